"""Input Validators — format checks shared by auth, admin and property flows.

Invariants:
    - Pure functions: no IO, no exceptions except check_required_fields
    - Mobile numbers are 10-digit Indian numbers starting with 6-9
    - RERA registration numbers look like "MHRERA/P51800012345"
"""

import re
from typing import Any, Iterable, Mapping

from propertyhub.core.errors import ValidationError

_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE = re.compile(r"^[6-9]\d{9}$")
_RERA = re.compile(r"^[A-Z]{2}RERA/[A-Z0-9]+$")


def is_valid_email(email: str | None) -> bool:
    return bool(email) and bool(_EMAIL.match(email))


def is_valid_phone(phone: str | None) -> bool:
    return bool(phone) and bool(_PHONE.match(phone))


def is_valid_rera_number(rera: str | None) -> bool:
    return bool(rera) and bool(_RERA.match(rera))


def sanitize_string(value: str | None) -> str:
    if not value:
        return ""
    return value.strip().replace("<", "").replace(">", "")


def missing_fields(fields: Iterable[str], data: Mapping[str, Any]) -> list[str]:
    """Return required fields that are absent or falsy, in declaration order."""
    return [f for f in fields if not data.get(f)]


def check_required_fields(fields: Iterable[str], data: Mapping[str, Any]) -> None:
    missing = missing_fields(fields, data)
    if missing:
        raise ValidationError(
            f"Missing required fields: {', '.join(missing)}", field=missing[0],
        )


def check_contact_formats(email: str | None, mobile_number: str | None) -> None:
    """Validate email / mobile formats when present."""
    if email is not None and not is_valid_email(email):
        raise ValidationError("Invalid email format", field="email")
    if mobile_number is not None and not is_valid_phone(mobile_number):
        raise ValidationError(
            "Invalid mobile number. Must be 10 digits starting with 6-9",
            field="mobileNumber",
        )
