"""Permission Rules — pure evaluation of granted codes against required codes.

Invariants:
    - Codes compare case-sensitively
    - ANY: granted iff at least one required code is granted
    - ALL: granted iff every required code is granted; missing lists the
      uncovered codes in request order, without duplicates
    - An actor with no active role is always denied, whatever the grants say
"""

from typing import Iterable

from propertyhub.core.domain_types import AuthorizationMode, AuthorizationResult


def normalize_codes(required: str | Iterable[str]) -> list[str]:
    """Accept one code or many; return them de-duplicated in request order."""
    if isinstance(required, str):
        return [required]
    seen: list[str] = []
    for code in required:
        code = code.value if hasattr(code, "value") else code
        if code not in seen:
            seen.append(code)
    return seen


def evaluate_permissions(
    required: list[str],
    granted: set[str],
    mode: AuthorizationMode,
    has_active_role: bool = True,
) -> AuthorizationResult:
    """Compare required codes with the codes granted to the actor's active roles."""
    if not has_active_role or not required:
        return AuthorizationResult(granted=False, missing=list(required))
    if mode == AuthorizationMode.ANY:
        for code in required:
            if code in granted:
                return AuthorizationResult(granted=True)
        return AuthorizationResult(granted=False, missing=list(required))
    missing = [code for code in required if code not in granted]
    return AuthorizationResult(granted=not missing, missing=missing)
