"""Audit Delta — pure computation of before/after values for audit rows.

Invariants:
    - Only keys present in the patch are considered
    - A key appears in both old_values and new_values iff old[k] != patch[k]
    - Unchanged keys are absent from both sides
    - Output values are JSON-safe (UUID, Decimal, date → str)

Design Decisions:
    - Comparison happens on raw Python values BEFORE JSON conversion, so
      Decimal("10.00") and Decimal("10") count as unchanged
    - pydantic_core.to_jsonable_python for serialization: same encoder the API
      layer uses, no hand-written type switch
"""

from typing import Any, Mapping

from pydantic_core import to_jsonable_python


def build_update_values(
    old: Mapping[str, Any], patch: Mapping[str, Any],
) -> tuple[dict[str, Any], dict[str, Any]]:
    """Return (old_values, new_values) restricted to keys whose value changed."""
    old_values: dict[str, Any] = {}
    new_values: dict[str, Any] = {}
    for key, new_value in patch.items():
        old_value = old.get(key)
        if old_value != new_value:
            old_values[key] = jsonable(old_value)
            new_values[key] = jsonable(new_value)
    return old_values, new_values


def jsonable(value: Any) -> Any:
    """Convert a value (or nested dict/list) into JSON-serializable primitives."""
    return to_jsonable_python(value)
