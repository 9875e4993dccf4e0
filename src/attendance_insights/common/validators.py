from __future__ import annotations

from typing import Any, Iterable

from ..core.exceptions import InvalidPeriod, ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_period_index(value: Any, field_name: str = "periodIndex") -> int:
    # bool is an int subclass; True must not pass as period 1.
    if isinstance(value, bool):
        raise InvalidPeriod(f"{field_name} must be an integer")
    try:
        index = int(value)
    except (TypeError, ValueError):
        raise InvalidPeriod(f"{field_name} must be an integer")
    if isinstance(value, float) and not value.is_integer():
        raise InvalidPeriod(f"{field_name} must be an integer")
    if index < 0:
        raise InvalidPeriod(f"{field_name} must be >= 0 (got {index})")
    return index


def require_unique(values: Iterable[int], field_name: str) -> None:
    seen: set[int] = set()
    for v in values:
        if v in seen:
            raise ValidationError(f"Duplicate {field_name} {v}")
        seen.add(v)
