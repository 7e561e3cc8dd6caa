from __future__ import annotations

from typing import Any

from ..core.exceptions import ValidationError


def require_raw_string(value: Any, field_name: str) -> str:
    """Must be a non-blank str; returned untouched (opaque payloads are compared byte for byte)."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value


def require_number_in_range(value: Any, field_name: str, low: float, high: float) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number") from None
    if not low <= number <= high:
        raise ValidationError(f"{field_name} must be between {low:g} and {high:g}")
    return number
