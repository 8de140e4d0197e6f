"""
Planning Errors

Structured error types raised by the planning core.
"""

from typing import Any, Optional


class PlanningError(Exception):
    """Base error for the planning core. Carries an error kind and offending field."""

    kind = "planning_error"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "field": self.field,
            "message": self.message
        }


class ValidationError(PlanningError):
    """A required field is missing or malformed. Raised before any store mutation."""

    kind = "validation_error"

    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(message or f"{field} is required", field=field)


def require_id(value: Any, field: str) -> str:
    """Return a contributor/task identifier as a non-empty string."""
    if value is None or isinstance(value, bool):
        raise ValidationError(field)
    text = str(value).strip()
    if not text:
        raise ValidationError(field)
    return text


def require_number(
    value: Any,
    field: str,
    minimum: Optional[float] = None,
    exclusive: bool = False
) -> float:
    """
    Coerce a numeric field, rejecting missing, non-numeric and out-of-range values.

    Args:
        value: Raw value from a caller or provider payload
        field: Field name reported in the error
        minimum: Lower bound, if any
        exclusive: Whether the bound itself is rejected
    """
    if value is None:
        raise ValidationError(field)
    if isinstance(value, bool):
        raise ValidationError(field, f"{field} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(field, f"{field} must be a number") from None
    if number != number or number in (float("inf"), float("-inf")):
        raise ValidationError(field, f"{field} must be a finite number")

    if minimum is not None:
        if exclusive and number <= minimum:
            raise ValidationError(field, f"{field} must be greater than {minimum:g}")
        if not exclusive and number < minimum:
            raise ValidationError(field, f"{field} must be at least {minimum:g}")
    return number


def optional_number(
    value: Any,
    field: str,
    default: float = 0.0,
    minimum: Optional[float] = None
) -> float:
    """Like require_number, but a missing or blank value yields default."""
    if value is None or value == "":
        return default
    return require_number(value, field, minimum=minimum)
