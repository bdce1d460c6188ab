"""Input parsing and validation helpers."""

from __future__ import annotations

import math
from typing import Any

from startup_valuator.exceptions import InvalidNumericInputError, ValidationError


def require_field(payload: dict[str, Any], key: str, expected_type: type | tuple[type, ...]) -> Any:
    value = payload.get(key)
    if value is None:
        raise ValidationError(f"Missing required field: '{key}'.")
    if not isinstance(value, expected_type):
        if isinstance(expected_type, tuple):
            expected_name = ", ".join(t.__name__ for t in expected_type)
        else:
            expected_name = expected_type.__name__
        raise ValidationError(
            f"Field '{key}' must be of type {expected_name}, received {type(value).__name__}."
        )
    return value


def parse_number(value: Any, field_name: str) -> float:
    """Parse a finite number from a JSON value or free-text answer.

    Thousands separators, currency symbols and a trailing percent sign are
    tolerated because questionnaire answers are typed by hand.
    """
    # bool is an int subclass; a checkbox value is not a number.
    if isinstance(value, bool):
        raise InvalidNumericInputError(f"Field '{field_name}' must be numeric, received bool.")
    if isinstance(value, (int, float)):
        parsed = float(value)
    elif isinstance(value, str):
        cleaned = value.strip().replace(",", "").replace("$", "").rstrip("%").strip()
        if not cleaned:
            raise InvalidNumericInputError(f"Field '{field_name}' is empty.")
        try:
            parsed = float(cleaned)
        except ValueError as exc:
            raise InvalidNumericInputError(
                f"Field '{field_name}' must be numeric, received {value!r}."
            ) from exc
    else:
        raise InvalidNumericInputError(
            f"Field '{field_name}' must be numeric, received {type(value).__name__}."
        )
    if not math.isfinite(parsed):
        raise InvalidNumericInputError(f"Field '{field_name}' must be finite.")
    return parsed


def optional_number(payload: dict[str, Any], key: str) -> float | None:
    """Return a numeric field or None when it is absent.

    Present-but-malformed values are rejected; absence is the only way to
    say "unknown".
    """
    value = payload.get(key)
    if value is None:
        return None
    try:
        return parse_number(value, key)
    except InvalidNumericInputError as exc:
        raise ValidationError(str(exc)) from exc


def optional_text(payload: dict[str, Any], key: str) -> str | None:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"Field '{key}' must be of type str, received {type(value).__name__}.")
    return value


def non_negative(value: float) -> float:
    """Clamp a monetary estimate to a finite, non-negative number."""
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value
