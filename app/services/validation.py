"""
Parsing of loosely-typed request values into constrained scoreboard values.

Request schemas accept whatever the client sent; everything that reaches the
aggregate engine has passed through one of these functions first.
"""
import math
from typing import Any

from app.core.errors import ValidationError

NAME_REQUIRED = "Student name is required"
EXAM_REQUIRED = "Exam name is required"
POINTS_INVALID = "Points must be a non-negative whole number"
TOTAL_INVALID = "Total must be a whole number greater than zero"
POINTS_ABOVE_TOTAL = "Points cannot be greater than the total"

# signed 64-bit, the widest INTEGER the supported databases store
MAX_WHOLE_NUMBER = 2 ** 63 - 1


def _required_text(value: Any, message: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(message)
    return value.strip()


def _whole_number(value: Any, message: str) -> int:
    # bool is an int subclass, but True is not a score
    if value is None or isinstance(value, bool):
        raise ValidationError(message)

    if isinstance(value, str):
        text = value.strip()
        try:
            value = int(text)
        except ValueError:
            try:
                value = float(text)
            except ValueError:
                raise ValidationError(message) from None

    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            raise ValidationError(message)
        value = int(value)

    if not isinstance(value, int):
        raise ValidationError(message)

    if abs(value) > MAX_WHOLE_NUMBER:
        raise ValidationError(message)
    return value


def parse_name(value: Any) -> str:
    return _required_text(value, NAME_REQUIRED)


def parse_exam(value: Any) -> str:
    return _required_text(value, EXAM_REQUIRED)


def parse_points(value: Any) -> int:
    points = _whole_number(value, POINTS_INVALID)
    if points < 0:
        raise ValidationError(POINTS_INVALID)
    return points


def parse_total(value: Any) -> int:
    total = _whole_number(value, TOTAL_INVALID)
    if total < 1:
        raise ValidationError(TOTAL_INVALID)
    return total


def check_detail_bounds(points: int, total: int) -> None:
    """
    Enforce 0 <= points <= total and total >= 1 on an already-parsed pair.

    Raises:
        ValidationError: the pair breaks one of the bounds
    """
    if points < 0:
        raise ValidationError(POINTS_INVALID)
    if total < 1:
        raise ValidationError(TOTAL_INVALID)
    if points > total:
        raise ValidationError(POINTS_ABOVE_TOTAL)
