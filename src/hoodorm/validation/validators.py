"""
Built-in validator helpers.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol

from ..core.types import is_zero
from .errors import ValidationCode, ValidationError


class Validator(Protocol):
    def __call__(self, value: Any, field: Optional[str] = None) -> None: ...


class LengthValidator:
    """
    Bound the length of string values; other types pass untouched.
    """

    def __init__(self, minimum: Optional[int] = None, maximum: Optional[int] = None) -> None:
        self.minimum = minimum
        self.maximum = maximum

    def __call__(self, value: Any, field: Optional[str] = None) -> None:
        if not isinstance(value, str):
            return
        if self.minimum is not None and len(value) < self.minimum:
            raise ValidationError(ValidationCode.VALUE_TOO_SHORT, "value too short", field)
        if self.maximum is not None and len(value) > self.maximum:
            raise ValidationError(ValidationCode.VALUE_TOO_LONG, "value too long", field)


class RangeValidator:
    """
    Bound numeric values; booleans and non-numbers pass untouched.
    """

    def __init__(self, minimum: Optional[float] = None, maximum: Optional[float] = None) -> None:
        self.minimum = minimum
        self.maximum = maximum

    def __call__(self, value: Any, field: Optional[str] = None) -> None:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return
        if self.minimum is not None and value < self.minimum:
            raise ValidationError(ValidationCode.VALUE_TOO_SMALL, "value too small", field)
        if self.maximum is not None and value > self.maximum:
            raise ValidationError(ValidationCode.VALUE_TOO_BIG, "value too big", field)


class PresenceValidator:
    def __call__(self, value: Any, field: Optional[str] = None) -> None:
        if is_zero(value):
            raise ValidationError(ValidationCode.VALUE_NOT_SET, "value not set", field)
