"""
Validation utilities exposed at the package level.
"""

from .errors import ValidationCode, ValidationError
from .pipeline import validate_instance, validate_model
from .validators import LengthValidator, PresenceValidator, RangeValidator

__all__ = [
    "LengthValidator",
    "PresenceValidator",
    "RangeValidator",
    "ValidationCode",
    "ValidationError",
    "validate_instance",
    "validate_model",
]
