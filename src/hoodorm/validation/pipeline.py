"""
Validation pipeline used by models and sessions.
"""

from __future__ import annotations

from typing import Any, List

from ..core.model import Model, ModelField, iter_lifecycle, model_from
from .validators import LengthValidator, PresenceValidator, RangeValidator, Validator


def field_validators(field: ModelField) -> List[Validator]:
    validators: List[Validator] = []
    if field.length is not None:
        validators.append(LengthValidator(*field.length))
    if field.range is not None:
        validators.append(RangeValidator(*field.range))
    if field.presence:
        validators.append(PresenceValidator())
    return validators


def validate_model(model: Model) -> None:
    """
    Check declared constraints field by field, raising the first failure.
    """
    for field in model.fields:
        for validator in field_validators(field):
            validator(field.value, field.name)


def validate_instance(instance: Any) -> None:
    """
    Validate declared constraints, then run the instance's ``validate*`` methods.
    """
    model_from(instance).validate()
    for method in iter_lifecycle(instance, "validate"):
        method()
