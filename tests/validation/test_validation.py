from dataclasses import dataclass

import pytest

from hoodorm import ValidationCode, ValidationError, column, model_from
from hoodorm.validation import (
    LengthValidator,
    PresenceValidator,
    RangeValidator,
    validate_instance,
)


@dataclass
class Profile:
    username: str = column("", length=(3, 8), presence=True)
    age: int = column(18, range=(13, 120))


def test_validation_codes_are_stable():
    assert ValidationCode.VALUE_NOT_SET == 65536
    assert ValidationCode.VALUE_TOO_SMALL == 65537
    assert ValidationCode.VALUE_TOO_BIG == 65538
    assert ValidationCode.VALUE_TOO_SHORT == 65539
    assert ValidationCode.VALUE_TOO_LONG == 65540


@pytest.mark.parametrize(
    "profile, code",
    [
        (Profile(username="ab"), ValidationCode.VALUE_TOO_SHORT),
        (Profile(username="abcdefghi"), ValidationCode.VALUE_TOO_LONG),
        (Profile(username="alice", age=12), ValidationCode.VALUE_TOO_SMALL),
        (Profile(username="alice", age=121), ValidationCode.VALUE_TOO_BIG),
    ],
)
def test_declared_constraints(profile, code):
    with pytest.raises(ValidationError) as excinfo:
        model_from(profile).validate()
    assert excinfo.value.code == code


def test_valid_model_passes():
    model_from(Profile(username="alice")).validate()


def test_length_checked_before_presence():
    with pytest.raises(ValidationError) as excinfo:
        model_from(Profile(username="")).validate()
    assert excinfo.value.code == ValidationCode.VALUE_TOO_SHORT
    assert excinfo.value.field == "username"


def test_validators_ignore_other_types():
    LengthValidator(1, 2)(12345)
    RangeValidator(0, 1)("not a number")
    RangeValidator(5, 10)(True)


def test_presence_validator():
    with pytest.raises(ValidationError) as excinfo:
        PresenceValidator()(0, "count")
    assert excinfo.value.message == "value not set"
    PresenceValidator()(1)


def test_instance_validate_methods_run_after_constraints():
    @dataclass
    class Signup:
        password: str = column("", length=(8, None))
        confirm: str = ""

        def validate_match(self):
            if self.password != self.confirm:
                raise ValidationError(ValidationCode.VALUE_NOT_SET, "passwords differ", "confirm")

    with pytest.raises(ValidationError) as excinfo:
        validate_instance(Signup(password="short", confirm="short"))
    assert excinfo.value.code == ValidationCode.VALUE_TOO_SHORT

    with pytest.raises(ValidationError) as excinfo:
        validate_instance(Signup(password="long enough", confirm="other"))
    assert excinfo.value.message == "passwords differ"

    validate_instance(Signup(password="long enough", confirm="long enough"))
