from datetime import datetime, timezone
from typing import Optional

from hoodorm import Created, Id, Int64, UInt, UInt64, VarChar
from hoodorm.core.types import ValueKind, classify, coerce, is_zero, zero_value


def test_classify_prefers_runtime_type():
    assert classify(True) is ValueKind.BOOLEAN
    assert classify(3) is ValueKind.INTEGER
    assert classify(Int64(3)) is ValueKind.BIG_INTEGER
    assert classify(UInt(3)) is ValueKind.UNSIGNED
    assert classify(UInt64(3)) is ValueKind.BIG_UNSIGNED
    assert classify(VarChar("a")) is ValueKind.VARCHAR
    assert classify(bytearray(b"a")) is ValueKind.BYTES
    assert classify(datetime(2024, 1, 1)) is ValueKind.TIMESTAMP
    assert classify(object()) is None


def test_classify_uses_annotation_for_plain_values_and_none():
    assert classify(5, Id) is ValueKind.ID
    assert classify("x", VarChar) is ValueKind.VARCHAR
    assert classify(None, Optional[Created]) is ValueKind.TIMESTAMP
    assert classify(None, Optional[float]) is ValueKind.FLOAT
    # the declared field type wins within one type family
    assert classify(True, int) is ValueKind.INTEGER
    assert classify(Id(3), int) is ValueKind.INTEGER
    assert classify("x", int) is ValueKind.TEXT


def test_zero_values():
    assert zero_value(ValueKind.TEXT) == ""
    assert zero_value(ValueKind.TIMESTAMP) is None
    assert isinstance(zero_value(ValueKind.ID, Id), Id)
    assert is_zero(0) and is_zero("") and is_zero(None) and is_zero(False)
    assert not is_zero(datetime(2024, 1, 1))


def test_coerce_wraps_marker_types():
    assert isinstance(coerce(Id, 5), Id)
    assert isinstance(coerce(Optional[VarChar], "x"), VarChar)
    moment = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    created = coerce(Created, moment)
    assert isinstance(created, Created)
    assert created == moment
    assert coerce(Id, None) is None
