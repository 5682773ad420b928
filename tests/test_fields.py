from enum import Enum, auto

import pytest

from riffmeta.enum import Compliant
from riffmeta.exceptions import UnpackException, MagicException
from riffmeta.fields import StructField, StringField, ArrayField
from riffmeta.meta import Endianess
from riffmeta.streams import Stream


def test_structfield_unpack():
    """Check that unpacking reads the right amount of bytes with the right byte order."""
    field = StructField('I')

    assert field.size == 4
    assert field.value == 0

    stream = Stream(b'\x01\x02\x03\x04\xff')
    field.unpack(stream)

    assert field.value == 0x04030201
    assert field.offset == 0
    assert stream.tell() == 4


def test_structfield_big_endian():
    field = StructField('H', endianess=Endianess.BIG_ENDIAN)

    field.unpack(Stream(b'\x01\x02'))

    assert field.value == 0x0102


def test_structfield_short_read():
    field = StructField('I')

    with pytest.raises(UnpackException):
        field.unpack(Stream(b'\x01\x02'))


def test_structfield_enum():
    class DummyEnum(Enum):
        NONE = 0
        FIRST = auto()
        SECOND = auto()

    field = StructField('I', enum=DummyEnum, compliant=Compliant.ENUM)

    assert field.value == DummyEnum.NONE

    field.unpack(Stream(b'\x02\x00\x00\x00'))

    assert field.value == DummyEnum.SECOND

    with pytest.raises(UnpackException):
        field.unpack(Stream(b'\x04\x00\x00\x00'))


def test_structfield_enum_not_compliant():
    """Without Compliant.ENUM an unknown value is kept as an integer"""
    class DummyEnum(Enum):
        NONE = 0

    field = StructField('I', enum=DummyEnum)
    field.unpack(Stream(b'\x04\x00\x00\x00'))

    assert field.value == 4


def test_stringfield():
    field = StringField(0x10)

    assert field.size == 0x10
    assert field.value == b'\x00' * field.size

    data = bytes(range(0x20))
    field.unpack(Stream(data))

    assert field.value == data[:0x10]
    assert len(field) == 0x10


def test_stringfield_needs_a_length():
    with pytest.raises(ValueError):
        StringField()


def test_stringfield_magic():
    field = StringField(4, default=b'RIFF', is_magic=True)

    field.unpack(Stream(b'RIFX'))
    assert field.value == b'RIFX'

    field = StringField(4, default=b'RIFF', is_magic=True, compliant=Compliant.MAGIC)

    with pytest.raises(MagicException):
        field.unpack(Stream(b'RIFX'))


def test_arrayfield():
    array = ArrayField(StructField('H'), n=3)

    assert array.value == []

    array.unpack(Stream(b'\x01\x00\x02\x00\x03\x00\x04\x00'))

    assert len(array) == 3
    assert [_.value for _ in array] == [1, 2, 3]
    assert array[0] is not array[1]
    assert [_.offset for _ in array] == [0, 2, 4]
    assert array.size == 6


def test_arrayfield_wrong_n():
    with pytest.raises(ValueError):
        ArrayField(StructField('H'), n='3')
