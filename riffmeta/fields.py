"""
The leaves of a declared structure: integers (StructField), fixed or
dependent length byte strings (StringField) and repeated elements (ArrayField).

The fields here are read-only: riffmeta only extracts metadata, nothing is ever
packed back.
"""
import logging
import struct
from enum import Enum

from .enum import Compliant
from .meta import FieldBase, Endianess
from .properties import Dependency, get_root_from_chunk
from .exceptions import UnpackException, MagicException


class Field(FieldBase):
    """Something with a name, an offset and a value inside a Chunk"""

    def __init__(self, name=None, father=None, default=None, offset=None,
                 endianess=Endianess.LITTLE_ENDIAN, compliant=Compliant.INHERIT, is_magic=False):
        super().__init__()
        self.logger = logging.getLogger(__name__)
        self.name = name
        self.father = father
        self.default = default
        self.offset = offset
        self.endianess = endianess
        self.compliant = compliant
        self.is_magic = is_magic

        self.init()

    def init(self):
        self.value = self.value_from_default()

    def value_from_default(self):
        return self.default

    def __str__(self):
        return str(self.value)

    @property
    def root(self):
        '''The outermost chunk this field belongs to'''
        return get_root_from_chunk(self)

    def resolve(self, value):
        '''Return the actual value for an attribute that can be a Dependency'''
        if isinstance(value, Dependency):
            return value.resolve(self)

        return value

    def is_compliant(self, level):
        '''Walk up the fathers while the compliant is inherited'''
        instance = self
        while instance:
            if instance.compliant & level:
                return True
            if not instance.compliant & Compliant.INHERIT:
                break

            instance = instance.father

        return False

    def check_magic(self, value):
        if self.is_magic and value != self.default:
            self.logger.warning(f'the magic for field \'{self.name}\' doesn\'t correspond: {value!r} != {self.default!r}')
            if self.is_compliant(Compliant.MAGIC):
                raise MagicException(f'wrong magic {value!r}', chain=[self.name])

    def _get_size(self):
        raise NotImplementedError(f"method {self.__class__.__name__}._get_size() not implemented")

    size = property(
        fget=lambda self: self._get_size(),
    )

    def unpack(self, stream):
        raise NotImplementedError('you need to implement this in the subclass')


class StructField(Field):
    """
    Simplest of the fields: mimic the behaviour of the struct module unpacking
    integers from bytes.

    The "enum" argument takes a subclass of enum.Enum so to have directly a
    representation of the integer value of the field itself.
    """

    def __init__(self, format, default=0, enum=None, **kw):
        self.format = format
        self.enum = enum
        super().__init__(default=default, **kw)

    def __repr__(self):
        if not self.enum or not isinstance(self.value, Enum):
            return '<%s(%s)>' % (self.__class__.__name__, hex(self.value) if isinstance(self.value, int) else self.value)

        return f'<{self.__class__.__name__}({self.value!r})>'

    def value_from_default(self):
        if not self.enum:
            return super().value_from_default()

        return self.enum(self.default)

    def get_format(self):
        return '%s%s' % (self.endianess.prefix, self.format)

    def _get_size(self):
        return struct.calcsize(self.get_format())

    def _unpack_enum(self, value: int):
        try:
            return self.enum(value)
        except ValueError:
            if self.is_compliant(Compliant.ENUM):
                raise UnpackException(f'{value:#x} not in {self.enum.__name__}', chain=[])

            self.logger.warning(f'enum {self.enum!r} doesn\'t have element with value 0x{value:x} in it')

        return value

    def unpack(self, stream):
        self.offset = stream.tell()
        raw = stream.read_exactly(self.size)

        value = struct.unpack(self.get_format(), raw)[0]
        if self.enum:
            value = self._unpack_enum(value)

        self.check_magic(value)
        self.value = value


class StringField(Field):
    """Represent a contiguous chunk of bytes; its length can be a Dependency."""

    def __init__(self, n=None, **kw):
        if n is None and 'default' not in kw:
            raise ValueError(f"StringField must have 'n' or 'default' indicated!")

        self.length = n if n is not None else len(kw['default'])

        super().__init__(**kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, repr(self.value))

    def __len__(self):
        return self.size

    def value_from_default(self):
        if self.default is not None:
            return self.default

        return b'\x00' * self.length if isinstance(self.length, int) else b''

    def _get_size(self):
        return self.resolve(self.length)

    def unpack(self, stream):
        self.offset = stream.tell()
        value = stream.read_exactly(self.size)

        self.check_magic(value)
        self.value = value


class ArrayField(Field):
    '''Unpack an array of fields (usually Chunks).

    The number of elements is indicated via the parameter named "n" that can be
    an integer or a Dependency.

    This class behaves like a read-only list.
    '''

    def __init__(self, field_cls, n=0, **kw):
        if not isinstance(n, (Dependency, int)):
            raise ValueError('n is \'%s\' must be of the right type' % n.__class__.__name__)

        self.field_cls = field_cls
        self._n = n

        kw.setdefault('default', [])
        super().__init__(**kw)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.value!r})>'

    def __getitem__(self, item):
        return self.value[item]

    def __iter__(self):
        return iter(self.value)

    def __len__(self):
        return len(self.value)

    def value_from_default(self):
        return list(self.default)

    def _get_size(self):
        return sum(element.size for element in self.value)

    def instance_element(self):
        return self.field_cls.create(father=self)

    def unpack(self, stream):
        self.offset = stream.tell()
        n = self.resolve(self._n)

        self.logger.debug('unpacking %d elements for \'%s\'' % (n, self.name))

        self.value = []
        for _ in range(n):
            element = self.instance_element()
            element.unpack(stream)
            self.value.append(element)
