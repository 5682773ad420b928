import copy
import logging
from enum import Enum, auto


class Endianess(Enum):
    LITTLE_ENDIAN = auto()
    BIG_ENDIAN    = auto()

    @property
    def prefix(self):
        '''The struct module prefix for this byte order'''
        return '<' if self is Endianess.LITTLE_ENDIAN else '>'


class FieldDescriptor(object):
    """Wrapper around field access of a Chunk: each instance of the chunk
    gets its own copy of the field declared on the class."""

    def __init__(self, field_instance: "Field", field_name: str):
        self.field = field_instance
        self.field.name = field_name

    def __get__(self, instance, type=None):
        if instance is None:
            return self.field

        data = instance.__dict__

        if self.field.name not in data:
            data[self.field.name] = self.field.create(father=instance)

        return data[self.field.name]

    def __set__(self, instance, value):
        data = instance.__dict__

        if isinstance(value, self.field.__class__):
            value.father = instance
            value.name = self.field.name
            data[self.field.name] = value
        else:
            self.__get__(instance).value = value


class FieldBase(object):

    def contribute_to_chunk(self, cls, name):
        if name in cls.__dict__:
            raise AttributeError(f'field {name} is already present in class {cls.__name__}')

        setattr(cls, name, FieldDescriptor(self, name))

    def create(self, father):
        instance = copy.deepcopy(self)
        instance.father = father
        return instance


class Meta(object):
    """Class containing metadata about the structure"""

    def __init__(self):
        self.fields = []


class MetaChunk(type):

    def __new__(cls, names, bases, attrs):
        '''Collect the fields in declaration order, the way Django collects the
        fields of a model; the fields of the parents come first.'''
        field_attrs = {name: obj for name, obj in attrs.items() if hasattr(obj, 'contribute_to_chunk')}
        plain_attrs = {name: obj for name, obj in attrs.items() if name not in field_attrs}

        new_cls = super(MetaChunk, cls).__new__(cls, names, bases, plain_attrs)

        new_cls._meta = Meta()

        for parent in bases:
            if isinstance(parent, MetaChunk):
                new_cls._meta.fields.extend(parent._meta.fields)

        for obj_name, obj in field_attrs.items():
            new_cls.add_to_class(obj_name, obj)

        return new_cls

    def add_to_class(cls, name, value):
        logging.getLogger(__name__).debug('contribute_to_chunk() found for field \'%s\'' % name)
        cls._meta.fields.append(name)
        value.contribute_to_chunk(cls, name)
