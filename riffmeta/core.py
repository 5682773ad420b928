"""
Declarative description of the fixed layouts found inside the RIFF
container and the embedded formats (chunk headers, ICC header, ...).
"""
from typing import Tuple, List, Dict

from .fields import Field
from .meta import MetaChunk
from .streams import Stream
from .exceptions import (
    ChunkUnpackException,
    UnpackException,
)


class Chunk(Field, metaclass=MetaChunk):
    """
    Together with Field is the main class that defines a format: you declare
    the fields as class attributes, in the order they appear in the data.

        class RiffChunkHeader(Chunk):
            fourcc = fields.StringField(4)
            size   = fields.StructField('i')

    A Chunk can contain sub-chunks, simply declaring an instance of another
    Chunk as a field.

    Passing a source (path, bytes or file object) to the constructor unpacks
    it immediately.
    """

    def __init__(self, source=None, **kwargs):
        super().__init__(**kwargs)

        if source is not None:
            with Stream(source) as stream:
                self.logger.debug('unpacking \'%s\' from %s' % (self.__class__.__name__, stream))
                self.unpack(stream)

    def init(self):
        # the fields are created lazily by their descriptors
        pass

    def get_ordered_fields_name(self) -> List[str]:
        return self._meta.fields

    def get_fields(self) -> List[Tuple[str, Field]]:
        '''It returns a list of couples (name, instance) for each field.'''
        return [(_, getattr(self, _)) for _ in self.get_ordered_fields_name()]

    @property
    def value(self) -> Dict[str, object]:
        return {name: field.value for name, field in self.get_fields()}

    def __repr__(self):
        msg = []
        for field_name, field in self.get_fields():
            msg.append('%s=%s' % (field_name, repr(field)))
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(msg))

    def __str__(self):
        msg = ''
        for field_name, field in self.get_fields():
            msg += '%s: %s\n' % (field_name, repr(field))
        return msg

    def _get_size(self):
        '''the size is derived from the sub-fields'''
        return sum(field.size for _, field in self.get_fields())

    @property
    def layout(self) -> Dict[str, Tuple[int, int]]:
        result = {}
        for name, field in self.get_fields():
            result[name] = (field.offset, field.size)

        return result

    def unpack(self, stream):
        '''Read the fields one after the other starting from the actual
        position of the stream.

        A failure of a field is re-raised as ChunkUnpackException with the
        chain of the names of the fields involved, so that

            ChunkUnpackException.chain == ['year', 'created']

        reads as "failed to unpack 'created.year'".
        '''
        self.offset = stream.tell()

        for field_name, field in self.get_fields():
            self.logger.debug('unpacking %s.%s at offset %d' % (self.__class__.__name__, field_name, stream.tell()))

            try:
                field.unpack(stream)
            except (UnpackException, ChunkUnpackException) as e:
                chain = e.chain if isinstance(e, ChunkUnpackException) else []
                chain.append(field_name)
                raise ChunkUnpackException(*e.args, chain=chain) from e
