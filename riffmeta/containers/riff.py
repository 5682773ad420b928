'''
# Resource Interchange File Format

Generic container used by WAV, AVI and WebP: a 12 bytes header

    'RIFF' | size (uint32 little-endian) | identifier (4 chars)

followed by a sequence of chunks

    fourcc (4 chars) | size (uint32 little-endian) | payload | pad byte if size is odd

where the size of the header counts the identifier and all the chunks. The
chunks named 'LIST' (or a nested 'RIFF') contain a list type and other chunks.

The walker here doesn't know anything about the content: a RiffHandler decides
which identifier, chunks and lists are interesting and receives their payload.
'''
import abc
import logging

from ..core import Chunk
from .. import fields
from ..enum import Compliant
from ..exceptions import ChunkUnpackException, RiffProcessingException, UnpackException


RIFF_MAGIC = b'RIFF'
LIST_FOURCCS = (b'LIST', b'RIFF')


class RiffHeader(Chunk):
    magic      = fields.StringField(4, default=RIFF_MAGIC, is_magic=True)
    size       = fields.StructField('I')
    identifier = fields.StringField(4)


class RiffChunkHeader(Chunk):
    fourcc = fields.StringField(4)
    size   = fields.StructField('i')


class RiffHandler(abc.ABC):
    '''Callbacks for RiffReader.process(): the four-character codes are passed as bytes.'''

    @abc.abstractmethod
    def should_accept_riff_identifier(self, identifier: bytes) -> bool:
        pass

    @abc.abstractmethod
    def should_accept_chunk(self, fourcc: bytes) -> bool:
        pass

    @abc.abstractmethod
    def should_accept_list(self, fourcc: bytes) -> bool:
        pass

    @abc.abstractmethod
    def process_chunk(self, fourcc: bytes, payload: bytes) -> None:
        pass

    @abc.abstractmethod
    def add_error(self, message: str) -> None:
        pass


def _printable(fourcc: bytes) -> str:
    return fourcc.decode('latin1')


class RiffReader(object):
    '''Walks the chunks of a RIFF stream calling back a RiffHandler.

    Problems with the framing are reported with handler.add_error() and stop
    the walk, unless the reader is built with Compliant.MAGIC and the magic of
    the header is wrong: in that case MagicException is raised.
    '''

    def __init__(self, compliant=Compliant.NONE):
        self.compliant = compliant
        self.logger = logging.getLogger(__name__)

    def process(self, stream, handler: RiffHandler) -> None:
        header = RiffHeader(compliant=self.compliant)

        try:
            header.unpack(stream)
        except ChunkUnpackException as e:
            handler.add_error(f'Invalid RIFF header: {e}')
            return

        magic = header.magic.value
        if magic != RIFF_MAGIC:
            handler.add_error(f'Invalid RIFF header: {_printable(magic)}')
            return

        identifier = header.identifier.value
        if not handler.should_accept_riff_identifier(identifier):
            self.logger.debug('identifier \'%s\' not accepted' % _printable(identifier))
            return

        # the size of the header counts the identifier too
        size_left = header.size.value - 4

        try:
            self.process_chunks(stream, size_left, handler)
        except (RiffProcessingException, UnpackException, ChunkUnpackException) as e:
            self.logger.warning('stopping at offset %d: %s' % (stream.tell(), e))
            handler.add_error(str(e))

    def process_chunks(self, stream, size_left: int, handler: RiffHandler) -> None:
        while size_left >= 8:
            chunk_header = RiffChunkHeader()
            chunk_header.unpack(stream)

            fourcc = chunk_header.fourcc.value
            size = chunk_header.size.value
            size_left -= 8

            self.logger.debug('chunk \'%s\' of size %d at offset %d' % (_printable(fourcc), size, chunk_header.offset))

            if size < 0 or size_left < size:
                raise RiffProcessingException('Invalid RIFF chunk size')

            if fourcc in LIST_FOURCCS:
                if size < 4:
                    break

                list_type = stream.read_exactly(4)
                if handler.should_accept_list(list_type):
                    self.process_chunks(stream, size - 4, handler)
                else:
                    self.logger.debug('skipping list \'%s\'' % _printable(list_type))
                    stream.skip(size - 4)
                size_left -= size
                continue

            if handler.should_accept_chunk(fourcc):
                handler.process_chunk(fourcc, stream.read_exactly(size))
            else:
                self.logger.debug('skipping chunk \'%s\'' % _printable(fourcc))
                stream.skip(size)

            size_left -= size

            if size % 2 == 1:
                stream.skip(1)
                size_left -= 1
