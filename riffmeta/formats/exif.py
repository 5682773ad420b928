'''
# Exif

Exif data is a TIFF structure: an 8 bytes header

    byte order ('II' or 'MM') | 0x002a | offset of the first IFD

followed by Image File Directories (IFD), each one being

    count (uint16) | count * entry (12 bytes) | offset of the next IFD (uint32)

with every entry made of

    tag (uint16) | format (uint16) | components (uint32) | value or offset (4 bytes)

where the value is inline when it fits in four bytes. All the offsets are
relative to the start of the TIFF header.

The first IFD (IFD0) describes the main image, the next one the thumbnail;
some tags of IFD0 point to further IFDs (Exif SubIFD, GPS, Interoperability).

See <https://www.cipa.jp/std/documents/e/DC-008-2012_E.pdf>.
'''
import logging
from collections import deque
from enum import Enum
from typing import List, NamedTuple, Set, Tuple

from ..directory import Directory, DirectoryKind
from ..exceptions import ReadException
from ..reader import ByteReader

# JPEG APP1 segments start with this before the TIFF header
JPEG_EXIF_PREAMBLE = b'Exif\x00\x00'
JPEG_SEGMENT_PREAMBLE_LENGTH = len(JPEG_EXIF_PREAMBLE)

TIFF_MAGIC = 0x002a

TAG_EXIF_SUB_IFD_OFFSET = 0x8769
TAG_GPS_INFO_OFFSET     = 0x8825
TAG_INTEROP_OFFSET      = 0xa005

SUB_IFD_KINDS = {
    TAG_EXIF_SUB_IFD_OFFSET: DirectoryKind.EXIF_SUBIFD,
    TAG_GPS_INFO_OFFSET: DirectoryKind.GPS,
    TAG_INTEROP_OFFSET: DirectoryKind.EXIF_INTEROP,
}


def starts_with_jpeg_exif_preamble(payload: bytes) -> bool:
    return payload[:JPEG_SEGMENT_PREAMBLE_LENGTH] == JPEG_EXIF_PREAMBLE


class ExifFormat(Enum):
    '''The format of the components of an entry with the size of each one'''
    BYTE      = 1
    ASCII     = 2
    SHORT     = 3
    LONG      = 4
    RATIONAL  = 5
    SBYTE     = 6
    UNDEFINED = 7
    SSHORT    = 8
    SLONG     = 9
    SRATIONAL = 10
    FLOAT     = 11
    DOUBLE    = 12

    @property
    def component_size(self) -> int:
        return {
            ExifFormat.SHORT: 2,
            ExifFormat.SSHORT: 2,
            ExifFormat.LONG: 4,
            ExifFormat.SLONG: 4,
            ExifFormat.FLOAT: 4,
            ExifFormat.RATIONAL: 8,
            ExifFormat.SRATIONAL: 8,
            ExifFormat.DOUBLE: 8,
        }.get(self, 1)


class Rational(NamedTuple):
    numerator: int
    denominator: int

    def __str__(self):
        return '%d/%d' % (self.numerator, self.denominator)


class ExifReader(object):
    '''Decodes an Exif block into one directory per IFD found.'''

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def extract(self, payload: bytes, start_offset: int = 0) -> List[Directory]:
        try:
            reader = ByteReader(payload, base_offset=start_offset)
            byte_order = reader.get_bytes(0, 2)
        except (ReadException, ValueError) as e:
            return [Directory.error(f'Exif data segment ended prematurely: {e}', DirectoryKind.EXIF_IFD0)]

        if byte_order == b'MM':
            reader = reader.with_byte_order(True)
        elif byte_order == b'II':
            reader = reader.with_byte_order(False)
        else:
            return [Directory.error(
                f'Unclear distinction between Motorola/Intel byte ordering: {byte_order!r}', DirectoryKind.EXIF_IFD0)]

        try:
            magic = reader.get_uint16(2)
            first_ifd_offset = reader.get_uint32(4)
        except ReadException as e:
            return [Directory.error(f'Invalid TIFF header: {e}', DirectoryKind.EXIF_IFD0)]

        if magic != TIFF_MAGIC:
            return [Directory.error(f'Unexpected TIFF marker: 0x{magic:04X}', DirectoryKind.EXIF_IFD0)]

        return self.process_ifds(reader, first_ifd_offset)

    def process_ifds(self, reader: ByteReader, first_ifd_offset: int) -> List[Directory]:
        '''Depth first walk of the IFDs starting from IFD0: the sub-IFDs of an IFD
        come right after it, the thumbnail IFD after everything reachable from IFD0.'''
        directories: List[Directory] = []
        visited: Set[int] = set()
        pending = deque([(first_ifd_offset, DirectoryKind.EXIF_IFD0)])

        while pending:
            offset, kind = pending.pop()

            if offset in visited:
                self.logger.warning('IFD at offset %d already visited, skipping' % offset)
                continue
            visited.add(offset)

            # last in, first out
            pending.extend(reversed(self.process_ifd(reader, offset, kind, directories)))

        return directories

    def process_ifd(self, reader: ByteReader, offset: int, kind: DirectoryKind,
                    directories: List[Directory]) -> List[Tuple[int, DirectoryKind]]:
        '''Decode the IFD at offset and return the IFDs it links to'''
        try:
            count = reader.get_uint16(offset)
        except ReadException as e:
            directories.append(Directory.error(f'Ignored IFD marked to start outside data segment: {e}', kind))
            return []

        directory = Directory(kind)
        directories.append(directory)

        sub_ifds = []
        failures = []
        for idx in range(count):
            entry_offset = offset + 2 + 12 * idx
            try:
                tag = reader.get_uint16(entry_offset)
                format_code = reader.get_uint16(entry_offset + 2)
                components = reader.get_uint32(entry_offset + 4)

                try:
                    format = ExifFormat(format_code)
                except ValueError:
                    self.logger.warning('invalid TIFF tag format code %d for tag 0x%04X' % (format_code, tag))
                    continue

                byte_count = components * format.component_size
                value_offset = entry_offset + 8 if byte_count <= 4 else reader.get_uint32(entry_offset + 8)
                reader.validate_index(value_offset, byte_count)

                if tag in SUB_IFD_KINDS:
                    sub_ifds.append((reader.get_uint32(value_offset), SUB_IFD_KINDS[tag]))
                    continue

                directory.set(tag, self.read_value(reader, format, value_offset, components))
            except ReadException as e:
                self.logger.warning('skipping IFD entry %d at offset %d: %s' % (idx, entry_offset, e))
                failures.append(str(e))

        if failures and len(directory) == 0:
            directory.add_error(f'Invalid IFD at offset {offset}: {failures[0]}')

        if kind is not DirectoryKind.EXIF_IFD0:
            return sub_ifds

        # IFD0 is followed by the thumbnail IFD
        try:
            next_ifd_offset = reader.get_uint32(offset + 2 + 12 * count)
        except ReadException:
            self.logger.debug('no link to a next IFD after IFD0')
            return sub_ifds

        if next_ifd_offset != 0:
            sub_ifds.append((next_ifd_offset, DirectoryKind.EXIF_THUMBNAIL))

        return sub_ifds

    def read_value(self, reader: ByteReader, format: ExifFormat, offset: int, components: int):
        if format is ExifFormat.ASCII:
            return reader.get_bytes(offset, components).split(b'\x00', 1)[0].decode('utf-8', errors='replace')
        if format is ExifFormat.UNDEFINED:
            return reader.get_bytes(offset, components)
        if format is ExifFormat.BYTE and components != 1:
            return reader.get_bytes(offset, components)

        getter = {
            ExifFormat.BYTE: reader.get_byte,
            ExifFormat.SBYTE: reader.get_sbyte,
            ExifFormat.SHORT: reader.get_uint16,
            ExifFormat.SSHORT: reader.get_int16,
            ExifFormat.LONG: reader.get_uint32,
            ExifFormat.SLONG: reader.get_int32,
            ExifFormat.FLOAT: reader.get_float32,
            ExifFormat.DOUBLE: reader.get_float64,
            ExifFormat.RATIONAL: lambda index: Rational(reader.get_uint32(index), reader.get_uint32(index + 4)),
            ExifFormat.SRATIONAL: lambda index: Rational(reader.get_int32(index), reader.get_int32(index + 4)),
        }[format]

        size = format.component_size
        values = tuple(getter(offset + size * _) for _ in range(components))

        return values[0] if len(values) == 1 else values
