'''
# ICC color profile

The profile starts with a fixed 128 bytes header (all big-endian) followed by
a tag table

    count (uint32) | count * (signature (4 chars) | offset (uint32) | size (uint32))

where the offsets are from the start of the profile.

The format is described at <https://www.color.org/specification/ICC.1-2022-05.pdf>.
'''
import datetime
import logging
from enum import Enum
from typing import List, Optional

from ..core import Chunk
from .. import fields
from ..directory import Directory, DirectoryKind, IccTag
from ..enum import Compliant
from ..exceptions import ChunkUnpackException, MagicException, ReadException
from ..meta import Endianess
from ..properties import Dependency
from ..reader import ByteReader
from ..streams import Stream


BE = Endianess.BIG_ENDIAN

ICC_SIGNATURE = b'acsp'
ICC_HEADER_LENGTH = 128

TEXT_TAGS = (
    IccTag.DESCRIPTION,
    IccTag.COPYRIGHT,
    IccTag.DEVICE_MFG_DESCRIPTION,
    IccTag.DEVICE_MODEL_DESCRIPTION,
)


class IccRenderingIntent(Enum):
    PERCEPTUAL            = 0
    MEDIA_RELATIVE        = 1
    SATURATION            = 2
    ICC_ABSOLUTE          = 3


class IccDateTime(Chunk):
    year   = fields.StructField('H', endianess=BE)
    month  = fields.StructField('H', endianess=BE)
    day    = fields.StructField('H', endianess=BE)
    hour   = fields.StructField('H', endianess=BE)
    minute = fields.StructField('H', endianess=BE)
    second = fields.StructField('H', endianess=BE)

    def to_datetime(self) -> Optional[datetime.datetime]:
        try:
            return datetime.datetime(*[field.value for _, field in self.get_fields()])
        except ValueError:
            return None


class IccXYZNumber(Chunk):
    '''Three s15Fixed16 numbers'''
    x = fields.StructField('i', endianess=BE)
    y = fields.StructField('i', endianess=BE)
    z = fields.StructField('i', endianess=BE)

    @property
    def xyz(self):
        return tuple(field.value / 65536.0 for _, field in self.get_fields())


class IccHeader(Chunk):
    profile_size     = fields.StructField('I', endianess=BE)
    cmm_type         = fields.StringField(4)
    version          = fields.StructField('I', endianess=BE)
    device_class     = fields.StringField(4)
    color_space      = fields.StringField(4)
    connection_space = fields.StringField(4)
    created          = IccDateTime()
    signature        = fields.StringField(4, default=ICC_SIGNATURE, is_magic=True)
    platform         = fields.StringField(4)
    flags            = fields.StructField('I', endianess=BE)
    manufacturer     = fields.StringField(4)
    model            = fields.StructField('I', endianess=BE)
    attributes       = fields.StructField('Q', endianess=BE)
    rendering_intent = fields.StructField('I', endianess=BE, enum=IccRenderingIntent)
    illuminant       = IccXYZNumber()
    creator          = fields.StringField(4)
    profile_id       = fields.StringField(16)
    reserved         = fields.StringField(28)

    @property
    def version_string(self):
        '''"major.minor.bugfix" from the BCD encoded version'''
        version = self.version.value
        return '%d.%d.%d' % ((version >> 24) & 0xff, (version >> 20) & 0x0f, (version >> 16) & 0x0f)


class IccTagEntry(Chunk):
    signature = fields.StringField(4)
    offset    = fields.StructField('I', endianess=BE)
    size      = fields.StructField('I', endianess=BE)


class IccTagTable(Chunk):
    count   = fields.StructField('I', endianess=BE)
    entries = fields.ArrayField(IccTagEntry(), n=Dependency('.count'))


def _signature_to_int(signature: bytes) -> int:
    return int.from_bytes(signature, 'big')


def _four_cc(value: bytes) -> Optional[str]:
    '''Four-character codes padded with spaces or NULs, None when unset'''
    text = value.decode('latin1').rstrip('\x00 ')
    return text or None


class IccReader(object):
    '''Decodes an ICC profile into a single directory.'''

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def extract(self, payload: bytes, start_offset: int = 0) -> List[Directory]:
        data = bytes(payload[start_offset:])

        if len(data) < ICC_HEADER_LENGTH:
            return [Directory.error(f'ICC data too short: {len(data)} bytes', DirectoryKind.ICC)]

        try:
            with Stream(data) as stream:
                header = IccHeader(compliant=Compliant.MAGIC)
                header.unpack(stream)
                table = IccTagTable()
                table.unpack(stream)
        except MagicException:
            return [Directory.error('Invalid ICC profile signature', DirectoryKind.ICC)]
        except ChunkUnpackException as e:
            return [Directory.error(f'Exception reading ICC profile: {e}', DirectoryKind.ICC)]

        directory = Directory(DirectoryKind.ICC)
        self.set_header_tags(directory, header)
        directory.set(IccTag.TAG_COUNT, table.count.value)

        reader = ByteReader(data)
        for entry in table.entries:
            tag = _signature_to_int(entry.signature.value)
            try:
                raw = reader.get_bytes(entry.offset.value, entry.size.value)
            except ReadException as e:
                self.logger.warning('ICC tag \'%s\' out of the profile: %s' % (entry.signature.value, e))
                continue

            value = self.decode_text(raw) if tag in TEXT_TAGS else None
            directory.set(tag, value if value is not None else raw)

        return [directory]

    def set_header_tags(self, directory: Directory, header: IccHeader) -> None:
        directory.set(IccTag.PROFILE_BYTE_COUNT, header.profile_size.value)
        directory.set(IccTag.PROFILE_VERSION, header.version_string)
        directory.set(IccTag.CMM_FLAGS, header.flags.value)
        directory.set(IccTag.DEVICE_MODEL, header.model.value)
        directory.set(IccTag.DEVICE_ATTR, header.attributes.value)
        directory.set(IccTag.SIGNATURE, header.signature.value.decode('latin1'))
        directory.set(IccTag.XYZ_VALUES, header.illuminant.xyz)

        intent = header.rendering_intent.value
        directory.set(IccTag.RENDERING_INTENT, intent.name if isinstance(intent, IccRenderingIntent) else intent)

        for tag, field in (
            (IccTag.CMM_TYPE, header.cmm_type),
            (IccTag.PROFILE_CLASS, header.device_class),
            (IccTag.COLOR_SPACE, header.color_space),
            (IccTag.PROFILE_CONNECTION_SPACE, header.connection_space),
            (IccTag.PLATFORM, header.platform),
            (IccTag.DEVICE_MAKE, header.manufacturer),
            (IccTag.PROFILE_CREATOR, header.creator),
        ):
            value = _four_cc(field.value)
            if value is not None:
                directory.set(tag, value)

        created = header.created.to_datetime()
        if created is not None:
            directory.set(IccTag.PROFILE_DATETIME, created)

    def decode_text(self, raw: bytes) -> Optional[str]:
        '''Text of the "desc", "text" and "mluc" tag types; None for anything else'''
        reader = ByteReader(raw)
        try:
            type_signature = reader.get_bytes(0, 4)

            if type_signature == b'desc':
                length = reader.get_uint32(8)
                return reader.get_null_terminated_bytes(12, length).decode('latin1')

            if type_signature == b'text':
                return reader.get_null_terminated_bytes(8, reader.length - 8).decode('latin1')

            if type_signature == b'mluc':
                # only the first record
                if reader.get_uint32(8) == 0:
                    return ''
                length = reader.get_uint32(20)
                offset = reader.get_uint32(24)
                return reader.get_string(offset, length, encoding='utf-16-be')
        except ReadException as e:
            self.logger.warning('malformed ICC text tag: %s' % e)

        return None
