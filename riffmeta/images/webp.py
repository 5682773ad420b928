'''
# WebP

Image format by Google stored in a RIFF container with identifier 'WEBP'.

The chunks we are interested in are

 1. VP8X: extended header with the capability flags and the canvas size
 2. VP8L: header of a lossless bitstream
 3. VP8 : header of a lossy (VP8 key frame) bitstream
 4. EXIF: an Exif block (TIFF structure)
 5. ICCP: an ICC color profile
 6. XMP : an XMP packet

The container is described at <https://developers.google.com/speed/webp/docs/riff_container>,
the lossless bitstream at <https://developers.google.com/speed/webp/docs/webp_lossless_bitstream_specification>
and the VP8 key frame header at <https://tools.ietf.org/html/rfc6386#section-9.1>.
'''
import logging
from enum import Enum
from pathlib import Path
from typing import NamedTuple, Optional, Union

from ..containers.riff import RiffHandler, RiffReader
from ..directory import Directory, DirectoryKind, Metadata, WebPTag, file_directory
from ..enum import Compliant
from ..exceptions import ReadException
from ..formats.exif import ExifReader, JPEG_SEGMENT_PREAMBLE_LENGTH, starts_with_jpeg_exif_preamble
from ..formats.icc import IccReader
from ..formats.xmp import XmpReader
from ..reader import ByteReader
from ..streams import Stream


logger = logging.getLogger(__name__)

WEBP_IDENTIFIER = b'WEBP'

VP8L_SIGNATURE = 0x2f
VP8_START_CODE = b'\x9d\x01\x2a'


class FourCC(Enum):
    EXIF    = b'EXIF'
    ICCP    = b'ICCP'
    XMP     = b'XMP '
    VP8X    = b'VP8X'
    VP8L    = b'VP8L'
    VP8     = b'VP8 '
    UNKNOWN = None

    @classmethod
    def from_bytes(cls, fourcc) -> 'FourCC':
        if isinstance(fourcc, str):
            fourcc = fourcc.encode('latin1')
        try:
            return cls(bytes(fourcc))
        except ValueError:
            return cls.UNKNOWN


class Dimensions(NamedTuple):
    width: int
    height: int
    is_animation: Optional[bool] = None
    has_alpha: Optional[bool] = None


class DecodeError(NamedTuple):
    message: str


# None means that the payload is not what we expected and it's skipped
DimensionResult = Optional[Union[Dimensions, DecodeError]]


def decode_vp8x(payload: bytes) -> DimensionResult:
    '''
    Byte 0 contains the flags

        bit 0: has fragments
        bit 1: is animation
        bit 2: has XMP
        bit 3: has Exif
        bit 4: has alpha
        bit 5: has ICC

    then 3 reserved bytes, the width minus one and the height minus one
    as 24 bits little-endian integers.
    '''
    if len(payload) != 10:
        return None

    reader = ByteReader(payload, is_motorola_byte_order=False)
    try:
        is_animation = reader.get_bit(1)
        has_alpha = reader.get_bit(4)

        width_minus_one = reader.get_int24(4)
        height_minus_one = reader.get_int24(7)
    except ReadException as e:
        return DecodeError("Exception reading WebpRiff chunk 'VP8X' : %s" % e)

    return Dimensions(width_minus_one + 1, height_minus_one + 1, is_animation=is_animation, has_alpha=has_alpha)


def decode_vp8l(payload: bytes) -> DimensionResult:
    '''A signature byte then 14 bits for the width minus one and 14 bits
    for the height minus one, packed little-endian.'''
    if len(payload) < 5:
        return None

    reader = ByteReader(payload, is_motorola_byte_order=False)
    try:
        if reader.get_byte(0) != VP8L_SIGNATURE:
            return None

        b1 = reader.get_byte(1)
        b2 = reader.get_byte(2)
        b3 = reader.get_byte(3)
        b4 = reader.get_byte(4)
    except ReadException as e:
        return DecodeError("Exception reading WebpRiff chunk 'VP8L' : %s" % e)

    width_minus_one = (b2 & 0x3f) << 8 | b1
    height_minus_one = (b4 & 0x0f) << 10 | b3 << 2 | (b2 & 0xc0) >> 6

    return Dimensions(width_minus_one + 1, height_minus_one + 1)


def decode_vp8(payload: bytes) -> DimensionResult:
    '''3 bytes of frame tag, the start code and then width and height
    as 16 bits little-endian integers.

    The two upper bits of width and height are the scaling factors and they
    are reported as they are.'''
    if len(payload) < 10:
        return None

    reader = ByteReader(payload, is_motorola_byte_order=False)
    try:
        if reader.get_bytes(3, 3) != VP8_START_CODE:
            return None

        width = reader.get_uint16(6)
        height = reader.get_uint16(8)
    except ReadException as e:
        return DecodeError("Exception reading WebpRiff chunk 'VP8' : %s" % e)

    return Dimensions(width, height)


DIMENSION_DECODERS = {
    FourCC.VP8X: decode_vp8x,
    FourCC.VP8L: decode_vp8l,
    FourCC.VP8: decode_vp8,
}


class WebPRiffHandler(RiffHandler):
    '''Appends to "metadata" a directory for each chunk it understands.

    The embedded blocks are handed to the decoders passed to the constructor
    (the ones of riffmeta.formats by default), whose directories are appended
    untouched.
    '''

    def __init__(self, metadata: Metadata, exif_reader=None, icc_reader=None, xmp_reader=None):
        self._metadata = metadata
        self.exif_reader = exif_reader or ExifReader()
        self.icc_reader = icc_reader or IccReader()
        self.xmp_reader = xmp_reader or XmpReader()
        self.logger = logging.getLogger(__name__)

    def should_accept_riff_identifier(self, identifier: bytes) -> bool:
        return identifier == WEBP_IDENTIFIER

    def should_accept_chunk(self, fourcc: bytes) -> bool:
        return FourCC.from_bytes(fourcc) is not FourCC.UNKNOWN

    def should_accept_list(self, fourcc: bytes) -> bool:
        return False

    def add_error(self, message: str) -> None:
        self._metadata.append(Directory.error(message))

    def process_chunk(self, fourcc: bytes, payload: bytes) -> None:
        code = FourCC.from_bytes(fourcc)

        if code is FourCC.EXIF:
            # Some software copies the whole JPEG APP1 segment, preamble included
            start_offset = JPEG_SEGMENT_PREAMBLE_LENGTH if starts_with_jpeg_exif_preamble(payload) else 0
            self._metadata.extend(self.exif_reader.extract(payload, start_offset))
        elif code is FourCC.ICCP:
            self._metadata.extend(self.icc_reader.extract(payload, 0))
        elif code is FourCC.XMP:
            self._metadata.extend(self.xmp_reader.extract(payload, 0))
        elif code in DIMENSION_DECODERS:
            self.process_dimensions(code, DIMENSION_DECODERS[code](payload))
        else:
            self.logger.debug('ignoring chunk %r' % fourcc)

    def process_dimensions(self, code: FourCC, result: DimensionResult) -> None:
        if result is None:
            self.logger.debug('skipping malformed \'%s\' chunk' % code.value.decode())
            return

        directory = Directory(DirectoryKind.WEBP)

        if isinstance(result, DecodeError):
            self.logger.warning(result.message)
            directory.add_error(result.message)
        else:
            directory.set(WebPTag.IMAGE_WIDTH, result.width)
            directory.set(WebPTag.IMAGE_HEIGHT, result.height)
            if result.has_alpha is not None:
                directory.set(WebPTag.HAS_ALPHA, result.has_alpha)
            if result.is_animation is not None:
                directory.set(WebPTag.IS_ANIMATION, result.is_animation)

        self._metadata.append(directory)


def read_metadata(source, compliant=Compliant.NONE) -> Metadata:
    '''Extract the metadata of a WebP image.

    The source can be a path, raw bytes or a binary file object; for a path a
    File directory is added at the end.'''
    metadata = Metadata()

    with Stream(source) as stream:
        logger.debug('reading WebP metadata from %r' % stream)
        RiffReader(compliant=compliant).process(stream, WebPRiffHandler(metadata))

    if isinstance(source, (str, Path)):
        metadata.append(file_directory(source))

    return metadata
