import struct

from riffmeta.directory import DirectoryKind
from riffmeta.formats.exif import (
    ExifReader,
    Rational,
    starts_with_jpeg_exif_preamble,
)


def ascii_entry(tag, text):
    data = text.encode() + b'\x00'
    return (tag, 2, len(data), data)


def test_preamble():
    assert starts_with_jpeg_exif_preamble(b'Exif\x00\x00II*\x00')
    assert not starts_with_jpeg_exif_preamble(b'II*\x00\x08\x00\x00\x00')
    assert not starts_with_jpeg_exif_preamble(b'Exif')


def test_ifd0_little_endian(tiff_bytes):
    data = tiff_bytes([
        ascii_entry(0x010f, 'riffmeta'),
        (0x0112, 3, 1, struct.pack('<H', 6)),
        (0x011a, 5, 1, struct.pack('<II', 72, 1)),
    ])

    directories = ExifReader().extract(data)

    assert len(directories) == 1
    ifd0 = directories[0]
    assert ifd0.kind is DirectoryKind.EXIF_IFD0
    assert ifd0.get(0x010f) == 'riffmeta'
    assert ifd0.get(0x0112) == 6
    assert ifd0.get(0x011a) == Rational(72, 1)
    assert ifd0.tag_name(0x010f) == 'Make'
    assert ifd0.description(0x011a) == '72/1'
    assert not ifd0.has_error


def test_ifd0_big_endian(tiff_bytes):
    data = tiff_bytes([
        (0x0100, 4, 1, struct.pack('>I', 4000)),
        (0x0101, 3, 2, struct.pack('>HH', 3, 4)),
    ], byte_order=b'MM')

    ifd0, = ExifReader().extract(data)

    assert ifd0.get(0x0100) == 4000
    assert ifd0.get(0x0101) == (3, 4)


def test_start_offset(tiff_bytes):
    data = b'Exif\x00\x00' + tiff_bytes([ascii_entry(0x0110, 'model')])

    ifd0, = ExifReader().extract(data, start_offset=6)

    assert ifd0.get(0x0110) == 'model'


def test_sub_ifds(ifd_bytes):
    # IFD0 at 8 with two inline entries is 30 bytes long
    sub_ifd_offset = 8 + 2 + 2 * 12 + 4
    ifd0 = ifd_bytes([
        (0x0112, 3, 1, struct.pack('<H', 1)),
        (0x8769, 4, 1, struct.pack('<I', sub_ifd_offset)),
    ], 8, '<')
    assert len(ifd0) == 30

    gps_offset = sub_ifd_offset + 2 + 12 + 4
    sub_ifd = ifd_bytes([
        (0x8825, 4, 1, struct.pack('<I', gps_offset)),
    ], sub_ifd_offset, '<')
    gps = ifd_bytes([
        (0x0001, 2, 2, b'N\x00'),
    ], gps_offset, '<')

    data = b'II' + struct.pack('<HI', 0x2a, 8) + ifd0 + sub_ifd + gps

    directories = ExifReader().extract(data)

    assert [_.kind for _ in directories] == [
        DirectoryKind.EXIF_IFD0,
        DirectoryKind.EXIF_SUBIFD,
        DirectoryKind.GPS,
    ]
    assert 0x8769 not in directories[0]
    assert directories[2].get(0x0001) == 'N'
    assert directories[2].tag_name(0x0001) == 'GPSLatitudeRef'


def test_thumbnail_ifd(ifd_bytes):
    thumbnail_offset = 8 + 2 + 12 + 4
    ifd0 = ifd_bytes([(0x0112, 3, 1, struct.pack('<H', 1))], 8, '<', next_ifd=thumbnail_offset)
    ifd1 = ifd_bytes([(0x0103, 3, 1, struct.pack('<H', 6))], thumbnail_offset, '<')

    data = b'II' + struct.pack('<HI', 0x2a, 8) + ifd0 + ifd1

    directories = ExifReader().extract(data)

    assert [_.kind for _ in directories] == [DirectoryKind.EXIF_IFD0, DirectoryKind.EXIF_THUMBNAIL]
    assert directories[1].get(0x0103) == 6


def test_ifd_loop(ifd_bytes):
    ifd0 = ifd_bytes([(0x8769, 4, 1, struct.pack('<I', 8))], 8, '<', next_ifd=8)
    data = b'II' + struct.pack('<HI', 0x2a, 8) + ifd0

    directories = ExifReader().extract(data)

    assert len(directories) == 1


def test_long_ifd_chain(ifd_bytes):
    count = 2000
    offsets = [8 + 18 * _ for _ in range(count)]
    body = b''.join(
        ifd_bytes([(0x8769, 4, 1, struct.pack('<I', next_offset))], offset, '<')
        for offset, next_offset in zip(offsets, offsets[1:])
    )
    body += ifd_bytes([(0x0112, 3, 1, struct.pack('<H', 3))], offsets[-1], '<')
    data = b'II' + struct.pack('<HI', 0x2a, 8) + body

    directories = ExifReader().extract(data)

    assert len(directories) == count
    assert directories[0].kind is DirectoryKind.EXIF_IFD0
    assert all(_.kind is DirectoryKind.EXIF_SUBIFD for _ in directories[1:])
    assert directories[-1].get(0x0112) == 3


def test_ifd_order(ifd_bytes):
    # IFD0 -> (SubIFD -> Interoperability), GPS, then the thumbnail
    sub_ifd_offset = 8 + 2 + 2 * 12 + 4
    interop_offset = sub_ifd_offset + 18
    gps_offset = interop_offset + 18
    thumbnail_offset = gps_offset + 18

    ifd0 = ifd_bytes([
        (0x8769, 4, 1, struct.pack('<I', sub_ifd_offset)),
        (0x8825, 4, 1, struct.pack('<I', gps_offset)),
    ], 8, '<', next_ifd=thumbnail_offset)
    sub_ifd = ifd_bytes([(0xa005, 4, 1, struct.pack('<I', interop_offset))], sub_ifd_offset, '<')
    interop = ifd_bytes([(0x0002, 7, 4, b'0100')], interop_offset, '<')
    gps = ifd_bytes([(0x0000, 1, 4, b'\x02\x02\x00\x00')], gps_offset, '<')
    thumbnail = ifd_bytes([(0x0103, 3, 1, struct.pack('<H', 6))], thumbnail_offset, '<')

    data = b'II' + struct.pack('<HI', 0x2a, 8) + ifd0 + sub_ifd + interop + gps + thumbnail

    directories = ExifReader().extract(data)

    assert [_.kind for _ in directories] == [
        DirectoryKind.EXIF_IFD0,
        DirectoryKind.EXIF_SUBIFD,
        DirectoryKind.EXIF_INTEROP,
        DirectoryKind.GPS,
        DirectoryKind.EXIF_THUMBNAIL,
    ]
    assert directories[2].get(0x0002) == b'0100'
    assert directories[3].get(0x0000) == b'\x02\x02\x00\x00'
    assert directories[4].get(0x0103) == 6


def test_wrong_byte_order():
    directories = ExifReader().extract(b'XX*\x00\x08\x00\x00\x00')

    assert len(directories) == 1
    assert directories[0].has_error
    assert len(directories[0]) == 0
    assert directories[0].errors[0].startswith('Unclear distinction between Motorola/Intel byte ordering')


def test_wrong_tiff_marker():
    directories = ExifReader().extract(b'II+\x00\x08\x00\x00\x00')

    assert directories[0].errors == ['Unexpected TIFF marker: 0x002B']


def test_too_short():
    directories = ExifReader().extract(b'I')

    assert len(directories) == 1
    assert directories[0].has_error


def test_first_ifd_outside():
    directories = ExifReader().extract(b'II*\x00\xff\x00\x00\x00')

    assert len(directories) == 1
    assert directories[0].kind is DirectoryKind.EXIF_IFD0
    assert directories[0].has_error


def test_value_outside_is_skipped(tiff_bytes):
    data = tiff_bytes([
        ascii_entry(0x010f, 'riffmeta'),
        (0x0110, 2, 100, struct.pack('<I', 0xffff)),
    ])

    ifd0, = ExifReader().extract(data)

    assert ifd0.get(0x010f) == 'riffmeta'
    assert 0x0110 not in ifd0
    assert not ifd0.has_error


def test_invalid_format_is_skipped(tiff_bytes):
    data = tiff_bytes([
        (0x0100, 99, 1, b'\x00' * 4),
        (0x0101, 3, 1, struct.pack('<H', 5)),
    ])

    ifd0, = ExifReader().extract(data)

    assert 0x0100 not in ifd0
    assert ifd0.get(0x0101) == 5


def test_undefined_and_signed(tiff_bytes):
    data = tiff_bytes([
        (0x9000, 7, 4, b'0232'),
        (0x9204, 10, 1, struct.pack('<ii', -1, 3)),
    ])

    ifd0, = ExifReader().extract(data)

    assert ifd0.get(0x9000) == b'0232'
    assert ifd0.get(0x9204) == Rational(-1, 3)
