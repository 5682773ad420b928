import struct

import pytest


def _riff_chunk(fourcc, payload, size=None):
    data = fourcc + struct.pack('<I', len(payload) if size is None else size) + payload
    if len(payload) % 2:
        data += b'\x00'
    return data


def _riff(chunks, identifier=b'WEBP', magic=b'RIFF'):
    '''chunks is a list of (fourcc, payload) couples'''
    body = identifier + b''.join(_riff_chunk(fourcc, payload) for fourcc, payload in chunks)
    return magic + struct.pack('<I', len(body)) + body


def _ifd(entries, offset, endian, next_ifd=0):
    '''IFD at "offset" with the values not fitting the entries right after it'''
    data_offset = offset + 2 + 12 * len(entries) + 4
    head = struct.pack(endian + 'H', len(entries))
    extra = b''
    for tag, format, components, value in entries:
        if len(value) <= 4:
            head += struct.pack(endian + 'HHI', tag, format, components) + value.ljust(4, b'\x00')
        else:
            head += struct.pack(endian + 'HHII', tag, format, components, data_offset + len(extra))
            extra += value
            if len(extra) % 2:
                extra += b'\x00'
    head += struct.pack(endian + 'I', next_ifd)

    return head + extra


def _tiff(entries, byte_order=b'II'):
    '''entries is a list of (tag, format, components, raw value)'''
    endian = '<' if byte_order == b'II' else '>'
    return byte_order + struct.pack(endian + 'HI', 0x2a, 8) + _ifd(entries, 8, endian)


def _icc_text_desc(text):
    data = text.encode('latin1') + b'\x00'
    return b'desc' + b'\x00' * 4 + struct.pack('>I', len(data)) + data


def _icc(tags=(), signature=b'acsp'):
    '''tags is a list of (signature, raw data)'''
    table_length = 4 + 12 * len(tags)
    table = struct.pack('>I', len(tags))
    body = b''
    for tag_signature, data in tags:
        table += tag_signature + struct.pack('>II', 128 + table_length + len(body), len(data))
        body += data
        while len(body) % 4:
            body += b'\x00'

    header = (
        struct.pack('>I', 128 + table_length + len(body)) +
        b'lcms' +
        struct.pack('>I', 0x04300000) +
        b'mntr' + b'RGB ' + b'XYZ ' +
        struct.pack('>6H', 2020, 1, 2, 3, 4, 5) +
        signature +
        b'APPL' +
        struct.pack('>I', 0) +
        b'\x00' * 4 +
        struct.pack('>I', 0) +
        struct.pack('>Q', 0) +
        struct.pack('>I', 0) +
        struct.pack('>3i', 63190, 65536, 54061) +
        b'lcms' +
        b'\x00' * 16 +
        b'\x00' * 28
    )
    assert len(header) == 128

    return header + table + body


@pytest.fixture
def riff_chunk():
    return _riff_chunk


@pytest.fixture
def riff_bytes():
    return _riff


@pytest.fixture
def ifd_bytes():
    return _ifd


@pytest.fixture
def tiff_bytes():
    return _tiff


@pytest.fixture
def icc_text_desc():
    return _icc_text_desc


@pytest.fixture
def icc_bytes():
    return _icc
