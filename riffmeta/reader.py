'''
Random access reads of fixed width integers and single bits from a buffer.

Every read is validated against the bounds of the buffer and raises
ReadException when it would go outside of it, so the decoders can tell a
truncated payload apart from a malformed one.
'''
from bitstring import Bits

from .exceptions import ReadException


class ByteReader(object):
    '''Reads values at absolute indexes of a byte buffer.

    The "base_offset" shifts index zero inside the buffer (used by the Exif
    decoder, whose offsets are relative to the TIFF header); the byte order is
    big-endian ("Motorola") unless is_motorola_byte_order is False.
    '''

    def __init__(self, buffer: bytes, base_offset: int = 0, is_motorola_byte_order: bool = True):
        if base_offset < 0:
            raise ValueError('base offset must be positive, not %d' % base_offset)

        self.buffer = bytes(buffer)
        self.base_offset = base_offset
        self.is_motorola_byte_order = is_motorola_byte_order

    def __repr__(self):
        return '<%s(length=%d, base_offset=%d, %s)>' % (
            self.__class__.__name__,
            self.length,
            self.base_offset,
            'big-endian' if self.is_motorola_byte_order else 'little-endian',
        )

    @property
    def length(self) -> int:
        return len(self.buffer) - self.base_offset

    def with_byte_order(self, is_motorola_byte_order: bool) -> 'ByteReader':
        return ByteReader(self.buffer, self.base_offset, is_motorola_byte_order)

    def is_valid_index(self, index: int, count: int) -> bool:
        return count >= 0 and index >= 0 and index + count <= self.length

    def validate_index(self, index: int, count: int) -> None:
        if self.is_valid_index(index, count):
            return

        if index < 0:
            raise ReadException(f'Attempt to read from buffer using a negative index ({index})')
        if count < 0:
            raise ReadException(f'Number of requested bytes cannot be negative ({count})')

        raise ReadException(
            f'Attempt to read from beyond end of underlying data source '
            f'(requested index: {index}, requested count: {count}, max index: {self.length - 1})')

    def _bits(self, index: int, count: int) -> Bits:
        self.validate_index(index, count)
        start = self.base_offset + index
        return Bits(self.buffer[start:start + count])

    def _unsigned(self, index: int, count: int) -> int:
        bits = self._bits(index, count)
        return bits.uintbe if self.is_motorola_byte_order else bits.uintle

    def _signed(self, index: int, count: int) -> int:
        bits = self._bits(index, count)
        return bits.intbe if self.is_motorola_byte_order else bits.intle

    def get_byte(self, index: int) -> int:
        return self._bits(index, 1).uint

    def get_sbyte(self, index: int) -> int:
        return self._bits(index, 1).int

    def get_bytes(self, index: int, count: int) -> bytes:
        return self._bits(index, count).bytes

    def get_bit(self, index: int) -> bool:
        '''Bit "index % 8" of byte "index // 8", counting from the least significant one.'''
        byte_index, bit_index = divmod(index, 8)
        # Bits are indexed from the most significant bit
        return self._bits(byte_index, 1)[7 - bit_index]

    def get_uint16(self, index: int) -> int:
        return self._unsigned(index, 2)

    def get_int16(self, index: int) -> int:
        return self._signed(index, 2)

    def get_int24(self, index: int) -> int:
        '''24 bits unsigned integer'''
        return self._unsigned(index, 3)

    def get_uint32(self, index: int) -> int:
        return self._unsigned(index, 4)

    def get_int32(self, index: int) -> int:
        return self._signed(index, 4)

    def get_float32(self, index: int) -> float:
        bits = self._bits(index, 4)
        return bits.floatbe if self.is_motorola_byte_order else bits.floatle

    def get_float64(self, index: int) -> float:
        bits = self._bits(index, 8)
        return bits.floatbe if self.is_motorola_byte_order else bits.floatle

    def get_s15fixed16(self, index: int) -> float:
        '''Signed fixed point number with 16 fractional bits (ICC profiles)'''
        return self.get_int32(index) / 65536.0

    def get_string(self, index: int, count: int, encoding: str = 'ascii') -> str:
        return self.get_bytes(index, count).decode(encoding, errors='replace')

    def get_null_terminated_bytes(self, index: int, max_length: int) -> bytes:
        '''Bytes up to the first NUL, reading at most max_length bytes'''
        data = self.get_bytes(index, min(max_length, max(self.length - index, 0)))
        return data.split(b'\x00', 1)[0]

    def starts_with(self, pattern: bytes) -> bool:
        return self.is_valid_index(0, len(pattern)) and self.get_bytes(0, len(pattern)) == pattern
