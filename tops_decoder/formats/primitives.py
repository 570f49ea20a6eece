"""
Primitive field decoders.

Each reader takes a buffer and an offset and returns (value, new_offset).
Buffers may be bytes, bytearray or memoryview; nothing is copied except
the symbol text.

All multi-byte integers on the TOPS wire are little-endian.

    Price      8 bytes  integer, scaled by 10,000
    Timestamp  8 bytes  signed, nanoseconds since the Unix epoch
    Size       4 bytes  unsigned
    Trade ID   8 bytes  signed
    Symbol     8 bytes  ASCII, right-padded with spaces
"""

import struct
from typing import Callable, Sequence, Tuple, TypeVar

from ..core.errors import ErrorCode, IncompleteMessage, MalformedMessage, ReservedBitsError
from .records import Timestamp


S = TypeVar('S')

PRICE_SCALE = 10_000.0

# Q=u64 price, q=i64 timestamp/id, I=u32 size
PRICE_FORMAT = struct.Struct('<Q')
TIMESTAMP_FORMAT = struct.Struct('<q')
U32_FORMAT = struct.Struct('<I')
I64_FORMAT = struct.Struct('<q')

SYMBOL_WIDTH = 8


def require(data: Sequence, offset: int, size: int) -> None:
    """Raise IncompleteMessage unless size bytes are available at offset."""
    if len(data) - offset < size:
        raise IncompleteMessage(needed=offset + size, available=len(data))


def read_u8(data, offset: int) -> Tuple[int, int]:
    require(data, offset, 1)
    return data[offset], offset + 1


def read_u32(data, offset: int) -> Tuple[int, int]:
    require(data, offset, U32_FORMAT.size)
    return U32_FORMAT.unpack_from(data, offset)[0], offset + U32_FORMAT.size


def read_i64(data, offset: int) -> Tuple[int, int]:
    require(data, offset, I64_FORMAT.size)
    return I64_FORMAT.unpack_from(data, offset)[0], offset + I64_FORMAT.size


def read_price(data, offset: int) -> Tuple[float, int]:
    """Fixed-point price in units of 1/10,000."""
    require(data, offset, PRICE_FORMAT.size)
    raw = PRICE_FORMAT.unpack_from(data, offset)[0]
    return raw / PRICE_SCALE, offset + PRICE_FORMAT.size


def read_timestamp(data, offset: int) -> Tuple[Timestamp, int]:
    require(data, offset, TIMESTAMP_FORMAT.size)
    nanos = TIMESTAMP_FORMAT.unpack_from(data, offset)[0]
    return Timestamp(nanos), offset + TIMESTAMP_FORMAT.size


def read_padded_text(
    data,
    offset: int,
    width: int,
    factory: Callable[[str], S] = str,
) -> Tuple[S, int]:
    """
    Read a fixed-width, space-padded text field.

    Only trailing spaces are trimmed; interior bytes are kept verbatim.

    Raises:
        IncompleteMessage: Fewer than width bytes remain
        MalformedMessage: The bytes are not valid UTF-8
    """
    require(data, offset, width)
    raw = bytes(data[offset:offset + width]).rstrip(b' ')
    try:
        text = raw.decode('utf-8')
    except UnicodeDecodeError as e:
        raise MalformedMessage(
            ErrorCode.E1004_INVALID_SYMBOL_TEXT,
            {'offset': offset, 'raw': raw.hex(), 'reason': e.reason},
        ) from None
    return factory(text), offset + width


def unpack_flags(byte: int, count: int) -> Tuple[bool, ...]:
    """
    Split a flag byte into count booleans, most significant bit first.

    The remaining (8 - count) low bits are reserved and must be zero.

    Raises:
        ReservedBitsError: Any reserved bit is set
    """
    if not 0 <= count <= 8:
        raise ValueError(f"Flag count out of range: {count}")

    reserved_mask = (1 << (8 - count)) - 1
    if byte & reserved_mask:
        raise ReservedBitsError(byte, reserved_mask)

    return tuple(bool((byte >> (7 - bit)) & 1) for bit in range(count))


def read_flags(data, offset: int, count: int) -> Tuple[Tuple[bool, ...], int]:
    byte, offset = read_u8(data, offset)
    return unpack_flags(byte, count), offset


def pack_flags(flags: Sequence[bool]) -> int:
    """Inverse of unpack_flags; reserved bits are written as zero."""
    if len(flags) > 8:
        raise ValueError(f"Too many flags: {len(flags)}")
    byte = 0
    for bit, flag in enumerate(flags):
        if flag:
            byte |= 1 << (7 - bit)
    return byte
