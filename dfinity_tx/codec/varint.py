"""
Unsigned LEB128 variable-length integers.

Only the minimal encoding of a value is accepted, so each integer has exactly
one valid byte sequence.
"""
from typing import Tuple

from ..exceptions import NonCanonicalError, TruncatedPayloadError


def encode_uvarint(value: int) -> bytes:
    """
    Encode a non-negative integer as unsigned LEB128.

    Args:
        value: Integer to encode

    Returns:
        Encoded bytes, low group first

    Raises:
        ValueError: If value is negative
    """
    if value < 0:
        raise ValueError(f"cannot encode negative value {value} as unsigned varint")

    out = bytearray()
    while True:
        group = value & 0x7F
        value >>= 7
        if value:
            out.append(group | 0x80)
        else:
            out.append(group)
            return bytes(out)


def read_uvarint(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Read an unsigned LEB128 integer.

    Args:
        data: Buffer to read from
        offset: Position of the first byte

    Returns:
        Tuple of (value, offset just past the integer)

    Raises:
        TruncatedPayloadError: If the buffer ends inside the integer
        NonCanonicalError: If the integer carries padding groups
    """
    value = 0
    shift = 0
    pos = offset
    while True:
        if pos >= len(data):
            raise TruncatedPayloadError("varint runs past end of input", offset=offset)
        byte = data[pos]
        pos += 1
        value |= (byte & 0x7F) << shift
        shift += 7
        if not byte & 0x80:
            break

    # A trailing zero group means a shorter encoding existed
    if byte == 0 and pos - offset > 1:
        raise NonCanonicalError("varint is not minimally encoded", offset=offset)
    return value, pos
