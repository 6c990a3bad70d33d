"""
Flat binary layout.

    discriminator(1) | varint(version) | address(20) | varint(caps)
    | varint(ticks) | varint(ticks_price) | varint(nonce)
    | varint(length) | data

When the profile's length prefix covers the signature, ``length`` is
``len(data) + 65`` whether or not the signature is present; otherwise it is
``len(data)``. Either way the unsigned encoding is a prefix of the signed one.
"""
import logging
from typing import Tuple

from ..config import FormatProfile
from ..exceptions import (
    EncodeError, FormatMismatchError, LengthMismatchError, MalformedFieldError,
    TruncatedPayloadError,
)
from ..models import ADDRESS_LENGTH, UINT64_MAX, TxFields
from .varint import encode_uvarint, read_uvarint

logger = logging.getLogger(__name__)

SIGNATURE_REGION = 65


def _read_uint64(raw: bytes, pos: int, name: str) -> Tuple[int, int]:
    value, end = read_uvarint(raw, pos)
    if value > UINT64_MAX:
        raise MalformedFieldError(f"{name} does not fit in 64 bits", offset=pos)
    return value, end


def _read_header(raw: bytes, profile: FormatProfile) -> Tuple[dict, int]:
    if not raw:
        raise TruncatedPayloadError("empty input", offset=0)
    if raw[0] != profile.discriminator:
        raise FormatMismatchError(
            f"expected discriminator {profile.discriminator}, got {raw[0]}", offset=0
        )

    values = {}
    values["version"], pos = _read_uint64(raw, 1, "version")
    if pos + ADDRESS_LENGTH > len(raw):
        raise TruncatedPayloadError("address runs past end of input", offset=pos)
    values["target"] = bytes(raw[pos:pos + ADDRESS_LENGTH])
    pos += ADDRESS_LENGTH
    for name in ("caps", "ticks", "ticks_price", "nonce"):
        values[name], pos = _read_uint64(raw, pos, name)
    return values, pos


def _payload_bounds(raw: bytes, profile: FormatProfile) -> Tuple[dict, int, int]:
    """Return (header values, payload start, payload end)."""
    values, pos = _read_header(raw, profile)
    declared, start = read_uvarint(raw, pos)
    if profile.length_covers_signature:
        if declared < SIGNATURE_REGION:
            raise LengthMismatchError(
                f"length prefix {declared} is smaller than the signature region", offset=pos
            )
        declared -= SIGNATURE_REGION
    end = start + declared
    if end > len(raw):
        raise TruncatedPayloadError(
            f"payload of {declared} bytes runs past end of input", offset=start
        )
    return values, start, end


def encode_fields(fields: TxFields, profile: FormatProfile) -> bytes:
    """
    Encode the unsigned form of a field set.

    Raises:
        EncodeError: If the target is not an address or the payload is not bytes
    """
    if not isinstance(fields.target, bytes):
        raise EncodeError(f"{profile.version.value} requires a 20-byte address target")
    if not isinstance(fields.data, bytes):
        raise EncodeError(f"{profile.version.value} requires a bytes payload")

    length = len(fields.data)
    if profile.length_covers_signature:
        length += SIGNATURE_REGION

    return b"".join([
        bytes([profile.discriminator]),
        encode_uvarint(fields.version),
        fields.target,
        encode_uvarint(fields.caps),
        encode_uvarint(fields.ticks),
        encode_uvarint(fields.ticks_price),
        encode_uvarint(fields.nonce),
        encode_uvarint(length),
        fields.data,
    ])


def unsigned_length(raw: bytes, profile: FormatProfile) -> int:
    """
    Length of the unsigned portion of ``raw``, taken from its length prefix.

    Raises:
        DecodeError: If the header cannot be parsed
    """
    _, _, end = _payload_bounds(raw, profile)
    return end


def decode_fields(raw: bytes, profile: FormatProfile) -> TxFields:
    """
    Decode the unsigned form of a field set. ``raw`` must contain nothing else.

    Raises:
        FormatMismatchError: If the discriminator is wrong
        LengthMismatchError: If the length prefix disagrees with the input size
        TruncatedPayloadError: If the input ends inside a field
        NonCanonicalError: If a varint is padded
    """
    values, start, end = _payload_bounds(raw, profile)
    if end != len(raw):
        raise LengthMismatchError(
            f"length prefix declares {end - start} payload bytes, {len(raw) - start} present",
            offset=start,
        )
    values["data"] = bytes(raw[start:end])
    logger.debug("Decoded flat transaction with %d payload bytes", end - start)
    return TxFields(**values)
