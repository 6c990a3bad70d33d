"""
Signature envelope: attaches signatures to, and strips them from, an
already encoded unsigned transaction.

Recoverable envelope:
    unsigned | signature(64) | recovery_id(1)
    A message is signed exactly when 65 bytes follow the unsigned portion.
    There is no flag byte.

Explicit-key envelope (CBOR formats only):
    signed:   [tagged_value, public_key, der_signature]
    unsigned: tagged_value
"""
import logging
from dataclasses import dataclass
from typing import Optional

import cbor2

from . import codec
from .codec.cbor import dumps, read_item
from .config import EnvelopeStyle, FormatProfile
from .ec_constants import SIGNATURE_LENGTH, RECOVERY_ID_LENGTH
from .exceptions import (
    EncodeError, FormatMismatchError, LengthMismatchError, MalformedFieldError,
    NonCanonicalError,
)

logger = logging.getLogger(__name__)

SIGNATURE_REGION = SIGNATURE_LENGTH + RECOVERY_ID_LENGTH

# CBOR major type 4 (array) with three items
_ARRAY_OF_THREE = b"\x83"


@dataclass(frozen=True)
class Detached:
    """
    A message split into its unsigned portion and signature material.

    Attributes:
        unsigned: Canonical unsigned encoding
        signature: 64-byte raw or DER signature, None if unsigned
        recovery_id: Recovery id (recoverable envelope only)
        public_key: Carried public key (explicit-key envelope only)
    """
    unsigned: bytes
    signature: Optional[bytes] = None
    recovery_id: Optional[int] = None
    public_key: Optional[bytes] = None

    @property
    def is_signed(self) -> bool:
        return self.signature is not None


def attach(
    unsigned: bytes,
    signature: bytes,
    profile: FormatProfile,
    recovery_id: Optional[int] = None,
    public_key: Optional[bytes] = None,
) -> bytes:
    """
    Append signature material to an unsigned encoding.

    Args:
        unsigned: Canonical unsigned encoding
        signature: 64-byte r||s (recoverable) or DER signature (explicit key)
        profile: Format profile
        recovery_id: Required for the recoverable envelope
        public_key: Required for the explicit-key envelope

    Returns:
        Signed message bytes

    Raises:
        EncodeError: If the signature material does not fit the envelope
    """
    if profile.envelope == EnvelopeStyle.RECOVERABLE:
        if len(signature) != SIGNATURE_LENGTH:
            raise EncodeError(f"Recoverable signature must be {SIGNATURE_LENGTH} bytes")
        # Out-of-range ids are kept so decoded messages re-serialize verbatim
        if not isinstance(recovery_id, int) or not 0 <= recovery_id <= 0xFF:
            raise EncodeError(f"Recovery id must fit in one byte, got {recovery_id}")
        return bytes(unsigned) + bytes(signature) + bytes([recovery_id])

    if public_key is None:
        raise EncodeError("Explicit-key envelope requires a public key")
    return _ARRAY_OF_THREE + bytes(unsigned) + dumps(bytes(public_key)) + dumps(bytes(signature))


def _detach_recoverable(raw: bytes, profile: FormatProfile) -> Detached:
    end = codec.unsigned_length(raw, profile)
    trailing = len(raw) - end
    if trailing == 0:
        return Detached(unsigned=raw)
    if trailing == SIGNATURE_REGION:
        return Detached(
            unsigned=raw[:end],
            signature=raw[end:end + SIGNATURE_LENGTH],
            recovery_id=raw[-1],
        )
    raise LengthMismatchError(
        f"expected 0 or {SIGNATURE_REGION} bytes after the unsigned payload, found {trailing}",
        offset=end,
    )


def _detach_explicit_key(raw: bytes, profile: FormatProfile) -> Detached:
    item, end = read_item(raw)
    if end != len(raw):
        raise LengthMismatchError(f"{len(raw) - end} unexpected trailing bytes", offset=end)

    if isinstance(item, cbor2.CBORTag):
        return Detached(unsigned=raw)

    if not isinstance(item, (list, tuple)) or len(item) != 3:
        raise FormatMismatchError("expected a tagged value or a 3-element signed envelope")
    tagged, public_key, signature = item
    if not isinstance(tagged, cbor2.CBORTag):
        raise FormatMismatchError("first envelope element must be the tagged transaction")
    if not isinstance(public_key, bytes) or not isinstance(signature, bytes):
        raise MalformedFieldError("public key and signature must be byte strings")

    unsigned = dumps(tagged)
    if _ARRAY_OF_THREE + unsigned + dumps(public_key) + dumps(signature) != raw:
        raise NonCanonicalError("signed envelope is not canonically encoded")
    return Detached(unsigned=unsigned, signature=signature, public_key=public_key)


def detach(raw: bytes, profile: FormatProfile) -> Detached:
    """
    Split a message into its unsigned portion and signature material.

    Raises:
        DecodeError: If the trailing region matches no recognised shape
    """
    raw = bytes(raw)
    if profile.envelope == EnvelopeStyle.RECOVERABLE:
        detached = _detach_recoverable(raw, profile)
    else:
        detached = _detach_explicit_key(raw, profile)
    logger.debug("Detached %s message (signed=%s)", profile.version.value, detached.is_signed)
    return detached
