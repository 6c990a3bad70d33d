"""
Exceptions for the dfinity_tx package.
"""
from enum import Enum
from typing import Optional


class DecodeErrorCode(str, Enum):
    """
    Reasons a byte stream was rejected by the decoder.
    """
    FORMAT_MISMATCH = "FORMAT_MISMATCH"
    TRUNCATED_PAYLOAD = "TRUNCATED_PAYLOAD"
    LENGTH_MISMATCH = "LENGTH_MISMATCH"
    NON_CANONICAL = "NON_CANONICAL"
    MALFORMED_FIELD = "MALFORMED_FIELD"


class DfinityTxError(Exception):
    """Base exception for all transaction codec errors."""
    pass


class EncodeError(DfinityTxError, ValueError):
    """Raised when a field set cannot be written in the selected format."""
    pass


class DecodeError(DfinityTxError, ValueError):
    """Raised when a byte stream is not a well-formed transaction."""

    code = DecodeErrorCode.MALFORMED_FIELD

    def __init__(self, message: str, offset: Optional[int] = None):
        self.offset = offset
        super().__init__(message)


class FormatMismatchError(DecodeError):
    """Leading discriminator or CBOR tag does not match the expected format."""

    code = DecodeErrorCode.FORMAT_MISMATCH


class TruncatedPayloadError(DecodeError):
    """The stream ended before a field was complete."""

    code = DecodeErrorCode.TRUNCATED_PAYLOAD


class LengthMismatchError(DecodeError):
    """A declared length disagrees with the bytes actually present."""

    code = DecodeErrorCode.LENGTH_MISMATCH


class NonCanonicalError(DecodeError):
    """The stream decodes, but is not the canonical encoding of its fields."""

    code = DecodeErrorCode.NON_CANONICAL


class MalformedFieldError(DecodeError):
    """A field has the wrong type or an out-of-range value."""

    code = DecodeErrorCode.MALFORMED_FIELD


class SigningError(DfinityTxError):
    """Raised when a transaction cannot be signed."""
    pass
