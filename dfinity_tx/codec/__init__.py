"""
Field codecs, keyed by wire encoding.

Each codec converts a field set to and from its canonical unsigned bytes and
knows nothing about signatures.
"""
from types import ModuleType
from typing import Dict

from ..config import FormatProfile, WireEncoding
from ..models import TxFields
from . import cbor, flat

__all__ = ['encode', 'decode', 'unsigned_length', 'codec_for']

_CODECS: Dict[WireEncoding, ModuleType] = {
    WireEncoding.FLAT: flat,
    WireEncoding.CBOR: cbor,
}


def codec_for(profile: FormatProfile) -> ModuleType:
    """Return the codec module for a profile's encoding"""
    return _CODECS[profile.encoding]


def encode(fields: TxFields, profile: FormatProfile) -> bytes:
    return codec_for(profile).encode_fields(fields, profile)


def decode(raw: bytes, profile: FormatProfile) -> TxFields:
    return codec_for(profile).decode_fields(raw, profile)


def unsigned_length(raw: bytes, profile: FormatProfile) -> int:
    return codec_for(profile).unsigned_length(raw, profile)
