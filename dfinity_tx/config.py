"""
Wire format profiles for transactions.

Each historical wire format is described by a ``FormatProfile``; the codec
and envelope modules read the profile instead of branching on the version
name.
"""
import json
import logging
import importlib.resources
from enum import Enum
from typing import Dict, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

logger = logging.getLogger(__name__)


class FormatVersion(str, Enum):
    """Known wire formats."""
    FLAT_V0 = "flat-v0"
    FLAT_V1 = "flat-v1"
    CBOR_V2 = "cbor-v2"
    CBOR_V3 = "cbor-v3"


class WireEncoding(str, Enum):
    FLAT = "flat"
    CBOR = "cbor"


class Addressing(str, Enum):
    ADDRESS = "address"
    FUNCTION_REF = "function_ref"
    ACTOR_FUNCTION = "actor_function"


class PayloadKind(str, Enum):
    BYTES = "bytes"
    ARGS = "args"


class EnvelopeStyle(str, Enum):
    RECOVERABLE = "recoverable"
    EXPLICIT_KEY = "explicit_key"


class FormatProfile(BaseModel):
    """Constants describing one wire format."""
    model_config = ConfigDict(frozen=True)

    version: FormatVersion
    encoding: WireEncoding
    addressing: Addressing
    payload: PayloadKind = PayloadKind.BYTES
    envelope: EnvelopeStyle = EnvelopeStyle.RECOVERABLE
    discriminator: int = Field(1, ge=0, le=255)
    cbor_tag: Optional[int] = Field(None, ge=0)
    length_covers_signature: bool = False

    @model_validator(mode="after")
    def _check_combination(self) -> "FormatProfile":
        if self.encoding == WireEncoding.FLAT:
            if self.addressing != Addressing.ADDRESS:
                raise ValueError("flat encoding only supports 20-byte addresses")
            if self.payload != PayloadKind.BYTES:
                raise ValueError("flat encoding only supports byte payloads")
            if self.envelope != EnvelopeStyle.RECOVERABLE:
                raise ValueError("flat encoding only supports the recoverable envelope")
        elif self.cbor_tag is None:
            raise ValueError("cbor encoding requires a cbor_tag")
        return self


class FormatConfig:
    """Loads and caches the bundled format profiles."""

    DEFAULT_VERSION = FormatVersion.FLAT_V1

    _profiles_cache: Optional[Dict[FormatVersion, FormatProfile]] = None

    @classmethod
    def load_profiles(cls) -> Dict[FormatVersion, FormatProfile]:
        """
        Load format profiles from the bundled formats.json.

        Returns:
            Mapping of format version to profile
        """
        if cls._profiles_cache is not None:
            return cls._profiles_cache

        raw = importlib.resources.files("dfinity_tx").joinpath("formats.json").read_text(encoding="utf-8")
        data: Dict[str, Dict[str, Any]] = json.loads(raw)

        profiles = {}
        for name, entry in data.items():
            version = FormatVersion(name)
            profiles[version] = FormatProfile(version=version, **entry)
        logger.debug("Loaded %d format profiles", len(profiles))

        cls._profiles_cache = profiles
        return profiles

    @classmethod
    def get_profile(cls, version: Any = None) -> FormatProfile:
        """
        Get the profile for a format version.

        Args:
            version: A FormatVersion, its string value, a FormatProfile
                (returned unchanged) or None for the default

        Returns:
            The matching FormatProfile

        Raises:
            ValueError: If the version is unknown
        """
        if isinstance(version, FormatProfile):
            return version
        if version is None:
            version = cls.DEFAULT_VERSION

        profiles = cls.load_profiles()
        try:
            return profiles[FormatVersion(version)]
        except (ValueError, KeyError):
            available = ", ".join(v.value for v in profiles)
            raise ValueError(f"Unknown format version '{version}'. Available: {available}")
