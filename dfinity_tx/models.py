"""
Data models for transaction fields.
"""
from typing import Any, List, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

ADDRESS_LENGTH = 20
UINT64_MAX = 2**64 - 1


class FunctionRef(BaseModel):
    """Integer reference to an exported function"""
    model_config = ConfigDict(frozen=True)

    index: int = Field(..., ge=0, le=UINT64_MAX, strict=True)


class ActorFunction(BaseModel):
    """Actor id plus the name of the function to invoke on it"""
    model_config = ConfigDict(frozen=True)

    actor_id: bytes
    function: str


Target = Union[bytes, FunctionRef, ActorFunction]
Payload = Union[bytes, List[Any]]


def thaw_args(value: Any) -> Any:
    """Copy an argument tree with every array as a list"""
    if isinstance(value, (list, tuple)):
        return [thaw_args(item) for item in value]
    if isinstance(value, dict):
        return {key: thaw_args(item) for key, item in value.items()}
    return value


def freeze_args(value: Any) -> Any:
    """Copy an argument tree with every array as a tuple"""
    if isinstance(value, (list, tuple)):
        return tuple(freeze_args(item) for item in value)
    if isinstance(value, dict):
        return {key: freeze_args(item) for key, item in value.items()}
    return value


def _default_target() -> bytes:
    return bytes(ADDRESS_LENGTH)


class TxFields(BaseModel):
    """
    The ordered field set of a transaction.

    Field declaration order is the wire order. Unset fields take their zero
    value; the default target is the all-zero 20-byte address.
    """
    model_config = ConfigDict(validate_assignment=True)

    version: int = Field(0, ge=0, le=UINT64_MAX, strict=True)
    target: Target = Field(default_factory=_default_target)
    caps: int = Field(0, ge=0, le=UINT64_MAX, strict=True)
    ticks: int = Field(0, ge=0, le=UINT64_MAX, strict=True)
    ticks_price: int = Field(0, ge=0, le=UINT64_MAX, strict=True)
    nonce: int = Field(0, ge=0, le=UINT64_MAX, strict=True)
    data: Payload = b""

    @field_validator("target", mode="before")
    @classmethod
    def validate_target(cls, v: Any) -> Any:
        """Addresses must be exactly 20 bytes"""
        if isinstance(v, bytearray):
            v = bytes(v)
        if isinstance(v, str):
            raise ValueError("target address must be bytes, not str")
        if isinstance(v, bytes) and len(v) != ADDRESS_LENGTH:
            raise ValueError(f"target address must be {ADDRESS_LENGTH} bytes, got {len(v)}")
        return v

    @field_validator("data", mode="before")
    @classmethod
    def validate_data(cls, v: Any) -> Any:
        if isinstance(v, (bytearray, memoryview)):
            return bytes(v)
        if isinstance(v, (list, tuple)):
            return thaw_args(v)
        return v

    def field_values(self) -> dict:
        """Field values keyed by name, without converting nested models"""
        return {name: getattr(self, name) for name in TxFields.model_fields}
