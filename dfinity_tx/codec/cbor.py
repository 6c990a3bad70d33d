"""
CBOR-tagged layout.

The transaction is one CBOR tag (the profile's ``cbor_tag``) wrapping an
array of the fields in wire order:

    function_ref:   [version, index, caps, ticks, ticks_price, nonce, payload]
    address:        [version, address, caps, ticks, ticks_price, nonce, payload]
    actor_function: [version, actor_id, function, caps, ticks, ticks_price, nonce, payload]

An ``args`` payload is itself canonical CBOR, embedded as a byte string.
All output is canonical CBOR, and decoding rejects anything that does not
re-encode to the exact input.
"""
import io
import logging
from typing import Any, List, Tuple

import cbor2
from cbor2 import CBORTag
from pydantic import ValidationError

from ..config import Addressing, FormatProfile, PayloadKind
from ..exceptions import (
    EncodeError, FormatMismatchError, LengthMismatchError, MalformedFieldError,
    NonCanonicalError, TruncatedPayloadError,
)
from ..models import ActorFunction, FunctionRef, TxFields, thaw_args

logger = logging.getLogger(__name__)

_INT_FIELDS = ("caps", "ticks", "ticks_price", "nonce")


def dumps(value: Any) -> bytes:
    """Canonical CBOR encoding"""
    try:
        return cbor2.dumps(value, canonical=True)
    except (cbor2.CBOREncodeError, TypeError, ValueError) as e:
        raise EncodeError(f"Value cannot be CBOR encoded: {e}") from e


def read_item(raw: bytes) -> Tuple[Any, int]:
    """
    Decode the first CBOR item of ``raw``.

    Returns:
        Tuple of (decoded item, number of bytes it occupied)

    Raises:
        TruncatedPayloadError: If the input ends inside the item
        MalformedFieldError: If the input is not valid CBOR
    """
    if not raw:
        raise TruncatedPayloadError("empty input", offset=0)
    fp = io.BytesIO(raw)
    try:
        item = cbor2.CBORDecoder(fp).decode()
    except EOFError as e:
        raise TruncatedPayloadError(f"CBOR item runs past end of input: {e}") from e
    except (cbor2.CBORDecodeError, ValueError) as e:
        raise MalformedFieldError(f"Invalid CBOR: {e}") from e
    return item, fp.tell()


def _target_items(fields: TxFields, profile: FormatProfile) -> List[Any]:
    target = fields.target
    if profile.addressing == Addressing.ADDRESS and isinstance(target, bytes):
        return [target]
    if profile.addressing == Addressing.FUNCTION_REF and isinstance(target, FunctionRef):
        return [target.index]
    if profile.addressing == Addressing.ACTOR_FUNCTION and isinstance(target, ActorFunction):
        return [target.actor_id, target.function]
    raise EncodeError(
        f"{profile.version.value} expects a {profile.addressing.value} target, "
        f"got {type(target).__name__}"
    )


def _payload_item(fields: TxFields, profile: FormatProfile) -> bytes:
    if profile.payload == PayloadKind.ARGS:
        if not isinstance(fields.data, (list, tuple)):
            raise EncodeError(f"{profile.version.value} expects an argument list payload")
        return dumps(fields.data)
    if not isinstance(fields.data, bytes):
        raise EncodeError(f"{profile.version.value} expects a bytes payload")
    return fields.data


def tagged_value(fields: TxFields, profile: FormatProfile) -> CBORTag:
    """Build the tagged CBOR value for a field set"""
    items = [fields.version]
    items.extend(_target_items(fields, profile))
    items.extend(getattr(fields, name) for name in _INT_FIELDS)
    items.append(_payload_item(fields, profile))
    return CBORTag(profile.cbor_tag, items)


def encode_fields(fields: TxFields, profile: FormatProfile) -> bytes:
    """
    Encode the unsigned form of a field set.

    Raises:
        EncodeError: If the field set does not fit the profile
    """
    return dumps(tagged_value(fields, profile))


def _expect(value: Any, kind: type, name: str) -> Any:
    # bool is an int subclass but a distinct CBOR type
    if not isinstance(value, kind) or isinstance(value, bool):
        raise MalformedFieldError(f"{name} must be {kind.__name__}, got {type(value).__name__}")
    return value


def fields_from_tagged(item: Any, profile: FormatProfile) -> TxFields:
    """
    Convert a decoded tagged value back to a field set.

    Raises:
        FormatMismatchError: If the item is not the profile's tag
        MalformedFieldError: If the array has the wrong shape or types
    """
    if not isinstance(item, CBORTag) or item.tag != profile.cbor_tag:
        found = item.tag if isinstance(item, CBORTag) else type(item).__name__
        raise FormatMismatchError(f"expected CBOR tag {profile.cbor_tag}, got {found}")

    # cbor2 6 decodes arrays inside a tag as tuples
    items = item.value
    target_width = 2 if profile.addressing == Addressing.ACTOR_FUNCTION else 1
    expected = 2 + target_width + len(_INT_FIELDS)
    if not isinstance(items, (list, tuple)) or len(items) != expected:
        raise MalformedFieldError(f"expected an array of {expected} fields")
    items = list(items)

    values = {"version": _expect(items[0], int, "version")}
    if profile.addressing == Addressing.ADDRESS:
        values["target"] = _expect(items[1], bytes, "address")
    elif profile.addressing == Addressing.FUNCTION_REF:
        values["target"] = FunctionRef(index=_expect(items[1], int, "function index"))
    else:
        values["target"] = ActorFunction(
            actor_id=_expect(items[1], bytes, "actor_id"),
            function=_expect(items[2], str, "function"),
        )

    rest = items[1 + target_width:]
    for name, value in zip(_INT_FIELDS, rest):
        values[name] = _expect(value, int, name)

    payload = _expect(rest[-1], bytes, "payload")
    if profile.payload == PayloadKind.ARGS:
        args, end = read_item(payload)
        if end != len(payload) or not isinstance(args, (list, tuple)):
            raise MalformedFieldError("args payload must be exactly one CBOR array")
        values["data"] = thaw_args(args)
    else:
        values["data"] = payload

    try:
        return TxFields(**values)
    except ValidationError as e:
        raise MalformedFieldError(f"Invalid field value: {e}") from e


def unsigned_length(raw: bytes, profile: FormatProfile) -> int:
    """
    Length of the leading tagged value of ``raw``.

    Raises:
        FormatMismatchError: If the leading item is not the profile's tag
    """
    item, end = read_item(raw)
    if not isinstance(item, CBORTag) or item.tag != profile.cbor_tag:
        raise FormatMismatchError(f"expected CBOR tag {profile.cbor_tag} at start of message", offset=0)
    return end


def decode_fields(raw: bytes, profile: FormatProfile) -> TxFields:
    """
    Decode the unsigned form of a field set. ``raw`` must contain nothing else.

    Raises:
        FormatMismatchError: If the tag is wrong
        LengthMismatchError: If bytes follow the tagged value
        NonCanonicalError: If the input is not the canonical encoding
    """
    item, end = read_item(raw)
    if end != len(raw):
        raise LengthMismatchError(f"{len(raw) - end} unexpected bytes after tagged value", offset=end)
    fields = fields_from_tagged(item, profile)
    if encode_fields(fields, profile) != bytes(raw):
        raise NonCanonicalError("tagged value is not canonically encoded")
    logger.debug("Decoded CBOR transaction with tag %d", profile.cbor_tag)
    return fields
