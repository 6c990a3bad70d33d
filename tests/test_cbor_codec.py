"""
Tests for the CBOR-tagged layout.
"""
import cbor2
import pytest
from cbor2 import CBORTag

from dfinity_tx.codec import cbor
from dfinity_tx.config import FormatConfig, FormatVersion
from dfinity_tx.exceptions import (
    DecodeError, EncodeError, FormatMismatchError, LengthMismatchError,
    MalformedFieldError, NonCanonicalError,
)
from dfinity_tx.models import ActorFunction, FunctionRef, TxFields

# tag 57088 (0xdf00), array(7), version 0, function 7, four zero ints, empty bytes
V2_CANONICAL = b"\xd9\xdf\x00\x87\x00\x07\x00\x00\x00\x00\x40"


@pytest.fixture
def v2():
    return FormatConfig.get_profile(FormatVersion.CBOR_V2)


@pytest.fixture
def v3():
    return FormatConfig.get_profile(FormatVersion.CBOR_V3)


class TestEncode:

    def test_canonical_bytes(self, v2):
        assert cbor.encode_fields(TxFields(target=FunctionRef(index=7)), v2) == V2_CANONICAL

    def test_tagged_value_field_order(self, v2):
        fields = TxFields(version=1, target=FunctionRef(index=9), caps=2, ticks=3, ticks_price=4, nonce=5, data=b"d")
        tagged = cbor.tagged_value(fields, v2)
        assert tagged.tag == 57088
        assert tagged.value == [1, 9, 2, 3, 4, 5, b"d"]

    def test_actor_function_layout(self, v3):
        fields = TxFields(target=ActorFunction(actor_id=b"\x0a", function="run"), data=["x", 1])
        tagged = cbor.tagged_value(fields, v3)
        assert tagged.tag == 57089
        assert tagged.value[1:3] == [b"\x0a", "run"]
        # args are embedded as their own canonical CBOR
        assert tagged.value[-1] == cbor2.dumps(["x", 1], canonical=True)

    def test_wrong_target_kind(self, v2):
        with pytest.raises(EncodeError, match="function_ref"):
            cbor.encode_fields(TxFields(), v2)

    def test_args_required(self, v3):
        fields = TxFields(target=ActorFunction(actor_id=b"", function="f"), data=b"raw")
        with pytest.raises(EncodeError, match="argument list"):
            cbor.encode_fields(fields, v3)

    def test_unencodable_args(self, v3):
        fields = TxFields(target=ActorFunction(actor_id=b"", function="f"), data=[object()])
        with pytest.raises(EncodeError):
            cbor.encode_fields(fields, v3)


class TestDecode:

    def test_round_trip_function_ref(self, v2):
        fields = TxFields(version=2, target=FunctionRef(index=2**33), caps=1, nonce=2**64 - 1, data=b"\xff" * 40)
        assert cbor.decode_fields(cbor.encode_fields(fields, v2), v2) == fields

    def test_round_trip_args(self, v3):
        args = [0, -5, "name", b"\x00\x01", [1, [2, 3]], {"k": "v"}, True, None]
        fields = TxFields(target=ActorFunction(actor_id=b"\x01" * 8, function="call"), data=args)
        decoded = cbor.decode_fields(cbor.encode_fields(fields, v3), v3)
        assert decoded.data == args
        assert decoded.target == fields.target

    def test_tagged_value_with_tuple_array(self, v2, v3):
        # cbor2 6 hands back an array inside a tag as a tuple
        fields = cbor.fields_from_tagged(CBORTag(57088, (0, 7, 0, 0, 0, 0, b"")), v2)
        assert fields.target == FunctionRef(index=7)

        args = cbor2.dumps(["x", [1, 2]], canonical=True)
        fields = cbor.fields_from_tagged(CBORTag(57089, (0, b"\x01", "f", 0, 0, 0, 0, args)), v3)
        assert fields.data == ["x", [1, 2]]

    def test_tuple_args_encode_like_lists(self, v3):
        target = ActorFunction(actor_id=b"", function="f")
        as_list = TxFields(target=target, data=[1, [2, 3]])
        as_tuple = TxFields(target=target, data=[1, [2, 3]])
        as_tuple.__dict__["data"] = (1, (2, 3))
        assert cbor.encode_fields(as_tuple, v3) == cbor.encode_fields(as_list, v3)

    def test_wrong_tag(self, v2, v3):
        raw = cbor.encode_fields(TxFields(target=FunctionRef(index=1)), v2)
        with pytest.raises(FormatMismatchError):
            cbor.decode_fields(raw, v3)

    def test_untagged_value(self, v2):
        with pytest.raises(FormatMismatchError):
            cbor.decode_fields(cbor2.dumps([0, 7, 0, 0, 0, 0, b""]), v2)

    def test_non_canonical_integer(self, v2):
        # 7 written with a one-byte argument instead of inline
        raw = b"\xd9\xdf\x00\x87\x00\x18\x07\x00\x00\x00\x00\x40"
        with pytest.raises(NonCanonicalError):
            cbor.decode_fields(raw, v2)

    def test_wrong_array_length(self, v2):
        raw = cbor2.dumps(CBORTag(57088, [0, 7]))
        with pytest.raises(MalformedFieldError):
            cbor.decode_fields(raw, v2)

    def test_bool_is_not_an_integer(self, v2):
        raw = cbor2.dumps(CBORTag(57088, [True, 7, 0, 0, 0, 0, b""]))
        with pytest.raises(MalformedFieldError):
            cbor.decode_fields(raw, v2)

    def test_negative_integer(self, v2):
        raw = cbor2.dumps(CBORTag(57088, [0, 7, -1, 0, 0, 0, b""]))
        with pytest.raises(MalformedFieldError):
            cbor.decode_fields(raw, v2)

    def test_args_must_be_array(self, v3):
        raw = cbor2.dumps(CBORTag(57089, [0, b"", "f", 0, 0, 0, 0, cbor2.dumps(5)]), canonical=True)
        with pytest.raises(MalformedFieldError):
            cbor.decode_fields(raw, v3)

    def test_trailing_bytes(self, v2):
        with pytest.raises(LengthMismatchError):
            cbor.decode_fields(V2_CANONICAL + b"\x00", v2)

    def test_truncated(self, v2):
        with pytest.raises(DecodeError):
            cbor.decode_fields(V2_CANONICAL[:-3], v2)

    def test_not_cbor(self, v2):
        with pytest.raises(DecodeError):
            cbor.decode_fields(b"\xff\xff", v2)


class TestUnsignedLength:

    def test_measures_leading_item(self, v2):
        assert cbor.unsigned_length(V2_CANONICAL + b"\x00" * 65, v2) == len(V2_CANONICAL)

    def test_rejects_foreign_leading_item(self, v2):
        with pytest.raises(FormatMismatchError):
            cbor.unsigned_length(b"\x01" + bytes(30), v2)
