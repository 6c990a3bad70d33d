"""
Tests for public key recovery and the secp256k1 helpers.
"""
import pytest
from eth_keys import keys

from dfinity_tx import crypto
from dfinity_tx.ec_constants import SECP256K1_N
from dfinity_tx.exceptions import SigningError
from dfinity_tx.hashing import tx_hash
from dfinity_tx.recovery import RecoveryFailure, RecoveryResult, recover_public_key
from conftest import TEST_SECRET_KEY

MSG_HASH = tx_hash(b"recovery test message")


@pytest.fixture
def signed():
    signature, recovery_id = crypto.sign_recoverable(MSG_HASH, TEST_SECRET_KEY)
    return signature, recovery_id, crypto.public_key_from_secret(TEST_SECRET_KEY)


class TestRecoverPublicKey:

    def test_recovers_signer(self, signed):
        signature, recovery_id, public_key = signed
        result = recover_public_key(MSG_HASH, signature, recovery_id)
        assert result.ok
        assert result
        assert result.public_key == public_key
        assert len(result.public_key) == 33

    def test_matches_uncompressed_form(self, signed):
        signature, recovery_id, _ = signed
        uncompressed = keys.PrivateKey(TEST_SECRET_KEY).public_key.to_bytes()
        assert recover_public_key(MSG_HASH, signature, recovery_id).matches(uncompressed)

    def test_not_signed(self):
        result = recover_public_key(MSG_HASH, b"", 0)
        assert not result
        assert result.failure == RecoveryFailure.NOT_SIGNED

    def test_short_signature(self, signed):
        result = recover_public_key(MSG_HASH, signed[0][:63], signed[1])
        assert result.failure == RecoveryFailure.MALFORMED_SIGNATURE

    @pytest.mark.parametrize("recovery_id", [4, 5, 255, -1, None])
    def test_recovery_id_out_of_range(self, signed, recovery_id):
        result = recover_public_key(MSG_HASH, signed[0], recovery_id)
        assert result.failure == RecoveryFailure.INVALID_RECOVERY_ID
        assert result.public_key is None

    def test_wrong_recovery_id_never_matches(self, signed):
        signature, recovery_id, public_key = signed
        for other in {0, 1, 2, 3} - {recovery_id}:
            assert not recover_public_key(MSG_HASH, signature, other).matches(public_key)

    def test_flipped_signature_byte_never_matches(self, signed):
        signature, recovery_id, public_key = signed
        for index in (0, 31, 32, 63):
            tampered = bytearray(signature)
            tampered[index] ^= 0x01
            result = recover_public_key(MSG_HASH, bytes(tampered), recovery_id)
            assert not result.matches(public_key)

    def test_all_ones_signature(self, signed):
        result = recover_public_key(MSG_HASH, b"\xff" * 64, signed[1])
        assert not result.matches(signed[2])

    def test_different_hash_never_matches(self, signed):
        signature, recovery_id, public_key = signed
        assert not recover_public_key(tx_hash(b"other"), signature, recovery_id).matches(public_key)


class TestRecoveryResult:

    def test_failure_is_falsy(self):
        result = RecoveryResult.failed(RecoveryFailure.RECOVERY_FAILED)
        assert not result
        assert not result.matches(b"\x02" * 33)

    def test_matches_rejects_garbage_key(self, signed):
        result = RecoveryResult.success(signed[2])
        assert not result.matches(b"\x00" * 10)
        assert not result.matches(None)


class TestCrypto:

    @pytest.mark.parametrize("secret", [
        bytes(32),
        SECP256K1_N.to_bytes(32, "big"),
        b"\xff" * 32,
        b"\x01" * 31,
        "not bytes",
    ])
    def test_invalid_secret_keys(self, secret):
        with pytest.raises(SigningError):
            crypto.validate_secret_key(secret)

    def test_generate_secret_key(self):
        first, second = crypto.generate_secret_key(), crypto.generate_secret_key()
        assert len(first) == 32
        assert first != second
        crypto.validate_secret_key(first)

    def test_public_key_is_compressed(self):
        public_key = crypto.public_key_from_secret(TEST_SECRET_KEY)
        assert len(public_key) == 33
        assert public_key[0] in (2, 3)

    def test_normalize_public_key(self):
        compressed = crypto.public_key_from_secret(TEST_SECRET_KEY)
        raw = keys.PrivateKey(TEST_SECRET_KEY).public_key.to_bytes()
        assert crypto.normalize_public_key(raw) == compressed
        assert crypto.normalize_public_key(b"\x04" + raw) == compressed
        assert crypto.normalize_public_key(compressed) == compressed

    @pytest.mark.parametrize("bad", [b"", b"\x02" * 10, b"\x05" + b"\x00" * 32])
    def test_normalize_rejects_bad_keys(self, bad):
        with pytest.raises(ValueError):
            crypto.normalize_public_key(bad)

    def test_der_sign_and_verify(self):
        public_key = crypto.public_key_from_secret(TEST_SECRET_KEY)
        der = crypto.sign_der(MSG_HASH, TEST_SECRET_KEY)
        assert der[0] == 0x30
        assert crypto.verify_der(MSG_HASH, der, public_key)
        assert not crypto.verify_der(tx_hash(b"other"), der, public_key)

    def test_der_verify_never_raises(self):
        public_key = crypto.public_key_from_secret(TEST_SECRET_KEY)
        assert not crypto.verify_der(MSG_HASH, b"not der", public_key)
        assert not crypto.verify_der(MSG_HASH, b"\x30\x00", b"\x02" * 5)

    def test_der_wrong_key(self):
        der = crypto.sign_der(MSG_HASH, TEST_SECRET_KEY)
        other = crypto.public_key_from_secret(crypto.generate_secret_key())
        assert not crypto.verify_der(MSG_HASH, der, other)
