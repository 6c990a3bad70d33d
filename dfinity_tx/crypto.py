"""
secp256k1 operations used to sign, verify and recover transactions.

Recoverable signatures go through eth_keys; DER signatures for the
explicit-key envelope go through cryptography.
"""
import logging
import secrets
from typing import Tuple

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat
from eth_keys import keys

from .ec_constants import (
    SECP256K1_MIN, SECP256K1_MAX, SECRET_KEY_LENGTH, SIGNATURE_LENGTH,
    COMPRESSED_PUBLIC_KEY_LENGTH, UNCOMPRESSED_PUBLIC_KEY_LENGTH,
)
from .exceptions import SigningError

logger = logging.getLogger(__name__)

_ECDSA_PREHASHED = ec.ECDSA(Prehashed(hashes.SHA256()))


def validate_secret_key(secret_key: bytes) -> bytes:
    """
    Check that a secret key is 32 bytes and inside the curve order.

    Raises:
        SigningError: If the key is unusable
    """
    if not isinstance(secret_key, (bytes, bytearray)) or len(secret_key) != SECRET_KEY_LENGTH:
        raise SigningError(f"Secret key must be {SECRET_KEY_LENGTH} bytes")
    if not SECP256K1_MIN <= int.from_bytes(secret_key, "big") <= SECP256K1_MAX:
        raise SigningError("Secret key is outside the secp256k1 range")
    return bytes(secret_key)


def generate_secret_key() -> bytes:
    """
    Generate a random secp256k1 secret key.

    Returns:
        32-byte secret key
    """
    while True:
        candidate = secrets.token_bytes(SECRET_KEY_LENGTH)
        if SECP256K1_MIN <= int.from_bytes(candidate, "big") <= SECP256K1_MAX:
            return candidate


def public_key_from_secret(secret_key: bytes) -> bytes:
    """Compressed 33-byte public key for a secret key"""
    sk = keys.PrivateKey(validate_secret_key(secret_key))
    return sk.public_key.to_compressed_bytes()


def normalize_public_key(public_key: bytes) -> bytes:
    """
    Convert a 33, 64 or 65-byte public key to its compressed form.

    Raises:
        ValueError: If the bytes are not a point on secp256k1
    """
    if len(public_key) == UNCOMPRESSED_PUBLIC_KEY_LENGTH - 1:
        public_key = b"\x04" + bytes(public_key)
    if len(public_key) not in (COMPRESSED_PUBLIC_KEY_LENGTH, UNCOMPRESSED_PUBLIC_KEY_LENGTH):
        raise ValueError(f"Unsupported public key length {len(public_key)}")
    point = ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256K1(), bytes(public_key))
    return point.public_bytes(Encoding.X962, PublicFormat.CompressedPoint)


def sign_recoverable(msg_hash: bytes, secret_key: bytes) -> Tuple[bytes, int]:
    """
    Sign a 32-byte hash.

    Returns:
        Tuple of (64-byte r||s signature, recovery id)
    """
    sk = keys.PrivateKey(validate_secret_key(secret_key))
    sig = sk.sign_msg_hash(msg_hash)
    raw = sig.r.to_bytes(32, "big") + sig.s.to_bytes(32, "big")
    return raw, sig.v


def recover(msg_hash: bytes, signature: bytes, recovery_id: int) -> bytes:
    """
    Recover the compressed public key that produced a signature.

    Raises:
        eth_keys.exceptions.BadSignature: If no key can be recovered
        ValueError: If the inputs are malformed
    """
    if len(signature) != SIGNATURE_LENGTH:
        raise ValueError(f"Signature must be {SIGNATURE_LENGTH} bytes")
    sig = keys.Signature(signature_bytes=bytes(signature) + bytes([recovery_id]))
    return sig.recover_public_key_from_msg_hash(msg_hash).to_compressed_bytes()


def sign_der(msg_hash: bytes, secret_key: bytes) -> bytes:
    """DER-encoded ECDSA signature over a 32-byte hash"""
    secret = int.from_bytes(validate_secret_key(secret_key), "big")
    private_key = ec.derive_private_key(secret, ec.SECP256K1())
    return private_key.sign(msg_hash, _ECDSA_PREHASHED)


def verify_der(msg_hash: bytes, signature: bytes, public_key: bytes) -> bool:
    """
    Verify a DER signature. Never raises.

    Returns:
        True if the signature is valid for the hash and key
    """
    try:
        point = ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256K1(), bytes(public_key))
        point.verify(bytes(signature), msg_hash, _ECDSA_PREHASHED)
        return True
    except InvalidSignature:
        return False
    except (ValueError, TypeError) as e:
        logger.debug("DER verification rejected malformed input: %s", str(e))
        return False
