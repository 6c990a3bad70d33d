"""
In-process signer holding a secp256k1 secret key.
"""
import logging
from typing import Optional, Tuple

from .. import crypto

logger = logging.getLogger(__name__)


class LocalSigner:
    """Signs with a secret key held in memory"""

    def __init__(self, secret_key: bytes):
        """
        Args:
            secret_key: 32-byte secp256k1 secret key

        Raises:
            SigningError: If the key is not a valid secp256k1 secret
        """
        self._secret_key = crypto.validate_secret_key(secret_key)
        self._public_key: Optional[bytes] = None

    @classmethod
    def generate(cls) -> "LocalSigner":
        """Create a signer with a fresh random key"""
        return cls(crypto.generate_secret_key())

    @property
    def public_key(self) -> bytes:
        if self._public_key is None:
            self._public_key = crypto.public_key_from_secret(self._secret_key)
        return self._public_key

    def sign_hash(self, msg_hash: bytes) -> Tuple[bytes, int]:
        return crypto.sign_recoverable(msg_hash, self._secret_key)

    def sign_hash_der(self, msg_hash: bytes) -> bytes:
        return crypto.sign_der(msg_hash, self._secret_key)

    def __repr__(self) -> str:
        # Never expose the secret key
        return f"LocalSigner(public_key={self.public_key.hex()})"
