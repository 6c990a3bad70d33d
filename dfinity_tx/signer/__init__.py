"""
Signer interface for transactions.

Transaction.sign accepts either a raw 32-byte secret key or any object
implementing this protocol, so keys can live outside the process.
"""
from typing import Protocol, Tuple, runtime_checkable

from .local import LocalSigner

__all__ = ['Signer', 'LocalSigner']


@runtime_checkable
class Signer(Protocol):
    """Protocol for secp256k1 signers"""

    @property
    def public_key(self) -> bytes:
        """Compressed 33-byte public key"""
        ...

    def sign_hash(self, msg_hash: bytes) -> Tuple[bytes, int]:
        """Sign a 32-byte hash, returning (64-byte signature, recovery id)"""
        ...

    def sign_hash_der(self, msg_hash: bytes) -> bytes:
        """Sign a 32-byte hash, returning a DER-encoded signature"""
        ...
