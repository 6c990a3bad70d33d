"""
Public key recovery from recoverable signatures.

Recovery never raises. A failure comes back as a ``RecoveryResult`` that
carries the reason instead of a key, so it cannot be confused with a valid
key that belongs to someone else.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from . import crypto
from .ec_constants import RECOVERY_IDS, SIGNATURE_LENGTH

logger = logging.getLogger(__name__)


class RecoveryFailure(str, Enum):
    """Why a signature did not yield a public key."""
    NOT_SIGNED = "NOT_SIGNED"
    MALFORMED_SIGNATURE = "MALFORMED_SIGNATURE"
    INVALID_RECOVERY_ID = "INVALID_RECOVERY_ID"
    RECOVERY_FAILED = "RECOVERY_FAILED"


@dataclass(frozen=True)
class RecoveryResult:
    """
    Outcome of a recovery attempt.

    Attributes:
        public_key: Compressed public key, or None on failure
        failure: Reason for failure, or None on success
    """
    public_key: Optional[bytes] = None
    failure: Optional[RecoveryFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def __bool__(self) -> bool:
        return self.ok

    def matches(self, public_key: Optional[bytes]) -> bool:
        """True only for a successful recovery of exactly this key"""
        if not self.ok or public_key is None:
            return False
        try:
            return crypto.normalize_public_key(public_key) == self.public_key
        except ValueError:
            return False

    @classmethod
    def success(cls, public_key: bytes) -> "RecoveryResult":
        return cls(public_key=public_key)

    @classmethod
    def failed(cls, reason: RecoveryFailure) -> "RecoveryResult":
        return cls(failure=reason)


def recover_public_key(msg_hash: bytes, signature: Optional[bytes], recovery_id: Optional[int]) -> RecoveryResult:
    """
    Recover the signer's public key.

    Args:
        msg_hash: 32-byte hash of the unsigned transaction
        signature: 64-byte r||s signature
        recovery_id: Recovery id, 0-3

    Returns:
        RecoveryResult with the compressed key or a failure reason
    """
    if not signature:
        return RecoveryResult.failed(RecoveryFailure.NOT_SIGNED)
    if len(signature) != SIGNATURE_LENGTH:
        return RecoveryResult.failed(RecoveryFailure.MALFORMED_SIGNATURE)
    if not isinstance(recovery_id, int) or recovery_id not in RECOVERY_IDS:
        return RecoveryResult.failed(RecoveryFailure.INVALID_RECOVERY_ID)

    try:
        public_key = crypto.recover(msg_hash, signature, recovery_id)
    except Exception as e:
        # eth_keys signals bad signatures through several exception types
        logger.debug("Public key recovery failed: %s", str(e))
        return RecoveryResult.failed(RecoveryFailure.RECOVERY_FAILED)
    return RecoveryResult.success(public_key)
