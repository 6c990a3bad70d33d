"""
Transaction entity: owns the field values and signature material and
composes the codec, envelope, hash and recovery modules.
"""
import logging
from typing import Any, Optional, Union

from pydantic import Field, PrivateAttr

from . import codec, crypto, envelope
from ._rate_limited_log import rate_limited_log
from .config import EnvelopeStyle, FormatConfig, FormatProfile, FormatVersion
from .exceptions import DfinityTxError, SigningError
from .hashing import DIGEST_SIZE, hex_hash, tx_hash
from .models import TxFields, freeze_args
from .recovery import RecoveryFailure, RecoveryResult, recover_public_key
from .signer import LocalSigner, Signer

logger = logging.getLogger(__name__)


class Transaction(TxFields):
    """
    A transaction invoking a remote actor.

    A transaction starts unsigned. ``sign`` is the only way to attach
    signature material; once signed, fields can no longer be changed (build
    a new transaction with ``unsigned_copy`` instead) and an argument-list
    payload is held as nested tuples. Signing again replaces the signature.

    Example:
        tx = Transaction(caps=4, ticks=1000)
        raw = tx.sign(secret_key)
        tx2 = Transaction.deserialize(raw)
        assert tx2.public_key == public_key_from_secret(secret_key)
    """

    format_version: FormatVersion = Field(default=FormatConfig.DEFAULT_VERSION, frozen=True)

    _signature: Optional[bytes] = PrivateAttr(default=None)
    _recovery_id: Optional[int] = PrivateAttr(default=None)
    _public_key: Optional[bytes] = PrivateAttr(default=None)
    _recovery: Optional[RecoveryResult] = PrivateAttr(default=None)
    _preimage: Optional[bytes] = PrivateAttr(default=None)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in TxFields.model_fields and self.is_signed:
            raise SigningError(f"Cannot change '{name}' on a signed transaction")
        super().__setattr__(name, value)

    @property
    def profile(self) -> FormatProfile:
        return FormatConfig.get_profile(self.format_version)

    @property
    def is_signed(self) -> bool:
        return self._signature is not None

    @property
    def signature(self) -> Optional[bytes]:
        """64-byte r||s signature, or DER signature for explicit-key formats"""
        return self._signature

    @property
    def recovery_id(self) -> Optional[int]:
        return self._recovery_id

    @property
    def public_key(self) -> Optional[bytes]:
        """
        Signer's public key.

        Set by ``sign``, or by ``deserialize``: the recovered key for
        recoverable formats (None when recovery failed, see ``recovery`` for
        the reason), the carried key for explicit-key formats.
        """
        return self._public_key

    @property
    def recovery(self) -> RecoveryResult:
        """Outcome of the last sign or decode"""
        if self._recovery is None:
            return RecoveryResult.failed(RecoveryFailure.NOT_SIGNED)
        return self._recovery

    def serialize_unsigned(self) -> bytes:
        """
        Canonical encoding without signature material. This is the hash
        preimage, whether or not the transaction is signed.

        Raises:
            EncodeError: If the fields do not fit the format
        """
        if self._preimage is not None:
            return self._preimage
        return codec.encode(self, self.profile)

    def _lock(self, preimage: bytes) -> None:
        # The signature covers these bytes; an argument list becomes tuples
        # so it cannot be edited in place either
        self._preimage = preimage
        if isinstance(self.data, list):
            self.__dict__["data"] = freeze_args(self.data)

    def serialize(self, include_signature: Optional[bool] = None) -> bytes:
        """
        Serialize the transaction.

        Args:
            include_signature: Defaults to whether the transaction is signed.
                Pass False to get the unsigned form of a signed transaction.

        Returns:
            Encoded transaction

        Raises:
            SigningError: If a signature is requested but none is present
            EncodeError: If the fields do not fit the format
        """
        unsigned = self.serialize_unsigned()
        if include_signature is None:
            include_signature = self.is_signed
        if not include_signature:
            return unsigned
        if not self.is_signed:
            raise SigningError("Transaction is not signed")

        return envelope.attach(
            unsigned,
            self._signature,
            self.profile,
            recovery_id=self._recovery_id,
            public_key=self._public_key,
        )

    def hash(self, output_length: int = DIGEST_SIZE) -> bytes:
        """Hash of the unsigned encoding; also the transaction id"""
        return tx_hash(self.serialize_unsigned(), output_length)

    def hex_hash(self, output_length: int = DIGEST_SIZE) -> str:
        """Hex transaction id with 0x prefix"""
        return hex_hash(self.serialize_unsigned(), output_length)

    def sign(self, key: Union[bytes, Signer]) -> bytes:
        """
        Sign the transaction and return the signed serialization.

        Args:
            key: 32-byte secret key or a Signer

        Returns:
            Signed message bytes

        Raises:
            SigningError: If the key is invalid or the signer fails
            EncodeError: If the fields do not fit the format
        """
        signer = key if isinstance(key, Signer) else LocalSigner(key)
        profile = self.profile
        unsigned = self.serialize_unsigned()
        msg_hash = tx_hash(unsigned)

        try:
            public_key = crypto.normalize_public_key(signer.public_key)
            if profile.envelope == EnvelopeStyle.RECOVERABLE:
                signature, recovery_id = signer.sign_hash(msg_hash)
            else:
                signature, recovery_id = signer.sign_hash_der(msg_hash), None
        except SigningError:
            raise
        except Exception as e:
            raise SigningError(f"Signer failed: {e}") from e

        if profile.envelope == EnvelopeStyle.RECOVERABLE:
            result = recover_public_key(msg_hash, signature, recovery_id)
            if not result.matches(public_key):
                raise SigningError("Signature does not recover to the signer's public key")
        elif not crypto.verify_der(msg_hash, signature, public_key):
            raise SigningError("Signature does not verify against the signer's public key")

        self._signature = bytes(signature)
        self._recovery_id = recovery_id
        self._public_key = public_key
        self._recovery = RecoveryResult.success(public_key)
        self._lock(unsigned)
        logger.debug("Signed transaction %s", hex_hash(unsigned))

        return envelope.attach(
            unsigned, self._signature, profile,
            recovery_id=recovery_id, public_key=public_key,
        )

    def recover_public_key(self) -> RecoveryResult:
        """
        Derive the signer's key from the signature.

        For explicit-key formats this succeeds with the carried key only if
        the DER signature verifies against it.
        """
        if not self.is_signed:
            return RecoveryResult.failed(RecoveryFailure.NOT_SIGNED)
        msg_hash = self.hash()
        if self.profile.envelope == EnvelopeStyle.RECOVERABLE:
            return recover_public_key(msg_hash, self._signature, self._recovery_id)
        if crypto.verify_der(msg_hash, self._signature, self._public_key):
            return RecoveryResult.success(self._public_key)
        return RecoveryResult.failed(RecoveryFailure.RECOVERY_FAILED)

    def verify(self, public_key: Optional[bytes] = None) -> bool:
        """
        Check the signature against a public key. Never raises.

        Args:
            public_key: Expected signer key. Defaults to ``self.public_key``;
                for a decoded recoverable transaction that only confirms the
                signature recovers, so pass the key you expect.

        Returns:
            False if unsigned, if recovery failed, or if the signature does
            not match the key
        """
        expected = public_key if public_key is not None else self._public_key
        if not self.is_signed or expected is None:
            return False
        try:
            if self.profile.envelope == EnvelopeStyle.RECOVERABLE:
                return self.recover_public_key().matches(expected)
            expected = crypto.normalize_public_key(expected)
            return crypto.verify_der(self.hash(), self._signature, expected)
        except (DfinityTxError, ValueError) as e:
            logger.debug("Verification failed: %s", str(e))
            return False

    def unsigned_copy(self) -> "Transaction":
        """New unsigned transaction with the same fields and format"""
        return Transaction(format_version=self.format_version, **self.field_values())

    @classmethod
    def deserialize(cls, raw: bytes, format_version: Any = None) -> "Transaction":
        """
        Decode a transaction.

        A signature that does not recover (or verify) does not fail the
        decode: the result has ``public_key`` None and ``recovery`` carrying
        the reason, and ``verify()`` returns False.

        Args:
            raw: Encoded transaction, signed or not
            format_version: Format to decode with, defaults to flat-v1

        Returns:
            Decoded Transaction

        Raises:
            DecodeError: If the bytes are not a well-formed transaction
        """
        profile = FormatConfig.get_profile(format_version)
        detached = envelope.detach(raw, profile)
        fields = codec.decode(detached.unsigned, profile)
        tx = cls(format_version=profile.version, **fields.field_values())
        if not detached.is_signed:
            return tx

        msg_hash = tx_hash(detached.unsigned)
        if profile.envelope == EnvelopeStyle.RECOVERABLE:
            result = recover_public_key(msg_hash, detached.signature, detached.recovery_id)
            public_key = result.public_key
        else:
            public_key = detached.public_key
            if crypto.verify_der(msg_hash, detached.signature, public_key):
                result = RecoveryResult.success(public_key)
            else:
                result = RecoveryResult.failed(RecoveryFailure.RECOVERY_FAILED)

        if not result.ok:
            rate_limited_log(
                "Signature on transaction %s did not verify: %s",
                hex_hash(detached.unsigned), result.failure.value,
                key=f"recovery:{result.failure.value}",
                logger_instance=logger,
            )

        tx._signature = detached.signature
        tx._recovery_id = detached.recovery_id
        tx._public_key = public_key
        tx._recovery = result
        tx._lock(detached.unsigned)
        return tx

    @classmethod
    def decode(cls, raw: bytes, format_version: Any = None) -> "Transaction":
        """Alias for ``deserialize``"""
        return cls.deserialize(raw, format_version)
