"""
dfinity_tx - canonical wire format and recoverable signatures for
actor-invoking transactions.
"""
from .version import __version__
from .config import FormatVersion, FormatProfile, FormatConfig
from .models import TxFields, FunctionRef, ActorFunction
from .transaction import Transaction
from .recovery import RecoveryResult, RecoveryFailure, recover_public_key
from .signer import Signer, LocalSigner
from .crypto import generate_secret_key, public_key_from_secret
from .hashing import tx_hash
from .exceptions import (
    DfinityTxError, EncodeError, DecodeError, DecodeErrorCode, FormatMismatchError,
    TruncatedPayloadError, LengthMismatchError, NonCanonicalError,
    MalformedFieldError, SigningError,
)

__all__ = [
    '__version__',
    'Transaction',
    'TxFields',
    'FunctionRef',
    'ActorFunction',
    'FormatVersion',
    'FormatProfile',
    'FormatConfig',
    'RecoveryResult',
    'RecoveryFailure',
    'recover_public_key',
    'Signer',
    'LocalSigner',
    'generate_secret_key',
    'public_key_from_secret',
    'tx_hash',
    'DfinityTxError',
    'EncodeError',
    'DecodeError',
    'DecodeErrorCode',
    'FormatMismatchError',
    'TruncatedPayloadError',
    'LengthMismatchError',
    'NonCanonicalError',
    'MalformedFieldError',
    'SigningError',
]
