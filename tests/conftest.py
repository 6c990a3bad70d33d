"""
Pytest fixtures for the dfinity_tx tests.
"""
import pytest

from dfinity_tx import _rate_limited_log
from dfinity_tx.config import FormatConfig, FormatVersion
from dfinity_tx.crypto import generate_secret_key, public_key_from_secret
from dfinity_tx.models import ActorFunction, FunctionRef
from dfinity_tx.transaction import Transaction

# Fixed key so failures are reproducible
TEST_SECRET_KEY = bytes.fromhex("4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318")

ALL_VERSIONS = list(FormatVersion)
RECOVERABLE_VERSIONS = [FormatVersion.FLAT_V0, FormatVersion.FLAT_V1, FormatVersion.CBOR_V2]

# Field set from the reference scenario
SCENARIO_FIELDS = {
    "version": 0,
    "target": bytes(20),
    "caps": 4,
    "ticks": 1000,
    "ticks_price": 0,
    "nonce": 0,
    "data": b"",
}

_TARGETS = {
    FormatVersion.FLAT_V0: bytes(range(20)),
    FormatVersion.FLAT_V1: bytes(range(20)),
    FormatVersion.CBOR_V2: FunctionRef(index=3),
    FormatVersion.CBOR_V3: ActorFunction(actor_id=b"\x01\x02\x03", function="transfer"),
}

_PAYLOADS = {
    FormatVersion.FLAT_V0: b"payload",
    FormatVersion.FLAT_V1: b"payload",
    FormatVersion.CBOR_V2: b"payload",
    FormatVersion.CBOR_V3: [1, "two", b"\x03", [4, 5]],
}


def make_tx(version: FormatVersion, **overrides) -> Transaction:
    """Build a transaction whose target and payload fit the format"""
    values = {
        "version": 1,
        "target": _TARGETS[version],
        "caps": 2,
        "ticks": 500,
        "ticks_price": 7,
        "nonce": 42,
        "data": _PAYLOADS[version],
    }
    values.update(overrides)
    return Transaction(format_version=version, **values)


@pytest.fixture(autouse=True)
def _reset_caches():
    """Clear module-level caches between tests"""
    _rate_limited_log.reset()
    FormatConfig._profiles_cache = None
    yield
    _rate_limited_log.reset()
    FormatConfig._profiles_cache = None


@pytest.fixture
def secret_key():
    """A fresh random secret key"""
    return generate_secret_key()


@pytest.fixture
def public_key(secret_key):
    return public_key_from_secret(secret_key)


@pytest.fixture(params=ALL_VERSIONS, ids=lambda v: v.value)
def any_version(request):
    return request.param


@pytest.fixture(params=RECOVERABLE_VERSIONS, ids=lambda v: v.value)
def recoverable_version(request):
    return request.param
