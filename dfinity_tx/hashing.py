"""
Digest used as both the signing preimage and the transaction id.
"""
import hashlib

from eth_utils import encode_hex

DIGEST_SIZE = 32


def tx_hash(data: bytes, output_length: int = DIGEST_SIZE) -> bytes:
    """
    Hash bytes with SHA-256, truncated to ``output_length`` bytes.

    Args:
        data: Bytes to hash
        output_length: Number of leading digest bytes to keep (1-32)

    Returns:
        The (possibly truncated) digest

    Raises:
        TypeError: If data is not bytes-like
        ValueError: If output_length is outside 1..32
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError(f"data must be bytes, got {type(data).__name__}")
    if not 0 < output_length <= DIGEST_SIZE:
        raise ValueError(f"output_length must be between 1 and {DIGEST_SIZE}, got {output_length}")
    return hashlib.sha256(data).digest()[:output_length]


def hex_hash(data: bytes, output_length: int = DIGEST_SIZE) -> str:
    """Hash bytes and return the 0x-prefixed hex digest"""
    return encode_hex(tx_hash(data, output_length))
