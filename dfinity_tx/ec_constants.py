"""
Constants for elliptic curve cryptography.
"""

# SECP256K1 constants
# Order of the SECP256K1 elliptic curve (N value)
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

# Valid secret keys are 1..N-1
SECP256K1_MIN = 1
SECP256K1_MAX = SECP256K1_N - 1

SECRET_KEY_LENGTH = 32

# Raw r||s signature and its recovery id
SIGNATURE_LENGTH = 64
RECOVERY_ID_LENGTH = 1
RECOVERY_IDS = frozenset(range(4))

COMPRESSED_PUBLIC_KEY_LENGTH = 33
UNCOMPRESSED_PUBLIC_KEY_LENGTH = 65
