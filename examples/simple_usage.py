#!/usr/bin/env python3
"""
Simple example of using dfinity_tx.
"""
import os

from dfinity_tx import (
    ActorFunction, FormatVersion, LocalSigner, Transaction, public_key_from_secret,
)


def main():
    """
    Demonstrate basic usage of Transaction.

    This example shows how to:
    1. Build and sign a transaction in the default flat format
    2. Decode it again and check who signed it
    3. Sign a CBOR transaction that carries its public key
    """
    secret_hex = os.environ.get("SECRET_KEY")
    signer = LocalSigner(bytes.fromhex(secret_hex)) if secret_hex else LocalSigner.generate()
    print(f"Signer public key: 0x{signer.public_key.hex()}")

    tx = Transaction(target=bytes(20), caps=4, ticks=1000)
    raw = tx.sign(signer)
    print(f"Transaction id: {tx.hex_hash()}")
    print(f"Signed bytes ({len(raw)}): {raw.hex()}")

    decoded = Transaction.deserialize(raw)
    print(f"Recovered signer matches: {decoded.verify(signer.public_key)}")

    call = Transaction(
        format_version=FormatVersion.CBOR_V3,
        target=ActorFunction(actor_id=bytes.fromhex("0a0b0c"), function="transfer"),
        nonce=1,
        data=["alice", 250],
    )
    raw = call.sign(signer)
    decoded = Transaction.deserialize(raw, FormatVersion.CBOR_V3)
    print(f"CBOR call to {decoded.target.function} with args {decoded.data}")
    print(f"Carried key is the signer's: {decoded.public_key == signer.public_key}")

    if secret_hex:
        assert decoded.public_key == public_key_from_secret(bytes.fromhex(secret_hex))


if __name__ == "__main__":
    main()
