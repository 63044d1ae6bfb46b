""" Hash helpers for ciphertext digests and key fingerprints. """

import hashlib


def calculate_sha256_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def fingerprint(public_key: bytes) -> str:
    """
    Short, stable identifier for a public key.

    Only public material goes through here; it is what log records use to
    name a recipient or holder.
    """
    return hashlib.sha256(bytes(public_key)).hexdigest()[:16]
