"""Cryptographically secure random bytes for keys and nonces.

Everything is drawn from libsodium's ``randombytes`` (OS-backed). There is no
fallback source: if the OS cannot supply entropy the error propagates.
"""

import nacl.utils

KEY_SIZE = 32  # 256-bit DEKs and folder keys
NONCE_SIZE = 24  # XChaCha20 uses 192-bit nonces


def random_bytes(length: int) -> bytes:
    if not isinstance(length, int) or length < 0:
        raise ValueError("length must be a non-negative integer")
    out = nacl.utils.random(length)
    if len(out) != length:
        raise RuntimeError("random source returned a short read")
    return out


def generate_dek() -> bytes:
    """Return a fresh 256-bit data encryption key."""
    return random_bytes(KEY_SIZE)


def generate_nonce() -> bytes:
    """Return a fresh 192-bit nonce for XChaCha20-Poly1305."""
    return random_bytes(NONCE_SIZE)


def generate_folder_key() -> bytes:
    """Return a fresh 256-bit symmetric folder (group) key."""
    return random_bytes(KEY_SIZE)
