"""XChaCha20-Poly1305 authenticated encryption over whole buffers.

Ciphertext layout is ``payload || 16-byte Poly1305 tag`` with no header and
no embedded nonce; the nonce travels separately. The entire input is handled
in one call, so the usable size is bounded by memory (see
:mod:`kryptvault.security.stream` for the chunked form).
"""

from __future__ import annotations

from typing import Optional

from nacl.bindings import (
    crypto_aead_xchacha20poly1305_ietf_ABYTES,
    crypto_aead_xchacha20poly1305_ietf_decrypt,
    crypto_aead_xchacha20poly1305_ietf_encrypt,
)
from nacl.exceptions import CryptoError

from ..core.exceptions import AuthenticationError
from ..utils import ensure_bytes
from .rng import KEY_SIZE, NONCE_SIZE

TAG_SIZE = crypto_aead_xchacha20poly1305_ietf_ABYTES


def encrypt(plaintext: bytes, key: bytes, nonce: bytes, aad: Optional[bytes] = None) -> bytes:
    """
    Encrypt ``plaintext`` under ``key`` / ``nonce``.

    ``aad`` is optional associated data; the envelope engine binds none.
    The caller owns nonce uniqueness per key.
    """
    plaintext = ensure_bytes(plaintext, "plaintext")
    key = ensure_bytes(key, "key", KEY_SIZE)
    nonce = ensure_bytes(nonce, "nonce", NONCE_SIZE)
    if aad is not None:
        aad = ensure_bytes(aad, "associated data")
    return crypto_aead_xchacha20poly1305_ietf_encrypt(plaintext, aad, nonce, key)


def decrypt(ciphertext: bytes, key: bytes, nonce: bytes, aad: Optional[bytes] = None) -> bytes:
    """
    Verify and decrypt ``ciphertext``.

    Raises :class:`AuthenticationError` for a wrong key, a wrong nonce, a
    truncated buffer or any modified byte, without saying which.
    """
    ciphertext = ensure_bytes(ciphertext, "ciphertext")
    key = ensure_bytes(key, "key", KEY_SIZE)
    nonce = ensure_bytes(nonce, "nonce", NONCE_SIZE)
    if aad is not None:
        aad = ensure_bytes(aad, "associated data")
    if len(ciphertext) < TAG_SIZE:
        raise AuthenticationError("Decryption failed")
    try:
        return crypto_aead_xchacha20poly1305_ietf_decrypt(ciphertext, aad, nonce, key)
    except CryptoError:
        raise AuthenticationError("Decryption failed") from None
