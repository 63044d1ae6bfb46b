"""
File envelope engine.

Encryption draws a fresh DEK and nonce, encrypts the content with
XChaCha20-Poly1305 and seals the DEK to the recipient public key. The DEK
exists only inside a :class:`~kryptvault.memory.SecretBuffer` for the
duration of the call.

The ciphertext is the raw AEAD output (payload + tag); the wrapped DEK and
the nonce are separate values the caller stores alongside it.
"""

from __future__ import annotations

import logging

from ..memory import SecretBuffer
from ..security import aead, sealer
from ..security.keys import PUBLIC_KEY_SIZE
from ..security.rng import KEY_SIZE, NONCE_SIZE, generate_dek, generate_nonce
from ..utils import ensure_bytes
from .hashing import fingerprint
from .models import AsymmetricWrap, EncryptedFile, sealed_bytes

logger = logging.getLogger(__name__)


def encrypt_file(plaintext: bytes, recipient_public_key: bytes, original_name: str = "unknown") -> EncryptedFile:
    """Encrypt ``plaintext`` for ``recipient_public_key``."""
    plaintext = ensure_bytes(plaintext, "plaintext")
    recipient_public_key = ensure_bytes(recipient_public_key, "recipient public key", PUBLIC_KEY_SIZE)

    with SecretBuffer(generate_dek()) as dek:
        nonce = generate_nonce()
        ciphertext = aead.encrypt(plaintext, dek, nonce)
        wrapped = sealer.wrap(dek, recipient_public_key)

    logger.info(
        "Encrypted %r (%d bytes) for %s",
        original_name,
        len(ciphertext),
        fingerprint(recipient_public_key),
    )
    return EncryptedFile(
        ciphertext=ciphertext,
        wrapped_dek=AsymmetricWrap(wrapped),
        nonce=nonce,
        size=len(ciphertext),
        original_name=original_name,
    )


def decrypt_file(ciphertext: bytes, wrapped_dek, nonce: bytes, holder_public_key: bytes, holder_private_key: bytes) -> bytes:
    """Unwrap the DEK with the holder's key pair, then decrypt ``ciphertext``."""
    ciphertext = ensure_bytes(ciphertext, "ciphertext")
    nonce = ensure_bytes(nonce, "nonce", NONCE_SIZE)
    sealed = sealed_bytes(wrapped_dek)

    with SecretBuffer(sealer.unwrap(sealed, holder_public_key, holder_private_key)) as dek:
        plaintext = decrypt_file_with_dek(ciphertext, dek, nonce)

    logger.info("Decrypted %d bytes for %s", len(plaintext), fingerprint(holder_public_key))
    return plaintext


def decrypt_file_with_dek(ciphertext: bytes, dek: bytes, nonce: bytes) -> bytes:
    """Decrypt with an already-recovered DEK (e.g. from :func:`unwrap_for_self`)."""
    dek = ensure_bytes(dek, "DEK", KEY_SIZE)
    return aead.decrypt(ciphertext, dek, nonce)
