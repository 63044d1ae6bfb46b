"""
Anonymous sealed-box wrapping of DEKs and small payloads.

A sealed box (X25519 + XSalsa20-Poly1305 with an ephemeral sender key) binds
a payload to one recipient public key and carries its own ephemeral material,
so the output is a single opaque byte string with no caller-managed nonce.
Nothing in it identifies the sender.
"""

from __future__ import annotations

import logging

from nacl.bindings import crypto_box_SEALBYTES
from nacl.exceptions import CryptoError
from nacl.public import PrivateKey, PublicKey, SealedBox

from ..core.exceptions import AuthenticationError, InputValidationError
from ..core.hashing import fingerprint
from ..utils import ensure_bytes
from .keys import PRIVATE_KEY_SIZE, PUBLIC_KEY_SIZE, keypair_matches
from .rng import KEY_SIZE

logger = logging.getLogger(__name__)

SEAL_OVERHEAD = crypto_box_SEALBYTES  # ephemeral public key + MAC
WRAPPED_DEK_SIZE = KEY_SIZE + SEAL_OVERHEAD


def seal(payload: bytes, recipient_public_key: bytes) -> bytes:
    """Seal an arbitrary payload to ``recipient_public_key``."""
    payload = ensure_bytes(payload, "payload")
    recipient_public_key = ensure_bytes(recipient_public_key, "recipient public key", PUBLIC_KEY_SIZE)
    try:
        sealed = SealedBox(PublicKey(recipient_public_key)).encrypt(payload)
    except CryptoError:
        # low-order points yield an all-zero shared secret
        raise InputValidationError("Invalid recipient public key") from None
    logger.debug("Sealed %d bytes for %s", len(payload), fingerprint(recipient_public_key))
    return sealed


def unseal(sealed: bytes, holder_public_key: bytes, holder_private_key: bytes) -> bytes:
    """
    Open a sealed box with the holder's key pair.

    A key pair whose halves do not belong together, a box sealed to someone
    else and a modified box all raise the same :class:`AuthenticationError`.
    """
    sealed = ensure_bytes(sealed, "sealed data")
    holder_public_key = ensure_bytes(holder_public_key, "holder public key", PUBLIC_KEY_SIZE)
    holder_private_key = ensure_bytes(holder_private_key, "holder private key", PRIVATE_KEY_SIZE)
    if len(sealed) < SEAL_OVERHEAD:
        raise InputValidationError("Sealed data too short")

    if not keypair_matches(holder_public_key, holder_private_key):
        raise AuthenticationError("Failed to unseal")
    try:
        return SealedBox(PrivateKey(holder_private_key)).decrypt(sealed)
    except CryptoError:
        raise AuthenticationError("Failed to unseal") from None


def wrap(dek: bytes, recipient_public_key: bytes) -> bytes:
    """Seal a 32-byte DEK to ``recipient_public_key``."""
    dek = ensure_bytes(dek, "DEK", KEY_SIZE)
    return seal(dek, recipient_public_key)


def unwrap(wrapped: bytes, holder_public_key: bytes, holder_private_key: bytes) -> bytes:
    """Recover a DEK sealed by :func:`wrap`."""
    wrapped = ensure_bytes(wrapped, "wrapped DEK")
    if len(wrapped) != WRAPPED_DEK_SIZE:
        raise InputValidationError(
            f"Invalid wrapped DEK size: expected {WRAPPED_DEK_SIZE} bytes, got {len(wrapped)}"
        )
    dek = unseal(wrapped, holder_public_key, holder_private_key)
    if len(dek) != KEY_SIZE:
        raise AuthenticationError("Failed to unseal")
    return dek
