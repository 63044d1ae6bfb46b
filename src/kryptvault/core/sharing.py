"""
Sharing coordinator.

Re-wrapping moves a DEK from one wrapping to another without the plaintext
DEK leaving the call: it is recovered into a scrubbed buffer, re-wrapped and
wiped before returning. Nothing here persists or logs key material.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..memory import SecretBuffer
from ..security import group, sealer
from ..security.keys import PUBLIC_KEY_SIZE, AsymmetricKeypair
from ..security.rng import KEY_SIZE
from ..utils import ensure_bytes
from .exceptions import InputValidationError
from .hashing import fingerprint
from .models import AsymmetricWrap, SymmetricWrap, sealed_bytes

logger = logging.getLogger(__name__)


def _require_keypair(keypair) -> AsymmetricKeypair:
    if not isinstance(keypair, AsymmetricKeypair):
        raise InputValidationError("Expected an AsymmetricKeypair")
    return keypair


def unwrap_for_self(wrapped_dek, own_keypair: AsymmetricKeypair) -> bytes:
    """Recover the DEK sealed to ``own_keypair``.

    The caller owns the returned DEK and can reuse it against every
    ciphertext encrypted under it.
    """
    own_keypair = _require_keypair(own_keypair)
    return sealer.unwrap(sealed_bytes(wrapped_dek), own_keypair.public_key, own_keypair.private_key)


def share(wrapped_dek, current_holder: AsymmetricKeypair, recipient_public_key: bytes) -> AsymmetricWrap:
    """Re-seal a DEK held by ``current_holder`` to ``recipient_public_key``."""
    current_holder = _require_keypair(current_holder)
    sealed = sealed_bytes(wrapped_dek)
    recipient_public_key = ensure_bytes(recipient_public_key, "recipient public key", PUBLIC_KEY_SIZE)

    with SecretBuffer(unwrap_for_self(sealed, current_holder)) as dek:
        resealed = sealer.wrap(dek, recipient_public_key)

    logger.info(
        "Shared DEK from %s to %s",
        fingerprint(current_holder.public_key),
        fingerprint(recipient_public_key),
    )
    return AsymmetricWrap(resealed)


def share_with_folder(wrapped_dek, current_holder: AsymmetricKeypair, folder_key: bytes) -> SymmetricWrap:
    """Move a sealed DEK under a folder key so every folder member can open it."""
    current_holder = _require_keypair(current_holder)
    sealed = sealed_bytes(wrapped_dek)
    folder_key = ensure_bytes(folder_key, "folder key", KEY_SIZE)

    with SecretBuffer(unwrap_for_self(sealed, current_holder)) as dek:
        ciphertext, nonce = group.wrap_with_group_key(dek, folder_key)

    logger.info("Wrapped DEK from %s under folder key", fingerprint(current_holder.public_key))
    return SymmetricWrap(ciphertext=ciphertext, nonce=nonce)


def rewrap_folder(wrap: SymmetricWrap, old_folder_key: bytes, new_folder_key: bytes) -> SymmetricWrap:
    """Re-wrap one DEK from ``old_folder_key`` to ``new_folder_key`` (folder key rotation)."""
    if not isinstance(wrap, SymmetricWrap):
        raise InputValidationError("Expected a folder-key wrap")
    old_folder_key = ensure_bytes(old_folder_key, "folder key", KEY_SIZE)
    new_folder_key = ensure_bytes(new_folder_key, "new folder key", KEY_SIZE)

    with SecretBuffer(group.unwrap_with_group_key(wrap.ciphertext, wrap.nonce, old_folder_key)) as dek:
        ciphertext, nonce = group.wrap_with_group_key(dek, new_folder_key)
    return SymmetricWrap(ciphertext=ciphertext, nonce=nonce)


def unwrap_any(wrapped, keypair: Optional[AsymmetricKeypair] = None, folder_key: Optional[bytes] = None) -> bytes:
    """
    Recover a DEK from a tagged wrap using the matching credential.

    A sealed wrap needs ``keypair``; a folder wrap needs ``folder_key``.
    Supplying only the other credential is an :class:`InputValidationError`.
    """
    if isinstance(wrapped, AsymmetricWrap):
        if keypair is None:
            raise InputValidationError("A sealed wrap requires a key pair")
        return unwrap_for_self(wrapped, keypair)
    if isinstance(wrapped, SymmetricWrap):
        if folder_key is None:
            raise InputValidationError("A folder wrap requires a folder key")
        return group.unwrap_with_group_key(wrapped.ciphertext, wrapped.nonce, folder_key)
    raise InputValidationError("Expected an AsymmetricWrap or SymmetricWrap")
