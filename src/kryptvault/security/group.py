"""
Symmetric DEK wrapping under a shared folder (group) key.

Anyone holding the folder key can unwrap, without a personal key pair. The
wrapped form is a ``(ciphertext, nonce)`` pair and the caller must keep the
nonce. Rotating a folder key after removing a member means re-wrapping every
affected DEK; that protocol lives outside this module.
"""

from __future__ import annotations

from typing import Tuple

from ..core.exceptions import InputValidationError
from ..utils import ensure_bytes
from . import aead
from .rng import KEY_SIZE, NONCE_SIZE, generate_nonce

WRAPPED_DEK_SIZE = KEY_SIZE + aead.TAG_SIZE


def wrap_with_group_key(dek: bytes, group_key: bytes) -> Tuple[bytes, bytes]:
    dek = ensure_bytes(dek, "DEK", KEY_SIZE)
    group_key = ensure_bytes(group_key, "folder key", KEY_SIZE)
    nonce = generate_nonce()
    return aead.encrypt(dek, group_key, nonce), nonce


def unwrap_with_group_key(ciphertext: bytes, nonce: bytes, group_key: bytes) -> bytes:
    ciphertext = ensure_bytes(ciphertext, "wrapped DEK")
    if len(ciphertext) != WRAPPED_DEK_SIZE:
        raise InputValidationError(
            f"Invalid wrapped DEK size: expected {WRAPPED_DEK_SIZE} bytes, got {len(ciphertext)}"
        )
    nonce = ensure_bytes(nonce, "wrapping nonce", NONCE_SIZE)
    group_key = ensure_bytes(group_key, "folder key", KEY_SIZE)
    return aead.decrypt(ciphertext, group_key, nonce)
