"""Security primitives for KryptVault.

This package provides:
- OS-backed random generation for DEKs, nonces and folder keys
- XChaCha20-Poly1305 whole-buffer AEAD
- X25519 / Ed25519 identity key pairs
- Sealed-box (anonymous, per-recipient) DEK wrapping
- Folder-key (symmetric) DEK wrapping
- A chunked streaming AEAD container
- Argon2id passphrase locking for exported identities
"""

from .rng import random_bytes, generate_dek, generate_nonce, generate_folder_key
from .aead import encrypt, decrypt
from .keys import (
    AsymmetricKeypair,
    SigningKeypair,
    UserIdentity,
    generate_asymmetric_keypair,
    generate_keypair,
    generate_signing_keypair,
    generate_user_identity,
)
from .sealer import seal, unseal, wrap, unwrap
from .group import wrap_with_group_key, unwrap_with_group_key
from .stream import encrypt_stream, decrypt_stream
from .custody import lock_identity, unlock_identity

__all__ = [
    "random_bytes",
    "generate_dek",
    "generate_nonce",
    "generate_folder_key",
    "encrypt",
    "decrypt",
    "AsymmetricKeypair",
    "SigningKeypair",
    "UserIdentity",
    "generate_asymmetric_keypair",
    "generate_keypair",
    "generate_signing_keypair",
    "generate_user_identity",
    "seal",
    "unseal",
    "wrap",
    "unwrap",
    "wrap_with_group_key",
    "unwrap_with_group_key",
    "encrypt_stream",
    "decrypt_stream",
    "lock_identity",
    "unlock_identity",
]
