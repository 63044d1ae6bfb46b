"""
Passphrase-locked export of a user identity.

This is the only serializer for private key halves in the package. The four
raw key halves are encrypted with XChaCha20-Poly1305 under a key derived from
the passphrase with Argon2id; the KDF parameters are bound as associated
data so they cannot be downgraded without breaking the tag.

Bundle format (UTF-8 JSON)::

    {"v": 1,
     "kdf": {"algo": "argon2id", "salt": <hex>, "time": .., "memory": .., "parallelism": ..},
     "nonce": <base64>,
     "ciphertext": <base64>}
"""

from __future__ import annotations

import json

from ..core.exceptions import AuthenticationError, InputValidationError
from ..memory import SecretBuffer
from ..utils import b64d, b64e
from . import aead
from .kdf import check_params, derive_key, generate_salt, kdf_params_to_dict
from .keys import (
    PRIVATE_KEY_SIZE,
    PUBLIC_KEY_SIZE,
    SIGNING_PRIVATE_KEY_SIZE,
    SIGNING_PUBLIC_KEY_SIZE,
    AsymmetricKeypair,
    SigningKeypair,
    UserIdentity,
)
from .rng import generate_nonce

BUNDLE_VERSION = 1
_SECRET_SIZE = (
    PUBLIC_KEY_SIZE + PRIVATE_KEY_SIZE + SIGNING_PUBLIC_KEY_SIZE + SIGNING_PRIVATE_KEY_SIZE
)


def _aad(kdf: dict) -> bytes:
    return json.dumps(
        {"v": BUNDLE_VERSION, "kdf": kdf}, separators=(",", ":"), sort_keys=True
    ).encode("utf-8")


def lock_identity(
    identity: UserIdentity,
    passphrase: bytes | str,
    time_cost: int = 3,
    memory_cost: int = 65536,
    parallelism: int = 1,
) -> bytes:
    """Encrypt ``identity`` under ``passphrase`` and return the bundle bytes."""
    if not passphrase:
        raise InputValidationError("Passphrase must not be empty")

    salt = generate_salt()
    kdf = kdf_params_to_dict(salt, time_cost, memory_cost, parallelism)
    nonce = generate_nonce()

    with SecretBuffer(
        identity.encryption.public_key
        + identity.encryption.private_key
        + identity.signing.public_key
        + identity.signing.private_key
    ) as secret, SecretBuffer(
        derive_key(passphrase, salt, time_cost, memory_cost, parallelism)
    ) as key:
        ciphertext = aead.encrypt(bytes(secret), key, nonce, aad=_aad(kdf))

    bundle = {
        "v": BUNDLE_VERSION,
        "kdf": kdf,
        "nonce": b64e(nonce),
        "ciphertext": b64e(ciphertext),
    }
    return json.dumps(bundle, sort_keys=True).encode("utf-8")


def unlock_identity(blob: bytes | str, passphrase: bytes | str) -> UserIdentity:
    """
    Recover a :class:`UserIdentity` from a bundle made by :func:`lock_identity`.

    A wrong passphrase and a modified bundle both raise
    :class:`AuthenticationError`.
    """
    try:
        bundle = json.loads(blob)
        if bundle["v"] != BUNDLE_VERSION:
            raise InputValidationError(f"Unsupported identity bundle version: {bundle['v']}")
        kdf = bundle["kdf"]
        if kdf["algo"] != "argon2id":
            raise InputValidationError(f"Unsupported KDF: {kdf['algo']}")
        salt = bytes.fromhex(kdf["salt"])
        time_cost = int(kdf["time"])
        memory_cost = int(kdf["memory"])
        parallelism = int(kdf["parallelism"])
        nonce = b64d(bundle["nonce"], "nonce")
        ciphertext = b64d(bundle["ciphertext"], "ciphertext")
    except InputValidationError:
        raise
    except (ValueError, KeyError, TypeError):
        raise InputValidationError("Malformed identity bundle") from None

    check_params(salt, time_cost, memory_cost, parallelism)

    with SecretBuffer(
        derive_key(passphrase, salt, time_cost, memory_cost, parallelism)
    ) as key:
        plaintext = aead.decrypt(ciphertext, key, nonce, aad=_aad(kdf))

    if len(plaintext) != _SECRET_SIZE:
        raise AuthenticationError("Decryption failed")

    with SecretBuffer(plaintext) as secret:
        raw = bytes(secret)
        o = 0
        enc_pub = raw[o:o + PUBLIC_KEY_SIZE]
        o += PUBLIC_KEY_SIZE
        enc_priv = raw[o:o + PRIVATE_KEY_SIZE]
        o += PRIVATE_KEY_SIZE
        sign_pub = raw[o:o + SIGNING_PUBLIC_KEY_SIZE]
        o += SIGNING_PUBLIC_KEY_SIZE
        sign_priv = raw[o:]

    return UserIdentity(
        encryption=AsymmetricKeypair(public_key=enc_pub, private_key=enc_priv),
        signing=SigningKeypair(public_key=sign_pub, private_key=sign_priv),
    )
