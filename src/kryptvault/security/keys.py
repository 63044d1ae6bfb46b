"""
Identity key pairs.

Two independent pairs per user:

- an X25519 pair (32-byte public / 32-byte private) used by the sealed-box
  wrap and unwrap operations
- an Ed25519 signing pair (32-byte public / 64-byte private) provisioned for
  a future authenticity feature; nothing in this package signs or verifies

Key-pair objects never print their private halves and only offer
:meth:`to_public_dict` as a serializer. Moving a private half across a
trust boundary is left to the caller (see :mod:`kryptvault.security.custody`
for the passphrase-locked export).
"""

from __future__ import annotations

import hmac
from dataclasses import dataclass, field
from typing import NamedTuple, Tuple

from nacl.bindings import crypto_sign_SEEDBYTES, crypto_sign_seed_keypair
from nacl.public import PrivateKey

from ..utils import b64e, ensure_bytes
from .rng import random_bytes

PUBLIC_KEY_SIZE = 32
PRIVATE_KEY_SIZE = 32
SIGNING_PUBLIC_KEY_SIZE = 32
SIGNING_PRIVATE_KEY_SIZE = 64


@dataclass(frozen=True)
class AsymmetricKeypair:
    public_key: bytes
    private_key: bytes = field(repr=False)

    def __post_init__(self):
        object.__setattr__(
            self, "public_key", ensure_bytes(self.public_key, "public key", PUBLIC_KEY_SIZE)
        )
        object.__setattr__(
            self, "private_key", ensure_bytes(self.private_key, "private key", PRIVATE_KEY_SIZE)
        )

    def matches(self) -> bool:
        """True when the public half is the one derived from the private half."""
        return keypair_matches(self.public_key, self.private_key)

    def to_public_dict(self) -> dict:
        return {"public_key": b64e(self.public_key)}


@dataclass(frozen=True)
class SigningKeypair:
    public_key: bytes
    private_key: bytes = field(repr=False)

    def __post_init__(self):
        object.__setattr__(
            self,
            "public_key",
            ensure_bytes(self.public_key, "signing public key", SIGNING_PUBLIC_KEY_SIZE),
        )
        object.__setattr__(
            self,
            "private_key",
            ensure_bytes(self.private_key, "signing private key", SIGNING_PRIVATE_KEY_SIZE),
        )

    def to_public_dict(self) -> dict:
        return {"signing_public_key": b64e(self.public_key)}


class UserIdentity(NamedTuple):
    encryption: AsymmetricKeypair
    signing: SigningKeypair

    def to_public_dict(self) -> dict:
        out = self.encryption.to_public_dict()
        out.update(self.signing.to_public_dict())
        return out


def keypair_matches(public_key: bytes, private_key: bytes) -> bool:
    derived = PrivateKey(private_key).public_key.encode()
    return hmac.compare_digest(derived, public_key)


def generate_asymmetric_keypair() -> Tuple[bytes, bytes]:
    """Return a fresh X25519 ``(public, private)`` pair as raw bytes."""
    sk = PrivateKey(random_bytes(PRIVATE_KEY_SIZE))
    return sk.public_key.encode(), sk.encode()


def generate_keypair() -> AsymmetricKeypair:
    public, private = generate_asymmetric_keypair()
    return AsymmetricKeypair(public_key=public, private_key=private)


def generate_signing_keypair() -> SigningKeypair:
    # libsodium layout: 64-byte secret key is seed || public key
    public, secret = crypto_sign_seed_keypair(random_bytes(crypto_sign_SEEDBYTES))
    return SigningKeypair(public_key=public, private_key=secret)


def generate_user_identity() -> UserIdentity:
    """Generate the encryption pair and the signing pair for a new user."""
    return UserIdentity(encryption=generate_keypair(), signing=generate_signing_keypair())
