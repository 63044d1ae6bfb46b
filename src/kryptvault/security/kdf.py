"""Argon2id passphrase derivation for the locked identity bundle."""

from typing import Dict

from argon2.low_level import Type, hash_secret_raw

from ..core.exceptions import InputValidationError
from .rng import random_bytes

MIN_SALT_SIZE = 8


def generate_salt(length: int = 16) -> bytes:
    return random_bytes(length)


def check_params(salt: bytes, time_cost: int, memory_cost: int, parallelism: int) -> None:
    """
    Reject Argon2id parameters libargon2 would refuse.

    ``memory_cost`` is in KiB and must cover at least 8 KiB per lane.
    """
    if len(salt) < MIN_SALT_SIZE:
        raise InputValidationError(f"KDF salt must be at least {MIN_SALT_SIZE} bytes")
    if time_cost < 1:
        raise InputValidationError("KDF time_cost must be at least 1")
    if parallelism < 1:
        raise InputValidationError("KDF parallelism must be at least 1")
    if memory_cost < 8 * parallelism:
        raise InputValidationError("KDF memory_cost must be at least 8 KiB per lane")


def derive_key(
    passphrase: bytes,
    salt: bytes,
    time_cost: int = 3,
    memory_cost: int = 65536,
    parallelism: int = 1,
    key_len: int = 32,
) -> bytes:
    """Stretch ``passphrase`` into ``key_len`` raw key bytes."""
    if isinstance(passphrase, str):
        passphrase = passphrase.encode("utf-8")
    check_params(salt, time_cost, memory_cost, parallelism)

    return hash_secret_raw(
        secret=passphrase,
        salt=salt,
        time_cost=time_cost,
        memory_cost=memory_cost,
        parallelism=parallelism,
        hash_len=key_len,
        type=Type.ID,
    )


def kdf_params_to_dict(salt: bytes, time_cost: int, memory_cost: int, parallelism: int) -> Dict:
    return {
        "algo": "argon2id",
        "salt": salt.hex(),
        "time": time_cost,
        "memory": memory_cost,
        "parallelism": parallelism,
    }
