"""
Data models for wrapped keys and encrypted-file results.

Wrapped keys come in two shapes that cannot be told apart from their bytes
alone, so at the persistence boundary they carry an explicit ``kind`` tag:

- ``AsymmetricWrap`` ("sealed"): one sealed box, bound to a recipient public key
- ``SymmetricWrap`` ("folder"): ciphertext + nonce under a folder key
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, NamedTuple, Union

from ..utils import b64d, b64e, ensure_bytes
from ..security.rng import NONCE_SIZE
from .exceptions import InputValidationError
from .hashing import calculate_sha256_bytes


@dataclass(frozen=True)
class AsymmetricWrap:
    sealed: bytes
    kind = "sealed"

    def __post_init__(self):
        object.__setattr__(self, "sealed", ensure_bytes(self.sealed, "wrapped DEK"))

    def to_dict(self) -> Dict[str, str]:
        return {"kind": self.kind, "wrapped_dek": b64e(self.sealed)}


@dataclass(frozen=True)
class SymmetricWrap:
    ciphertext: bytes
    nonce: bytes
    kind = "folder"

    def __post_init__(self):
        object.__setattr__(self, "ciphertext", ensure_bytes(self.ciphertext, "wrapped DEK"))
        object.__setattr__(self, "nonce", ensure_bytes(self.nonce, "wrapping nonce", NONCE_SIZE))

    def to_dict(self) -> Dict[str, str]:
        return {
            "kind": self.kind,
            "wrapped_dek": b64e(self.ciphertext),
            "wrapping_nonce": b64e(self.nonce),
        }


WrappedKey = Union[AsymmetricWrap, SymmetricWrap]


def wrap_from_dict(data: Dict[str, Any]) -> WrappedKey:
    """Rebuild a tagged wrapped key from its :meth:`to_dict` form."""
    if not isinstance(data, dict):
        raise InputValidationError("Wrapped key record must be a mapping")
    kind = data.get("kind")
    try:
        if kind == AsymmetricWrap.kind:
            return AsymmetricWrap(sealed=b64d(data["wrapped_dek"], "wrapped DEK"))
        if kind == SymmetricWrap.kind:
            return SymmetricWrap(
                ciphertext=b64d(data["wrapped_dek"], "wrapped DEK"),
                nonce=b64d(data["wrapping_nonce"], "wrapping nonce"),
            )
    except KeyError as e:
        raise InputValidationError(f"Wrapped key record is missing {e.args[0]!r}") from None
    raise InputValidationError(f"Unknown wrapped key kind: {kind!r}")


def sealed_bytes(wrapped) -> bytes:
    """Accept an ``AsymmetricWrap`` or raw sealed bytes; reject folder wraps."""
    if isinstance(wrapped, AsymmetricWrap):
        return wrapped.sealed
    if isinstance(wrapped, SymmetricWrap):
        raise InputValidationError(
            "Folder-key wrap cannot be opened with a key pair; use the folder key"
        )
    return ensure_bytes(wrapped, "wrapped DEK")


class EncryptedFile(NamedTuple):
    """Everything needed to decrypt a file later.

    ``original_name`` is passed through as-is and is not covered by the
    AEAD tag.
    """

    ciphertext: bytes
    wrapped_dek: AsymmetricWrap
    nonce: bytes
    size: int
    original_name: str

    def ciphertext_sha256(self) -> str:
        return calculate_sha256_bytes(self.ciphertext)

    def metadata(self) -> Dict[str, Any]:
        # what an external store persists next to the ciphertext object
        return {
            "wrapped_dek": b64e(self.wrapped_dek.sealed),
            "nonce": b64e(self.nonce),
            "file_size": self.size,
            "original_filename": self.original_name,
        }

    def __repr__(self) -> str:
        return (
            f"EncryptedFile(original_name={self.original_name!r}, size={self.size}, "
            f"nonce={self.nonce.hex()})"
        )


class StreamedFile(NamedTuple):
    """Result of a streaming encryption; the nonce prefix lives in the stream header."""

    wrapped_dek: AsymmetricWrap
    plaintext_size: int
    size: int
    original_name: str

    def metadata(self) -> Dict[str, Any]:
        return {
            "wrapped_dek": b64e(self.wrapped_dek.sealed),
            "file_size": self.size,
            "original_filename": self.original_name,
            "format": "stream",
        }
