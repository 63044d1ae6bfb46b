"""
kryptvault.utils
----------------
Base64 helpers for the textual boundary and byte-length checks shared by
every operation. All failures here are ``InputValidationError`` and happen
before any cryptographic call.
"""

from __future__ import annotations

import base64
import binascii
from typing import Optional

from .core.exceptions import InputValidationError
from .memory import SecretBuffer


def b64e(b: bytes) -> str:
    return base64.b64encode(bytes(b)).decode("ascii")


def b64d(s: str, name: str = "value") -> bytes:
    if isinstance(s, (bytes, bytearray)):
        s = bytes(s).decode("ascii", errors="replace")
    if not isinstance(s, str):
        raise InputValidationError(f"{name} must be base64 text")
    try:
        return base64.b64decode(s.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError):
        raise InputValidationError(f"Failed to decode {name}: invalid base64") from None


def ensure_bytes(value, name: str, length: Optional[int] = None) -> bytes:
    """Return ``value`` as ``bytes``, optionally enforcing an exact length."""
    if isinstance(value, SecretBuffer):
        value = bytes(value)
    elif isinstance(value, (bytearray, memoryview)):
        value = bytes(value)
    elif not isinstance(value, bytes):
        raise InputValidationError(
            f"{name} must be bytes, got {type(value).__name__}"
        )
    if length is not None and len(value) != length:
        raise InputValidationError(
            f"Invalid {name} size: expected {length} bytes, got {len(value)}"
        )
    return value
