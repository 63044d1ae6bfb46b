"""Scoped holder for secret key material.

Python cannot promise that every copy of a secret is cleared: ``bytes`` are
immutable and libraries make their own copies. What this module does give is
one mutable buffer per operation that is zeroed when the operation ends and
that never shows its contents through ``repr()`` or logging.
"""

from __future__ import annotations


class SecretBuffer:
    """A ``bytearray`` wrapper that wipes itself on ``__exit__``."""

    __slots__ = ("_buf",)

    def __init__(self, data) -> None:
        self._buf = bytearray(data)

    def __enter__(self) -> "SecretBuffer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()

    def wipe(self) -> None:
        """Overwrite the buffer with zeros in place."""
        self._buf[:] = bytes(len(self._buf))

    @property
    def wiped(self) -> bool:
        return not any(self._buf)

    def __bytes__(self) -> bytes:
        return bytes(self._buf)

    def __len__(self) -> int:
        return len(self._buf)

    def __repr__(self) -> str:
        return f"SecretBuffer(<{len(self._buf)} bytes redacted>)"

    __str__ = __repr__
