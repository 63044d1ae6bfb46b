"""Chunked AEAD container for content that should not be fully buffered.

Header layout (binary, all big-endian):
- 4 bytes: magic b'KVS1'
- 1 byte: version (1)
- 4 bytes: chunk_size (plaintext bytes per chunk)
- 16 bytes: nonce prefix

Body: sequence of records: 4-byte big-endian ciphertext length + ciphertext bytes

Each chunk is XChaCha20-Poly1305 under a per-stream key derived from the DEK
with HKDF (salt = nonce prefix). The chunk nonce is ``prefix || counter`` and
the associated data is ``header || final_flag``, so a reordered, truncated,
extended or re-headed stream fails authentication. Empty input still yields
one (empty) final chunk.
"""
from __future__ import annotations

import logging
import struct
from typing import BinaryIO

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from ..core.exceptions import AuthenticationError, InputValidationError, StreamFormatError
from ..memory import SecretBuffer
from ..utils import ensure_bytes
from . import aead
from .rng import KEY_SIZE, random_bytes

logger = logging.getLogger(__name__)

MAGIC = b"KVS1"
VERSION = 1
NONCE_PREFIX_SIZE = 16
DEFAULT_CHUNK_SIZE = 64 * 1024
MAX_CHUNK_SIZE = 16 * 1024 * 1024

_HEADER = struct.Struct(">4sBI16s")
_RECORD_LEN = struct.Struct(">I")
HEADER_SIZE = _HEADER.size


def _derive_stream_key(dek: bytes, nonce_prefix: bytes, info: bytes = b"kryptvault-stream-v1") -> bytes:
    hkdf = HKDF(algorithm=hashes.SHA256(), length=KEY_SIZE, salt=nonce_prefix, info=info)
    return hkdf.derive(dek)


def _make_nonce(prefix: bytes, chunk_index: int) -> bytes:
    return prefix + chunk_index.to_bytes(8, "big")


def _read_full(src: BinaryIO, n: int) -> bytes:
    # Raw streams and pipes may return short reads before EOF.
    buf = bytearray()
    while len(buf) < n:
        part = src.read(n - len(buf))
        if not part:
            break
        buf += part
    return bytes(buf)


def encrypt_stream(src: BinaryIO, dst: BinaryIO, dek: bytes, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """Encrypt ``src`` into ``dst``; returns the number of plaintext bytes."""
    dek = ensure_bytes(dek, "DEK", KEY_SIZE)
    if not isinstance(chunk_size, int) or not 0 < chunk_size <= MAX_CHUNK_SIZE:
        raise InputValidationError(f"chunk_size must be between 1 and {MAX_CHUNK_SIZE} bytes")

    prefix = random_bytes(NONCE_PREFIX_SIZE)
    header = _HEADER.pack(MAGIC, VERSION, chunk_size, prefix)
    dst.write(header)

    total = 0
    chunk_index = 0
    with SecretBuffer(_derive_stream_key(dek, prefix)) as key:
        chunk = _read_full(src, chunk_size)
        while True:
            following = _read_full(src, chunk_size)
            final = not following
            ct = aead.encrypt(
                chunk, key, _make_nonce(prefix, chunk_index), aad=header + bytes([final])
            )
            dst.write(_RECORD_LEN.pack(len(ct)))
            dst.write(ct)
            total += len(chunk)
            if final:
                break
            chunk = following
            chunk_index += 1

    logger.debug("Encrypted stream: %d bytes in %d chunks", total, chunk_index + 1)
    return total


def read_header(src: BinaryIO):
    """Parse and validate a stream header; returns ``(header_bytes, chunk_size, prefix)``."""
    header = _read_full(src, HEADER_SIZE)
    if len(header) != HEADER_SIZE:
        raise StreamFormatError("Truncated stream header")
    magic, version, chunk_size, prefix = _HEADER.unpack(header)
    if magic != MAGIC:
        raise StreamFormatError("Invalid stream format (magic mismatch)")
    if version != VERSION:
        raise StreamFormatError("Unsupported stream version")
    if not 0 < chunk_size <= MAX_CHUNK_SIZE:
        raise StreamFormatError("Invalid chunk size in stream header")
    return header, chunk_size, prefix


def decrypt_stream(src: BinaryIO, dst: BinaryIO, dek: bytes) -> int:
    """
    Decrypt a stream produced by :func:`encrypt_stream`; returns plaintext bytes.

    Plaintext is written chunk by chunk as each chunk verifies, so on failure
    ``dst`` may hold a verified prefix. Callers that need all-or-nothing output
    should write to a staging file (see :mod:`kryptvault.core.storage`).
    """
    dek = ensure_bytes(dek, "DEK", KEY_SIZE)
    header, chunk_size, prefix = read_header(src)
    max_record = chunk_size + aead.TAG_SIZE

    total = 0
    chunk_index = 0
    with SecretBuffer(_derive_stream_key(dek, prefix)) as key:
        len_bytes = _read_full(src, _RECORD_LEN.size)
        while True:
            if len(len_bytes) != _RECORD_LEN.size:
                raise AuthenticationError("Decryption failed (truncated stream)")
            (ct_len,) = _RECORD_LEN.unpack(len_bytes)
            if ct_len < aead.TAG_SIZE or ct_len > max_record:
                raise AuthenticationError("Decryption failed")
            ct = _read_full(src, ct_len)
            if len(ct) != ct_len:
                raise AuthenticationError("Decryption failed (truncated stream)")

            len_bytes = _read_full(src, _RECORD_LEN.size)
            final = not len_bytes
            pt = aead.decrypt(ct, key, _make_nonce(prefix, chunk_index), aad=header + bytes([final]))
            dst.write(pt)
            total += len(pt)
            if final:
                break
            chunk_index += 1

    return total
