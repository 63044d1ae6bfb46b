"""
Unit tests for the chunked streaming AEAD container.
"""

import io
import os
import struct

import pytest

from kryptvault.core.exceptions import AuthenticationError, InputValidationError, StreamFormatError
from kryptvault.security.stream import (
    HEADER_SIZE,
    MAGIC,
    VERSION,
    decrypt_stream,
    encrypt_stream,
    read_header,
)

# ==============================================================================
# Fixtures
# ==============================================================================

@pytest.fixture
def dek():
    return os.urandom(32)


def _encrypt(data, dek, chunk_size=1024):
    out = io.BytesIO()
    encrypt_stream(io.BytesIO(data), out, dek, chunk_size=chunk_size)
    return out.getvalue()


def _decrypt(blob, dek):
    out = io.BytesIO()
    decrypt_stream(io.BytesIO(blob), out, dek)
    return out.getvalue()


def _records(blob):
    """Split a container body into (offset, length) of each record."""
    pos = HEADER_SIZE
    found = []
    while pos < len(blob):
        (n,) = struct.unpack(">I", blob[pos:pos + 4])
        found.append((pos, 4 + n))
        pos += 4 + n
    return found


# ==============================================================================
# Tests: Round trip
# ==============================================================================

@pytest.mark.parametrize("size", [0, 1, 1023, 1024, 1025, 10_000])
def test_roundtrip(dek, size):
    data = os.urandom(size)
    assert _decrypt(_encrypt(data, dek), dek) == data


def test_roundtrip_default_chunk_size(dek):
    data = os.urandom(250_000)
    out = io.BytesIO()
    assert encrypt_stream(io.BytesIO(data), out, dek) == len(data)
    assert _decrypt(out.getvalue(), dek) == data


def test_chunk_count(dek):
    blob = _encrypt(b"x" * 2500, dek, chunk_size=1000)
    assert len(_records(blob)) == 3


def test_empty_input_has_one_final_chunk(dek):
    blob = _encrypt(b"", dek)
    assert len(_records(blob)) == 1
    assert _decrypt(blob, dek) == b""


def test_header_fields(dek):
    blob = _encrypt(b"abc", dek, chunk_size=4096)
    header, chunk_size, prefix = read_header(io.BytesIO(blob))
    assert header[:4] == MAGIC
    assert header[4] == VERSION
    assert chunk_size == 4096
    assert len(prefix) == 16


def test_short_reads_from_source(dek):
    """Sources that return fewer bytes than requested still round-trip."""

    class Trickle(io.RawIOBase):
        def __init__(self, data):
            self._data = data

        def readable(self):
            return True

        def read(self, n=-1):
            chunk, self._data = self._data[:7], self._data[7:]
            return chunk

    data = os.urandom(5000)
    out = io.BytesIO()
    encrypt_stream(Trickle(data), out, dek, chunk_size=1024)
    assert _decrypt(out.getvalue(), dek) == data


# ==============================================================================
# Tests: Authentication failures
# ==============================================================================

def test_wrong_dek(dek):
    blob = _encrypt(b"secret" * 100, dek)
    with pytest.raises(AuthenticationError):
        _decrypt(blob, os.urandom(32))


def test_tampered_chunk(dek):
    blob = bytearray(_encrypt(b"hello world" * 100, dek))
    blob[HEADER_SIZE + 10] ^= 0x01
    with pytest.raises(AuthenticationError):
        _decrypt(bytes(blob), dek)


def test_tampered_header_prefix(dek):
    """The header is bound as associated data to every chunk."""
    blob = bytearray(_encrypt(b"data" * 10, dek))
    blob[HEADER_SIZE - 1] ^= 0x01
    with pytest.raises(AuthenticationError):
        _decrypt(bytes(blob), dek)


def test_dropped_final_chunk(dek):
    blob = _encrypt(b"x" * 3000, dek, chunk_size=1000)
    last_offset, _ = _records(blob)[-1]
    with pytest.raises(AuthenticationError):
        _decrypt(blob[:last_offset], dek)


def test_truncated_mid_record(dek):
    blob = _encrypt(os.urandom(10_000), dek)
    with pytest.raises(AuthenticationError):
        _decrypt(blob[:-10], dek)


def test_truncated_length_prefix(dek):
    blob = _encrypt(b"x" * 3000, dek, chunk_size=1000)
    last_offset, _ = _records(blob)[-1]
    with pytest.raises(AuthenticationError):
        _decrypt(blob[:last_offset + 2], dek)


def test_reordered_chunks(dek):
    blob = _encrypt(b"a" * 1000 + b"b" * 1000 + b"c" * 1000, dek, chunk_size=1000)
    recs = _records(blob)
    (o1, l1), (o2, l2) = recs[0], recs[1]
    swapped = blob[:o1] + blob[o2:o2 + l2] + blob[o1:o1 + l1] + blob[o2 + l2:]
    with pytest.raises(AuthenticationError):
        _decrypt(swapped, dek)


def test_trailing_data_rejected(dek):
    blob = _encrypt(b"payload", dek)
    extra = struct.pack(">I", 20) + b"\x00" * 20
    with pytest.raises(AuthenticationError):
        _decrypt(blob + extra, dek)


def test_oversized_record_length(dek):
    blob = bytearray(_encrypt(b"payload", dek, chunk_size=64))
    blob[HEADER_SIZE:HEADER_SIZE + 4] = struct.pack(">I", 10_000)
    with pytest.raises(AuthenticationError):
        _decrypt(bytes(blob), dek)


# ==============================================================================
# Tests: Header errors
# ==============================================================================

def test_invalid_magic(dek):
    bad = b"BADX" + b"\x00" * 40
    with pytest.raises(StreamFormatError, match="magic"):
        _decrypt(bad, dek)


def test_unsupported_version(dek):
    bad = struct.pack(">4sBI16s", MAGIC, 99, 1024, b"\x00" * 16)
    with pytest.raises(StreamFormatError, match="Unsupported stream version"):
        _decrypt(bad, dek)


def test_zero_chunk_size_in_header(dek):
    bad = struct.pack(">4sBI16s", MAGIC, VERSION, 0, b"\x00" * 16)
    with pytest.raises(StreamFormatError, match="chunk size"):
        _decrypt(bad, dek)


def test_truncated_header(dek):
    with pytest.raises(StreamFormatError, match="Truncated"):
        _decrypt(MAGIC + b"\x01", dek)


def test_stream_format_error_is_input_validation():
    assert issubclass(StreamFormatError, InputValidationError)


# ==============================================================================
# Tests: Input validation
# ==============================================================================

@pytest.mark.parametrize("chunk_size", [0, -1, 16 * 1024 * 1024 + 1])
def test_invalid_chunk_size(dek, chunk_size):
    with pytest.raises(InputValidationError):
        encrypt_stream(io.BytesIO(b"x"), io.BytesIO(), dek, chunk_size=chunk_size)


def test_invalid_dek_length():
    with pytest.raises(InputValidationError):
        encrypt_stream(io.BytesIO(b"x"), io.BytesIO(), b"\x00" * 16)
