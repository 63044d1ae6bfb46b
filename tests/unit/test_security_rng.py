"""Unit tests for the random generator."""

import pytest
from unittest.mock import patch

from kryptvault.security import rng


def test_generated_deks_are_32_bytes():
    for _ in range(50):
        assert len(rng.generate_dek()) == 32


def test_generated_nonces_are_24_bytes():
    for _ in range(50):
        assert len(rng.generate_nonce()) == 24


def test_folder_key_is_32_bytes():
    assert len(rng.generate_folder_key()) == 32


def test_outputs_are_independent():
    """Repeated calls never return the same key."""
    deks = {rng.generate_dek() for _ in range(200)}
    assert len(deks) == 200


def test_random_bytes_zero_length():
    assert rng.random_bytes(0) == b""


def test_random_bytes_rejects_negative():
    with pytest.raises(ValueError):
        rng.random_bytes(-1)


def test_short_read_is_fatal():
    """A short read from the entropy source raises instead of returning weak output."""
    with patch("kryptvault.security.rng.nacl.utils.random", return_value=b"\x00" * 3):
        with pytest.raises(RuntimeError, match="short read"):
            rng.generate_dek()


def test_entropy_failure_propagates():
    with patch("kryptvault.security.rng.nacl.utils.random", side_effect=OSError("no entropy")):
        with pytest.raises(OSError, match="no entropy"):
            rng.generate_nonce()
