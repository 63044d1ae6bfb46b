"""Unit tests for sealed-box DEK wrapping."""

import os

import pytest

from kryptvault.core.exceptions import AuthenticationError, InputValidationError
from kryptvault.security import sealer
from kryptvault.security.keys import generate_keypair


# ==============================================================================
# Fixtures
# ==============================================================================

@pytest.fixture
def alice():
    return generate_keypair()


@pytest.fixture
def bob():
    return generate_keypair()


@pytest.fixture
def dek():
    return os.urandom(32)


# ==============================================================================
# Tests: Wrap / unwrap
# ==============================================================================

def test_wrap_unwrap_roundtrip(alice, dek):
    wrapped = sealer.wrap(dek, alice.public_key)
    assert sealer.unwrap(wrapped, alice.public_key, alice.private_key) == dek


def test_wrapped_dek_size(alice, dek):
    assert len(sealer.wrap(dek, alice.public_key)) == sealer.WRAPPED_DEK_SIZE == 80


def test_wrap_is_randomized(alice, dek):
    """Fresh ephemeral key per seal: same DEK never produces the same box."""
    assert sealer.wrap(dek, alice.public_key) != sealer.wrap(dek, alice.public_key)


def test_wrong_keypair_cannot_unwrap(alice, bob, dek):
    wrapped = sealer.wrap(dek, alice.public_key)
    with pytest.raises(AuthenticationError):
        sealer.unwrap(wrapped, bob.public_key, bob.private_key)


def test_mismatched_holder_halves_rejected(alice, bob, dek):
    wrapped = sealer.wrap(dek, alice.public_key)
    with pytest.raises(AuthenticationError):
        sealer.unwrap(wrapped, alice.public_key, bob.private_key)


def test_tampered_wrap_rejected(alice, dek):
    wrapped = bytearray(sealer.wrap(dek, alice.public_key))
    wrapped[40] ^= 0x80
    with pytest.raises(AuthenticationError):
        sealer.unwrap(bytes(wrapped), alice.public_key, alice.private_key)


def test_failures_are_undifferentiated(alice, bob, dek):
    wrapped = sealer.wrap(dek, alice.public_key)
    with pytest.raises(AuthenticationError) as wrong_pair:
        sealer.unwrap(wrapped, bob.public_key, bob.private_key)
    tampered = wrapped[:-1] + bytes([wrapped[-1] ^ 1])
    with pytest.raises(AuthenticationError) as corrupted:
        sealer.unwrap(tampered, alice.public_key, alice.private_key)
    assert str(wrong_pair.value) == str(corrupted.value)


def test_sealed_payload_of_wrong_length_rejected(alice):
    """A sealed box that is not DEK-sized is rejected before opening."""
    box = sealer.seal(b"\x00" * 31 + b"\x01\x02", alice.public_key)  # 33 bytes inside
    with pytest.raises(InputValidationError):
        sealer.unwrap(box, alice.public_key, alice.private_key)


# ==============================================================================
# Tests: Input validation
# ==============================================================================

@pytest.mark.parametrize("bad_len", [16, 31, 33, 64])
def test_wrap_rejects_bad_dek_length(alice, bad_len):
    with pytest.raises(InputValidationError, match="DEK"):
        sealer.wrap(b"\x00" * bad_len, alice.public_key)


def test_wrap_rejects_bad_public_key(dek):
    with pytest.raises(InputValidationError, match="public key"):
        sealer.wrap(dek, b"\x00" * 31)


@pytest.mark.parametrize("low_order", [b"\x00" * 32, b"\x01" + b"\x00" * 31])
def test_seal_rejects_low_order_recipient(dek, low_order):
    """Points of small order cannot receive a sealed box."""
    with pytest.raises(InputValidationError, match="recipient public key"):
        sealer.seal(b"token", low_order)
    with pytest.raises(InputValidationError, match="recipient public key"):
        sealer.wrap(dek, low_order)


def test_unwrap_rejects_wrong_size_input(alice):
    with pytest.raises(InputValidationError, match="wrapped DEK size"):
        sealer.unwrap(b"\x00" * 48, alice.public_key, alice.private_key)


# ==============================================================================
# Tests: Opaque data sealing
# ==============================================================================

@pytest.mark.parametrize("payload", [b"", b"token", os.urandom(4096)])
def test_seal_unseal_payload(alice, payload):
    sealed = sealer.seal(payload, alice.public_key)
    assert len(sealed) == len(payload) + sealer.SEAL_OVERHEAD
    assert sealer.unseal(sealed, alice.public_key, alice.private_key) == payload


def test_unseal_rejects_short_input(alice):
    with pytest.raises(InputValidationError, match="too short"):
        sealer.unseal(b"\x00" * 10, alice.public_key, alice.private_key)


def test_unseal_wrong_recipient(alice, bob):
    sealed = sealer.seal(b"token", alice.public_key)
    with pytest.raises(AuthenticationError):
        sealer.unseal(sealed, bob.public_key, bob.private_key)
