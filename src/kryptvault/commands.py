"""
Command surface with base64 text at the boundary.

Each function mirrors one desktop command: arguments and results are base64
strings (or plain ints / strings / dicts), decoded and validated here before
any cryptographic call. There is no transport, upload or UI code in this
module; a command dispatcher calls these functions and serializes the
results.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Tuple

from .core import envelope, sharing, storage
from .core.exceptions import InputValidationError
from .core.models import AsymmetricWrap
from .security import group, sealer
from .security.keys import AsymmetricKeypair, generate_asymmetric_keypair, generate_user_identity
from .security.rng import generate_folder_key as _generate_folder_key
from .utils import b64d, b64e

logger = logging.getLogger(__name__)


def _keypair(public_b64: str, private_b64: str) -> AsymmetricKeypair:
    return AsymmetricKeypair(
        public_key=b64d(public_b64, "public key"),
        private_key=b64d(private_b64, "private key"),
    )


def generate_keypair() -> Tuple[str, str]:
    """Return ``(public_key, private_key)`` as base64."""
    public, private = generate_asymmetric_keypair()
    return b64e(public), b64e(private)


def generate_user_keypair() -> Dict[str, str]:
    """
    Generate X25519 + Ed25519 key pairs for a new user.

    Private halves are returned to the local caller for keychain storage;
    only the public halves are meant to be sent to a server.
    """
    identity = generate_user_identity()
    return {
        "public_key": b64e(identity.encryption.public_key),
        "private_key": b64e(identity.encryption.private_key),
        "signing_public_key": b64e(identity.signing.public_key),
        "signing_private_key": b64e(identity.signing.private_key),
    }


def generate_folder_key() -> str:
    return b64e(_generate_folder_key())


def encrypt_data(data: str, recipient_public_key: str, original_name: str = "unknown") -> Dict[str, Any]:
    """In-memory EncryptFile: base64 plaintext in, base64 envelope out."""
    result = envelope.encrypt_file(
        b64d(data, "data"), b64d(recipient_public_key, "recipient public key"), original_name
    )
    out = result.metadata()
    out["ciphertext"] = b64e(result.ciphertext)
    return out


def decrypt_data(ciphertext: str, wrapped_dek: str, nonce: str, public_key: str, private_key: str) -> str:
    plaintext = envelope.decrypt_file(
        b64d(ciphertext, "ciphertext"),
        b64d(wrapped_dek, "wrapped DEK"),
        b64d(nonce, "nonce"),
        b64d(public_key, "public key"),
        b64d(private_key, "private key"),
    )
    return b64e(plaintext)


def encrypt_file_only(input_path: str, output_path: str, server_public_key: str, ctx=None) -> Dict[str, Any]:
    """Encrypt a local file without uploading it."""
    result = storage.encrypt_path(
        input_path, output_path, b64d(server_public_key, "server public key"), ctx
    )
    logger.info("Encrypted file written to %s", output_path)
    out = result.metadata()
    out["encrypted_file_path"] = str(output_path)
    return out


def decrypt_file_only(params: Dict[str, str], output_path: str, server_public_key: str, ctx=None) -> str:
    """
    Decrypt a local file.

    ``params`` carries ``encrypted_file_path``, ``wrapped_dek``, ``nonce`` and
    ``server_private_key`` (all base64 except the path).
    """
    try:
        encrypted_path = params["encrypted_file_path"]
        wrapped_dek = params["wrapped_dek"]
        nonce = params["nonce"]
        private_key = params["server_private_key"]
    except KeyError as e:
        raise InputValidationError(f"Missing decryption parameter: {e.args[0]}") from None

    keypair = _keypair(server_public_key, private_key)
    out = storage.decrypt_path(
        encrypted_path,
        output_path,
        AsymmetricWrap(b64d(wrapped_dek, "wrapped DEK")),
        b64d(nonce, "nonce"),
        keypair,
        ctx,
    )
    logger.info("Decrypted file written to %s", out)
    return str(out)


def decrypt_file_with_dek(encrypted_path: str, dek_base64: str, nonce: str, output_path: str, ctx=None) -> str:
    """Decrypt a shared file with a DEK obtained from :func:`unwrap_shared_dek`."""
    out = storage.decrypt_path_with_dek(
        encrypted_path, output_path, b64d(dek_base64, "DEK"), b64d(nonce, "nonce"), ctx
    )
    return str(out)


def wrap_dek_with_folder_key(dek_b64: str, folder_key_b64: str) -> Dict[str, str]:
    ciphertext, nonce = group.wrap_with_group_key(
        b64d(dek_b64, "DEK"), b64d(folder_key_b64, "folder key")
    )
    return {"wrapped_dek": b64e(ciphertext), "wrapping_nonce": b64e(nonce)}


def unwrap_dek_with_folder_key(wrapped_dek: str, wrapping_nonce: str, folder_key_b64: str) -> str:
    dek = group.unwrap_with_group_key(
        b64d(wrapped_dek, "wrapped DEK"),
        b64d(wrapping_nonce, "wrapping nonce"),
        b64d(folder_key_b64, "folder key"),
    )
    return b64e(dek)


def share_file_key(wrapped_dek: str, user_public_key: str, user_private_key: str, recipient_public_key: str) -> str:
    """Unwrap with the current user's key pair and re-wrap for the recipient."""
    resealed = sharing.share(
        b64d(wrapped_dek, "wrapped DEK"),
        _keypair(user_public_key, user_private_key),
        b64d(recipient_public_key, "recipient public key"),
    )
    return b64e(resealed.sealed)


def unwrap_shared_dek(wrapped_dek: str, user_public_key: str, user_private_key: str) -> str:
    dek = sharing.unwrap_for_self(
        b64d(wrapped_dek, "wrapped DEK"), _keypair(user_public_key, user_private_key)
    )
    return b64e(dek)


def seal_data(data: str, recipient_public_key: str) -> str:
    sealed = sealer.seal(b64d(data, "data"), b64d(recipient_public_key, "recipient public key"))
    return b64e(sealed)
