"""KryptVault: envelope encryption for files shared between users and folders."""

from .core.exceptions import (
    KryptVaultError,
    InputValidationError,
    AuthenticationError,
    StreamFormatError,
)
from .core.models import AsymmetricWrap, SymmetricWrap, EncryptedFile, wrap_from_dict
from .core.envelope import encrypt_file, decrypt_file, decrypt_file_with_dek
from .core.sharing import share, unwrap_for_self, share_with_folder, rewrap_folder, unwrap_any
from .security.keys import AsymmetricKeypair, SigningKeypair, UserIdentity, generate_keypair, generate_user_identity
from .security.sealer import seal
from .security.group import wrap_with_group_key, unwrap_with_group_key
from .security.rng import generate_folder_key

__version__ = "0.1.0"

__all__ = [
    "KryptVaultError",
    "InputValidationError",
    "AuthenticationError",
    "StreamFormatError",
    "AsymmetricWrap",
    "SymmetricWrap",
    "EncryptedFile",
    "wrap_from_dict",
    "encrypt_file",
    "decrypt_file",
    "decrypt_file_with_dek",
    "share",
    "unwrap_for_self",
    "share_with_folder",
    "rewrap_folder",
    "unwrap_any",
    "AsymmetricKeypair",
    "SigningKeypair",
    "UserIdentity",
    "generate_keypair",
    "generate_user_identity",
    "seal",
    "wrap_with_group_key",
    "unwrap_with_group_key",
    "generate_folder_key",
]
