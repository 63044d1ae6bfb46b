"""
Exceptions for KryptVault
This is placed such that there is a general error catcher
"""


class KryptVaultError(Exception):
    # general container for errors
    pass


class InputValidationError(KryptVaultError, ValueError):
    # raised for malformed input (bad encoding, wrong key / nonce / DEK length)
    # before any cryptographic operation runs
    pass


class AuthenticationError(KryptVaultError):
    # raised when an AEAD tag or a sealed box does not verify.
    # wrong key and tampered data are reported the same way
    pass


class StreamFormatError(InputValidationError):
    # raised when a streaming container header is structurally invalid
    pass
