"""Navigator Keyring.

Local secret storage: one passphrase-encrypted file per secret key.
"""
from .version import __version__
from .exceptions import (
    KeyringError,
    SecretNotFound,
    DirectoryError,
    PassphraseError,
    CryptoError,
    StorageIOError,
)
from .backends import AbstractKeyring
from .encrypted import EncryptedFileKeyring, KeyringConfig

__all__ = [
    "__version__",
    "KeyringError",
    "SecretNotFound",
    "DirectoryError",
    "PassphraseError",
    "CryptoError",
    "StorageIOError",
    "AbstractKeyring",
    "EncryptedFileKeyring",
    "KeyringConfig",
]
