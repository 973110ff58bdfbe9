"""Keyring error taxonomy.

Every failure crossing the keyring boundary is one of five disjoint kinds,
all subclasses of :class:`KeyringError`. Callers usually branch on
:class:`SecretNotFound` ("nothing stored") versus everything else
("storage or passphrase broken").
"""


class KeyringError(Exception):
    """Base class for keyring errors."""


class SecretNotFound(KeyringError):
    """No secret is stored under the requested identity."""


class DirectoryError(KeyringError):
    """Storage root cannot be resolved, created, or used as a directory."""


class PassphraseError(KeyringError):
    """Passphrase could not be acquired (no terminal, closed input)."""


class CryptoError(KeyringError):
    """Envelope is malformed, tampered with, or the passphrase is wrong."""


class StorageIOError(KeyringError):
    """Reading, writing or removing a secret file failed."""
