"""
EncryptedFileKeyring — one passphrase-encrypted file per secret.

Provides the public API of the file keyring:
- ``get(namespace, key)`` — read and decrypt a secret
- ``set(namespace, key, secret)`` — encrypt and persist a secret
- ``delete(namespace, key)`` — remove a secret file

Only ``key`` selects the file; ``namespace`` is accepted for interface
compatibility with the other keyrings and is otherwise ignored, so the same
key under two namespaces refers to a single file.

Each operation is a short sequence with no retries and no state kept
between calls. A single writer per key is assumed.

Security Note:
    Never log secrets, passphrases or tokens. Only log namespaces, keys and
    paths.
"""
import logging
from typing import Optional

from ..backends.abstract import AbstractKeyring
from .config import KeyringConfig
from .crypto import EnvelopeCodec
from .passphrase import EnvPassphraseProvider, PassphraseProvider
from .paths import PathResolver
from .store import FileStore

logger = logging.getLogger("navigator.keyring")


class EncryptedFileKeyring(AbstractKeyring):
    """Keyring storing secrets as JWE-encrypted files below a root directory.

    Args:
        config: Keyring settings; defaults to ``KeyringConfig()``.
        passphrase: Passphrase capability; defaults to the configured
            environment variable with a terminal prompt fallback.
        codec: Envelope codec; defaults to one using the configured
            iteration count.
        store: File persistence layer.
    """

    name = "file"

    def __init__(
        self,
        config: Optional[KeyringConfig] = None,
        passphrase: Optional[PassphraseProvider] = None,
        codec: Optional[EnvelopeCodec] = None,
        store: Optional[FileStore] = None,
    ):
        self.config = config or KeyringConfig()
        self.paths = PathResolver(self.config.directory)
        self.passphrase = passphrase or EnvPassphraseProvider(
            self.config.passphrase_env
        )
        self.codec = codec or EnvelopeCodec(self.config.kdf_iterations)
        self.store = store or FileStore()

    @classmethod
    def from_env(
        cls, passphrase: Optional[PassphraseProvider] = None
    ) -> "EncryptedFileKeyring":
        """Build a keyring from environment configuration."""
        return cls(config=KeyringConfig.from_env(), passphrase=passphrase)

    def get(self, namespace: str, key: str) -> str:
        """Read and decrypt the secret stored under ``key``.

        Raises:
            SecretNotFound: If nothing is stored under ``key``.
            DirectoryError: If the storage root is unusable.
            PassphraseError: If the passphrase cannot be acquired.
            CryptoError: On a wrong passphrase or a corrupted file.
            StorageIOError: If the file cannot be read.
        """
        filename = self.paths.resolve_file(key)
        token = self.store.read(filename)
        password = self.passphrase.acquire(self.paths.resolve_root())
        secret = self.codec.open(token, password)
        logger.debug("Keyring get: namespace=%s key=%s", namespace, key)
        return secret

    def set(self, namespace: str, key: str, secret: str) -> None:
        """Encrypt ``secret`` and store it under ``key``.

        Raises:
            DirectoryError: If the storage root is unusable.
            PassphraseError: If the passphrase cannot be acquired.
            StorageIOError: If the file cannot be written.
        """
        filename = self.paths.resolve_file(key)
        password = self.passphrase.acquire(self.paths.resolve_root())
        token = self.codec.seal(secret, password)
        self.store.write(filename, token.encode("ascii"))
        logger.debug(
            "Keyring set: namespace=%s key=%s path=%s", namespace, key, filename
        )

    def delete(self, namespace: str, key: str) -> None:
        """Remove the secret stored under ``key``.

        Raises:
            SecretNotFound: If nothing is stored under ``key``.
            DirectoryError: If the storage root is unusable.
            StorageIOError: If the file cannot be removed.
        """
        filename = self.paths.resolve_file(key)
        self.store.remove(filename)
        logger.debug("Keyring delete: namespace=%s key=%s", namespace, key)
