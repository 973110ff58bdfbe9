"""Encrypted File Keyring — passphrase-protected secret files.

Security Note (Threat Model):
    Secrets and the passphrase are held in process memory while an
    operation runs and are not wiped afterwards. Anyone able to read the
    storage root can attempt offline guessing of the passphrase; the PBKDF2
    iteration count is the only brake on that.
"""

from .backend import EncryptedFileKeyring
from .config import KeyringConfig
from .crypto import EnvelopeCodec
from .passphrase import (
    PassphraseProvider,
    EnvPassphraseProvider,
    FixedPassphraseProvider,
    terminal_prompt,
    fixed_string_prompt,
)
from .paths import PathResolver, escape_key, expand_tilde
from .store import FileStore

__all__ = [
    "EncryptedFileKeyring",
    "KeyringConfig",
    "EnvelopeCodec",
    "PassphraseProvider",
    "EnvPassphraseProvider",
    "FixedPassphraseProvider",
    "terminal_prompt",
    "fixed_string_prompt",
    "PathResolver",
    "escape_key",
    "expand_tilde",
    "FileStore",
]
