"""Keyring defaults, overridable from the environment."""
import os

# Storage root for encrypted secret files ("~" expands to the home directory).
KEYRING_DIRECTORY = os.environ.get(
    "NAVIGATOR_KEYRING_DIR", "~/.navigator-keyring"
)

# Name of the environment variable holding the passphrase.
KEYRING_PASSPHRASE_ENV = os.environ.get(
    "NAVIGATOR_KEYRING_PASSPHRASE_ENV", "NAVIGATOR_KEYRING_PASSPHRASE"
)

# PBKDF2 iteration count written into new envelopes. Kept as the raw string;
# KeyringConfig coerces and range-checks it.
KEYRING_KDF_ITERATIONS = os.environ.get(
    "NAVIGATOR_KEYRING_KDF_ITERATIONS", "100000"
)
