"""
Keyring Configuration — validated settings for the encrypted file keyring.

Values default to ``navigator_keyring.conf``, which reads:
    NAVIGATOR_KEYRING_DIR = <storage root, "~" allowed>
    NAVIGATOR_KEYRING_PASSPHRASE_ENV = <name of the passphrase variable>
    NAVIGATOR_KEYRING_KDF_ITERATIONS = <integer>

Security Note:
    The configuration names the passphrase variable; it never holds the
    passphrase itself.
"""
import os
import logging

from pydantic import BaseModel, Field, field_validator

from .. import conf
from .crypto import MAX_ITERATIONS, MIN_ITERATIONS

logger = logging.getLogger("navigator.keyring")


class KeyringConfig(BaseModel):
    """Validated encrypted file keyring configuration."""

    directory: str = Field(default=conf.KEYRING_DIRECTORY)
    passphrase_env: str = Field(default=conf.KEYRING_PASSPHRASE_ENV)
    kdf_iterations: int = Field(
        default=conf.KEYRING_KDF_ITERATIONS,
        ge=MIN_ITERATIONS,
        le=MAX_ITERATIONS,
        validate_default=True,
    )

    @field_validator("directory", "passphrase_env")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        """Reject empty or blank values."""
        if not v.strip():
            raise ValueError("value cannot be empty")
        return v

    @classmethod
    def from_env(cls) -> "KeyringConfig":
        """Create KeyringConfig from the current environment.

        Unlike the ``conf`` module defaults, this re-reads the environment
        at call time.

        Returns:
            Populated KeyringConfig instance.
        """
        config = cls(
            directory=os.environ.get("NAVIGATOR_KEYRING_DIR", conf.KEYRING_DIRECTORY),
            passphrase_env=os.environ.get(
                "NAVIGATOR_KEYRING_PASSPHRASE_ENV", conf.KEYRING_PASSPHRASE_ENV
            ),
            kdf_iterations=os.environ.get(
                "NAVIGATOR_KEYRING_KDF_ITERATIONS", conf.KEYRING_KDF_ITERATIONS
            ),
        )
        logger.debug(
            "Keyring config: directory=%s passphrase_env=%s",
            config.directory, config.passphrase_env,
        )
        return config
