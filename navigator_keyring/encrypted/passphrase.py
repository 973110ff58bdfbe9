"""
Passphrase acquisition for the encrypted file keyring.

A provider yields the passphrase protecting a storage root. The default
provider reads an environment variable and falls back to an interactive
prompt; fixed providers make the keyring usable without a terminal.

Security Note:
    Passphrases are never logged or persisted. They are not wiped from
    memory after use (Python strings are immutable).
"""
import os
import sys
import getpass
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Union

from ..exceptions import PassphraseError

logger = logging.getLogger("navigator.keyring")

PromptFunc = Callable[[str], str]


def terminal_prompt(message: str) -> str:
    """Read a passphrase from the terminal without echo.

    The prompt is written to stderr so stdout stays usable for piping.

    Raises:
        PassphraseError: If stdin is not a terminal or input is closed.
    """
    if not sys.stdin or not sys.stdin.isatty():
        raise PassphraseError(
            "Cannot prompt for passphrase: stdin is not a terminal"
        )
    try:
        return getpass.getpass(f"{message}: ", stream=sys.stderr)
    except (EOFError, OSError) as err:
        raise PassphraseError(f"Cannot read passphrase: {err}") from err


def fixed_string_prompt(value: str) -> PromptFunc:
    """Return a prompt function that always answers ``value``."""
    def _prompt(_message: str) -> str:
        return value
    return _prompt


class PassphraseProvider(ABC):
    """Capability yielding the passphrase for a storage root."""

    @abstractmethod
    def acquire(self, root: Union[str, Path]) -> str:
        """Return the passphrase protecting ``root``.

        Raises:
            PassphraseError: If the passphrase cannot be obtained.
        """


class EnvPassphraseProvider(PassphraseProvider):
    """Environment variable first, interactive prompt otherwise.

    An empty variable counts as unset. Neither source is validated: an
    empty passphrase still derives a (weak) key.
    """

    def __init__(self, env_name: str, prompt: PromptFunc = terminal_prompt):
        self.env_name = env_name
        self.prompt = prompt

    def acquire(self, root: Union[str, Path]) -> str:
        passphrase = os.environ.get(self.env_name)
        if passphrase:
            return passphrase
        logger.debug(
            "%s not set, prompting for passphrase of %s", self.env_name, root
        )
        try:
            return self.prompt(f'Enter passphrase to unlock "{root}"')
        except (EOFError, OSError) as err:
            raise PassphraseError(f"Cannot read passphrase: {err}") from err


class FixedPassphraseProvider(PassphraseProvider):
    """Always returns the same passphrase."""

    def __init__(self, passphrase: str):
        self._passphrase = passphrase

    def acquire(self, root: Union[str, Path]) -> str:
        return self._passphrase
