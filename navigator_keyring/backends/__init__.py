"""Keyring backend interface shared by every secret store."""

from .abstract import AbstractKeyring

__all__ = ["AbstractKeyring"]
