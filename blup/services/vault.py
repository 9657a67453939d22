"""
Secret storage for account credentials.

Secrets live in the operating system keychain through ``keyring``, one entry
per ``<account>.<key>`` under a single service name.
"""

from typing import Protocol

import keyring
import structlog
from keyring.errors import KeyringError

from blup.exceptions import ConfigurationError

logger = structlog.get_logger(__name__)


def entry_name(account: str, key: str) -> str:
    """Keychain entry for ``key`` of ``account``; a bare ``key`` when no account is given."""
    return f"{account}.{key}" if account else key


class SecretVault(Protocol):
    """Key-value credential store namespaced by account."""

    def get(self, account: str, key: str) -> str | None: ...

    def set(self, account: str, key: str, secret: str) -> None: ...


class KeyringVault:
    """SecretVault backed by the system keychain."""

    def __init__(self, service: str) -> None:
        self._service = service

    def get(self, account: str, key: str) -> str | None:
        """
        Raises:
            ConfigurationError: If no usable keychain backend is available.
        """
        name = entry_name(account, key)
        try:
            return keyring.get_password(self._service, name)
        except KeyringError as e:
            msg = f"Cannot read '{name}' from the system keychain: {e}"
            raise ConfigurationError(msg, service=self._service) from e

    def set(self, account: str, key: str, secret: str) -> None:
        """
        Raises:
            ConfigurationError: If no usable keychain backend is available.
        """
        name = entry_name(account, key)
        try:
            keyring.set_password(self._service, name, secret)
        except KeyringError as e:
            msg = f"Cannot write '{name}' to the system keychain: {e}"
            raise ConfigurationError(msg, service=self._service) from e
        logger.debug("Secret stored", service=self._service, entry=name)
