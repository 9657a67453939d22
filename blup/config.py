"""
Blup client configuration.
"""

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Self

from blup.exceptions import ConfigurationError

DEFAULT_RELAYS = (
    "wss://relay.damus.io",
    "wss://nos.lol",
    "wss://relay.primal.net",
)

LOOKUP_RELAYS = (
    "wss://purplepag.es",
    "wss://index.hzrd149.com",
)

DEFAULT_BLOSSOM_SERVER = "https://blossom.band"

CONFIG_FILE_NAME = "config.json"


def default_config_dir() -> Path:
    """
    Resolve the per-platform configuration directory.

    Returns:
        ``%APPDATA%/blup`` on Windows, ``$XDG_CONFIG_HOME/blup`` (or
        ``~/.config/blup``) elsewhere.

    Raises:
        ConfigurationError: On Windows when neither APPDATA nor LOCALAPPDATA is set.
    """
    if sys.platform == "win32":
        app_data = os.environ.get("APPDATA") or os.environ.get("LOCALAPPDATA")
        if not app_data:
            msg = "APPDATA/LOCALAPPDATA not set"
            raise ConfigurationError(msg)
        return Path(app_data) / "blup"

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(xdg_config_home) / "blup"


@dataclass(frozen=True, kw_only=True)
class BlupConfig:
    """
    Attributes:
        relays: Relay endpoints used to publish and query network records.
        lookup_relays: Additional relays that receive the relay list.
        default_server: Blob server seeded into a freshly created account.
        keyring_service: Service name under which secrets are stored.
        timeout: HTTP request timeout in seconds.
        relay_timeout: Per-relay budget for connecting, querying and acks.
        delete_timeout: Seconds after which a delete is reported as unconfirmed.
        chunk_size: Upload chunk size in bytes.
        auth_ttl: Lifetime of an authorization claim in seconds.
        list_limit: Maximum number of blobs requested by a list call.
        user_agent: User-Agent header value.
        config_dir: Directory holding the cache file. Platform default when None.
    """

    relays: tuple[str, ...] = DEFAULT_RELAYS
    lookup_relays: tuple[str, ...] = LOOKUP_RELAYS
    default_server: str = DEFAULT_BLOSSOM_SERVER
    keyring_service: str = "com.blossom.blup"
    timeout: float = 30.0
    relay_timeout: float = 10.0
    delete_timeout: float = 5.0
    chunk_size: int = 64 * 1024
    auth_ttl: int = 60
    list_limit: int = 10
    user_agent: str = "blup/0.1.0"
    config_dir: Path | None = field(default=None)

    def __post_init__(self) -> None:
        if not self.relays:
            msg = "at least one relay is required"
            raise ValueError(msg)
        if self.timeout <= 0:
            msg = "timeout must be positive"
            raise ValueError(msg)
        if self.relay_timeout <= 0:
            msg = "relay_timeout must be positive"
            raise ValueError(msg)
        if self.delete_timeout <= 0:
            msg = "delete_timeout must be positive"
            raise ValueError(msg)
        if self.chunk_size <= 0:
            msg = "chunk_size must be positive"
            raise ValueError(msg)
        if self.auth_ttl <= 0:
            msg = "auth_ttl must be positive"
            raise ValueError(msg)
        if self.list_limit <= 0:
            msg = "list_limit must be positive"
            raise ValueError(msg)

    @classmethod
    def from_env(cls, **overrides: object) -> Self:
        """
        Build a config honouring ``BLUP_RELAYS`` (comma separated).

        Args:
            **overrides: Explicit field values, applied last.
        """
        values: dict[str, object] = {}
        if env_relays := os.environ.get("BLUP_RELAYS"):
            relays = tuple(r.strip() for r in env_relays.split(",") if r.strip())
            if relays:
                values["relays"] = relays
        values.update(overrides)
        return cls(**values)

    @property
    def state_file(self) -> Path:
        """Path of the local cache file."""
        return (self.config_dir or default_config_dir()) / CONFIG_FILE_NAME
