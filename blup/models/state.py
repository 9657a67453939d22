"""
Locally cached state persisted in the config file.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Self

STATE_VERSION = 1

# Name given to keys and servers migrated from the single-account layout.
LEGACY_ACCOUNT = "default"


def _string_tuple(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(item for item in value if isinstance(item, str) and item)


@dataclass(frozen=True, kw_only=True)
class CachedState:
    """
    Versioned snapshot of the cache file.

    Missing or mistyped fields default to empty. Server lists are cached per
    account name.

    Attributes:
        version: Layout version of the serialized form.
        accounts: Registered account names, in creation order.
        active_account: Selected account, ``""`` when none.
        servers: Cached server list per account.
    """

    version: int = STATE_VERSION
    accounts: tuple[str, ...] = ()
    active_account: str = ""
    servers: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_dict(cls, data: Any) -> Self:
        """
        Build state from a decoded JSON document.

        An unversioned document stores a single flat ``servers`` list; it is
        attributed to the active (or first) account, or to
        ``LEGACY_ACCOUNT`` when no account is registered yet.
        """
        if not isinstance(data, dict):
            return cls()

        accounts = tuple(dict.fromkeys(_string_tuple(data.get("accounts"))))
        active = data.get("activeAccount")
        active_account = active if isinstance(active, str) else ""

        raw_servers = data.get("servers")
        servers: dict[str, tuple[str, ...]] = {}
        if isinstance(raw_servers, dict):
            for account, urls in raw_servers.items():
                if isinstance(account, str) and (entries := _string_tuple(urls)):
                    servers[account] = entries
        elif isinstance(raw_servers, list):
            owner = active_account or (accounts[0] if accounts else LEGACY_ACCOUNT)
            if (entries := _string_tuple(raw_servers)):
                servers[owner] = entries

        return cls(
            accounts=accounts,
            active_account=active_account,
            servers=MappingProxyType(servers),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "accounts": list(self.accounts),
            "activeAccount": self.active_account,
            "servers": {account: list(urls) for account, urls in self.servers.items()},
        }

    def servers_for(self, account: str) -> tuple[str, ...]:
        return self.servers.get(account, ())

    def with_servers(self, account: str, servers: tuple[str, ...]) -> Self:
        updated = dict(self.servers)
        updated[account] = tuple(servers)
        return replace(self, servers=MappingProxyType(updated))

    def with_account(self, account: str) -> Self:
        """Register ``account``; it becomes active when none is."""
        accounts = self.accounts if account in self.accounts else (*self.accounts, account)
        return replace(
            self,
            accounts=accounts,
            active_account=self.active_account or account,
        )

    def with_active(self, account: str) -> Self:
        return replace(self, active_account=account)
