"""
Ordered list of the account's blob servers.

The list published on the relay network is authoritative. The local state
file keeps a copy per account so that read operations can skip the network.
Mutations always start from a fresh network read, publish the new ordering,
and only then update the local copy.
"""

import structlog

from blup.core.state import StateStore
from blup.core.urls import normalize_server_url, same_server
from blup.crypto.events import finalize_event
from blup.crypto.protocol import Signer
from blup.exceptions import InvalidInput, NoServersConfigured
from blup.models.nostr import EventFilter, EventKind, ServerListRecord
from blup.relay.pool import RelayPool
from blup.services.account_service import AccountService

logger = structlog.get_logger(__name__)


class ServerListCache:
    """
    Resolves and edits the server list of the active account.

    Args:
        store: Local state file holding the cached lists.
        relays: Relay pool used as source of truth.
        accounts: Resolves the active account and its keys.
    """

    def __init__(self, store: StateStore, relays: RelayPool, accounts: AccountService) -> None:
        self._store = store
        self._relays = relays
        self._accounts = accounts

    async def resolve(self, force_refresh: bool = False) -> list[str]:
        """
        Return the server list, preferred server first.

        Without ``force_refresh`` a non-empty cached list is returned with no
        network access. A list read from the network replaces the cached one
        only when it is non-empty.

        Raises:
            NoAccountError: If no account can be resolved.
            TransportError: If the network is read and no relay answered.
        """
        account = self._accounts.require_account()
        if not force_refresh:
            cached = self._store.load().servers_for(account)
            if cached:
                return list(cached)

        servers = await self.fetch(self._accounts.public_key())
        if servers:
            self._store.save(self._store.load().with_servers(account, tuple(servers)))
        else:
            logger.debug("No server list found on relays", account=account)
        return servers

    async def fetch(self, pubkey: str) -> list[str]:
        """Read the published server list of ``pubkey``; empty when none is found."""
        event = await self._relays.query(
            EventFilter(kinds=(EventKind.BLOSSOM_SERVER_LIST,), authors=(pubkey,))
        )
        if event is None:
            return []
        return list(ServerListRecord.from_event(event).servers)

    async def preferred(self) -> str:
        """
        Raises:
            NoServersConfigured: If the resolved list is empty.
        """
        servers = await self.resolve()
        if not servers:
            raise NoServersConfigured()
        return servers[0]

    async def add_server(self, url: str) -> list[str]:
        """
        Put ``url`` first in the list, removing any previous occurrence.

        The new list is built from a fresh network read; when no relay answers
        that read nothing is published, so an unreachable network never
        replaces the published list with ``[url]`` alone.

        Raises:
            InvalidInput: If ``url`` is not an http(s) URL.
            TransportError: If no relay answered the read.
            PublishError: If no relay accepted the new list. The cache is left untouched.
        """
        normalized = normalize_server_url(url)
        signer = self._accounts.signer()
        existing = await self.resolve(force_refresh=True)
        servers = [normalized, *(s for s in existing if not same_server(s, normalized))]
        await self._commit(servers, signer)
        logger.info("Server added", server=normalized, count=len(servers))
        return servers

    async def set_preferred(self, index: int) -> list[str]:
        """
        Move the entry at ``index`` (0-based) to the front, keeping the others in order.

        Raises:
            NoServersConfigured: If the list is empty.
            InvalidInput: If ``index`` is out of range.
            TransportError: If no relay answered the read.
            PublishError: If no relay accepted the new list.
        """
        signer = self._accounts.signer()
        servers = await self.resolve(force_refresh=True)
        if not servers:
            raise NoServersConfigured()
        if not 0 <= index < len(servers):
            msg = f"Invalid selection: {index + 1}"
            raise InvalidInput(msg)
        if index == 0:
            return servers

        chosen = servers[index]
        reordered = [chosen, *servers[:index], *servers[index + 1 :]]
        await self._commit(reordered, signer)
        logger.info("Preferred server changed", server=chosen)
        return reordered

    async def publish(self, servers: list[str], signer: Signer | None = None) -> str:
        """
        Publish ``servers`` as the account's server list.

        Returns:
            The relay that acknowledged the record.
        """
        event = finalize_event(
            signer or self._accounts.signer(),
            kind=EventKind.BLOSSOM_SERVER_LIST,
            tags=ServerListRecord(servers=tuple(servers)).to_tags(),
        )
        return await self._relays.publish(event)

    async def _commit(self, servers: list[str], signer: Signer) -> None:
        account = self._accounts.require_account()
        await self.publish(servers, signer)
        self._store.save(self._store.load().with_servers(account, tuple(servers)))
