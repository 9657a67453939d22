"""
In-memory stand-ins for the secret vault, the relay pool and relay sockets.
"""

import asyncio
import json
from collections.abc import AsyncIterator, Callable, Iterable
from contextlib import asynccontextmanager
from typing import Any

from blup.core.progress import TransferSession
from blup.exceptions import PublishError, TransportError
from blup.models.nostr import EventFilter, NostrEvent
from blup.services.vault import entry_name


class FakeVault:
    def __init__(self, entries: dict[str, str] | None = None) -> None:
        self.entries: dict[str, str] = dict(entries or {})

    def get(self, account: str, key: str) -> str | None:
        return self.entries.get(entry_name(account, key))

    def set(self, account: str, key: str, secret: str) -> None:
        self.entries[entry_name(account, key)] = secret


class FakeRelayPool:
    """Relay pool that stores published events and answers queries from them."""

    def __init__(self, relays: Iterable[str] = ("wss://relay.test",)) -> None:
        self.relays = tuple(relays)
        self.events: list[NostrEvent] = []
        self.published: list[NostrEvent] = []
        self.publish_targets: list[tuple[str, ...]] = []
        self.queries: list[EventFilter] = []
        self.fail_publish = False
        self.fail_query = False

    async def publish(self, event: NostrEvent, relays: Iterable[str] | None = None) -> str:
        targets = tuple(relays) if relays is not None else self.relays
        if self.fail_publish:
            raise PublishError("No relay accepted event", errors=dict.fromkeys(targets, "down"))
        self.published.append(event)
        self.publish_targets.append(targets)
        self.events.append(event)
        return targets[0]

    async def query(
        self, event_filter: EventFilter, relays: Iterable[str] | None = None
    ) -> NostrEvent | None:
        self.queries.append(event_filter)
        if self.fail_query:
            raise TransportError("No relay answered the query")
        newest: NostrEvent | None = None
        for event in self.events:
            if event_filter.matches(event) and (
                newest is None or event.created_at >= newest.created_at
            ):
                newest = event
        return newest


Responder = Callable[[list[Any]], list[list[Any]]]


class FakeConnection:
    """Websocket connection whose replies are computed from each sent message."""

    def __init__(self, responder: Responder) -> None:
        self._responder = responder
        self._inbox: asyncio.Queue[str] = asyncio.Queue()
        self.sent: list[list[Any]] = []

    async def send(self, message: str) -> None:
        data = json.loads(message)
        self.sent.append(data)
        for reply in self._responder(data):
            self._inbox.put_nowait(json.dumps(reply))

    async def recv(self) -> str:
        return await self._inbox.get()


class FakeConnector:
    """Connection factory for RelayPool, one scripted relay per URL."""

    def __init__(self) -> None:
        self.connections: dict[str, FakeConnection] = {}
        self.unreachable: set[str] = set()

    def add(self, url: str, responder: Responder) -> FakeConnection:
        connection = FakeConnection(responder)
        self.connections[url] = connection
        return connection

    @asynccontextmanager
    async def __call__(self, url: str) -> AsyncIterator[FakeConnection]:
        if url in self.unreachable or url not in self.connections:
            raise OSError(f"connection refused: {url}")
        yield self.connections[url]


class RecordingListener:
    """TransferListener that keeps every notification in order."""

    def __init__(self) -> None:
        self.statuses: list[str] = []
        self.progress: list[int] = []
        self.completions: list[str] = []

    def on_status(self, message: str) -> None:
        self.statuses.append(message)

    def on_progress(self, session: TransferSession) -> None:
        self.progress.append(session.transferred)

    def on_complete(self, session: TransferSession) -> None:
        self.completions.append(session.render_complete())
