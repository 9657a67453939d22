"""
Relay pool for publishing and querying signed events.

Each operation opens short-lived websocket connections to every target relay
and runs them concurrently. A publish succeeds on the first acknowledgment;
a query gathers what every relay returns before its end-of-stored-events
marker (or its time budget) and keeps the newest valid event.
"""

import asyncio
import json
import secrets
from collections.abc import Callable, Iterable
from contextlib import AbstractAsyncContextManager
from functools import partial
from typing import Any, Protocol

import structlog
import websockets

from blup.crypto.events import verify_event
from blup.exceptions import PublishError, TransportError
from blup.models.nostr import EventFilter, NostrEvent

logger = structlog.get_logger(__name__)


class RelayConnection(Protocol):
    """The part of a websocket client connection the pool relies on."""

    async def send(self, message: str) -> None: ...

    async def recv(self) -> str | bytes: ...


ConnectFactory = Callable[[str], AbstractAsyncContextManager[RelayConnection]]


def _decode(message: str | bytes) -> list[Any] | None:
    if isinstance(message, bytes):
        message = message.decode("utf-8", errors="replace")
    try:
        data = json.loads(message)
    except ValueError:
        return None
    if not isinstance(data, list) or not data or not isinstance(data[0], str):
        return None
    return data


class RelayPool:
    """
    Publishes to and queries a set of relays.

    Args:
        relays: Default target relays.
        timeout: Budget per relay for connecting plus the whole exchange.
        connect: Connection factory; ``websockets.connect`` unless testing.
    """

    def __init__(
        self,
        relays: Iterable[str],
        *,
        timeout: float = 10.0,
        connect: ConnectFactory | None = None,
    ) -> None:
        self._relays = tuple(dict.fromkeys(relays))
        self._timeout = timeout
        self._connect = connect or partial(websockets.connect, open_timeout=timeout)

    @property
    def relays(self) -> tuple[str, ...]:
        return self._relays

    def _targets(self, relays: Iterable[str] | None) -> tuple[str, ...]:
        targets = self._relays if relays is None else tuple(dict.fromkeys(relays))
        if not targets:
            msg = "No relays to contact"
            raise TransportError(msg)
        return targets

    async def publish(self, event: NostrEvent, relays: Iterable[str] | None = None) -> str:
        """
        Send ``event`` to every relay and return the first one that accepts it.

        Remaining connections are cancelled once one relay acknowledges.

        Raises:
            PublishError: If every relay refused, failed or timed out.
        """
        targets = self._targets(relays)
        tasks = {
            asyncio.create_task(self._publish_one(url, event), name=f"publish:{url}"): url
            for url in targets
        }
        errors: dict[str, str] = {}
        pending = set(tasks)
        try:
            while pending:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                for task in done:
                    url = tasks[task]
                    if (error := task.exception()) is None:
                        logger.debug("Event accepted", relay=url, event_id=event.id, kind=event.kind)
                        return url
                    errors[url] = str(error) or type(error).__name__
                    logger.debug("Relay publish failed", relay=url, error=errors[url])
        finally:
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        msg = f"No relay accepted event of kind {event.kind}"
        raise PublishError(msg, errors=errors)

    async def _publish_one(self, url: str, event: NostrEvent) -> None:
        async with asyncio.timeout(self._timeout), self._connect(url) as connection:
            await connection.send(json.dumps(["EVENT", event.to_dict()]))
            while True:
                message = _decode(await connection.recv())
                if message is None or message[0] != "OK" or len(message) < 3:
                    continue
                if message[1] != event.id:
                    continue
                if message[2] is True:
                    return
                reason = message[3] if len(message) > 3 else "rejected"
                msg = f"Relay rejected event: {reason}"
                raise TransportError(msg, url=url)

    async def query(
        self, event_filter: EventFilter, relays: Iterable[str] | None = None
    ) -> NostrEvent | None:
        """
        Return the newest valid event matching ``event_filter`` across relays.

        Events with a bad id or signature, or that do not match the filter,
        are discarded. Unreachable relays are skipped; a relay that times out
        still counts as having answered with what it sent.

        Raises:
            TransportError: If no relay could be queried at all, so an absent
                event cannot be told apart from an unreachable network.
        """
        targets = self._targets(relays)
        results = await asyncio.gather(
            *(self._query_one(url, event_filter) for url in targets),
            return_exceptions=True,
        )

        newest: NostrEvent | None = None
        errors: dict[str, str] = {}
        for url, result in zip(targets, results, strict=True):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                errors[url] = str(result) or type(result).__name__
                logger.debug("Relay query failed", relay=url, error=errors[url])
                continue
            for event in result:
                if newest is None or event.created_at > newest.created_at:
                    newest = event

        if len(errors) == len(targets):
            msg = f"No relay answered the query ({len(targets)} tried)"
            raise TransportError(msg)
        return newest

    async def _query_one(self, url: str, event_filter: EventFilter) -> list[NostrEvent]:
        subscription_id = secrets.token_hex(8)
        events: list[NostrEvent] = []
        connected = False
        try:
            async with asyncio.timeout(self._timeout), self._connect(url) as connection:
                connected = True
                await connection.send(json.dumps(["REQ", subscription_id, event_filter.to_dict()]))
                while True:
                    message = _decode(await connection.recv())
                    if message is None or len(message) < 2 or message[1] != subscription_id:
                        continue
                    match message[0]:
                        case "EVENT" if len(message) >= 3:
                            if (event := self._accept(url, message[2], event_filter)) is not None:
                                events.append(event)
                        case "EOSE" | "CLOSED":
                            break
                await connection.send(json.dumps(["CLOSE", subscription_id]))
        except TimeoutError as e:
            if not connected:
                msg = "Timed out connecting to relay"
                raise TransportError(msg, url=url) from e
            logger.debug("Relay query timed out", relay=url, received=len(events))
        return events

    @staticmethod
    def _accept(url: str, raw: Any, event_filter: EventFilter) -> NostrEvent | None:
        try:
            event = NostrEvent.from_dict(raw)
        except ValueError as e:
            logger.debug("Malformed event from relay", relay=url, error=str(e))
            return None
        if not event_filter.matches(event) or not verify_event(event):
            logger.debug("Discarding event", relay=url, event_id=event.id)
            return None
        return event
