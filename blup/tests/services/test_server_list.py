import pytest

from blup.core.state import StateStore
from blup.crypto.keys import KeyPair
from blup.exceptions import (
    InvalidInput,
    NoAccountError,
    NoServersConfigured,
    PublishError,
    TransportError,
)
from blup.models.nostr import EventKind, ServerListRecord
from blup.services.account_service import AccountService
from blup.services.server_list import ServerListCache
from blup.tests.utils.constants import ACCOUNT
from blup.tests.utils.fakes import FakeRelayPool
from blup.tests.utils.helpers import server_list_event

A = "https://a.test"
B = "https://b.test"
C = "https://c.test"


@pytest.fixture
def servers(store: StateStore, relays: FakeRelayPool, accounts: AccountService) -> ServerListCache:
    return ServerListCache(store, relays, accounts)  # type: ignore[arg-type]


def publish_remote(relays: FakeRelayPool, keypair: KeyPair, urls: list[str], created_at: int = 1000) -> None:
    relays.events.append(server_list_event(keypair.signer(), urls, created_at))


def cache(store: StateStore, urls: list[str], account: str = ACCOUNT) -> None:
    store.save(store.load().with_servers(account, tuple(urls)))


@pytest.mark.asyncio
async def test_resolve_uses_cache_without_network(
    servers: ServerListCache, store: StateStore, relays: FakeRelayPool, registered: KeyPair
) -> None:
    cache(store, [A, B])

    assert await servers.resolve() == [A, B]
    assert relays.queries == []


@pytest.mark.asyncio
async def test_resolve_reads_network_when_cache_empty(
    servers: ServerListCache, store: StateStore, relays: FakeRelayPool, registered: KeyPair
) -> None:
    publish_remote(relays, registered, [B, A])

    assert await servers.resolve() == [B, A]
    assert store.load().servers_for(ACCOUNT) == (B, A)
    assert relays.queries[0].kinds == (EventKind.BLOSSOM_SERVER_LIST,)
    assert relays.queries[0].authors == (registered.public_key,)


@pytest.mark.asyncio
async def test_force_refresh_always_queries(
    servers: ServerListCache, store: StateStore, relays: FakeRelayPool, registered: KeyPair
) -> None:
    cache(store, [A])
    publish_remote(relays, registered, [C, A])

    assert await servers.resolve(force_refresh=True) == [C, A]
    assert len(relays.queries) == 1
    assert store.load().servers_for(ACCOUNT) == (C, A)


@pytest.mark.asyncio
async def test_empty_network_result_keeps_cache(
    servers: ServerListCache, store: StateStore, relays: FakeRelayPool, registered: KeyPair
) -> None:
    cache(store, [A])

    assert await servers.resolve(force_refresh=True) == []
    assert store.load().servers_for(ACCOUNT) == (A,)


@pytest.mark.asyncio
async def test_preferred_is_first_entry(
    servers: ServerListCache, store: StateStore, registered: KeyPair
) -> None:
    cache(store, [B, A])

    assert await servers.preferred() == B


@pytest.mark.asyncio
async def test_preferred_without_servers(servers: ServerListCache, registered: KeyPair) -> None:
    with pytest.raises(NoServersConfigured):
        await servers.preferred()


@pytest.mark.asyncio
async def test_resolve_without_account(servers: ServerListCache) -> None:
    with pytest.raises(NoAccountError):
        await servers.resolve()


@pytest.mark.asyncio
async def test_add_server_publishes_then_caches(
    servers: ServerListCache, store: StateStore, relays: FakeRelayPool, registered: KeyPair
) -> None:
    publish_remote(relays, registered, [A, B])

    result = await servers.add_server(f" {C}/ ")

    assert result == [C, A, B]
    (event,) = relays.published
    assert event.kind == EventKind.BLOSSOM_SERVER_LIST
    assert event.pubkey == registered.public_key
    assert ServerListRecord.from_event(event).servers == (C, A, B)
    assert store.load().servers_for(ACCOUNT) == (C, A, B)


@pytest.mark.asyncio
async def test_add_existing_server_moves_it_first(
    servers: ServerListCache, relays: FakeRelayPool, registered: KeyPair
) -> None:
    publish_remote(relays, registered, [A, f"{B}/", C])

    result = await servers.add_server(B)

    assert result == [B, A, C]


@pytest.mark.asyncio
async def test_add_server_starts_from_network_list(
    servers: ServerListCache, store: StateStore, relays: FakeRelayPool, registered: KeyPair
) -> None:
    cache(store, [A])
    publish_remote(relays, registered, [B])

    assert await servers.add_server(C) == [C, B]


@pytest.mark.asyncio
async def test_add_server_rejects_invalid_url(
    servers: ServerListCache, relays: FakeRelayPool, registered: KeyPair
) -> None:
    with pytest.raises(InvalidInput):
        await servers.add_server("ftp://files.test")

    assert relays.published == []


@pytest.mark.asyncio
async def test_failed_publish_leaves_cache_untouched(
    servers: ServerListCache, store: StateStore, relays: FakeRelayPool, registered: KeyPair
) -> None:
    cache(store, [A])
    publish_remote(relays, registered, [A])
    relays.fail_publish = True

    with pytest.raises(PublishError):
        await servers.add_server(B)

    assert store.load().servers_for(ACCOUNT) == (A,)


@pytest.mark.asyncio
async def test_set_preferred_moves_entry_to_front(
    servers: ServerListCache, store: StateStore, relays: FakeRelayPool, registered: KeyPair
) -> None:
    publish_remote(relays, registered, [A, B, C])

    result = await servers.set_preferred(2)

    assert result == [C, A, B]
    assert ServerListRecord.from_event(relays.published[0]).servers == (C, A, B)
    assert store.load().servers_for(ACCOUNT) == (C, A, B)


@pytest.mark.asyncio
async def test_set_preferred_first_entry_does_not_publish(
    servers: ServerListCache, relays: FakeRelayPool, registered: KeyPair
) -> None:
    publish_remote(relays, registered, [A, B])

    assert await servers.set_preferred(0) == [A, B]
    assert relays.published == []


@pytest.mark.asyncio
@pytest.mark.parametrize("index", [-1, 2, 10])
async def test_set_preferred_out_of_range(
    servers: ServerListCache, relays: FakeRelayPool, registered: KeyPair, index: int
) -> None:
    publish_remote(relays, registered, [A, B])

    with pytest.raises(InvalidInput, match="Invalid selection"):
        await servers.set_preferred(index)

    assert relays.published == []


@pytest.mark.asyncio
async def test_set_preferred_without_servers(servers: ServerListCache, registered: KeyPair) -> None:
    with pytest.raises(NoServersConfigured):
        await servers.set_preferred(0)


@pytest.mark.asyncio
async def test_lists_are_cached_per_account(
    store: StateStore,
    relays: FakeRelayPool,
    accounts: AccountService,
    servers: ServerListCache,
    registered: KeyPair,
) -> None:
    cache(store, [A])
    bob = accounts.create("bob")
    accounts.use("bob")
    publish_remote(relays, bob, [B])

    assert await servers.add_server(C) == [C, B]
    assert store.load().servers_for("bob") == (C, B)
    assert store.load().servers_for(ACCOUNT) == (A,)


@pytest.mark.asyncio
async def test_unreachable_network_blocks_mutations(
    servers: ServerListCache, store: StateStore, relays: FakeRelayPool, registered: KeyPair
) -> None:
    cache(store, [A, B])
    relays.fail_query = True

    with pytest.raises(TransportError):
        await servers.add_server(C)
    with pytest.raises(TransportError):
        await servers.set_preferred(1)

    assert relays.published == []
    assert store.load().servers_for(ACCOUNT) == (A, B)


@pytest.mark.asyncio
async def test_cached_read_does_not_need_network(
    servers: ServerListCache, store: StateStore, relays: FakeRelayPool, registered: KeyPair
) -> None:
    cache(store, [A])
    relays.fail_query = True

    assert await servers.preferred() == A
