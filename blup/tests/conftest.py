from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio

from blup.api.http_client import AsyncHttpClient
from blup.config import BlupConfig
from blup.core.state import StateStore
from blup.crypto.keys import KeyPair
from blup.crypto.secp256k1_backend import Secp256k1Signer
from blup.services.account_service import AccountService
from blup.services.token_factory import AuthTokenFactory
from blup.tests.utils.constants import ACCOUNT, SERVER
from blup.tests.utils.fakes import FakeRelayPool, FakeVault
from blup.tests.utils.mock_transport import MockTransport


@pytest.fixture
def config(tmp_path: Path) -> BlupConfig:
    return BlupConfig(
        relays=("wss://relay.test",),
        lookup_relays=("wss://lookup.test",),
        default_server=SERVER,
        config_dir=tmp_path,
        delete_timeout=0.2,
        chunk_size=4,
    )


@pytest.fixture
def store(config: BlupConfig) -> StateStore:
    return StateStore(config.state_file)


@pytest.fixture
def vault() -> FakeVault:
    return FakeVault()


@pytest.fixture
def relays() -> FakeRelayPool:
    return FakeRelayPool()


@pytest.fixture
def keypair() -> KeyPair:
    return KeyPair.generate()


@pytest.fixture
def signer(keypair: KeyPair) -> Secp256k1Signer:
    return keypair.signer()


@pytest.fixture
def tokens() -> AuthTokenFactory:
    return AuthTokenFactory()


@pytest.fixture
def accounts(store: StateStore, vault: FakeVault, config: BlupConfig) -> AccountService:
    return AccountService(store, vault, config)


@pytest.fixture
def registered(
    accounts: AccountService, store: StateStore, vault: FakeVault, keypair: KeyPair
) -> KeyPair:
    """Register ``keypair`` as the active account ``alice``, with no cached servers."""
    vault.set(ACCOUNT, "nsec", keypair.nsec)
    vault.set(ACCOUNT, "npub", keypair.npub)
    store.save(store.load().with_account(ACCOUNT))
    return keypair


@pytest.fixture
def mock_transport() -> MockTransport:
    return MockTransport()


@pytest_asyncio.fixture
async def http(config: BlupConfig, mock_transport: MockTransport) -> AsyncIterator[AsyncHttpClient]:
    async with AsyncHttpClient(config, transport=mock_transport) as client:
        yield client
