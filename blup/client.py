"""
Blup client facade.

This is the main entry point for users of the library. It owns every
collaborator for one invocation (HTTP client, relay pool, secret vault, state
file) and wires them into the services.
"""

import asyncio
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Self, TypeVar

import httpx
import structlog

from blup.api.http_client import AsyncHttpClient
from blup.config import BlupConfig
from blup.core.progress import NullListener, TransferListener
from blup.core.state import StateStore
from blup.crypto.keys import KeyPair, encode_npub
from blup.exceptions import BlupError, InvalidInput
from blup.models.blob import DEFAULT_CONTENT_TYPE, BlobDescriptor, DeleteResult
from blup.models.nostr import ProfileMetadata
from blup.relay.pool import RelayPool
from blup.services.account_service import DEFAULT_ACCOUNT, AccountInfo, AccountService
from blup.services.blob_service import BlobService
from blup.services.mirror_service import MirrorService
from blup.services.profile_service import ProfileService
from blup.services.server_list import ServerListCache
from blup.services.token_factory import AuthTokenFactory
from blup.services.upload_service import UploadService
from blup.services.vault import KeyringVault, SecretVault

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, kw_only=True)
class CreatedAccount:
    """
    Outcome of account creation.

    Publishing the initial records is best effort: the account exists locally
    even when no relay accepted them.
    """

    name: str
    keypair: KeyPair
    server: str
    server_list_published: bool
    relay_list_published: bool


class BlupClient:
    """
    Async client for blob servers and the relay network.

    Example:
        ```python
        async with BlupClient() as client:
            blob = await client.upload_file("photo.jpg")
            print(blob.url)

            for item in await client.list_blobs():
                print(item.sha256, item.size)
        ```

    Args:
        config: Client configuration. Uses defaults if not provided.
        account: Account to act as, overriding the stored selection.
        transport: Optional httpx transport for testing (mock transport).
        vault: Secret storage. System keychain if not provided.
        relays: Relay pool. Built from the configured relays if not provided.
        listener: Receives status lines and transfer progress.
    """

    def __init__(
        self,
        config: BlupConfig | None = None,
        *,
        account: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        vault: SecretVault | None = None,
        relays: RelayPool | None = None,
        listener: TransferListener | None = None,
    ) -> None:
        self._config = config or BlupConfig()
        self._transport = transport
        self._listener = listener or NullListener()

        self._vault = vault or KeyringVault(self._config.keyring_service)
        self._relays = relays or RelayPool(self._config.relays, timeout=self._config.relay_timeout)
        self._store = StateStore(self._config.state_file)
        self._accounts = AccountService(self._store, self._vault, self._config, override=account)
        self._tokens = AuthTokenFactory(ttl=self._config.auth_ttl)
        self._server_list = ServerListCache(self._store, self._relays, self._accounts)
        self._profiles = ProfileService(self._relays, self._config)

        self._http: AsyncHttpClient | None = None
        self._uploads: UploadService | None = None
        self._mirrors: MirrorService | None = None
        self._blobs: BlobService | None = None

        self._initialized = False
        self._init_lock = asyncio.Lock()

    async def __aenter__(self) -> Self:
        """Enter async context."""
        await self._ensure_initialized()
        return self

    async def __aexit__(
        self, exc_type: type | None, exc_val: BaseException | None, exc_tb: object
    ) -> None:
        """Exit async context."""
        await self.close()

    async def _ensure_initialized(self) -> None:
        async with self._init_lock:
            if self._initialized:
                return

            self._http = AsyncHttpClient(self._config, transport=self._transport)
            await self._http.__aenter__()

            self._uploads = UploadService(self._http, self._tokens, self._config)
            self._mirrors = MirrorService(self._http, self._tokens, self._uploads)
            self._blobs = BlobService(self._http, self._tokens, self._config)

            self._initialized = True
            logger.debug("Client initialized")

    async def close(self) -> None:
        """Close the client and release resources."""
        async with self._init_lock:
            if self._http:
                await self._http.__aexit__(None, None, None)
                self._http = None

            self._uploads = None
            self._mirrors = None
            self._blobs = None
            self._initialized = False
            logger.debug("Client closed")

    @property
    def config(self) -> BlupConfig:
        return self._config

    # Accounts

    def active_account(self) -> str:
        return self._accounts.active_account()

    def npub(self) -> str:
        """
        Raises:
            NoAccountError: If no account can be resolved.
        """
        return encode_npub(self._accounts.public_key())

    async def create_account(self, name: str = DEFAULT_ACCOUNT) -> CreatedAccount:
        """
        Create an account and announce it on the relay network.

        The default server list and the relay list are published; failing to
        publish either is logged and reported, not raised.

        Raises:
            AccountExistsError: If ``name`` is already registered.
        """
        keypair = self._accounts.create(name)
        signer = keypair.signer()
        servers = list(self._store.load().servers_for(name)) or [self._config.default_server]

        self._listener.on_status("Publishing to relays...")
        server_list_published = True
        try:
            await self._server_list.publish(servers, signer)
        except BlupError as e:
            server_list_published = False
            logger.warning("Could not publish server list", account=name, error=str(e))

        relay_list_published = True
        try:
            await self._profiles.publish_relay_list(signer)
        except BlupError as e:
            relay_list_published = False
            logger.warning("Could not publish relay list", account=name, error=str(e))

        return CreatedAccount(
            name=name,
            keypair=keypair,
            server=servers[0],
            server_list_published=server_list_published,
            relay_list_published=relay_list_published,
        )

    def import_account(self, name: str, npub: str, nsec: str) -> KeyPair:
        return self._accounts.import_keys(name, npub, nsec)

    def list_accounts(self) -> list[AccountInfo]:
        return self._accounts.list_accounts()

    def use_account(self, name: str) -> None:
        self._accounts.use(name)

    # Servers

    async def servers(self, force_refresh: bool = True) -> list[str]:
        return await self._server_list.resolve(force_refresh)

    async def add_server(self, url: str) -> list[str]:
        self._listener.on_status("Publishing server list to relays...")
        return await self._server_list.add_server(url)

    async def prefer_server(self, index: int) -> list[str]:
        """Make the server at ``index`` (0-based) the preferred one."""
        return await self._server_list.set_preferred(index)

    async def preferred_server(self) -> str:
        return await self._server_list.preferred()

    # Blobs

    async def upload_bytes(
        self, data: bytes, content_type: str = DEFAULT_CONTENT_TYPE
    ) -> BlobDescriptor:
        """
        Upload ``data`` to the preferred server.

        Raises:
            NoAccountError: If no account can be resolved.
            NoServersConfigured: If the account has no server.
            UploadRejected: If the server refused the upload.
            TransportError: If the transfer failed.
        """
        signer = self._accounts.signer()
        server = await self._server_list.preferred()
        return await self._require(self._uploads).upload(
            signer, server, data, content_type, listener=self._listener
        )

    async def upload_file(self, path: Path | str) -> BlobDescriptor:
        """
        Upload a local file to the preferred server.

        Raises:
            InvalidInput: If ``path`` is not a readable file.
        """
        path = Path(path)
        if not path.is_file():
            msg = f"File not found: {path}"
            raise InvalidInput(msg, path=str(path))
        try:
            data = path.read_bytes()
        except OSError as e:
            msg = f"Cannot read {path}: {e.strerror}"
            raise InvalidInput(msg, path=str(path)) from e

        content_type = mimetypes.guess_type(path.name)[0] or DEFAULT_CONTENT_TYPE
        self._listener.on_status(f"Uploading {path}...")
        return await self.upload_bytes(data, content_type)

    async def mirror(self, source_url: str) -> BlobDescriptor:
        """Copy the blob at ``source_url`` to the preferred server."""
        signer = self._accounts.signer()
        server = await self._server_list.preferred()
        return await self._require(self._mirrors).mirror(
            signer, server, source_url, listener=self._listener
        )

    async def list_blobs(self) -> list[BlobDescriptor]:
        signer = self._accounts.signer()
        server = await self._server_list.preferred()
        return await self._require(self._blobs).list_blobs(signer, server)

    async def delete_blob(self, sha256: str) -> DeleteResult:
        signer = self._accounts.signer()
        server = await self._server_list.preferred()
        return await self._require(self._blobs).delete_blob(signer, server, sha256)

    # Profile

    async def profile(self) -> ProfileMetadata | None:
        return await self._profiles.fetch(self._accounts.public_key())

    async def update_profile(self, updates: ProfileMetadata) -> ProfileMetadata:
        """
        Publish ``updates`` merged into the current profile.

        Local image files are uploaded to the preferred server first.
        """
        signer = self._accounts.signer()

        async def upload_image(path: Path) -> BlobDescriptor:
            blob = await self.upload_file(path)
            self._listener.on_status(f"Uploaded: {blob.url}")
            return blob

        self._listener.on_status("Fetching existing profile...")
        return await self._profiles.update(signer, updates, upload_file=upload_image)

    @staticmethod
    def _require(service: T | None) -> T:
        if service is None:
            raise RuntimeError("Client not initialized")
        return service
