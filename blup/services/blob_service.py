"""
Listing and deleting blobs on a server.
"""

import asyncio
import re

import structlog

from blup.api.endpoints.blossom import delete_blob, error_detail, list_blobs, parse_descriptor_list
from blup.api.http_client import AsyncHttpClient
from blup.config import BlupConfig
from blup.crypto.protocol import Signer
from blup.exceptions import InvalidInput, RequestTimeout, TransportError
from blup.models.auth import AuthKind
from blup.models.blob import BlobDescriptor, DeleteResult, DeleteStatus
from blup.services.token_factory import AuthTokenFactory

logger = structlog.get_logger(__name__)

SHA256_PATTERN = re.compile(r"[0-9a-f]{64}")


class BlobService:
    """
    Args:
        http: Async HTTP client.
        tokens: Mints list and delete claims.
        config: Client configuration (list limit, delete timeout).
    """

    def __init__(self, http: AsyncHttpClient, tokens: AuthTokenFactory, config: BlupConfig) -> None:
        self._http = http
        self._tokens = tokens
        self._config = config

    async def list_blobs(self, signer: Signer, server_url: str) -> list[BlobDescriptor]:
        """
        List the most recent blobs of the signer's identity.

        Raises:
            TransportError: On a network failure or a non-2xx response.
        """
        claim = self._tokens.mint(signer, AuthKind.LIST)
        response = await list_blobs(
            self._http,
            server_url,
            signer.public_key,
            authorization=claim.to_header(),
            limit=self._config.list_limit,
        )
        if not response.is_success:
            msg = f"Error {response.status_code}: {error_detail(response)}"
            raise TransportError(msg, status_code=response.status_code, url=str(response.url))
        return parse_descriptor_list(response)

    async def delete_blob(self, signer: Signer, server_url: str, sha256: str) -> DeleteResult:
        """
        Delete a blob by hash.

        Servers may take long to confirm a delete they have already accepted.
        After ``delete_timeout`` seconds the request is abandoned and the result
        is ``UNCONFIRMED`` rather than an error.

        Raises:
            InvalidInput: If ``sha256`` is not a hex sha256.
            TransportError: On a network failure or a non-2xx response.
        """
        digest = sha256.strip().lower()
        if not SHA256_PATTERN.fullmatch(digest):
            msg = f"Not a valid sha256: {sha256}"
            raise InvalidInput(msg)

        claim = self._tokens.mint(signer, AuthKind.DELETE, digest)
        try:
            async with asyncio.timeout(self._config.delete_timeout):
                response = await delete_blob(
                    self._http, server_url, digest, authorization=claim.to_header()
                )
        except (TimeoutError, RequestTimeout):
            logger.info("Delete not confirmed in time", sha256=digest, server=server_url)
            return DeleteResult(sha256=digest, status=DeleteStatus.UNCONFIRMED)

        if not response.is_success:
            msg = f"Error {response.status_code}: {error_detail(response)}"
            raise TransportError(msg, status_code=response.status_code, url=str(response.url))

        logger.info("Blob deleted", sha256=digest, server=server_url)
        return DeleteResult(sha256=digest, status=DeleteStatus.DELETED)
