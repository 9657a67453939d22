"""
Blob upload pipeline.

An upload hashes the payload, asks the server whether it would accept it
(HEAD /upload), then streams the bytes in fixed-size chunks (PUT /upload) and
parses the returned descriptor. Each request carries its own upload claim
bound to the payload digest.
"""

import asyncio
import hashlib
from collections.abc import AsyncGenerator

import structlog

from blup.api.endpoints.blossom import (
    error_detail,
    parse_descriptor,
    preflight_upload,
    put_upload,
    rejection_reason,
)
from blup.api.http_client import AsyncHttpClient
from blup.config import BlupConfig
from blup.core.progress import NullListener, TransferListener, TransferSession
from blup.crypto.protocol import Signer
from blup.exceptions import TransportError, UploadRejected
from blup.models.auth import AuthKind
from blup.models.blob import DEFAULT_CONTENT_TYPE, BlobDescriptor
from blup.services.token_factory import AuthTokenFactory

logger = structlog.get_logger(__name__)


def compute_digest(data: bytes) -> str:
    """Hex sha256 of ``data``; the blob's identity on every server."""
    return hashlib.sha256(data).hexdigest()


class UploadService:
    """
    Uploads byte payloads to a blob server.

    Args:
        http: Async HTTP client.
        tokens: Mints the per-request upload claims.
        config: Client configuration (chunk size).
    """

    def __init__(self, http: AsyncHttpClient, tokens: AuthTokenFactory, config: BlupConfig) -> None:
        self._http = http
        self._tokens = tokens
        self._chunk_size = config.chunk_size

    async def upload(
        self,
        signer: Signer,
        server_url: str,
        data: bytes,
        content_type: str = DEFAULT_CONTENT_TYPE,
        *,
        listener: TransferListener | None = None,
    ) -> BlobDescriptor:
        """
        Upload ``data`` to ``server_url``.

        Args:
            signer: Identity that authorizes the upload.
            server_url: Base URL of the target server.
            data: Complete payload.
            content_type: Declared media type.
            listener: Receives progress for the transfer phase.

        Returns:
            Descriptor reported by the server.

        Raises:
            UploadRejected: If the server refused the upload, with its reason when given.
            TransportError: If the transfer failed or the response could not be parsed.
        """
        listener = listener or NullListener()
        digest = compute_digest(data)
        size = len(data)
        log = logger.bind(server=server_url, sha256=digest, size=size)

        await self._preflight(signer, server_url, digest, content_type, size)

        session = TransferSession(total=size)
        claim = self._tokens.mint(signer, AuthKind.UPLOAD, digest)
        log.debug("Uploading blob", content_type=content_type)
        response = await put_upload(
            self._http,
            server_url,
            self._iter_chunks(data, session, listener),
            authorization=claim.to_header(),
            content_type=content_type,
            size=size,
        )

        if not response.is_success:
            if reason := rejection_reason(response):
                raise UploadRejected(reason, status_code=response.status_code)
            msg = f"Upload failed ({response.status_code}): {error_detail(response)}"
            raise TransportError(msg, status_code=response.status_code, url=str(response.url))

        blob = parse_descriptor(response)
        if blob.sha256 != digest:
            log.warning("Server reported a different hash", reported=blob.sha256)
        log.info("Upload complete", url=blob.url)
        return blob

    async def _preflight(
        self, signer: Signer, server_url: str, digest: str, content_type: str, size: int
    ) -> None:
        """
        Ask the server whether it would accept the upload.

        A 2xx means yes, a 404 means the server has no such check. A network
        failure is not conclusive either way and lets the upload go ahead.
        """
        claim = self._tokens.mint(signer, AuthKind.UPLOAD, digest)
        try:
            response = await preflight_upload(
                self._http,
                server_url,
                authorization=claim.to_header(),
                sha256=digest,
                content_type=content_type,
                size=size,
            )
        except TransportError as e:
            logger.warning("Upload preflight failed, continuing", server=server_url, error=str(e))
            return

        if response.is_success or response.status_code == 404:
            return
        reason = rejection_reason(response) or str(response.status_code)
        logger.info("Upload rejected at preflight", status=response.status_code, reason=reason)
        raise UploadRejected(reason, status_code=response.status_code)

    async def _iter_chunks(
        self, data: bytes, session: TransferSession, listener: TransferListener
    ) -> AsyncGenerator[bytes, None]:
        view = memoryview(data)
        for offset in range(0, len(data), self._chunk_size):
            chunk = bytes(view[offset : offset + self._chunk_size])
            session.advance(len(chunk))
            listener.on_progress(session)
            yield chunk
            await asyncio.sleep(0)
        listener.on_complete(session)
