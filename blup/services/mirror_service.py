"""
Blob mirror pipeline.

The destination server is first asked to fetch the source URL itself
(PUT /mirror). When it cannot or will not, the blob is downloaded locally and
uploaded through UploadService.
"""

import structlog

from blup.api.endpoints.blossom import error_detail, parse_descriptor, put_mirror
from blup.api.http_client import AsyncHttpClient
from blup.core.progress import NullListener, TransferListener, TransferSession
from blup.core.urls import is_http_url
from blup.crypto.protocol import Signer
from blup.exceptions import InvalidInput, TransportError
from blup.models.auth import AuthKind
from blup.models.blob import DEFAULT_CONTENT_TYPE, BlobDescriptor
from blup.services.token_factory import AuthTokenFactory
from blup.services.upload_service import UploadService

logger = structlog.get_logger(__name__)


def _content_length(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        length = int(value)
    except ValueError:
        return None
    return length if length >= 0 else None


class MirrorService:
    """
    Copies a blob from a URL onto a blob server.

    Args:
        http: Async HTTP client.
        tokens: Mints the mirror claim.
        uploads: Pipeline used for the download-and-reupload fallback.
    """

    def __init__(
        self, http: AsyncHttpClient, tokens: AuthTokenFactory, uploads: UploadService
    ) -> None:
        self._http = http
        self._tokens = tokens
        self._uploads = uploads

    async def mirror(
        self,
        signer: Signer,
        server_url: str,
        source_url: str,
        *,
        listener: TransferListener | None = None,
    ) -> BlobDescriptor:
        """
        Store the blob at ``source_url`` on ``server_url``.

        Raises:
            InvalidInput: If ``source_url`` is not an http(s) URL.
            TransportError: If the fallback download fails.
            UploadRejected: If the fallback upload is refused.
        """
        if not is_http_url(source_url):
            msg = f"Not a valid source URL: {source_url}"
            raise InvalidInput(msg, url=source_url)
        listener = listener or NullListener()

        if (blob := await self._remote_mirror(signer, server_url, source_url, listener)) is not None:
            return blob

        data, content_type = await self._download(source_url, listener)

        listener.on_status("Uploading...")
        return await self._uploads.upload(
            signer, server_url, data, content_type, listener=listener
        )

    async def _remote_mirror(
        self, signer: Signer, server_url: str, source_url: str, listener: TransferListener
    ) -> BlobDescriptor | None:
        """Descriptor when the server mirrored the blob itself, else None."""
        claim = self._tokens.mint(signer, AuthKind.UPLOAD)
        try:
            response = await put_mirror(
                self._http, server_url, source_url, authorization=claim.to_header()
            )
        except TransportError as e:
            listener.on_status(f"Mirror failed ({e.message}), downloading and reuploading...")
            return None

        if response.is_success:
            blob = parse_descriptor(response)
            logger.info("Blob mirrored by server", server=server_url, url=blob.url)
            return blob

        if response.status_code == 404:
            listener.on_status("Server does not support /mirror, downloading and reuploading...")
        else:
            listener.on_status(
                f"Mirror failed ({response.status_code}: {error_detail(response)}), "
                "downloading and reuploading..."
            )
        logger.debug("Falling back to download", server=server_url, status=response.status_code)
        return None

    async def _download(self, source_url: str, listener: TransferListener) -> tuple[bytes, str]:
        """
        Read the whole source into memory.

        Returns:
            The payload and its declared media type.

        Raises:
            TransportError: On a network failure or a non-2xx response.
        """
        listener.on_status("Downloading...")
        buffer = bytearray()
        async with self._http.stream("GET", source_url) as response:
            if not response.is_success:
                msg = f"Error fetching source: {response.status_code}"
                raise TransportError(msg, status_code=response.status_code, url=source_url)

            content_type = response.headers.get("Content-Type") or DEFAULT_CONTENT_TYPE
            session = TransferSession(total=_content_length(response.headers.get("Content-Length")))
            async for chunk in response.aiter_bytes():
                buffer.extend(chunk)
                session.advance(len(chunk))
                listener.on_progress(session)

        session.total = session.transferred
        listener.on_complete(session)
        logger.debug("Source downloaded", url=source_url, size=len(buffer))
        return bytes(buffer), content_type
