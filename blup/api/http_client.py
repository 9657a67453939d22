"""
Async HTTP client for blob servers.

Thin wrapper over httpx that owns the connection pool for one invocation and
turns network failures into TransportError. Status codes are returned to the
caller untouched: each pipeline decides what a status means.
"""

from collections.abc import AsyncIterable, AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog

from blup.config import BlupConfig
from blup.exceptions import RequestTimeout, TransportError

logger = structlog.get_logger(__name__)

SENSITIVE_HEADERS = frozenset({"authorization"})


def sanitize_headers(headers: dict[str, str]) -> dict[str, str]:
    """
    Mask credentials before logging.

    Args:
        headers: Request headers.

    Returns:
        Copy with sensitive values replaced by "***".
    """
    return {k: "***" if k.lower() in SENSITIVE_HEADERS else v for k, v in headers.items()}


class AsyncHttpClient:
    """Async HTTP client for blob servers."""

    def __init__(
        self,
        config: BlupConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            config: Client configuration.
            transport: Optional transport for testing (mock transport).
        """
        self._config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "AsyncHttpClient":
        self._ensure_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._config.timeout,
                transport=self._transport,
                follow_redirects=True,
                headers={"User-Agent": self._config.user_agent},
            )
        return self._client

    async def close(self) -> None:
        if self._client is None:
            logger.debug("Client not open.")
            return
        await self._client.aclose()
        self._client = None

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        content: bytes | AsyncIterable[bytes] | None = None,
        json: Any = None,
        params: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """
        Send a request and read the full response.

        Args:
            method: HTTP method.
            url: Absolute URL.
            headers: Extra request headers.
            content: Raw body, possibly an async stream of chunks.
            json: JSON body.
            params: Query parameters.
            timeout: Override of the configured timeout.

        Returns:
            The response, whatever its status.

        Raises:
            RequestTimeout: If the request timed out.
            TransportError: On any other network failure.
        """
        client = self._ensure_client()
        logger.debug("HTTP request", method=method, url=url, headers=sanitize_headers(headers or {}))
        try:
            response = await client.request(
                method,
                url,
                headers=headers,
                content=content,
                json=json,
                params=params,
                timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
            )
        except httpx.TimeoutException as e:
            msg = f"{method} {url} timed out"
            raise RequestTimeout(msg, url=url) from e
        except httpx.HTTPError as e:
            msg = f"{method} {url} failed: {e}"
            raise TransportError(msg, url=url) from e

        logger.debug("HTTP response", method=method, url=url, status=response.status_code)
        return response

    @asynccontextmanager
    async def stream(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> AsyncIterator[httpx.Response]:
        """
        Open a streaming response.

        Security:
            This method fetches arbitrary URLs supplied by the user; it never
            attaches authorization headers on its own.

        Yields:
            The response with its body not yet read.

        Raises:
            RequestTimeout: If connecting or reading timed out.
            TransportError: On any other network failure.
        """
        client = self._ensure_client()
        logger.debug("HTTP stream", method=method, url=url)
        try:
            async with client.stream(
                method,
                url,
                headers=headers,
                timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
            ) as response:
                yield response
        except httpx.TimeoutException as e:
            msg = f"{method} {url} timed out"
            raise RequestTimeout(msg, url=url) from e
        except httpx.HTTPError as e:
            msg = f"{method} {url} failed: {e}"
            raise TransportError(msg, url=url) from e

