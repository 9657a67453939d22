"""Blob server endpoints (upload, mirror, list, delete)."""

from collections.abc import AsyncIterable

import httpx

from blup.api.http_client import AsyncHttpClient
from blup.exceptions import TransportError
from blup.models.blob import BlobDescriptor

REASON_HEADER = "X-Reason"


def server_endpoint(server_url: str, path: str) -> str:
    """Join a server base URL and an absolute path, tolerating a trailing slash."""
    return f"{server_url.rstrip('/')}{path}"


def rejection_reason(response: httpx.Response) -> str | None:
    """Server-supplied reason for a refusal, if any."""
    reason = response.headers.get(REASON_HEADER)
    return reason.strip() if reason and reason.strip() else None


def error_detail(response: httpx.Response) -> str:
    """Best available description of a failed response."""
    if reason := rejection_reason(response):
        return reason
    text = response.text.strip()
    return text or response.reason_phrase or str(response.status_code)


def parse_descriptor(response: httpx.Response) -> BlobDescriptor:
    """
    Parse a 2xx response body into a BlobDescriptor.

    Raises:
        TransportError: If the body is not a valid descriptor.
    """
    try:
        return BlobDescriptor.from_dict(response.json())
    except ValueError as e:
        msg = f"Invalid blob descriptor in response: {e}"
        raise TransportError(msg, status_code=response.status_code, url=str(response.url)) from e


def parse_descriptor_list(response: httpx.Response) -> list[BlobDescriptor]:
    """
    Parse a 2xx list response, skipping entries that are not descriptors.

    Raises:
        TransportError: If the body is not a JSON array.
    """
    try:
        data = response.json()
    except ValueError as e:
        msg = "Invalid JSON in list response"
        raise TransportError(msg, status_code=response.status_code, url=str(response.url)) from e
    if not isinstance(data, list):
        msg = "List response is not an array"
        raise TransportError(msg, status_code=response.status_code, url=str(response.url))

    blobs = []
    for item in data:
        try:
            blobs.append(BlobDescriptor.from_dict(item))
        except ValueError:
            continue
    return blobs


async def preflight_upload(
    http: AsyncHttpClient,
    server_url: str,
    *,
    authorization: str,
    sha256: str,
    content_type: str,
    size: int,
) -> httpx.Response:
    """HEAD /upload: ask whether an upload would be accepted, without sending it."""
    return await http.request(
        "HEAD",
        server_endpoint(server_url, "/upload"),
        headers={
            "Authorization": authorization,
            "X-SHA-256": sha256,
            "X-Content-Type": content_type,
            "X-Content-Length": str(size),
        },
    )


async def put_upload(
    http: AsyncHttpClient,
    server_url: str,
    body: bytes | AsyncIterable[bytes],
    *,
    authorization: str,
    content_type: str,
    size: int,
) -> httpx.Response:
    """PUT /upload with a (possibly streamed) body of exactly ``size`` bytes."""
    return await http.request(
        "PUT",
        server_endpoint(server_url, "/upload"),
        headers={
            "Authorization": authorization,
            "Content-Type": content_type,
            "Content-Length": str(size),
        },
        content=body,
    )


async def put_mirror(
    http: AsyncHttpClient,
    server_url: str,
    source_url: str,
    *,
    authorization: str,
) -> httpx.Response:
    """PUT /mirror: ask the server to fetch ``source_url`` itself."""
    return await http.request(
        "PUT",
        server_endpoint(server_url, "/mirror"),
        headers={"Authorization": authorization},
        json={"url": source_url},
    )


async def list_blobs(
    http: AsyncHttpClient,
    server_url: str,
    pubkey: str,
    *,
    authorization: str,
    limit: int | None = None,
) -> httpx.Response:
    """GET /list/<pubkey>."""
    return await http.request(
        "GET",
        server_endpoint(server_url, f"/list/{pubkey}"),
        headers={"Authorization": authorization},
        params={"limit": limit} if limit is not None else None,
    )


async def delete_blob(
    http: AsyncHttpClient,
    server_url: str,
    sha256: str,
    *,
    authorization: str,
) -> httpx.Response:
    """DELETE /<sha256>."""
    return await http.request(
        "DELETE",
        server_endpoint(server_url, f"/{sha256}"),
        headers={"Authorization": authorization},
    )
