"""URL checks shared by the server list and the mirror pipeline."""

import httpx

from blup.exceptions import InvalidInput

HTTP_SCHEMES = ("http", "https")


def is_http_url(value: str) -> bool:
    """True for an absolute ``http(s)://host...`` URL."""
    try:
        url = httpx.URL(value)
    except (httpx.InvalidURL, TypeError):
        return False
    return url.scheme in HTTP_SCHEMES and bool(url.host)


def normalize_server_url(value: str) -> str:
    """
    Validate a server base URL and strip its trailing slashes.

    Raises:
        InvalidInput: If ``value`` is not an absolute http(s) URL.
    """
    candidate = value.strip()
    if not is_http_url(candidate):
        msg = f"Not a valid server URL: {value}"
        raise InvalidInput(msg, url=value)
    return candidate.rstrip("/")


def same_server(a: str, b: str) -> bool:
    return a.rstrip("/") == b.rstrip("/")
