"""
Blob server client layer.

Provides async HTTP communication with blob-hosting servers.
"""

from blup.api.http_client import AsyncHttpClient, sanitize_headers

__all__ = ["AsyncHttpClient", "sanitize_headers"]
