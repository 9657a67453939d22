"""
Blup: Nostr identity and Blossom blob client.

Example:
    ```python
    from blup import BlupClient

    async with BlupClient() as client:
        blob = await client.upload_file("photo.jpg")
        print(blob.url)

        await client.add_server("https://cdn.example.com")
        print(await client.mirror("https://example.org/cat.png"))
    ```
"""

from blup.client import BlupClient, CreatedAccount
from blup.config import BlupConfig
from blup.exceptions import (
    AccountExistsError,
    AccountNotFoundError,
    AuthError,
    BlupError,
    ConfigurationError,
    InvalidInput,
    NoAccountError,
    NoServersConfigured,
    PublishError,
    RequestTimeout,
    TransportError,
    UploadRejected,
)
from blup.models.blob import BlobDescriptor, DeleteResult, DeleteStatus

__version__ = "0.1.0"

__all__ = [
    # Main client
    "BlupClient",
    "BlupConfig",
    "CreatedAccount",
    # Models
    "BlobDescriptor",
    "DeleteResult",
    "DeleteStatus",
    # Exceptions
    "BlupError",
    "ConfigurationError",
    "NoAccountError",
    "NoServersConfigured",
    "InvalidInput",
    "AccountExistsError",
    "AccountNotFoundError",
    "AuthError",
    "TransportError",
    "RequestTimeout",
    "PublishError",
    "UploadRejected",
]
