"""
Domain models for blup.

These are immutable (frozen) dataclasses representing the core domain concepts.
"""

from blup.models.auth import AuthClaim, AuthKind
from blup.models.blob import BlobDescriptor, DeleteResult, DeleteStatus
from blup.models.nostr import (
    EventFilter,
    EventKind,
    NostrEvent,
    ProfileMetadata,
    ServerListRecord,
)
from blup.models.state import CachedState

__all__ = [
    # Auth
    "AuthKind",
    "AuthClaim",
    # Blobs
    "BlobDescriptor",
    "DeleteStatus",
    "DeleteResult",
    # Network records
    "EventKind",
    "NostrEvent",
    "EventFilter",
    "ServerListRecord",
    "ProfileMetadata",
    # Local state
    "CachedState",
]
