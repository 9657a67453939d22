"""
Authorization claims for blob server requests.

A claim is a kind-24242 event scoped to one operation kind, valid for a short
window and, for uploads and deletes, bound to a content hash. A new claim is
minted for every request.
"""

import time
from collections.abc import Callable

import structlog

from blup.crypto.events import finalize_event
from blup.crypto.protocol import Signer
from blup.models.auth import AuthClaim, AuthKind
from blup.models.nostr import EventKind

logger = structlog.get_logger(__name__)

DEFAULT_TTL = 60


class AuthTokenFactory:
    """
    Mints signed authorization claims.

    Args:
        ttl: Claim lifetime in seconds.
        clock: Source of the current unix time.
    """

    def __init__(self, *, ttl: int = DEFAULT_TTL, clock: Callable[[], float] = time.time) -> None:
        self._ttl = ttl
        self._clock = clock

    def mint(self, signer: Signer, kind: AuthKind, content_hash: str | None = None) -> AuthClaim:
        """
        Create a claim for ``kind``, bound to ``content_hash`` when the kind allows it.

        Args:
            signer: Identity the claim is issued for.
            kind: Operation being authorized.
            content_hash: Hex sha256 of the target blob (upload/delete only).

        Returns:
            A claim expiring ``ttl`` seconds from now.

        Raises:
            AuthError: If signing fails.
        """
        now = int(self._clock())
        expiration = now + self._ttl

        bound_hash = content_hash if kind.binds_hash else None
        if content_hash and bound_hash is None:
            logger.debug("Ignoring content hash for unbound claim", kind=str(kind))

        tags = [["t", str(kind)], ["expiration", str(expiration)]]
        if bound_hash:
            tags.append(["x", bound_hash])

        event = finalize_event(
            signer,
            kind=EventKind.BLOSSOM_AUTH,
            content=kind.description,
            tags=tags,
            created_at=now,
        )
        return AuthClaim(kind=kind, expiration=expiration, content_hash=bound_hash, event=event)
