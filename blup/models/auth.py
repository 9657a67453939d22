"""
Authorization claim domain models.
"""

import base64
import json
import time
from dataclasses import dataclass
from enum import StrEnum

from blup.models.nostr import NostrEvent

AUTH_SCHEME = "Nostr"


class AuthKind(StrEnum):
    """Operation a claim authorizes."""

    LIST = "list"
    UPLOAD = "upload"
    DELETE = "delete"

    @property
    def description(self) -> str:
        """Human readable content placed in the signed claim."""
        match self:
            case AuthKind.LIST:
                return "List Blobs"
            case AuthKind.UPLOAD:
                return "Upload Blob"
            case AuthKind.DELETE:
                return "Delete Blob"

    @property
    def binds_hash(self) -> bool:
        """Whether claims of this kind may be bound to a content hash."""
        return self in (AuthKind.UPLOAD, AuthKind.DELETE)


@dataclass(frozen=True, kw_only=True)
class AuthClaim:
    """
    Short-lived signed authorization for a single request.

    Attributes:
        kind: Operation the claim is scoped to.
        expiration: Absolute unix timestamp after which the claim is invalid.
        content_hash: Hex sha256 the claim is bound to, if any.
        event: The signed event carrying the claim.
    """

    kind: AuthKind
    expiration: int
    content_hash: str | None
    event: NostrEvent

    def is_valid_for(
        self,
        kind: AuthKind,
        content_hash: str | None = None,
        *,
        now: float | None = None,
    ) -> bool:
        """
        Check whether this claim authorizes ``kind`` on ``content_hash`` at ``now``.

        A claim never authorizes another operation kind or another hash binding.
        """
        current = time.time() if now is None else now
        if current > self.expiration:
            return False
        return self.kind == kind and self.content_hash == content_hash

    def to_header(self) -> str:
        """Authorization header value: ``Nostr <base64(event json)>``."""
        payload = json.dumps(self.event.to_dict(), separators=(",", ":"), ensure_ascii=False)
        encoded = base64.b64encode(payload.encode("utf-8")).decode("ascii")
        return f"{AUTH_SCHEME} {encoded}"
