"""
NIP-01 event identity, signing and verification.
"""

import hashlib
import json
import time
from collections.abc import Sequence

from blup.crypto.protocol import Signer
from blup.crypto.secp256k1_backend import Secp256k1Signer
from blup.models.nostr import NostrEvent


def serialize_event(
    pubkey: str,
    created_at: int,
    kind: int,
    tags: Sequence[Sequence[str]],
    content: str,
) -> bytes:
    """Canonical serialization hashed into the event id."""
    payload = [0, pubkey, created_at, kind, [list(tag) for tag in tags], content]
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def compute_event_id(
    pubkey: str,
    created_at: int,
    kind: int,
    tags: Sequence[Sequence[str]],
    content: str,
) -> str:
    return hashlib.sha256(serialize_event(pubkey, created_at, kind, tags, content)).hexdigest()


def finalize_event(
    signer: Signer,
    *,
    kind: int,
    content: str = "",
    tags: Sequence[Sequence[str]] = (),
    created_at: int | None = None,
) -> NostrEvent:
    """
    Build, hash and sign an event.

    Args:
        signer: Identity that authors the event.
        kind: Event kind.
        content: Event content.
        tags: Event tags.
        created_at: Unix timestamp; now when omitted.

    Raises:
        AuthError: If signing fails.
    """
    timestamp = int(time.time()) if created_at is None else created_at
    pubkey = signer.public_key
    event_id = compute_event_id(pubkey, timestamp, kind, tags, content)
    signature = signer.sign(bytes.fromhex(event_id))

    return NostrEvent(
        id=event_id,
        pubkey=pubkey,
        created_at=timestamp,
        kind=kind,
        tags=tuple(tuple(tag) for tag in tags),
        content=content,
        sig=signature.hex(),
    )


def verify_event(event: NostrEvent) -> bool:
    """Check that the id matches the content and the signature matches the id."""
    expected_id = compute_event_id(
        event.pubkey, event.created_at, event.kind, event.tags, event.content
    )
    if expected_id != event.id:
        return False
    return Secp256k1Signer.verify(event.pubkey, bytes.fromhex(event.id), bytes.fromhex(event.sig))
