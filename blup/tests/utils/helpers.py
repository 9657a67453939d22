import base64
import hashlib
import json
from typing import Any

from blup.crypto.events import finalize_event
from blup.crypto.protocol import Signer
from blup.models.nostr import EventKind, NostrEvent
from blup.tests.utils.constants import SERVER


def decode_auth_header(value: str) -> dict[str, Any]:
    """Signed event carried by a ``Nostr <base64>`` Authorization header."""
    scheme, encoded = value.split(" ", 1)
    assert scheme == "Nostr"
    return json.loads(base64.b64decode(encoded))


def claim_tags(value: str) -> dict[str, str]:
    return {tag[0]: tag[1] for tag in decode_auth_header(value)["tags"]}


def descriptor_for(data: bytes, content_type: str = "application/octet-stream") -> dict[str, Any]:
    digest = hashlib.sha256(data).hexdigest()
    return {"url": f"{SERVER}/{digest}", "sha256": digest, "size": len(data), "type": content_type}


def server_list_event(signer: Signer, servers: list[str], created_at: int = 1000) -> NostrEvent:
    return finalize_event(
        signer,
        kind=EventKind.BLOSSOM_SERVER_LIST,
        tags=[["server", server] for server in servers],
        created_at=created_at,
    )
