"""
Network record domain models (NIP-01 events and the records built on them).
"""

import json
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Self

Tag = tuple[str, ...]

_HEX_DIGITS = frozenset("0123456789abcdef")


def _is_hex(value: Any, length: int) -> bool:
    return isinstance(value, str) and len(value) == length and set(value) <= _HEX_DIGITS


class EventKind(IntEnum):
    """Event kinds used by blup."""

    METADATA = 0
    RELAY_LIST = 10002
    BLOSSOM_SERVER_LIST = 10063
    BLOSSOM_AUTH = 24242


@dataclass(frozen=True, kw_only=True)
class NostrEvent:
    """
    A signed event.

    Attributes:
        id: Hex sha256 of the canonical serialization.
        pubkey: Hex x-only public key of the author.
        created_at: Unix timestamp in seconds.
        kind: Event kind.
        tags: Ordered tags; each tag is a tuple of strings.
        content: Free-form content.
        sig: Hex BIP-340 signature over ``id``.
    """

    id: str
    pubkey: str
    created_at: int
    kind: int
    tags: tuple[Tag, ...]
    content: str
    sig: str

    def to_dict(self) -> dict[str, Any]:
        """Wire representation."""
        return {
            "id": self.id,
            "pubkey": self.pubkey,
            "created_at": self.created_at,
            "kind": self.kind,
            "tags": [list(tag) for tag in self.tags],
            "content": self.content,
            "sig": self.sig,
        }

    @classmethod
    def from_dict(cls, data: Any) -> Self:
        """
        Parse a wire event.

        Raises:
            ValueError: If any field is missing or has the wrong shape.
        """
        if not isinstance(data, dict):
            msg = "event must be an object"
            raise ValueError(msg)
        if not _is_hex(data.get("id"), 64):
            msg = "event id must be 64 hex chars"
            raise ValueError(msg)
        if not _is_hex(data.get("pubkey"), 64):
            msg = "event pubkey must be 64 hex chars"
            raise ValueError(msg)
        if not _is_hex(data.get("sig"), 128):
            msg = "event sig must be 128 hex chars"
            raise ValueError(msg)
        created_at = data.get("created_at")
        kind = data.get("kind")
        if not isinstance(created_at, int) or isinstance(created_at, bool):
            msg = "event created_at must be an integer"
            raise ValueError(msg)
        if not isinstance(kind, int) or isinstance(kind, bool):
            msg = "event kind must be an integer"
            raise ValueError(msg)
        content = data.get("content")
        if not isinstance(content, str):
            msg = "event content must be a string"
            raise ValueError(msg)
        raw_tags = data.get("tags")
        if not isinstance(raw_tags, list) or not all(
            isinstance(tag, list) and all(isinstance(item, str) for item in tag) for tag in raw_tags
        ):
            msg = "event tags must be a list of string lists"
            raise ValueError(msg)

        return cls(
            id=data["id"],
            pubkey=data["pubkey"],
            created_at=created_at,
            kind=kind,
            tags=tuple(tuple(tag) for tag in raw_tags),
            content=content,
            sig=data["sig"],
        )

    def tag_values(self, name: str) -> list[str]:
        """Return the first value of every tag named ``name``."""
        return [tag[1] for tag in self.tags if len(tag) >= 2 and tag[0] == name]


@dataclass(frozen=True, kw_only=True)
class EventFilter:
    """Subscription filter (subset of NIP-01 used by blup)."""

    kinds: tuple[int, ...]
    authors: tuple[str, ...]
    limit: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kinds": list(self.kinds), "authors": list(self.authors)}
        if self.limit is not None:
            data["limit"] = self.limit
        return data

    def matches(self, event: NostrEvent) -> bool:
        return event.kind in self.kinds and event.pubkey in self.authors


@dataclass(frozen=True, kw_only=True)
class ServerListRecord:
    """
    Ordered list of blob servers published as ``server`` tags.

    Position 0 is the preferred server.
    """

    servers: tuple[str, ...] = ()

    def to_tags(self) -> list[list[str]]:
        return [["server", server] for server in self.servers]

    @classmethod
    def from_event(cls, event: NostrEvent) -> Self:
        """Parse ``server`` tags, discarding malformed or empty entries."""
        servers = [value for value in event.tag_values("server") if value.strip()]
        return cls(servers=tuple(servers))


PROFILE_FIELDS = ("name", "about", "picture", "banner", "nip05", "lud16")


@dataclass(frozen=True, kw_only=True)
class ProfileMetadata:
    """
    Kind-0 profile metadata.

    Unknown fields found on the network are kept in ``extra`` so that a
    merge-and-publish round trip does not drop them.
    """

    name: str | None = None
    about: str | None = None
    picture: str | None = None
    banner: str | None = None
    nip05: str | None = None
    lud16: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_content(cls, content: str) -> Self | None:
        """Parse event content; None when it is not a JSON object."""
        try:
            data = json.loads(content)
        except ValueError:
            return None
        if not isinstance(data, dict):
            return None

        known = {k: data[k] for k in PROFILE_FIELDS if isinstance(data.get(k), str)}
        extra = {k: v for k, v in data.items() if k not in PROFILE_FIELDS}
        return cls(**known, extra=extra)

    def to_content(self) -> str:
        data = dict(self.extra)
        for key in PROFILE_FIELDS:
            if (value := getattr(self, key)) is not None:
                data[key] = value
        return json.dumps(data, ensure_ascii=False)

    def merged(self, updates: "ProfileMetadata") -> "ProfileMetadata":
        """Return a copy where every field set in ``updates`` overrides ours."""
        values = {key: getattr(self, key) for key in PROFILE_FIELDS}
        for key in PROFILE_FIELDS:
            if (value := getattr(updates, key)) is not None:
                values[key] = value
        return ProfileMetadata(**values, extra={**self.extra, **updates.extra})

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, key) is None for key in PROFILE_FIELDS) and not self.extra
