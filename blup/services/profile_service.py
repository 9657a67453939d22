"""
Profile metadata (kind 0) and relay list (kind 10002) records.
"""

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import replace
from pathlib import Path

import structlog

from blup.config import BlupConfig
from blup.core.urls import is_http_url
from blup.crypto.events import finalize_event
from blup.crypto.protocol import Signer
from blup.exceptions import InvalidInput
from blup.models.blob import BlobDescriptor
from blup.models.nostr import EventFilter, EventKind, ProfileMetadata
from blup.relay.pool import RelayPool

logger = structlog.get_logger(__name__)

# Profile fields that hold image URLs and accept a local file instead.
IMAGE_FIELDS = ("picture", "banner")

FileUploader = Callable[[Path], Awaitable[BlobDescriptor]]


class ProfileService:
    def __init__(self, relays: RelayPool, config: BlupConfig) -> None:
        self._relays = relays
        self._config = config

    async def fetch(self, pubkey: str) -> ProfileMetadata | None:
        """
        Latest published profile of ``pubkey``; None if absent or unparseable.

        Raises:
            TransportError: If no relay answered.
        """
        event = await self._relays.query(EventFilter(kinds=(EventKind.METADATA,), authors=(pubkey,)))
        if event is None:
            return None
        profile = ProfileMetadata.from_content(event.content)
        if profile is None:
            logger.debug("Ignoring unparseable profile", event_id=event.id)
        return profile

    async def update(
        self,
        signer: Signer,
        updates: ProfileMetadata,
        *,
        upload_file: FileUploader | None = None,
    ) -> ProfileMetadata:
        """
        Merge ``updates`` into the published profile and publish the result.

        ``picture`` and ``banner`` values that are not http(s) URLs are local
        files; they are uploaded first and replaced by the blob URL. Fields not
        present in ``updates`` keep their published value.

        Raises:
            InvalidInput: If a local image file does not exist, or no uploader is given.
            TransportError: If no relay answered the read of the current profile.
            PublishError: If no relay accepted the profile.
        """
        updates = await self._upload_images(updates, upload_file)

        existing = await self.fetch(signer.public_key) or ProfileMetadata()
        merged = existing.merged(updates)

        event = finalize_event(signer, kind=EventKind.METADATA, content=merged.to_content())
        relay = await self._relays.publish(event)
        logger.info("Profile published", relay=relay)
        return merged

    async def _upload_images(
        self, updates: ProfileMetadata, upload_file: FileUploader | None
    ) -> ProfileMetadata:
        replacements: dict[str, str] = {}
        for field_name in IMAGE_FIELDS:
            value = getattr(updates, field_name)
            if not value or is_http_url(value):
                continue
            path = Path(value).expanduser()
            if not path.is_file():
                msg = f"File not found: {value}"
                raise InvalidInput(msg, field=field_name)
            if upload_file is None:
                msg = f"Cannot upload local {field_name} without a server"
                raise InvalidInput(msg, field=field_name)
            blob = await upload_file(path)
            replacements[field_name] = blob.url
        return replace(updates, **replacements) if replacements else updates

    async def publish_relay_list(self, signer: Signer, relays: Iterable[str] | None = None) -> str:
        """
        Publish the relays the account reads and writes (``r`` tags).

        The record is sent to the configured relays and the lookup relays.

        Returns:
            The relay that acknowledged the record.
        """
        listed = tuple(relays) if relays is not None else self._config.relays
        event = finalize_event(
            signer,
            kind=EventKind.RELAY_LIST,
            tags=[["r", relay] for relay in listed],
        )
        targets = dict.fromkeys([*self._relays.relays, *self._config.lookup_relays])
        return await self._relays.publish(event, targets)
