"""
Blob domain models.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Self

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True, kw_only=True)
class BlobDescriptor:
    """
    Result of a successful transfer, as reported by the server.

    Attributes:
        url: Canonical URL of the stored blob.
        sha256: Hex content hash.
        size: Size in bytes.
        type: Declared media type.
        uploaded: Server-side upload timestamp, when reported.
    """

    url: str
    sha256: str
    size: int
    type: str = DEFAULT_CONTENT_TYPE
    uploaded: int | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Self:
        """
        Parse a descriptor returned by a blob server.

        Raises:
            ValueError: If ``url``, ``sha256`` or ``size`` is missing or mistyped.
        """
        if not isinstance(data, dict):
            msg = "blob descriptor must be an object"
            raise ValueError(msg)

        url = data.get("url")
        sha256 = data.get("sha256")
        size = data.get("size")
        if not isinstance(url, str) or not isinstance(sha256, str):
            msg = "blob descriptor requires string 'url' and 'sha256'"
            raise ValueError(msg)
        if not isinstance(size, int) or isinstance(size, bool) or size < 0:
            msg = "blob descriptor requires a non-negative integer 'size'"
            raise ValueError(msg)

        blob_type = data.get("type")
        uploaded = data.get("uploaded")
        return cls(
            url=url,
            sha256=sha256,
            size=size,
            type=blob_type if isinstance(blob_type, str) and blob_type else DEFAULT_CONTENT_TYPE,
            uploaded=uploaded if isinstance(uploaded, int) else None,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "url": self.url,
            "sha256": self.sha256,
            "size": self.size,
            "type": self.type,
        }
        if self.uploaded is not None:
            data["uploaded"] = self.uploaded
        return data


class DeleteStatus(StrEnum):
    """Outcome of a delete request."""

    DELETED = "deleted"
    UNCONFIRMED = "unconfirmed"  # request sent, no answer within the timeout


@dataclass(frozen=True, kw_only=True)
class DeleteResult:
    sha256: str
    status: DeleteStatus

    @property
    def confirmed(self) -> bool:
        return self.status == DeleteStatus.DELETED
