from typing import Any

import pytest

from blup.models.blob import DEFAULT_CONTENT_TYPE, BlobDescriptor, DeleteResult, DeleteStatus
from blup.tests.utils.constants import SHA256_HELLO


def test_descriptor_from_server_response() -> None:
    blob = BlobDescriptor.from_dict(
        {
            "url": f"https://cdn.test/{SHA256_HELLO}.txt",
            "sha256": SHA256_HELLO,
            "size": 5,
            "type": "text/plain",
            "uploaded": 1700000000,
            "nip94": [["x", SHA256_HELLO]],
        }
    )

    assert blob.size == 5
    assert blob.type == "text/plain"
    assert blob.uploaded == 1700000000
    assert blob.to_dict() == {
        "url": f"https://cdn.test/{SHA256_HELLO}.txt",
        "sha256": SHA256_HELLO,
        "size": 5,
        "type": "text/plain",
        "uploaded": 1700000000,
    }


def test_descriptor_defaults_missing_type() -> None:
    blob = BlobDescriptor.from_dict({"url": "https://cdn.test/x", "sha256": SHA256_HELLO, "size": 0})

    assert blob.type == DEFAULT_CONTENT_TYPE
    assert "uploaded" not in blob.to_dict()


@pytest.mark.parametrize(
    "data",
    [
        None,
        [],
        {"sha256": SHA256_HELLO, "size": 5},
        {"url": "https://cdn.test/x", "size": 5},
        {"url": "https://cdn.test/x", "sha256": SHA256_HELLO, "size": "5"},
        {"url": "https://cdn.test/x", "sha256": SHA256_HELLO, "size": -1},
    ],
)
def test_descriptor_rejects_incomplete_data(data: Any) -> None:
    with pytest.raises(ValueError):
        BlobDescriptor.from_dict(data)


def test_delete_result_confirmation() -> None:
    assert DeleteResult(sha256=SHA256_HELLO, status=DeleteStatus.DELETED).confirmed
    assert not DeleteResult(sha256=SHA256_HELLO, status=DeleteStatus.UNCONFIRMED).confirmed
