import pytest

from blup.core.urls import is_http_url, normalize_server_url, same_server
from blup.exceptions import InvalidInput


@pytest.mark.parametrize(
    "value",
    ["https://cdn.example.com", "http://localhost:3000/", "https://example.com/path?q=1"],
)
def test_is_http_url_accepts_absolute_http_urls(value: str) -> None:
    assert is_http_url(value)


@pytest.mark.parametrize("value", ["", "cdn.example.com", "ftp://example.com", "https://", "./a.png"])
def test_is_http_url_rejects_others(value: str) -> None:
    assert not is_http_url(value)


def test_normalize_strips_trailing_slashes() -> None:
    assert normalize_server_url(" https://cdn.example.com// ") == "https://cdn.example.com"


def test_normalize_rejects_non_url() -> None:
    with pytest.raises(InvalidInput, match="Not a valid server URL"):
        normalize_server_url("not a url")


def test_same_server_ignores_trailing_slash() -> None:
    assert same_server("https://a.test/", "https://a.test")
    assert not same_server("https://a.test", "https://b.test")
