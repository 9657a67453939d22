from unittest.mock import patch

import pytest
from keyring.errors import KeyringError

from blup.exceptions import ConfigurationError
from blup.services.vault import KeyringVault, entry_name

SERVICE = "com.blossom.blup.test"


def test_entry_name() -> None:
    assert entry_name("alice", "nsec") == "alice.nsec"
    assert entry_name("", "nsec") == "nsec"


def test_get_reads_namespaced_entry() -> None:
    with patch("blup.services.vault.keyring.get_password", return_value="npub1x") as get:
        assert KeyringVault(SERVICE).get("alice", "npub") == "npub1x"

    get.assert_called_once_with(SERVICE, "alice.npub")


def test_set_writes_namespaced_entry() -> None:
    with patch("blup.services.vault.keyring.set_password") as set_password:
        KeyringVault(SERVICE).set("alice", "nsec", "nsec1x")

    set_password.assert_called_once_with(SERVICE, "alice.nsec", "nsec1x")


def test_backend_failure_is_configuration_error() -> None:
    with (
        patch("blup.services.vault.keyring.get_password", side_effect=KeyringError("no backend")),
        pytest.raises(ConfigurationError, match="system keychain"),
    ):
        KeyringVault(SERVICE).get("alice", "nsec")
