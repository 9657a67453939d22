import base64
import json

import pytest

from blup.crypto.secp256k1_backend import Secp256k1Signer
from blup.models.auth import AuthKind
from blup.services.token_factory import AuthTokenFactory
from blup.tests.utils.constants import SHA256_HELLO

T = 1_700_000_000


@pytest.fixture
def factory() -> AuthTokenFactory:
    return AuthTokenFactory(ttl=60, clock=lambda: T)


def test_auth_kind_descriptions() -> None:
    assert AuthKind.LIST.description == "List Blobs"
    assert AuthKind.UPLOAD.description == "Upload Blob"
    assert AuthKind.DELETE.description == "Delete Blob"


def test_only_mutations_bind_hashes() -> None:
    assert not AuthKind.LIST.binds_hash
    assert AuthKind.UPLOAD.binds_hash
    assert AuthKind.DELETE.binds_hash


def test_claim_valid_until_expiry(factory: AuthTokenFactory, signer: Secp256k1Signer) -> None:
    claim = factory.mint(signer, AuthKind.UPLOAD, SHA256_HELLO)

    assert claim.is_valid_for(AuthKind.UPLOAD, SHA256_HELLO, now=T)
    assert claim.is_valid_for(AuthKind.UPLOAD, SHA256_HELLO, now=T + 60)
    assert not claim.is_valid_for(AuthKind.UPLOAD, SHA256_HELLO, now=T + 61)


def test_claims_are_not_interchangeable(factory: AuthTokenFactory, signer: Secp256k1Signer) -> None:
    upload = factory.mint(signer, AuthKind.UPLOAD, SHA256_HELLO)
    unbound = factory.mint(signer, AuthKind.UPLOAD)

    assert not upload.is_valid_for(AuthKind.DELETE, SHA256_HELLO, now=T)
    assert not upload.is_valid_for(AuthKind.UPLOAD, "00" * 32, now=T)
    assert not upload.is_valid_for(AuthKind.UPLOAD, None, now=T)
    assert not unbound.is_valid_for(AuthKind.UPLOAD, SHA256_HELLO, now=T)


def test_header_wraps_signed_event(factory: AuthTokenFactory, signer: Secp256k1Signer) -> None:
    claim = factory.mint(signer, AuthKind.DELETE, SHA256_HELLO)

    scheme, encoded = claim.to_header().split(" ", 1)
    payload = json.loads(base64.b64decode(encoded))

    assert scheme == "Nostr"
    assert payload == claim.event.to_dict()
