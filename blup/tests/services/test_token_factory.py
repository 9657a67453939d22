from blup.crypto.events import verify_event
from blup.crypto.secp256k1_backend import Secp256k1Signer
from blup.models.auth import AuthKind
from blup.models.nostr import EventKind
from blup.services.token_factory import AuthTokenFactory
from blup.tests.utils.constants import SHA256_HELLO

NOW = 1_700_000_000


def make_factory(ttl: int = 60) -> AuthTokenFactory:
    return AuthTokenFactory(ttl=ttl, clock=lambda: NOW + 0.9)


def test_mint_builds_signed_upload_claim(signer: Secp256k1Signer) -> None:
    claim = make_factory().mint(signer, AuthKind.UPLOAD, SHA256_HELLO)

    event = claim.event
    assert event.kind == EventKind.BLOSSOM_AUTH
    assert event.pubkey == signer.public_key
    assert event.created_at == NOW
    assert event.content == "Upload Blob"
    assert event.tags == (
        ("t", "upload"),
        ("expiration", str(NOW + 60)),
        ("x", SHA256_HELLO),
    )
    assert claim.expiration == NOW + 60
    assert claim.content_hash == SHA256_HELLO
    assert verify_event(event)


def test_list_claim_never_binds_a_hash(signer: Secp256k1Signer) -> None:
    claim = make_factory().mint(signer, AuthKind.LIST, SHA256_HELLO)

    assert claim.content_hash is None
    assert claim.event.tag_values("x") == []
    assert claim.event.content == "List Blobs"


def test_unbound_upload_claim_has_no_hash_tag(signer: Secp256k1Signer) -> None:
    claim = make_factory().mint(signer, AuthKind.UPLOAD)

    assert claim.content_hash is None
    assert claim.event.tag_values("x") == []


def test_ttl_is_configurable(signer: Secp256k1Signer) -> None:
    claim = make_factory(ttl=5).mint(signer, AuthKind.DELETE, SHA256_HELLO)

    assert claim.event.tag_values("expiration") == [str(NOW + 5)]
    assert not claim.is_valid_for(AuthKind.DELETE, SHA256_HELLO, now=NOW + 6)


def test_each_mint_produces_a_new_signature(signer: Secp256k1Signer) -> None:
    factory = make_factory()

    first = factory.mint(signer, AuthKind.UPLOAD, SHA256_HELLO)
    second = factory.mint(signer, AuthKind.UPLOAD, SHA256_HELLO)

    assert first is not second
    assert first.event.sig != second.event.sig
