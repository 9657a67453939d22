"""
Key pairs and their NIP-19 (bech32) text encodings.
"""

from dataclasses import dataclass, field
from typing import Self

import bech32

from blup.crypto.secp256k1_backend import Secp256k1Signer

NSEC_PREFIX = "nsec"
NPUB_PREFIX = "npub"


def encode_nip19(prefix: str, data: bytes) -> str:
    """Encode raw bytes as a bech32 string with the given human-readable prefix."""
    words = bech32.convertbits(list(data), 8, 5)
    if words is None:
        msg = "Cannot convert data to 5-bit words"
        raise ValueError(msg)
    return bech32.bech32_encode(prefix, words)


def decode_nip19(value: str, expected_prefix: str) -> bytes:
    """
    Decode a bech32 string carrying a 32-byte key.

    Args:
        value: Encoded string, e.g. ``npub1...``.
        expected_prefix: Required human-readable prefix.

    Raises:
        ValueError: On a bad checksum, an unexpected prefix or a wrong payload size.
    """
    prefix, words = bech32.bech32_decode(value.strip())
    if prefix is None or words is None:
        msg = "Invalid bech32 string"
        raise ValueError(msg)
    if prefix != expected_prefix:
        msg = f"Expected '{expected_prefix}' prefix, got '{prefix}'"
        raise ValueError(msg)
    data = bech32.convertbits(words, 5, 8, False)
    if data is None or len(data) != 32:
        msg = f"Invalid {expected_prefix} payload"
        raise ValueError(msg)
    return bytes(data)


def encode_nsec(secret_key: bytes) -> str:
    return encode_nip19(NSEC_PREFIX, secret_key)


def encode_npub(public_key: str) -> str:
    return encode_nip19(NPUB_PREFIX, bytes.fromhex(public_key))


def decode_nsec(nsec: str) -> bytes:
    return decode_nip19(nsec, NSEC_PREFIX)


def decode_npub(npub: str) -> str:
    """Return the hex public key encoded by ``npub``."""
    return decode_nip19(npub, NPUB_PREFIX).hex()


@dataclass(frozen=True)
class KeyPair:
    """An identity: secret scalar plus hex x-only public key."""

    secret_key: bytes = field(repr=False)
    public_key: str

    @classmethod
    def generate(cls) -> Self:
        signer = Secp256k1Signer.generate()
        return cls(secret_key=signer.secret_key, public_key=signer.public_key)

    @classmethod
    def from_secret(cls, secret_key: bytes) -> Self:
        """
        Raises:
            AuthError: If ``secret_key`` is not a valid secp256k1 scalar.
        """
        signer = Secp256k1Signer(secret_key)
        return cls(secret_key=secret_key, public_key=signer.public_key)

    @property
    def nsec(self) -> str:
        return encode_nsec(self.secret_key)

    @property
    def npub(self) -> str:
        return encode_npub(self.public_key)

    def signer(self) -> Secp256k1Signer:
        return Secp256k1Signer(self.secret_key)
