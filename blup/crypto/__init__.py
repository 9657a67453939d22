"""
Cryptographic operations for blup.

This module provides:
- secp256k1 key pairs and their nsec/npub encodings
- Event id computation and Schnorr signing
- Event signature verification
"""

from blup.crypto.events import compute_event_id, finalize_event, verify_event
from blup.crypto.keys import (
    KeyPair,
    decode_npub,
    decode_nsec,
    encode_npub,
    encode_nsec,
)
from blup.crypto.protocol import Signer
from blup.crypto.secp256k1_backend import Secp256k1Signer

__all__ = [
    "KeyPair",
    "Signer",
    "Secp256k1Signer",
    "compute_event_id",
    "finalize_event",
    "verify_event",
    "encode_nsec",
    "encode_npub",
    "decode_nsec",
    "decode_npub",
]
