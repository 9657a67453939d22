"""
Signer implementation using the coincurve bindings to libsecp256k1.
"""

import os

import coincurve

from blup.exceptions import AuthError

SECRET_KEY_SIZE = 32


class Secp256k1Signer:
    """
    BIP-340 Schnorr signer over secp256k1.

    Example:
        signer = Secp256k1Signer.generate()
        signature = signer.sign(event_id_bytes)
    """

    def __init__(self, secret_key: bytes) -> None:
        """
        Args:
            secret_key: 32-byte secret scalar.

        Raises:
            AuthError: If the scalar is not a valid secp256k1 secret key.
        """
        if len(secret_key) != SECRET_KEY_SIZE:
            msg = f"Secret key must be {SECRET_KEY_SIZE} bytes, got {len(secret_key)}"
            raise AuthError(msg)
        try:
            self._key = coincurve.PrivateKey(secret_key)
        except ValueError as e:
            msg = f"Invalid secret key: {e}"
            raise AuthError(msg) from e

    @classmethod
    def generate(cls) -> "Secp256k1Signer":
        return cls(coincurve.PrivateKey().secret)

    @property
    def secret_key(self) -> bytes:
        return self._key.secret

    @property
    def public_key(self) -> str:
        return self._key.public_key_xonly.format().hex()

    def sign(self, digest: bytes) -> bytes:
        if len(digest) != 32:
            msg = f"Digest must be 32 bytes, got {len(digest)}"
            raise AuthError(msg)
        try:
            return self._key.sign_schnorr(digest, os.urandom(32))
        except Exception as e:
            msg = f"Failed to sign: {e}"
            raise AuthError(msg) from e

    @staticmethod
    def verify(public_key: str, digest: bytes, signature: bytes) -> bool:
        """
        Verify a Schnorr signature.

        Returns:
            False for any malformed input instead of raising.
        """
        try:
            key = coincurve.PublicKeyXOnly(bytes.fromhex(public_key))
            return key.verify(signature, digest)
        except (ValueError, TypeError):
            return False
