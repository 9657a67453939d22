"""
Signer protocol definition.

This defines the interface for event signing, allowing different
implementations (coincurve, a hardware signer, a remote bunker, ...) to be
swapped without changing the rest of the codebase.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class Signer(Protocol):
    """
    Abstract interface for signing event ids.

    Implementations hold (or can reach) the secret key of one identity.
    """

    @property
    def public_key(self) -> str:
        """Hex x-only public key of the identity."""
        ...

    def sign(self, digest: bytes) -> bytes:
        """
        Produce a BIP-340 Schnorr signature.

        Args:
            digest: 32-byte message digest (the event id).

        Returns:
            64-byte signature.

        Raises:
            AuthError: If the key cannot sign.
        """
        ...
