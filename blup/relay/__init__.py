"""
Relay network access.
"""

from blup.relay.pool import RelayPool

__all__ = ["RelayPool"]
