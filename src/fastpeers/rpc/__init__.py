"""
Peer directory.

Fetches the set of active peers from a node's JSON-RPC interface.
"""

from .client import (
    DEFAULT_FETCH_DEADLINE,
    DEFAULT_RPC_URL,
    decode_network_info,
    fetch_active_peers,
)
from .messages import NETWORK_INFO_REQUEST, NetworkInfoResponse, NetworkInfoResult, Peer

__all__ = [
    "DEFAULT_FETCH_DEADLINE",
    "DEFAULT_RPC_URL",
    "NETWORK_INFO_REQUEST",
    "NetworkInfoResponse",
    "NetworkInfoResult",
    "Peer",
    "decode_network_info",
    "fetch_active_peers",
]
