"""
JSON-RPC message shapes for the ``network_info`` method.

Only the fields needed to dial peers are modeled. Everything else in the
response is dropped during decoding.
"""

from __future__ import annotations

from typing import Any, Final

from pydantic import Field, field_validator, model_validator

from fastpeers.types import WireModel

NETWORK_INFO_METHOD: Final = "network_info"
"""RPC method that lists the node's currently active peers."""

NETWORK_INFO_REQUEST: Final[dict[str, Any]] = {
    "jsonrpc": "2.0",
    "id": "dontcare",
    "method": NETWORK_INFO_METHOD,
    "params": [],
}
"""The fixed request body. The node ignores the id beyond echoing it."""


class Peer(WireModel):
    """A candidate peer as reported by the node."""

    account_id: str | None = None
    """Validator account of the peer, if any. Not interpreted."""

    id: str = ""
    """Node identifier, usually a public key such as ``ed25519:...``."""

    addr: str = ""
    """Transport endpoint as ``host:port``. Empty when the node does not know it."""

    latency: float | None = Field(default=None, exclude=True)
    """Connect latency in seconds. Set only after a successful probe."""

    @model_validator(mode="before")
    @classmethod
    def _drop_wire_latency(cls, data: Any) -> Any:
        # Latency is measured locally. A value sent by the node is never trusted.
        if isinstance(data, dict) and "latency" in data:
            data = {key: value for key, value in data.items() if key != "latency"}
        return data

    @field_validator("id", "addr", mode="before")
    @classmethod
    def _null_to_empty(cls, value: Any) -> Any:
        # Nodes send null for peers whose address is not yet known.
        return "" if value is None else value

    @property
    def address(self) -> str:
        """The endpoint used for probing."""
        return self.addr

    def with_latency(self, latency: float) -> Peer:
        """Return a copy of this peer decorated with a measured latency."""
        return self.model_copy(update={"latency": latency})


class NetworkInfoResult(WireModel):
    """The ``result`` member of a ``network_info`` response."""

    active_peers: list[Peer]
    """Peers the node currently holds a connection to."""


class NetworkInfoResponse(WireModel):
    """A successful ``network_info`` response."""

    result: NetworkInfoResult
