"""Test helpers for fastpeers unit tests."""

from __future__ import annotations

import json
from typing import Any

from fastpeers.exceptions import TransportError
from fastpeers.probe import ProbeOutcome
from fastpeers.rpc import Peer


def make_peer(addr: str, *, account_id: str | None = None, peer_id: str = "") -> Peer:
    """Create a peer with the given address."""
    return Peer(account_id=account_id, id=peer_id or f"ed25519:{addr}", addr=addr)


def make_outcome(addr: str, latency: float | None) -> ProbeOutcome:
    """Create a probe outcome. A latency of None means the probe failed."""
    peer = make_peer(addr)
    if latency is None:
        return ProbeOutcome(peer=peer, error=TransportError(f"Connect to {addr} failed"))
    return ProbeOutcome(peer=peer.with_latency(latency), latency=latency)


def network_info_body(peers: list[dict[str, Any]]) -> bytes:
    """Encode a network_info response listing the given peers."""
    payload = {
        "jsonrpc": "2.0",
        "id": "dontcare",
        "result": {
            "active_peers": peers,
            "num_active_peers": len(peers),
            "peer_max_count": 40,
            "sent_bytes_per_sec": 1024,
            "received_bytes_per_sec": 2048,
            "known_producers": [],
        },
    }
    return json.dumps(payload).encode()


class FakeProber:
    """
    Probe stand-in returning preset latencies by address.

    Addresses missing from the table, or mapped to None, are unreachable.
    Every probed address is recorded in ``calls``.
    """

    def __init__(self, latencies: dict[str, float | None]) -> None:
        self.latencies = latencies
        self.calls: list[str] = []

    async def __call__(self, peer: Peer, *, timeout: float) -> ProbeOutcome:
        self.calls.append(peer.address)
        latency = self.latencies.get(peer.address)
        if latency is None:
            return ProbeOutcome(
                peer=peer, error=TransportError(f"Connect to {peer.address} failed")
            )
        return ProbeOutcome(peer=peer.with_latency(latency), latency=latency)


__all__ = [
    "FakeProber",
    "make_outcome",
    "make_peer",
    "network_info_body",
]
