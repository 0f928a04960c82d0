"""
Scan pipeline.

Fetch, probe, classify, select. Each stage runs to completion before the
next starts, and a failed fetch ends the scan before any peer is dialed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from fastpeers.config import ProbeConfig
from fastpeers.metrics import probes
from fastpeers.probe import (
    Classification,
    Prober,
    Tier,
    classify,
    probe_peer,
    probe_peers,
    select_fastest,
)
from fastpeers.rpc import Peer, fetch_active_peers

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SelectionResult:
    """Outcome of a scan."""

    classification: Classification
    """All probed peers by tier."""

    selection: list[Peer]
    """Fastest peers, at most ``n``, fastest first."""

    total: int
    """Number of peers the node reported."""

    @property
    def persistent_peers(self) -> str:
        """Selected addresses joined for a node's persistent-peer setting."""
        return ",".join(peer.address for peer in self.selection)


async def run(
    config: ProbeConfig,
    *,
    log: logging.Logger | None = None,
    probe: Prober = probe_peer,
    transport: httpx.AsyncBaseTransport | None = None,
) -> SelectionResult:
    """
    Run one scan.

    Args:
        config: Scan parameters.
        log: Logger for diagnostics. Defaults to this module's logger.
        probe: Probe implementation, replaceable for tests.
        transport: Optional httpx transport for the directory fetch.

    Returns:
        The classified peers and the selection.

    Raises:
        TransportError: If the node cannot be reached.
        CancellationError: If the directory fetch misses its deadline.
        DecodeError: If the node's response is malformed.
    """
    log = log or logger

    # Fetch errors are terminal. Nothing has been dialed yet.
    peers = await fetch_active_peers(
        config.rpc_url, deadline=config.fetch_timeout, transport=transport
    )

    outcomes = await probe_peers(
        peers,
        timeout=config.probe_timeout,
        concurrency=config.concurrency,
        deadline=config.deadline,
        probe=probe,
    )

    for outcome in outcomes:
        if outcome.latency is None:
            log.warning("Failed to check speed of %s: %s", outcome.peer.address, outcome.error)
        else:
            log.info("Peer %s speed: %.1fms", outcome.peer.address, outcome.latency * 1000)

    classification = classify(outcomes, threshold=config.threshold)
    for peer in classification.slow:
        log.info("Too slow: %s", peer.address)
    for tier in Tier:
        probes.labels(tier=tier.value).inc(len(classification.bucket(tier)))

    selection = select_fastest(classification, config.n)
    log.info(
        "Probed %d peers: %d fast, %d slow, %d unreachable",
        len(peers),
        len(classification.fast),
        len(classification.slow),
        len(classification.unreachable),
    )
    return SelectionResult(classification=classification, selection=selection, total=len(peers))
