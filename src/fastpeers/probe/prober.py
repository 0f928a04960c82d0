"""
Peer connect probes.

A probe answers one question: how long does it take to open a TCP
connection to the peer? The connection is closed as soon as it is
established. Nothing is sent, so the measurement is the handshake round
trip plus local scheduling overhead, which is what matters when choosing
persistent peers.

Probe failures are data, not errors. A refused or timed out connection
produces an outcome carrying the error, and the scan moves on.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

from fastpeers.exceptions import (
    CancellationError,
    ConfigError,
    FastPeersError,
    TransportError,
)
from fastpeers.metrics import probe_latency
from fastpeers.rpc import Peer

from .config import MAX_CONCURRENT_PROBES, PROBE_TIMEOUT

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProbeOutcome:
    """Result of probing one peer. Exactly one of latency and error is set."""

    peer: Peer
    """The probed peer, carrying its latency when the probe succeeded."""

    latency: float | None = None
    """Connect latency in seconds."""

    error: FastPeersError | None = None
    """Why the peer could not be reached."""

    @property
    def reachable(self) -> bool:
        """Check if the connection was established."""
        return self.error is None


Prober = Callable[..., Awaitable[ProbeOutcome]]
"""Signature of ``probe_peer``, replaceable for tests."""


def parse_address(addr: str) -> tuple[str, int]:
    """
    Split a ``host:port`` address.

    Bracketed IPv6 hosts (``[::1]:24567``) are accepted.

    Raises:
        TransportError: If the address cannot be dialed.
    """
    if not addr:
        raise TransportError("Peer has no address")

    host, sep, port_str = addr.rpartition(":")
    if not sep or not host:
        raise TransportError(f"Address {addr!r} has no port")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]

    # isdigit() alone admits characters such as superscripts that int() rejects.
    if not (port_str.isascii() and port_str.isdigit()) or not 0 < int(port_str) < 65536:
        raise TransportError(f"Address {addr!r} has an invalid port")

    return host, int(port_str)


async def probe_peer(peer: Peer, *, timeout: float = PROBE_TIMEOUT) -> ProbeOutcome:
    """
    Measure the TCP connect latency of a peer.

    Args:
        peer: Peer to dial.
        timeout: Seconds to wait for the connection.

    Returns:
        An outcome with the latency on success, or with the error on failure.
    """
    try:
        host, port = parse_address(peer.address)
    except TransportError as exc:
        logger.debug("Not dialing %r: %s", peer.address, exc)
        return ProbeOutcome(peer=peer, error=exc)

    start = time.perf_counter()
    try:
        _, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout=timeout)
    except asyncio.TimeoutError:
        error: FastPeersError = CancellationError(
            f"Connect to {peer.address} timed out after {timeout}s", timeout=timeout
        )
        logger.debug("Probe of %s failed: %s", peer.address, error)
        return ProbeOutcome(peer=peer, error=error)
    except (OSError, ValueError) as exc:
        # Resolver rejects hosts such as "a..b" with UnicodeError, a ValueError.
        error = TransportError(f"Connect to {peer.address} failed: {exc}")
        logger.debug("Probe of %s failed: %s", peer.address, error)
        return ProbeOutcome(peer=peer, error=error)

    latency = time.perf_counter() - start

    # Only the handshake is measured. Release the socket right away.
    writer.close()
    try:
        await writer.wait_closed()
    except OSError as exc:
        logger.debug("Error closing probe connection to %s: %s", peer.address, exc)

    probe_latency.observe(latency)
    logger.debug("Connected to %s in %.1fms", peer.address, latency * 1000)
    return ProbeOutcome(peer=peer.with_latency(latency), latency=latency)


async def probe_peers(
    peers: Sequence[Peer],
    *,
    timeout: float = PROBE_TIMEOUT,
    concurrency: int = MAX_CONCURRENT_PROBES,
    deadline: float | None = None,
    probe: Prober = probe_peer,
) -> list[ProbeOutcome]:
    """
    Probe every peer on a bounded pool of concurrent tasks.

    Outcomes are returned only once every probe has settled, in the same
    order as the input.

    Args:
        peers: Peers to probe.
        timeout: Per-probe connect timeout in seconds.
        concurrency: Maximum probes in flight at once.
        deadline: Optional limit in seconds for the whole scan. Probes that
            have not settled by then are cancelled and reported unreachable.
        probe: Probe implementation.

    Returns:
        One outcome per input peer.

    Raises:
        ConfigError: If concurrency or deadline are out of range.
    """
    if concurrency < 1:
        raise ConfigError(f"Probe concurrency must be at least 1, got {concurrency}")
    if deadline is not None and deadline <= 0:
        raise ConfigError(f"Probe deadline must be positive, got {deadline}")

    if not peers:
        return []

    semaphore = asyncio.Semaphore(concurrency)

    async def _bounded(peer: Peer) -> ProbeOutcome:
        async with semaphore:
            return await probe(peer, timeout=timeout)

    tasks = [asyncio.create_task(_bounded(peer)) for peer in peers]

    # Fan-in barrier.
    #
    # Aggregation must never see a partial set, so wait for every task to
    # settle or for the umbrella deadline, whichever comes first.
    _, pending = await asyncio.wait(tasks, timeout=deadline)
    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)
        logger.warning("Scan deadline of %ss reached, %d probes cancelled", deadline, len(pending))

    outcomes: list[ProbeOutcome] = []
    for peer, task in zip(peers, tasks, strict=True):
        if task in pending:
            outcomes.append(
                ProbeOutcome(
                    peer=peer,
                    error=CancellationError(
                        f"Probe of {peer.address} cancelled by scan deadline", timeout=deadline
                    ),
                )
            )
        else:
            outcomes.append(task.result())
    return outcomes
