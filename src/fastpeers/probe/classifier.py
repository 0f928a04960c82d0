"""
Peer classification and selection.

Turns probe outcomes into speed tiers and picks the fastest peers.

Tiers
-----
- **fast**: reachable, latency at or below the threshold
- **slow**: reachable, latency above the threshold
- **unreachable**: the probe failed

Every peer lands in exactly one tier. The fast tier is ordered by ascending
latency; equal latencies keep their probe order.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from fastpeers.exceptions import ConfigError
from fastpeers.rpc import Peer

from .prober import ProbeOutcome


class Tier(str, Enum):
    """Speed tier of a probed peer."""

    FAST = "fast"
    SLOW = "slow"
    UNREACHABLE = "unreachable"


def tier_of(outcome: ProbeOutcome, threshold: float) -> Tier:
    """Return the tier for a single probe outcome."""
    if outcome.latency is None:
        return Tier.UNREACHABLE
    if outcome.latency > threshold:
        return Tier.SLOW
    return Tier.FAST


@dataclass(slots=True)
class Classification:
    """Probed peers split into disjoint tiers."""

    fast: list[Peer] = field(default_factory=list)
    """Reachable peers within the threshold, fastest first."""

    slow: list[Peer] = field(default_factory=list)
    """Reachable peers above the threshold, in probe order."""

    unreachable: list[Peer] = field(default_factory=list)
    """Peers whose probe failed, in probe order."""

    def __len__(self) -> int:
        """Return the total number of classified peers."""
        return len(self.fast) + len(self.slow) + len(self.unreachable)

    def bucket(self, tier: Tier) -> list[Peer]:
        """Get the peers in a tier."""
        if tier is Tier.FAST:
            return self.fast
        if tier is Tier.SLOW:
            return self.slow
        return self.unreachable


def classify(outcomes: Iterable[ProbeOutcome], *, threshold: float) -> Classification:
    """
    Assign each outcome to a tier and order the fast tier.

    Args:
        outcomes: Probe outcomes in probe order.
        threshold: Latency limit in seconds for the fast tier (inclusive).

    Returns:
        The classification.

    Raises:
        ConfigError: If the threshold is negative.
    """
    if threshold < 0:
        raise ConfigError(f"Latency threshold must not be negative, got {threshold}")

    result = Classification()
    for outcome in outcomes:
        result.bucket(tier_of(outcome, threshold)).append(outcome.peer)

    # list.sort is stable, so ties keep their probe order.
    result.fast.sort(key=_latency)
    return result


def select_fastest(classification: Classification, n: int) -> list[Peer]:
    """
    Select up to ``n`` peers from the front of the fast tier.

    Fewer than ``n`` fast peers is not an error; all of them are returned.

    Raises:
        ConfigError: If n is negative.
    """
    if n < 0:
        raise ConfigError(f"Peer count must not be negative, got {n}")
    return classification.fast[:n]


def _latency(peer: Peer) -> float:
    # Fast peers always carry a latency.
    assert peer.latency is not None
    return peer.latency
