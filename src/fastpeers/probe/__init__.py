"""
Peer speed probing.

Overview
--------

Each candidate peer is dialed once over TCP:

1. **Probe**: time the connect, then close it
2. **Classify**: fast, slow, or unreachable against a latency threshold
3. **Select**: the first N of the fast tier, ordered by latency

No probe is retried, and no protocol handshake is attempted.
"""

from .classifier import Classification, Tier, classify, select_fastest, tier_of
from .config import LATENCY_THRESHOLD_MS, MAX_CONCURRENT_PROBES, MAX_SELECTED_PEERS, PROBE_TIMEOUT
from .prober import ProbeOutcome, Prober, parse_address, probe_peer, probe_peers

__all__ = [
    # Classification
    "Classification",
    "Tier",
    "classify",
    "select_fastest",
    "tier_of",
    # Probing
    "ProbeOutcome",
    "Prober",
    "parse_address",
    "probe_peer",
    "probe_peers",
    # Constants
    "LATENCY_THRESHOLD_MS",
    "MAX_CONCURRENT_PROBES",
    "MAX_SELECTED_PEERS",
    "PROBE_TIMEOUT",
]
