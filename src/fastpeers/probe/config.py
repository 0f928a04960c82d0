"""
Probe configuration constants.

Operational parameters for peer probing: timeouts, thresholds, and limits.
"""

from __future__ import annotations

from typing import Final

PROBE_TIMEOUT: Final[float] = 3.0
"""Timeout for a single TCP connect attempt in seconds."""

LATENCY_THRESHOLD_MS: Final[int] = 1000
"""Connect latency above which a reachable peer counts as slow."""

MAX_SELECTED_PEERS: Final[int] = 30
"""Default number of fast peers to select."""

MAX_CONCURRENT_PROBES: Final[int] = 16
"""Maximum probes in flight at once. One reproduces a sequential scan."""
