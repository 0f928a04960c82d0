"""
Metrics module for observability.

Counts directory fetches and probe outcomes, and tracks connect latency.
Exposes metrics in Prometheus text format.
"""

from .registry import (
    REGISTRY,
    generate_metrics,
    probe_latency,
    probes,
    rpc_requests,
    write_metrics,
)

__all__ = [
    "REGISTRY",
    "generate_metrics",
    "probe_latency",
    "probes",
    "rpc_requests",
    "write_metrics",
]
