"""
Metric registry using prometheus_client.

Provides pre-defined metrics for directory fetches and peer probes.
"""

from __future__ import annotations

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
    write_to_textfile,
)

# Create a dedicated registry for fastpeers metrics.
#
# Using a dedicated registry avoids pollution from default Python process metrics.
REGISTRY = CollectorRegistry()

# -----------------------------------------------------------------------------
# Directory Fetch
# -----------------------------------------------------------------------------

rpc_requests = Counter(
    "fastpeers_rpc_requests_total",
    "network_info requests by outcome",
    ["outcome"],
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
# Peer Probes
# -----------------------------------------------------------------------------

probes = Counter(
    "fastpeers_probes_total",
    "Peer probes by resulting tier",
    ["tier"],
    registry=REGISTRY,
)

probe_latency = Histogram(
    "fastpeers_probe_latency_seconds",
    "TCP connect latency of successful probes",
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
    registry=REGISTRY,
)


def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics output.

    Returns:
        Prometheus text format output as bytes.
    """
    return generate_latest(REGISTRY)


def write_metrics(path: str) -> None:
    """
    Write metrics to a file in Prometheus text format.

    The file is replaced atomically, so it can be read by the node exporter
    textfile collector while a scan is writing it.
    """
    write_to_textfile(path, REGISTRY)
