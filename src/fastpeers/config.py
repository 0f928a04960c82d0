"""
Run configuration.

Everything a scan needs is carried in one record and handed to the
pipeline explicitly, so a scan can be started from code without touching
process-wide state.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field, ValidationError

from fastpeers.exceptions import ConfigError
from fastpeers.probe.config import (
    LATENCY_THRESHOLD_MS,
    MAX_CONCURRENT_PROBES,
    MAX_SELECTED_PEERS,
    PROBE_TIMEOUT,
)
from fastpeers.rpc import DEFAULT_FETCH_DEADLINE, DEFAULT_RPC_URL
from fastpeers.types import StrictBaseModel


class ProbeConfig(StrictBaseModel):
    """Parameters of a single scan."""

    rpc_url: str = Field(default=DEFAULT_RPC_URL, min_length=1)
    """JSON-RPC endpoint of the node to ask for peers."""

    n: int = Field(default=MAX_SELECTED_PEERS, ge=0)
    """Maximum number of peers to select."""

    threshold_ms: int = Field(default=LATENCY_THRESHOLD_MS, ge=0)
    """Connect latency in milliseconds above which a peer is slow."""

    probe_timeout: float = Field(default=PROBE_TIMEOUT, gt=0)
    """Timeout for one connect attempt in seconds."""

    fetch_timeout: float = Field(default=DEFAULT_FETCH_DEADLINE, gt=0)
    """Deadline for the directory fetch in seconds."""

    concurrency: int = Field(default=MAX_CONCURRENT_PROBES, ge=1)
    """Maximum probes in flight at once."""

    deadline: float | None = Field(default=None, gt=0)
    """Optional limit in seconds for the whole probe phase."""

    @property
    def threshold(self) -> float:
        """The latency threshold in seconds."""
        return self.threshold_ms / 1000

    @classmethod
    def create(cls, **values: Any) -> ProbeConfig:
        """
        Build a config, reporting invalid values as a ConfigError.

        Raises:
            ConfigError: If any value is out of range.
        """
        try:
            return cls(**values)
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in exc.errors()
            )
            raise ConfigError(f"Invalid configuration: {problems}") from exc
