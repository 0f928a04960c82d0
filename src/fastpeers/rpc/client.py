"""
Peer directory client.

Asks a node for the peers it is currently connected to. The node's
``network_info`` JSON-RPC method returns them along with their advertised
transport addresses, which is all the prober needs.

The fetch is a single attempt. A node that cannot answer is not a source
of peers, and retrying would only hide a misconfigured endpoint from the
operator.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Final

import httpx
from pydantic import ValidationError

from fastpeers.exceptions import CancellationError, ConfigError, DecodeError, TransportError
from fastpeers.metrics import rpc_requests

from .messages import NETWORK_INFO_REQUEST, NetworkInfoResponse, Peer

logger = logging.getLogger(__name__)

DEFAULT_RPC_URL: Final = "http://localhost:3030"
"""JSON-RPC endpoint of a locally running node."""

DEFAULT_FETCH_DEADLINE: Final = 3.0
"""Time allowed for the whole directory fetch, in seconds."""


async def fetch_active_peers(
    url: str,
    *,
    deadline: float = DEFAULT_FETCH_DEADLINE,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[Peer]:
    """
    Fetch the active peer set from a node.

    Args:
        url: JSON-RPC endpoint of the node (e.g., "http://localhost:3030").
        deadline: Seconds allowed before the fetch is abandoned.
        transport: Optional httpx transport, used to stub the node in tests.

    Returns:
        Peers in the order the node listed them.

    Raises:
        ConfigError: If the deadline is not positive.
        TransportError: If the node cannot be reached or answers with an error status.
        CancellationError: If the deadline elapses first.
        DecodeError: If the response is not a well-formed network_info result.
    """
    if deadline <= 0:
        raise ConfigError(f"Fetch deadline must be positive, got {deadline}")

    logger.info("Fetching active peers from %s", url)

    try:
        body = await asyncio.wait_for(_post(url, deadline, transport), timeout=deadline)
    except asyncio.TimeoutError as exc:
        rpc_requests.labels(outcome="timeout").inc()
        raise CancellationError(
            f"Request to {url} canceled after {deadline}s", timeout=deadline
        ) from exc
    except TransportError:
        rpc_requests.labels(outcome="transport_error").inc()
        raise

    try:
        peers = decode_network_info(body)
    except DecodeError:
        rpc_requests.labels(outcome="decode_error").inc()
        raise

    rpc_requests.labels(outcome="ok").inc()
    logger.info("Node reported %d active peers", len(peers))
    return peers


async def _post(
    url: str,
    timeout: float,
    transport: httpx.AsyncBaseTransport | None,
) -> bytes:
    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            response = await client.post(url, json=NETWORK_INFO_REQUEST)
            response.raise_for_status()
            return response.content

    except httpx.RequestError as exc:
        raise TransportError(f"Network error while connecting to {url}: {exc}") from exc
    except httpx.HTTPStatusError as exc:
        raise TransportError(
            f"HTTP error {exc.response.status_code}: {exc.response.text[:200]}"
        ) from exc


def decode_network_info(body: bytes | str) -> list[Peer]:
    """
    Decode a raw ``network_info`` response body into peers.

    Raises:
        DecodeError: If the body is not JSON, carries a JSON-RPC error, or
            lacks a list at ``result.active_peers``.
    """
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DecodeError(f"body is not valid JSON: {exc}") from exc

    # JSON-RPC reports method failures in-band with a 200 status.
    if isinstance(payload, dict) and "error" in payload:
        raise DecodeError(f"node returned an error: {payload['error']}")

    try:
        response = NetworkInfoResponse.model_validate(payload)
    except ValidationError as exc:
        raise DecodeError(f"unexpected shape: {exc.error_count()} validation errors") from exc

    return response.result.active_peers
