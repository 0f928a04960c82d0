"""Tests for the peer directory client."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from fastpeers.exceptions import CancellationError, ConfigError, DecodeError, TransportError
from fastpeers.metrics import REGISTRY
from fastpeers.rpc import decode_network_info, fetch_active_peers
from tests.fastpeers.helpers import network_info_body

RPC_URL = "http://node.test:3030"


def _rpc_count(outcome: str) -> float:
    return REGISTRY.get_sample_value("fastpeers_rpc_requests_total", {"outcome": outcome}) or 0.0


class TestDecodeNetworkInfo:
    """Tests for decode_network_info()."""

    def test_decodes_peers(self) -> None:
        """Peers are decoded in upstream order."""
        body = network_info_body(
            [
                {"account_id": None, "addr": "10.0.0.1:24567", "id": "ed25519:a"},
                {"account_id": "v.near", "addr": "10.0.0.2:24567", "id": "ed25519:b"},
            ]
        )

        peers = decode_network_info(body)

        assert [p.address for p in peers] == ["10.0.0.1:24567", "10.0.0.2:24567"]
        assert peers[1].account_id == "v.near"

    def test_empty_peer_list(self) -> None:
        """Zero active peers is a valid response."""
        assert decode_network_info(network_info_body([])) == []

    def test_malformed_json(self) -> None:
        """A body that is not JSON raises DecodeError."""
        with pytest.raises(DecodeError, match="not valid JSON"):
            decode_network_info(b'{"result": {"active_peers": [')

    def test_jsonrpc_error(self) -> None:
        """An in-band JSON-RPC error raises DecodeError."""
        body = json.dumps(
            {"jsonrpc": "2.0", "id": "dontcare", "error": {"code": -32601, "message": "nope"}}
        )
        with pytest.raises(DecodeError, match="node returned an error"):
            decode_network_info(body)

    def test_active_peers_not_a_list(self) -> None:
        """active_peers of the wrong type raises DecodeError."""
        with pytest.raises(DecodeError, match="unexpected shape"):
            decode_network_info(json.dumps({"result": {"active_peers": "none"}}))

    def test_top_level_array(self) -> None:
        """A top-level array raises DecodeError."""
        with pytest.raises(DecodeError):
            decode_network_info(b"[]")

    def test_error_keeps_detail(self) -> None:
        """DecodeError exposes what went wrong."""
        with pytest.raises(DecodeError) as exc_info:
            decode_network_info(b"{}")
        assert "unexpected shape" in exc_info.value.detail


class TestFetchActivePeers:
    """Tests for fetch_active_peers()."""

    @pytest.mark.anyio
    async def test_sends_network_info_request(self) -> None:
        """The fixed JSON-RPC body is POSTed as JSON."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=network_info_body([]))

        await fetch_active_peers(RPC_URL, transport=httpx.MockTransport(handler))

        assert len(seen) == 1
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url).rstrip("/") == RPC_URL
        assert request.headers["content-type"] == "application/json"
        assert json.loads(request.content) == {
            "jsonrpc": "2.0",
            "id": "dontcare",
            "method": "network_info",
            "params": [],
        }

    @pytest.mark.anyio
    async def test_returns_peers(self) -> None:
        """A well-formed response yields the listed peers."""
        body = network_info_body([{"addr": "a:1", "id": "x"}, {"addr": "b:2", "id": "y"}])
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=body))
        before = _rpc_count("ok")

        peers = await fetch_active_peers(RPC_URL, transport=transport)

        assert [p.address for p in peers] == ["a:1", "b:2"]
        assert _rpc_count("ok") == before + 1

    @pytest.mark.anyio
    async def test_connection_refused(self) -> None:
        """A connect failure raises TransportError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        before = _rpc_count("transport_error")
        with pytest.raises(TransportError, match="Network error"):
            await fetch_active_peers(RPC_URL, transport=httpx.MockTransport(handler))
        assert _rpc_count("transport_error") == before + 1

    @pytest.mark.anyio
    async def test_http_error_status(self) -> None:
        """A non-2xx status raises TransportError."""
        transport = httpx.MockTransport(lambda request: httpx.Response(503, text="unavailable"))
        with pytest.raises(TransportError, match="HTTP error 503"):
            await fetch_active_peers(RPC_URL, transport=transport)

    @pytest.mark.anyio
    async def test_deadline_elapses(self) -> None:
        """A response slower than the deadline raises CancellationError."""

        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200, content=network_info_body([]))

        before = _rpc_count("timeout")
        with pytest.raises(CancellationError) as exc_info:
            await fetch_active_peers(
                RPC_URL, deadline=0.05, transport=httpx.MockTransport(handler)
            )

        assert exc_info.value.timeout == 0.05
        assert _rpc_count("timeout") == before + 1

    @pytest.mark.anyio
    async def test_malformed_body(self) -> None:
        """A malformed body raises DecodeError."""
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"<html>"))
        before = _rpc_count("decode_error")
        with pytest.raises(DecodeError):
            await fetch_active_peers(RPC_URL, transport=transport)
        assert _rpc_count("decode_error") == before + 1

    @pytest.mark.anyio
    @pytest.mark.parametrize("deadline", [0, -1.0])
    async def test_non_positive_deadline(self, deadline: float) -> None:
        """A non-positive deadline is rejected before any request."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        with pytest.raises(ConfigError):
            await fetch_active_peers(
                RPC_URL, deadline=deadline, transport=httpx.MockTransport(handler)
            )

    @pytest.mark.anyio
    async def test_upstream_latency_not_trusted(self) -> None:
        """Decoded peers carry no latency even if the node reports one."""
        body = network_info_body([{"addr": "a:1", "id": "x", "latency": 0.5}])
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=body))

        peers = await fetch_active_peers(RPC_URL, transport=transport)

        assert peers[0].latency is None
