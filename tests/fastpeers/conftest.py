"""
Shared pytest fixtures for fastpeers tests.

Provides loopback sockets for probe tests.
"""

from __future__ import annotations

import socket
from collections.abc import Iterator

import pytest


@pytest.fixture
def anyio_backend() -> str:
    """Run async tests on asyncio only."""
    return "asyncio"


@pytest.fixture
def listening_addr() -> Iterator[str]:
    """
    Address of a loopback socket accepting connections.

    The kernel completes the handshake from the listen backlog, so no
    accept loop is needed for connect probes.
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(16)
    host, port = sock.getsockname()
    try:
        yield f"{host}:{port}"
    finally:
        sock.close()


@pytest.fixture
def closed_addr() -> str:
    """Address of a loopback port nothing listens on."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    host, port = sock.getsockname()
    sock.close()
    return f"{host}:{port}"
