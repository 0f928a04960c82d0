"""Exception hierarchy for peer discovery and probing."""

from __future__ import annotations


class FastPeersError(Exception):
    """
    Base exception for all fastpeers errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class TransportError(FastPeersError):
    """
    Raised when a network endpoint cannot be reached.

    Covers the RPC endpoint (refused, unreachable, HTTP timeout, bad status)
    and individual peers (refused, unreachable host, malformed address).
    """


class CancellationError(FastPeersError):
    """
    Raised when a deadline elapses before an operation completes.

    Attributes:
        timeout: The deadline in seconds that was exceeded.
    """

    def __init__(self, message: str, *, timeout: float | None = None) -> None:
        self.timeout = timeout
        super().__init__(message)


class DecodeError(FastPeersError):
    """
    Raised when a response does not match the expected schema.

    Attributes:
        detail: Description of what went wrong.
    """

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Failed to decode network_info response: {detail}")


class ConfigError(FastPeersError):
    """
    Raised when selection parameters are invalid.

    Always raised before any network I/O takes place.
    """
