"""Custom exceptions for the relay.

This module defines the exceptions used throughout the relay implementation.
They separate the expected from the unexpected:
- A peer closing its side of a connection
- Address parsing and resolution failures at startup

End-of-stream is modelled as an exception so a directional pipe can hand it
to the termination coordinator through the same path as a socket error. The
coordinator recognises it and keeps it out of the error log.

Example:
    try:
        address = resolver.resolve_tcp_address("remote_server.test:636")
    except AddressResolutionError as e:
        console.print(f"[red]Failed to resolve remote address: {e}")
"""


class RelayError(Exception):
    """Base exception for relay errors."""


class EndOfStream(RelayError):
    """Raised when a peer closes its side of the connection."""

    def __init__(self, message: str = "EOF") -> None:
        super().__init__(message)


class AddressResolutionError(RelayError):
    """Raised when an address cannot be parsed or resolved."""
