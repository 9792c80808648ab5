"""Threaded TCP acceptor for the relay.

This module implements the listening side of the relay:
- A threaded TCP server that hands each accepted connection to a Session
- The process-wide session id counter
- Logging of accept errors without stopping the accept loop
- Clean shutdown handling

Each accepted connection gets its own handler thread. Sessions share nothing
with each other except the id counter owned by the server and the aggregate
statistics, which are only touched before and after a session runs.

Example:
    config = RelayConfig(local_addr=("", 6360), remote_addr=("10.0.0.5", 636))
    server = create_relay_server(config)
    run_server(server)
"""

import contextlib
import socket
import socketserver
import ssl
import threading
from dataclasses import dataclass, field

from loguru import logger

from unwrap_relay.core.lib.relay_stats import RelayStats, relay_stats
from unwrap_relay.core.lib.reporter import REPORT_INTERVAL
from unwrap_relay.core.lib.session import Address, Session
from unwrap_relay.core.utils.utils import format_address


@dataclass
class RelayConfig:
    """Resolved relay settings handed over by the command line.

    Attributes:
        local_addr: Address to listen on; an empty host means all interfaces
        remote_addr: Resolved remote address used for plain dials
        tls_unwrap: Dial the remote side with TLS
        tls_address: Remote target as typed by the user, used for the TLS dial
        report_interval: Seconds between per-session traffic reports
        ssl_context: TLS client context; system trust when omitted
    """

    local_addr: Address
    remote_addr: Address
    tls_unwrap: bool = False
    tls_address: str | None = None
    report_interval: float = REPORT_INTERVAL
    ssl_context: ssl.SSLContext | None = field(default=None, repr=False)


class RelayHandler(socketserver.BaseRequestHandler):
    """Run one relay session for an accepted connection."""

    server: "RelayServer"

    def handle(self) -> None:
        config = self.server.config
        session = Session(
            self.server.next_session_id(),
            self.request,
            self.server.server_address[:2],
            config.remote_addr,
            config.tls_unwrap,
            config.tls_address,
            ssl_context=config.ssl_context,
            report_interval=config.report_interval,
        )
        logger.debug(f"[{session.session_id}] accepted {format_address(self.client_address)}")

        self.server.stats.session_started(session)
        try:
            session.start()
        finally:
            self.server.stats.session_ended(session)


class RelayServer(socketserver.ThreadingMixIn, socketserver.TCPServer):
    """Relay server accepting local connections."""

    allow_reuse_address = True
    daemon_threads = True
    request_queue_size = 100

    def __init__(self, config: RelayConfig, stats: RelayStats | None = None) -> None:
        """Bind the listening socket.

        Args:
            config: Resolved relay settings
            stats: Aggregate statistics; the process-wide tracker when omitted

        Raises:
            OSError: If the local address cannot be bound
        """
        self.config = config
        self.stats = stats if stats is not None else relay_stats
        self._last_session_id = 0
        self._id_lock = threading.Lock()
        if ":" in config.local_addr[0]:
            self.address_family = socket.AF_INET6
        super().__init__(config.local_addr, RelayHandler)

    def next_session_id(self) -> int:
        """Return the next session id, unique for the server's lifetime."""
        with self._id_lock:
            self._last_session_id += 1
            return self._last_session_id

    def get_request(self) -> tuple[socket.socket, Address]:
        try:
            return super().get_request()
        except OSError as e:
            # socketserver drops the failed accept and keeps serving
            logger.error(f"failed to accept connection '{e}'")
            raise

    def handle_error(self, request, client_address) -> None:
        logger.exception(f"Unhandled error while relaying for {format_address(client_address)}")


def create_relay_server(config: RelayConfig, stats: RelayStats | None = None) -> RelayServer:
    """Create a relay server bound to the configured local address."""
    server = RelayServer(config, stats)
    logger.info(f"Relay listening on {format_address(server.server_address[:2])}")
    return server


def run_server(server: RelayServer) -> None:
    """Serve until interrupted, then close the listening socket.

    Args:
        server: Bound relay server
    """
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Relay stopping")
    finally:
        with contextlib.suppress(OSError):
            server.server_close()
        logger.info("Server closed")
