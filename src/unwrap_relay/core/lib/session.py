"""Relay session: one accepted local connection and its remote peer.

A session moves through three phases:
- Dialing: connect to the remote endpoint, plain TCP or TLS
- Piping: two directional pipes and a traffic reporter run concurrently
- Terminated: the first pipe failure stops everything and both legs close

Exactly one remote connection is attempted per session and exactly one
termination is processed, however many pipes fail afterwards. Sessions are
never reused.

Example:
    session = Session(1, conn, ("0.0.0.0", 6360), ("10.0.0.5", 636))
    session.start()  # blocks until the session ends
"""

import contextlib
import socket
import ssl
import threading
from typing import Final

from loguru import logger

from unwrap_relay.core.exceptions import AddressResolutionError
from unwrap_relay.core.lib.dns_handler import parse_address
from unwrap_relay.core.lib.pipe import pipe
from unwrap_relay.core.lib.reporter import REPORT_INTERVAL, TrafficReporter
from unwrap_relay.core.lib.termination import TerminationCoordinator
from unwrap_relay.core.utils.utils import format_address

Address = tuple[str, int]

PIPE_JOIN_TIMEOUT: Final = 1.0  # Seconds


def wake_connection(conn: socket.socket) -> None:
    """Shut down both directions so a pipe blocked on conn returns."""
    # socket.socket.shutdown keeps an SSLSocket's TLS object in place while
    # another pipe thread may still be using it
    with contextlib.suppress(OSError):
        socket.socket.shutdown(conn, socket.SHUT_RDWR)


def close_connection(conn: socket.socket) -> None:
    """Close a connection, logging a close failure."""
    try:
        conn.close()
    except OSError as e:
        logger.error(f"error while closing: {e}")


class Session:
    """Relay bytes between a local connection and one remote connection."""

    def __init__(
        self,
        session_id: int,
        local_conn: socket.socket,
        local_addr: Address,
        remote_addr: Address,
        tls_unwrap: bool = False,
        tls_address: str | None = None,
        *,
        ssl_context: ssl.SSLContext | None = None,
        report_interval: float = REPORT_INTERVAL,
    ) -> None:
        """Create a session. No I/O happens here.

        Args:
            session_id: Id assigned by the acceptor, used in log lines
            local_conn: Accepted local connection, owned by the session from now on
            local_addr: Address the relay listens on
            remote_addr: Resolved remote address used for plain dials
            tls_unwrap: Dial the remote side with TLS
            tls_address: Remote target as host:port, used for the TLS dial
            ssl_context: TLS client context; system trust when omitted
            report_interval: Seconds between traffic report ticks
        """
        self.session_id = session_id
        self.local_conn = local_conn
        self.local_addr = local_addr
        self.remote_addr = remote_addr
        self.tls_unwrap = tls_unwrap
        self.tls_address = tls_address or format_address(remote_addr)
        self.ssl_context = ssl_context
        self.report_interval = report_interval

        self.remote_conn: socket.socket | None = None
        self.sent_bytes = 0
        self.received_bytes = 0
        self.coordinator = TerminationCoordinator(session_id)
        self._pipes: list[threading.Thread] = []

    def _dial(self) -> socket.socket:
        if not self.tls_unwrap:
            return socket.create_connection(self.remote_addr)

        host, port = parse_address(self.tls_address)
        context = self.ssl_context or ssl.create_default_context()
        raw = socket.create_connection((host, port))
        try:
            return context.wrap_socket(raw, server_hostname=host)
        except (OSError, ValueError):
            raw.close()
            raise

    def counters(self) -> tuple[int, int]:
        return self.sent_bytes, self.received_bytes

    def _start_pipe(self, src: socket.socket, dst: socket.socket, name: str) -> None:
        thread = threading.Thread(
            target=pipe, args=(self, src, dst), name=f"{name}-{self.session_id}", daemon=True
        )
        self._pipes.append(thread)
        thread.start()

    def _connections(self) -> list[socket.socket]:
        return [conn for conn in (self.remote_conn, self.local_conn) if conn is not None]

    def _stop_pipes(self) -> None:
        for conn in self._connections():
            wake_connection(conn)
        for thread in self._pipes:
            thread.join(PIPE_JOIN_TIMEOUT)

    def start(self) -> None:
        """Dial the remote side and relay until either direction fails."""
        try:
            try:
                self.remote_conn = self._dial()
            except (OSError, ValueError, AddressResolutionError) as e:
                logger.error(f"[{self.session_id}] remote connection failed: {e}")
                return

            logger.info(
                f"[{self.session_id}] opened {format_address(self.local_addr)} "
                f"> {format_address(self.remote_addr)}"
            )
            self._start_pipe(self.local_conn, self.remote_conn, "upstream")
            self._start_pipe(self.remote_conn, self.local_conn, "downstream")

            reporter = TrafficReporter(self.session_id, self.counters, self.report_interval)
            reporter.start()

            self.coordinator.wait()
            reporter.stop()
            self._stop_pipes()
            logger.info(
                f"[{self.session_id}] closed ({self.sent_bytes} bytes sent, "
                f"{self.received_bytes} bytes received)"
            )
        finally:
            for conn in self._connections():
                close_connection(conn)
            self.coordinator.mark_terminated()
