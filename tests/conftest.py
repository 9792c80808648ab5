"""
Shared pytest fixtures for relay tests.

This module provides:
- A loguru capture sink exposing (level, message) records
- Threaded plain and TLS echo servers on loopback
- A remote that greets and hangs up
- TLS contexts built from the bundled test CA
"""

import socket
import ssl
import threading
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

import pytest
from loguru import logger

DATA_DIR = Path(__file__).parent / "data"
CA_FILE = DATA_DIR / "ca.pem"
SERVER_CERT = DATA_DIR / "server.pem"


# =============================================================================
# Log capture
# =============================================================================


@dataclass
class LogCapture:
    """Collect loguru records emitted during a test."""

    records: list[tuple[str, str]] = field(default_factory=list)

    def sink(self, message) -> None:
        record = message.record
        self.records.append((record["level"].name, record["message"]))

    @property
    def messages(self) -> list[str]:
        return [message for _, message in self.records]

    def matching(self, needle: str) -> list[str]:
        return [message for message in self.messages if needle in message]

    def at_level(self, level: str) -> list[str]:
        return [message for lvl, message in self.records if lvl == level]

    def wait_for(self, needle: str, timeout: float = 5.0) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if self.matching(needle):
                return True
            time.sleep(0.01)
        return False


@pytest.fixture
def log_capture() -> Iterator[LogCapture]:
    capture = LogCapture()
    handler_id = logger.add(capture.sink, level="DEBUG", format="{message}")
    yield capture
    logger.remove(handler_id)


# =============================================================================
# Loopback servers
# =============================================================================


class LoopbackServer:
    """Accept loop on 127.0.0.1 running one handler thread per connection."""

    def __init__(self, handler: Callable[[socket.socket], None], wrap: Callable | None = None):
        self.handler = handler
        self.wrap = wrap
        self.listener = socket.create_server(("127.0.0.1", 0))
        self.address = self.listener.getsockname()[:2]
        self.accepted = 0
        self._thread = threading.Thread(target=self._accept_loop, daemon=True)
        self._thread.start()

    def _accept_loop(self) -> None:
        while True:
            try:
                conn, _ = self.listener.accept()
            except OSError:
                return
            self.accepted += 1
            threading.Thread(target=self._serve, args=(conn,), daemon=True).start()

    def _serve(self, conn: socket.socket) -> None:
        try:
            if self.wrap is not None:
                conn = self.wrap(conn)
            self.handler(conn)
        except OSError:
            pass
        finally:
            conn.close()

    def close(self) -> None:
        self.listener.close()


def echo(conn: socket.socket) -> None:
    while True:
        data = conn.recv(65536)
        if not data:
            return
        conn.sendall(data)


@pytest.fixture
def echo_server() -> Iterator[LoopbackServer]:
    server = LoopbackServer(echo)
    yield server
    server.close()


@pytest.fixture
def greeting_server() -> Iterator[LoopbackServer]:
    """Remote that sends a greeting and closes straight away."""

    def greet(conn: socket.socket) -> None:
        conn.sendall(b"hello")

    server = LoopbackServer(greet)
    yield server
    server.close()


@pytest.fixture
def server_tls_context() -> ssl.SSLContext:
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.load_cert_chain(SERVER_CERT)
    return context


@pytest.fixture
def client_tls_context() -> ssl.SSLContext:
    return ssl.create_default_context(cafile=str(CA_FILE))


@pytest.fixture
def tls_echo_server(server_tls_context) -> Iterator[LoopbackServer]:
    server = LoopbackServer(
        echo, wrap=lambda conn: server_tls_context.wrap_socket(conn, server_side=True)
    )
    yield server
    server.close()


@pytest.fixture
def closed_port() -> int:
    """A loopback port nothing listens on."""
    with socket.create_server(("127.0.0.1", 0)) as sock:
        return sock.getsockname()[1]

