"""Directional byte copy between the two legs of a session."""

import socket
from typing import TYPE_CHECKING, Final

from unwrap_relay.core.exceptions import EndOfStream

if TYPE_CHECKING:
    from unwrap_relay.core.lib.session import Session

# One byte short of 64 KiB; counters and chunk boundaries depend on it
BUFFER_SIZE: Final = 0xFFFF


def pipe(session: "Session", src: socket.socket, dst: socket.socket) -> None:
    """Copy bytes from src to dst until either side fails.

    Args:
        session: Session owning both sockets and the byte counters
        src: Socket to read from
        dst: Socket to write to
    """
    is_local = src is session.local_conn
    buff = bytearray(BUFFER_SIZE)
    view = memoryview(buff)

    while True:
        try:
            n = src.recv_into(buff)
        except OSError as e:
            session.coordinator.report_failure("read failed", e)
            return
        if not n:
            session.coordinator.report_failure("read failed", EndOfStream())
            return

        try:
            dst.sendall(view[:n])
        except OSError as e:
            session.coordinator.report_failure("write failed", e)
            return

        # Single writer per counter, readers tolerate stale values
        if is_local:
            session.sent_bytes += n
        else:
            session.received_bytes += n
