import socket
import threading
from types import SimpleNamespace

import pytest
from helpers import recv_exactly

from unwrap_relay.core.lib.pipe import BUFFER_SIZE, pipe
from unwrap_relay.core.lib.termination import TerminationCoordinator, TerminationState


@pytest.fixture
def legs():
    """Two socket pairs: (peer, src) feeds the pipe, (dst, peer) drains it."""
    src_peer, src = socket.socketpair()
    dst, dst_peer = socket.socketpair()
    yield src_peer, src, dst, dst_peer
    for sock in (src_peer, src, dst, dst_peer):
        sock.close()


def make_session(local_conn):
    return SimpleNamespace(
        local_conn=local_conn,
        sent_bytes=0,
        received_bytes=0,
        coordinator=TerminationCoordinator(1),
    )


def run_pipe(session, src, dst):
    thread = threading.Thread(target=pipe, args=(session, src, dst), daemon=True)
    thread.start()
    return thread


def test_buffer_size_is_one_byte_short_of_64k():
    assert BUFFER_SIZE == 65535


@pytest.mark.parametrize("size", [1, BUFFER_SIZE - 1, BUFFER_SIZE, BUFFER_SIZE + 1, 4 * BUFFER_SIZE + 17])
def test_copies_local_bytes_and_counts_sent(legs, size, log_capture):
    src_peer, src, dst, dst_peer = legs
    session = make_session(local_conn=src)
    payload = bytes(range(256)) * (size // 256) + b"x" * (size % 256)

    thread = run_pipe(session, src, dst)
    sender = threading.Thread(target=src_peer.sendall, args=(payload,), daemon=True)
    sender.start()
    assert recv_exactly(dst_peer, size) == payload
    sender.join(5)
    src_peer.shutdown(socket.SHUT_WR)
    thread.join(5)

    assert not thread.is_alive()
    assert session.sent_bytes == size
    assert session.received_bytes == 0
    assert session.coordinator.state is TerminationState.TERMINATING
    # End-of-stream is an expected way for a pipe to stop
    assert log_capture.messages == []


def test_counts_received_when_source_is_remote(legs):
    src_peer, src, dst, dst_peer = legs
    session = make_session(local_conn=dst)

    thread = run_pipe(session, src, dst)
    src_peer.sendall(b"response")
    assert recv_exactly(dst_peer, 8) == b"response"
    src_peer.shutdown(socket.SHUT_WR)
    thread.join(5)

    assert session.received_bytes == 8
    assert session.sent_bytes == 0


def test_read_error_is_reported(legs, log_capture):
    _, src, dst, _ = legs
    session = make_session(local_conn=src)
    src.close()

    thread = run_pipe(session, src, dst)
    thread.join(5)

    assert session.coordinator.is_set()
    assert log_capture.matching("[1] read failed")


def test_write_error_is_reported(legs, log_capture):
    src_peer, src, dst, dst_peer = legs
    session = make_session(local_conn=src)
    dst_peer.close()

    thread = run_pipe(session, src, dst)
    src_peer.sendall(b"lost")
    thread.join(5)

    assert session.coordinator.is_set()
    assert log_capture.matching("[1] write failed")
    assert session.sent_bytes == 0
