"""Socket helpers shared by the relay tests."""

import socket
import threading


def recv_exactly(sock: socket.socket, size: int, timeout: float = 10.0) -> bytes:
    """Read until size bytes arrived or the peer closed."""
    sock.settimeout(timeout)
    chunks = []
    remaining = size
    while remaining:
        chunk = sock.recv(min(remaining, 65536))
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def send_in_background(sock: socket.socket, payload: bytes) -> threading.Thread:
    thread = threading.Thread(target=sock.sendall, args=(payload,), daemon=True)
    thread.start()
    return thread
