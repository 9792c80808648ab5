"""Process-wide statistics for the relay.

Tracks, across all sessions:
- Active sessions, keyed by session id
- Total number of sessions accepted
- Byte totals of sessions that already closed

Per-session counters stay on the session itself and are never locked. This
tracker is only touched by the acceptor, once before and once after each
session runs, and by the status panel when it renders.

Example:
    from .relay_stats import relay_stats

    relay_stats.session_started(session)
    try:
        session.start()
    finally:
        relay_stats.session_ended(session)
"""

import threading
from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from unwrap_relay.core.lib.session import Session


class RelayStats:
    """Thread-safe aggregate of session activity."""

    def __init__(self) -> None:
        self.total_sessions = 0
        self.closed_bytes_sent = 0
        self.closed_bytes_received = 0
        self.start_time = datetime.now(tz=UTC)
        self._active: dict[int, "Session"] = {}
        self._lock = threading.Lock()

    @property
    def active_sessions(self) -> int:
        with self._lock:
            return len(self._active)

    def session_started(self, session: "Session") -> None:
        with self._lock:
            self._active[session.session_id] = session
            self.total_sessions += 1

    def session_ended(self, session: "Session") -> None:
        """Drop the session from the active set and fold in its final totals."""
        with self._lock:
            if self._active.pop(session.session_id, None) is None:
                return
            self.closed_bytes_sent += session.sent_bytes
            self.closed_bytes_received += session.received_bytes

    def totals(self) -> tuple[int, int]:
        """Return (sent, received) across closed and active sessions.

        Active session counters are read while their pipes keep writing, so
        the result may trail the real numbers slightly.
        """
        with self._lock:
            sent = self.closed_bytes_sent + sum(s.sent_bytes for s in self._active.values())
            received = self.closed_bytes_received + sum(
                s.received_bytes for s in self._active.values()
            )
        return sent, received


# Global statistics object
relay_stats = RelayStats()
