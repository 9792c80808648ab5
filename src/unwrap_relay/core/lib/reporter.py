"""Periodic traffic logging for a single session.

The reporter reads the session counters without any synchronization. The
numbers are informational only, so an observation that lags behind the
pipes by a few chunks is acceptable.

Example:
    reporter = TrafficReporter(7, lambda: (session.sent_bytes, session.received_bytes))
    reporter.start()
    ...
    reporter.stop()
"""

import threading
from collections.abc import Callable
from typing import Final

from loguru import logger

REPORT_INTERVAL: Final = 30.0  # Seconds

Counters = Callable[[], tuple[int, int]]


class TrafficReporter:
    """Log cumulative byte counts on a fixed interval, only when they change."""

    def __init__(self, session_id: int, counters: Counters, interval: float = REPORT_INTERVAL) -> None:
        """Initialize the reporter.

        Args:
            session_id: Session id used to prefix log lines
            counters: Callable returning the current (sent, received) totals
            interval: Seconds between two observations
        """
        self.session_id = session_id
        self.interval = interval
        self._counters = counters
        self._prev_sent = 0
        self._prev_received = 0
        self._stopped = threading.Event()
        self._thread: threading.Thread | None = None

    def tick(self) -> bool:
        """Compare the counters with the last observation and log on change.

        Returns:
            bool: True if a line was logged
        """
        sent, received = self._counters()
        if sent == self._prev_sent and received == self._prev_received:
            return False

        logger.info(f"[{self.session_id}] {sent} bytes sent, {received} bytes received")
        self._prev_sent, self._prev_received = sent, received
        return True

    def run(self) -> None:
        # The stop event doubles as the timer
        while not self._stopped.wait(self.interval):
            self.tick()

    def start(self) -> None:
        self._thread = threading.Thread(
            target=self.run, name=f"reporter-{self.session_id}", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop the loop and wait for the thread to exit."""
        self._stopped.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join()
