"""Single-fire termination signal for a relay session.

Two directional pipes run per session and either of them may fail first.
Closing the connections after the first failure makes the other pipe fail
too, so the coordinator must act on exactly one report and drop the rest.

The state only moves forward:

    ACTIVE -> TERMINATING -> TERMINATED

The first caller of `report_failure` wins the ACTIVE -> TERMINATING
transition, logs the error (unless it is a clean end-of-stream) and sets the
event the session is waiting on. Every later report is a silent no-op.

Example:
    coordinator = TerminationCoordinator(session_id=7)
    coordinator.report_failure("read failed", EndOfStream())
    coordinator.wait()
"""

import enum
import threading

from loguru import logger

from unwrap_relay.core.exceptions import EndOfStream


class TerminationState(enum.Enum):
    ACTIVE = "active"
    TERMINATING = "terminating"
    TERMINATED = "terminated"


class TerminationCoordinator:
    """Deliver exactly one termination event to a session."""

    def __init__(self, session_id: int) -> None:
        self.session_id = session_id
        self._state = TerminationState.ACTIVE
        self._lock = threading.Lock()
        self._fired = threading.Event()

    @property
    def state(self) -> TerminationState:
        return self._state

    def _transition(self, expected: TerminationState, new: TerminationState) -> bool:
        with self._lock:
            if self._state is not expected:
                return False
            self._state = new
            return True

    def report_failure(self, context: str, err: BaseException) -> bool:
        """Report a pipe failure.

        Args:
            context: Short description of the failed operation
            err: The error raised by the read or write call

        Returns:
            bool: True if this report terminated the session, False if
            termination was already under way
        """
        if not self._transition(TerminationState.ACTIVE, TerminationState.TERMINATING):
            # Secondary failure caused by the teardown of the first one
            return False

        if not isinstance(err, EndOfStream):
            logger.warning(f"[{self.session_id}] {context} '{err}'")

        self._fired.set()
        return True

    def wait(self, timeout: float | None = None) -> bool:
        """Block until a failure has been reported."""
        return self._fired.wait(timeout)

    def is_set(self) -> bool:
        return self._fired.is_set()

    def mark_terminated(self) -> None:
        """Record that teardown has finished.

        Also valid straight from ACTIVE for a session that never started
        piping, so late reports are still ignored.
        """
        with self._lock:
            self._state = TerminationState.TERMINATED
