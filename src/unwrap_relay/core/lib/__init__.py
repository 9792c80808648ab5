"""Core relay library components."""

from .dns_handler import AddressResolver, parse_address
from .pipe import BUFFER_SIZE, pipe
from .relay_server import RelayConfig, RelayHandler, RelayServer, create_relay_server, run_server
from .relay_stats import RelayStats, relay_stats
from .reporter import REPORT_INTERVAL, TrafficReporter
from .session import Session
from .termination import TerminationCoordinator, TerminationState

__all__ = [
    "AddressResolver",
    "BUFFER_SIZE",
    "create_relay_server",
    "parse_address",
    "pipe",
    "RelayConfig",
    "RelayHandler",
    "RelayServer",
    "RelayStats",
    "relay_stats",
    "REPORT_INTERVAL",
    "run_server",
    "Session",
    "TerminationCoordinator",
    "TerminationState",
    "TrafficReporter",
]
