"""Formatting helpers for log lines and the status panel."""

from typing import Final

BYTES_PER_KB: Final = 1024

SIZE_UNITS: Final = ("KB", "MB", "GB", "TB")


def format_bytes(bytes_: float) -> str:
    """Format a byte count for humans.

    Counts below 1 KB are shown exactly, larger ones with one decimal.

    Args:
        bytes_: Number of bytes to format

    Returns:
        str: Formatted string with appropriate unit
    """
    if bytes_ < BYTES_PER_KB:
        return f"{int(bytes_)} B"
    value = bytes_ / BYTES_PER_KB
    unit = SIZE_UNITS[0]
    for next_unit in SIZE_UNITS[1:]:
        if value < BYTES_PER_KB:
            break
        value /= BYTES_PER_KB
        unit = next_unit
    return f"{value:.1f} {unit}"


def format_address(address: tuple[str, int]) -> str:
    """Format a (host, port) pair as host:port.

    IPv6 hosts are bracketed, an empty host renders as ":port".
    """
    host, port = address[0], address[1]
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"
