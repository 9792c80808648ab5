"""Utility functions and helpers."""

from unwrap_relay.core.utils.utils import format_address, format_bytes

__all__ = ["format_address", "format_bytes"]
