"""Prompt and UI utilities."""

from unwrap_relay.core.utils.prompt.relay_ui import RelayUI, console, create_relay_ui

__all__ = ["console", "create_relay_ui", "RelayUI"]
