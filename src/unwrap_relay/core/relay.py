"""Public entry point for the relay core.

This module exposes the pieces the command line needs to start a relay:
- Address resolution for the local and remote endpoints
- The resolved configuration handed to the server
- Server creation and the serve loop

Everything that happens per connection (dialing, piping, termination and
traffic reporting) stays behind `RelayServer`.

Example:
    from unwrap_relay.core.relay import RelayConfig, create_relay_server, run_server

    config = RelayConfig(local_addr=("", 6360), remote_addr=("10.0.0.5", 636))
    run_server(create_relay_server(config))

Attributes:
    __all__ (list): List of public components exposed by this module
"""

from .lib import AddressResolver, RelayConfig, create_relay_server, run_server

__all__ = ["AddressResolver", "create_relay_server", "RelayConfig", "run_server"]
