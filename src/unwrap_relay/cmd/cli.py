"""Command-line interface for the relay.

This module provides the command-line entry point, handling:
- Command-line argument parsing
- Logging setup
- Resolution of the local and remote addresses
- Binding the listening socket
- Fatal startup error reporting

Resolution and bind failures abort the process with exit code 1. Once the
server is listening, every failure is scoped to a single session and only
shows up in the log.

Example:
    # Expose an LDAPS server as plain LDAP on port 6360:
    $ unwrap-relay --local :6360 --remote ldap.example.com:636 --tls
"""

from typing import NoReturn

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape

from unwrap_relay import __version__
from unwrap_relay.core.exceptions import AddressResolutionError
from unwrap_relay.core.lib.reporter import REPORT_INTERVAL
from unwrap_relay.core.relay import AddressResolver, RelayConfig, create_relay_server, run_server
from unwrap_relay.core.utils.log_config import setup_logging
from unwrap_relay.core.utils.prompt import create_relay_ui

console = Console()
app = typer.Typer(help="Transparent TCP relay with optional TLS unwrapping")


def _fatal(message: str) -> NoReturn:
    logger.critical(message)
    console.print(f"[red]{escape(message)}")
    raise typer.Exit(1)


def version_callback(value: bool) -> None:
    """Show version information."""
    if value:
        console.print(f"[cyan]unwrap-relay v{__version__}[/cyan]")
        raise typer.Exit()


@app.command()
def relay(
    local: str = typer.Option(
        ":6360", "--local", "-l", envvar="UNWRAP_RELAY_LOCAL", help="Local address to listen on"
    ),
    remote: str = typer.Option(
        "remote_server.test:636",
        "--remote",
        "-r",
        envvar="UNWRAP_RELAY_REMOTE",
        help="Remote address to relay to",
    ),
    tls: bool = typer.Option(
        False,
        "--tls",
        envvar="UNWRAP_RELAY_TLS",
        help="Connect to the remote with TLS and expose it unencrypted locally",
    ),
    nameservers: list[str] | None = typer.Option(
        None,
        "--nameserver",
        envvar="UNWRAP_RELAY_NAMESERVERS",
        help="Fallback nameserver for address resolution (repeatable)",
    ),
    report_interval: float = typer.Option(
        REPORT_INTERVAL,
        "--report-interval",
        envvar="UNWRAP_RELAY_REPORT_INTERVAL",
        min=0.001,
        help="Seconds between per-session traffic reports",
    ),
    ui: bool = typer.Option(False, "--ui", help="Show a live status panel"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
    log_file: bool = typer.Option(True, "--log-file/--no-log-file", help="Write a rotating log file"),
    version: bool = typer.Option(
        False, "--version", callback=version_callback, is_eager=True, help="Show version and exit"
    ),
):
    """Relay local TCP connections to a fixed remote endpoint."""
    setup_logging(debug=debug, log_file=log_file)
    logger.info(f"proxying from {local} to {remote}")

    resolver = AddressResolver(nameservers or None)
    try:
        local_addr = resolver.resolve_tcp_address(local)
    except AddressResolutionError as e:
        _fatal(f"failed to resolve local address: {e}")
    try:
        remote_addr = resolver.resolve_tcp_address(remote)
    except AddressResolutionError as e:
        _fatal(f"failed to resolve remote address: {e}")

    config = RelayConfig(
        local_addr=local_addr,
        remote_addr=remote_addr,
        tls_unwrap=tls,
        tls_address=remote,
        report_interval=report_interval,
    )
    try:
        server = create_relay_server(config)
    except OSError as e:
        _fatal(f"failed to open local port to listen: {e}")

    status_ui = None
    if ui:
        status_ui, ui_thread = create_relay_ui(local, remote, tls)
        ui_thread.start()
    try:
        run_server(server)
    finally:
        if status_ui is not None:
            status_ui.stop()


if __name__ == "__main__":
    app()
