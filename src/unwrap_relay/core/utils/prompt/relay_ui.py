"""Live status panel for the relay."""

import threading
import time
from datetime import UTC, datetime

from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.spinner import Spinner
from rich.table import Table
from rich.text import Text

from unwrap_relay.core.lib.relay_stats import RelayStats, relay_stats
from unwrap_relay.core.utils.utils import format_bytes

console = Console()


class RelayUI:
    """Render relay statistics in a rich panel until stopped."""

    def __init__(
        self,
        local: str,
        remote: str,
        tls_unwrap: bool = False,
        stats: RelayStats | None = None,
    ) -> None:
        """Initialize the panel.

        Args:
            local: Listening address as shown to the user
            remote: Remote target as shown to the user
            tls_unwrap: Whether the remote leg uses TLS
            stats: Statistics to render; the process-wide tracker when omitted
        """
        self.local = local
        self.remote = remote
        self.tls_unwrap = tls_unwrap
        self.stats = stats if stats is not None else relay_stats
        self.running = True
        self._refresh_rate = 1.0
        self._start_time = time.monotonic()
        self._spinner = Spinner("dots", text="")

    def _generate_table(self) -> Table:
        table = Table(show_header=False, box=None, padding=(0, 1))
        table.add_column("Property", style="cyan", no_wrap=True)
        table.add_column("Value", style="green", no_wrap=True)

        sent, received = self.stats.totals()
        elapsed = time.monotonic() - self._start_time
        uptime = datetime.now(tz=UTC) - self.stats.start_time

        table.add_row("Remote leg", "TLS" if self.tls_unwrap else "plain TCP")
        table.add_row(
            "Active Sessions", f"{self._spinner.render(elapsed)} {self.stats.active_sessions}"
        )
        table.add_row("Total Sessions", str(self.stats.total_sessions))
        table.add_row("Sent", format_bytes(sent))
        table.add_row("Received", format_bytes(received))
        table.add_row("Uptime", str(uptime).split(".")[0])
        return table

    def _generate_display(self) -> Panel:
        title = Text(f"Relay {self.local} > {self.remote}", style="bold cyan")
        return Panel(
            self._generate_table(),
            title=title,
            subtitle="Press Ctrl+C to exit",
            border_style="blue",
            padding=(1, 2),
        )

    def run(self) -> None:
        """Refresh the panel until `running` is cleared."""
        with Live(
            self._generate_display(),
            console=console,
            refresh_per_second=4,
            transient=True,
            auto_refresh=False,
        ) as live:
            while self.running:
                live.update(self._generate_display(), refresh=True)
                time.sleep(self._refresh_rate)

    def stop(self) -> None:
        self.running = False


def create_relay_ui(local: str, remote: str, tls_unwrap: bool = False) -> tuple[RelayUI, threading.Thread]:
    """Create the panel and the daemon thread that runs it."""
    ui = RelayUI(local, remote, tls_unwrap)
    return ui, threading.Thread(target=ui.run, name="relay-ui", daemon=True)
