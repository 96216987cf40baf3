"""Real-time CLI dashboard for proxy monitoring."""

import logging
from datetime import datetime
from threading import Lock

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from ui.log_utils import write_cli_log

console = Console()


def configure_logging(level: int = logging.INFO) -> RichHandler:
    """Print stdlib log records through the dashboard console, above the live view."""
    handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(level)
    return handler


class ForwardInfo:
    """Info about a single forwarded request."""

    def __init__(self, method: str, target_url: str, status: int, timestamp: datetime):
        self.method = method
        self.target_url = target_url[:80] + "..." if len(target_url) > 80 else target_url
        self.status = status
        self.timestamp = timestamp


def status_class(status: int) -> str:
    """Bucket a status code into '2xx', '3xx', '4xx' or '5xx'."""
    if 200 <= status < 600:
        return f"{status // 100}xx"
    return "other"


class Dashboard:
    """Real-time dashboard showing recent forwards and errors."""

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()
        self._recent: list[ForwardInfo] = []
        self._max_recent = 10
        self._status_count = {"2xx": 0, "3xx": 0, "4xx": 0, "5xx": 0, "other": 0}
        self._errors: list[str] = []
        self._live: Live | None = None

    def start(self) -> "Dashboard":
        """Start the live dashboard."""
        self._live = Live(
            self._build_layout(),
            console=console,
            refresh_per_second=4,
            screen=False,
        )
        self._live.start()
        return self

    def stop(self) -> None:
        """Stop the live dashboard."""
        if self._live:
            self._live.stop()

    def log_forward(self, method: str, target_url: str, status: int) -> None:
        """Log a request forwarded upstream."""
        with self._lock:
            self._status_count[status_class(status)] += 1
            info = ForwardInfo(method, target_url, status, datetime.now())
            self._recent.insert(0, info)
            self._recent = self._recent[: self._max_recent]
            self._refresh()
            write_cli_log("FORWARD", target_url, method=method, status=status)

    def log_error(self, route: str, status: int, message: str) -> None:
        """Log an error."""
        with self._lock:
            self._status_count[status_class(status)] += 1
            truncated = message[:50] + "..." if len(message) > 50 else message
            self._errors.insert(0, f"{route} {status}: {truncated}")
            self._errors = self._errors[:3]
            self._refresh()
            write_cli_log("ERROR", message[:200], route=route, status=status)

    def _refresh(self) -> None:
        """Refresh the display."""
        if self._live:
            self._live.update(self._build_layout())

    def _build_layout(self) -> Layout:
        """Build the dashboard layout."""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=5),
        )

        layout["header"].update(self._build_header())
        layout["body"].update(self._build_recent_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("Path Proxy", style="bold cyan")
        for label, style in (("2xx", "green"), ("3xx", "blue"), ("4xx", "yellow"), ("5xx", "red")):
            stats.append("  |  ")
            stats.append(f"{label}: {self._status_count[label]}", style=style)
        stats.append("  |  ")
        stats.append(f"Port: {self.config.proxy.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_recent_panel(self) -> Panel:
        """Build the recent forwards panel."""
        if self._recent:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Method", width=7)
            table.add_column("Status", width=6)
            table.add_column("Target", ratio=1)

            for info in self._recent:
                table.add_row(
                    info.timestamp.strftime("%H:%M:%S"),
                    info.method,
                    str(info.status),
                    info.target_url,
                )

            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(content, title="[blue]Recent Forwards[/blue]", border_style="blue")

    def _build_footer(self) -> Panel:
        """Build footer with errors and help."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            content = Text(
                f"Request http://localhost:{self.config.proxy.port}/https://example.com/ to forward",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")
