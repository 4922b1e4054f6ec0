"""Real-time CLI dashboard for proxy monitoring."""

from datetime import datetime
from threading import Lock
from typing import Any

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from ui.log_utils import event_level, format_fields, write_cli_log

console = Console()


class RequestInfo:
    """Info about a single proxied request."""

    def __init__(self, method: str, url: str, timestamp: datetime):
        self.method = method
        self.url = url[:80] + "..." if len(url) > 80 else url
        self.status: int | None = None
        self.elapsed_ms: int | None = None
        self.timestamp = timestamp


class Dashboard:
    """Real-time dashboard showing recent proxied requests and errors."""

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()
        self._requests: list[RequestInfo] = []
        self._max_requests = 10
        self._counts = {"inbound": 0, "proxied": 0, "errors": 0}
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

    def log(self, event: str, fields: dict[str, Any]) -> None:
        """Record an event and append it to the CLI log file."""
        with self._lock:
            if event == "http.request":
                self._counts["inbound"] += 1
            elif event == "proxy.request":
                self._counts["proxied"] += 1
                info = RequestInfo(
                    method=fields.get("method", "GET"),
                    url=fields.get("url", ""),
                    timestamp=datetime.now(),
                )
                self._requests.insert(0, info)
                self._requests = self._requests[: self._max_requests]
            elif event == "proxy.response":
                info = self._find_pending(fields.get("url", ""))
                if info:
                    info.status = fields.get("status")
                    info.elapsed_ms = fields.get("elapsed_ms")
            elif event == "proxy.error":
                self._counts["errors"] += 1
                message = str(fields.get("message", ""))
                truncated = message[:50] + "..." if len(message) > 50 else message
                self._errors.insert(0, f"{fields.get('error', 'Error')}: {truncated}")
                self._errors = self._errors[:3]

            self._refresh()
            extra = {k: v for k, v in fields.items() if k != "headers"}
            write_cli_log(event_level(event), event, **extra)

    @property
    def counts(self) -> dict[str, int]:
        return dict(self._counts)

    @property
    def recent_requests(self) -> list[RequestInfo]:
        return list(self._requests)

    @property
    def recent_errors(self) -> list[str]:
        return list(self._errors)

    def _find_pending(self, url: str) -> RequestInfo | None:
        """Most recent request to url that has no status yet."""
        truncated = url[:80] + "..." if len(url) > 80 else url
        return next(
            (r for r in self._requests if r.url == truncated and r.status is None),
            None,
        )

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
        layout["body"].update(self._build_requests_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("CORS Forward Proxy", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"Inbound: {self._counts['inbound']}", style="blue")
        stats.append("  |  ")
        stats.append(f"Proxied: {self._counts['proxied']}", style="magenta")
        stats.append("  |  ")
        stats.append(f"Errors: {self._counts['errors']}", style="red")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.proxy.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_requests_panel(self) -> Panel:
        """Build the recent requests panel."""
        if self._requests:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Method", width=7)
            table.add_column("Status", width=6)
            table.add_column("ms", width=6)
            table.add_column("URL", ratio=1)

            for r in self._requests:
                status = "[dim]...[/dim]" if r.status is None else str(r.status)
                table.add_row(
                    r.timestamp.strftime("%H:%M:%S"),
                    r.method,
                    status,
                    "" if r.elapsed_ms is None else str(r.elapsed_ms),
                    Text(r.url),
                )

            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(content, title="[magenta]Proxied Requests[/magenta]", border_style="magenta")

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
                f"GET http://{self.config.proxy.host}:{self.config.proxy.port}"
                "/proxy?url=TARGET_URL",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")


class ConsoleLogger:
    """Print one line per event instead of a live dashboard."""

    def __init__(self, output: Console | None = None):
        self._console = output or console

    def log(self, event: str, fields: dict[str, Any]) -> None:
        level = event_level(event)
        style = "red" if level == "ERROR" else "cyan"
        extra = {k: v for k, v in fields.items() if k != "headers"}
        line = Text()
        line.append(datetime.now().strftime("%H:%M:%S"), style="dim")
        line.append(" ")
        line.append(event, style=style)
        line.append(f" {format_fields(extra)}")
        self._console.print(line, highlight=False)
        write_cli_log(level, event, **extra)
