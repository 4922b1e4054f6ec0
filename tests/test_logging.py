from io import StringIO

from rich.console import Console

from core.config import Config
from ui.dashboard import ConsoleLogger, Dashboard
from ui.log_utils import clear_logs, event_level, redact_headers, utc_timestamp


def test_dashboard_tracks_requests_and_errors(cli_log_file):
    dashboard = Dashboard(Config())

    dashboard.log("http.request", {"method": "GET", "path": "/proxy?url=x"})
    dashboard.log("proxy.request", {"method": "GET", "url": "https://example.com"})
    dashboard.log(
        "proxy.response",
        {"method": "GET", "url": "https://example.com", "status": 200, "elapsed_ms": 12},
    )
    dashboard.log(
        "proxy.error",
        {"url": "https://down.example", "error": "UpstreamConnectionError", "message": "refused"},
    )

    assert dashboard.counts == {"inbound": 1, "proxied": 1, "errors": 1}
    assert dashboard.recent_requests[0].status == 200
    assert dashboard.recent_requests[0].elapsed_ms == 12
    assert dashboard.recent_errors == ["UpstreamConnectionError: refused"]

    lines = cli_log_file.read_text().splitlines()
    assert len(lines) == 4
    assert "ERROR: proxy.error" in lines[-1]


def test_dashboard_layout_renders():
    dashboard = Dashboard(Config())
    dashboard.log("proxy.request", {"method": "POST", "url": "https://example.com/[odd]"})
    output = Console(file=StringIO(), width=120)

    output.print(dashboard._build_layout())


def test_console_logger_prints_one_line(cli_log_file):
    buffer = StringIO()
    logger = ConsoleLogger(Console(file=buffer, width=200))

    logger.log("proxy.response", {"url": "https://example.com", "status": 404, "headers": {}})

    printed = buffer.getvalue()
    assert "proxy.response" in printed
    assert "status=404" in printed
    assert "headers=" not in printed
    assert "PROXY: proxy.response" in cli_log_file.read_text()


def test_event_level():
    assert event_level("proxy.error") == "ERROR"
    assert event_level("http.request") == "HTTP"


def test_redact_headers():
    headers = redact_headers(
        {"Authorization": "Bearer abcdefghijklmnop", "X-Api-Key": "short", "Accept": "*/*"}
    )

    assert headers["Authorization"] == "Bearer...mnop"
    assert headers["X-Api-Key"] == "***"
    assert headers["Accept"] == "*/*"


def test_utc_timestamp_format():
    stamp = utc_timestamp()

    assert stamp.endswith("Z")
    assert "." in stamp


def test_clear_logs(tmp_path):
    root = tmp_path / "logs"
    root.mkdir()
    (root / "proxy.log").write_text("old")

    clear_logs(root)

    assert not root.exists()
