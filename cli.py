"""CLI entry point for cors-forward-proxy."""

import sys
from datetime import datetime

from rich.console import Console

from app import create_app
from core.config import CONFIG_FILE, load_config
from core.exceptions import ConfigurationError
from ui.dashboard import ConsoleLogger, Dashboard
from ui.log_utils import clear_logs, write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    args = sys.argv[1:]

    if "--help" in args or "-h" in args:
        _print_help()
        return

    if "--config" in args:
        console.print(f"[bold]Config:[/bold] {CONFIG_FILE}")
        return

    config = load_config()
    try:
        _validate(config)
    except ConfigurationError as e:
        console.print(f"[red][ERROR][/red] {e}")
        console.print(f"[dim]Edit {CONFIG_FILE}[/dim]")
        sys.exit(1)

    # Clear previous logs and pick the request logger
    clear_logs()
    plain = "--plain" in args
    dashboard = None if plain else Dashboard(config)
    logger = ConsoleLogger() if plain else dashboard

    import uvicorn

    app = create_app(config, logger)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.host,
        port=config.proxy.port,
        log_level="info" if config.proxy.debug else "warning",
        timeout_keep_alive=config.limits.keep_alive_timeout,
    )
    server = uvicorn.Server(uvicorn_config)

    if dashboard:
        dashboard.start()
    start_time = datetime.now()
    write_cli_log("STARTUP", "Proxy started", host=config.proxy.host, port=config.proxy.port)
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Proxy stopped", duration=str(duration))
        if dashboard:
            dashboard.stop()


def _validate(config) -> None:
    if not 0 < config.proxy.port < 65536:
        raise ConfigurationError(f"Invalid port: {config.proxy.port}")


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]CORS Forward Proxy[/bold cyan]

Fetches third-party URLs on behalf of browser clients, relaying the reply
with permissive CORS headers and without frame-blocking headers.

[bold]Usage:[/bold]
    cors-forward-proxy              Start with live dashboard
    cors-forward-proxy --plain      Start with one log line per request
    cors-forward-proxy --config     Show config location
    cors-forward-proxy --help       Show this help

[bold]Endpoints:[/bold]
    GET  /proxy?url=TARGET_URL
    POST /proxy  {"url": ..., "method": ..., "headers": {...}, "body": ...}
    GET  /health

[bold]Config:[/bold]
    Set cors.frame_options (e.g. "ALLOWALL") in the config file to send
    X-Frame-Options on relayed replies; it is omitted by default.
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
