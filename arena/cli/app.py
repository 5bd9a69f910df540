"""Command line entry point for the Arena server."""

import logging
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel

from arena import __version__
from arena.core.context import ServerContext
from arena.server.loop import EventLoop
from arena.server.transport import create_listener
from arena.utils.config import config
from arena.utils.log import configure_logging

app = typer.Typer(
    name="arena",
    help="Arena - a text-protocol battle server",
    no_args_is_help=True,
)

console = Console()
logger = logging.getLogger("arena.cli")


@app.command("serve")
def serve(
    host: str = typer.Option(config.host, "--host", help="Interface to bind"),
    port: int = typer.Option(config.port, "--port", "-p", help="TCP port to listen on"),
    turn_seconds: float = typer.Option(
        config.turn_seconds, "--turn-seconds", "-t", min=1, help="Time allowed per turn"
    ),
    tick: Optional[float] = typer.Option(
        config.tick_seconds,
        "--tick",
        help="Seconds between idle-turn sweeps (0 = only check on player input)",
    ),
    log_level: str = typer.Option(config.log_level, "--log-level", "-l"),
) -> None:
    """Run the battle server until interrupted."""
    configure_logging(log_level)
    settings = config.model_copy(
        update={
            "host": host,
            "port": port,
            "turn_seconds": turn_seconds,
            "tick_seconds": tick if tick and tick > 0 else None,
            "log_level": log_level,
        }
    )

    try:
        listener = create_listener(settings.host, settings.port, settings.backlog)
    except OSError as e:
        console.print(f"[red]Could not listen on {settings.host}:{settings.port}:[/red] {e}")
        raise typer.Exit(1)

    console.print(Panel(
        f"Listening on [bold]{settings.host}:{settings.port}[/bold]\n"
        f"Turn limit: {settings.turn_seconds:g}s | "
        f"Idle sweep: {f'{settings.tick_seconds:g}s' if settings.tick_seconds else 'off'}",
        title=f"Arena v{__version__}",
        border_style="green",
    ))
    logger.info("Server listening on port %d", settings.port)

    loop = EventLoop(ServerContext(config=settings), listener)
    loop.run()


@app.command("version")
def show_version() -> None:
    """Show version information."""
    console.print(f"Arena v{__version__}")


if __name__ == "__main__":
    app()
