"""Server command for job-board."""

from __future__ import annotations

import typer
import uvicorn

from job_board.settings import get_settings


def run_start(
    *,
    host: str | None = None,
    port: int | None = None,
    processes: int | None = None,
) -> None:
    """Start the API server (requires migrations to be applied)."""

    settings = get_settings()
    host = host or settings.api_host
    port = int(port or settings.api_port)
    processes = int(processes if processes is not None else settings.api_processes)

    typer.echo(f"Starting job-board on http://{host}:{port}")
    uvicorn.run(
        "job_board.main:app",
        host=host,
        port=port,
        workers=processes if processes > 1 else None,
        log_level=settings.logging_level.lower(),
        log_config=None,
    )


def register(app: typer.Typer) -> None:
    @app.command(
        name="start",
        help="Start the API server (requires migrations).",
    )
    def start(
        host: str = typer.Option(
            None,
            "--host",
            help="Host/interface for the API server.",
            envvar="JOB_BOARD_API_HOST",
        ),
        port: int = typer.Option(
            None,
            "--port",
            help="Port for the API server.",
            envvar="JOB_BOARD_API_PORT",
        ),
        processes: int = typer.Option(
            None,
            "--processes",
            help="Number of API processes.",
            envvar="JOB_BOARD_API_PROCESSES",
            min=1,
        ),
    ) -> None:
        run_start(host=host, port=port, processes=processes)
