"""job-board: CLI for the job-board API."""

from __future__ import annotations

import typer

from job_board.commands import register_all

app = typer.Typer(
    add_completion=False,
    invoke_without_command=True,
    help="job-board CLI (start, migrate).",
)


@app.callback()
def _main(ctx: typer.Context) -> None:
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


register_all(app)


if __name__ == "__main__":
    app()
