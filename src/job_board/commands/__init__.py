"""Command registrations for the job-board CLI."""

from __future__ import annotations

import typer

from . import migrate, server

COMMAND_MODULES = (
    server,
    migrate,
)


def register_all(app: typer.Typer) -> None:
    for module in COMMAND_MODULES:
        module.register(app)
