"""
CLI entry point using Typer.

Provides commands for interval sessions:
- run: Run a live session
- preview: List the phases of a plan
- simulate: Run a plan instantly on a virtual clock
- durations: Show / set / reset warmup and cooldown step durations
"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.config_loader import load_timer_settings
from ..logging_setup import setup_logger
from .app import app
from .commands import durations, session  # noqa: F401  (registers commands)


@app.callback()
def main_callback(
    debug: Annotated[bool, typer.Option("--debug", help="Enable debug logging")] = False,
    log_file: Annotated[
        Optional[Path],
        typer.Option("--log-file", help="Also write logs to this file"),
    ] = None,
) -> None:
    """
    Interval-training timer. Run `hiit-timer run` to start the bundled quick session.
    """
    settings = load_timer_settings()
    setup_logger("DEBUG" if debug else settings.log_level, log_file)


if __name__ == "__main__":
    app()
