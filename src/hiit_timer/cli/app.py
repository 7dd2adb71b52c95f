"""Shared Typer app object, shared option types, and store utility."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ..io.preferences_store import DurationPreferencesStore, get_default_preferences_path

# Shared plan argument used by every session command
PlanArgument = Annotated[
    str,
    typer.Argument(help="Plan file path or bundled plan name (default: quick)"),
]

# Shared --preferences-path option type
PreferencesPathOption = Annotated[
    Optional[Path],
    typer.Option("--preferences-path", help="Custom preferences.json path"),
]

app = typer.Typer(
    name="hiit-timer",
    help="Guided interval-training sessions: warmup, work/rest intervals, cooldown.",
    no_args_is_help=True,
)


def get_preferences_store(path: Path | None) -> DurationPreferencesStore:
    """Get preferences store from path or the default location."""
    if path is None:
        path = get_default_preferences_path()
    return DurationPreferencesStore(path)
