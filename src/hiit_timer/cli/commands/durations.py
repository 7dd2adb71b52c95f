"""Duration preference commands: durations show / set / reset."""

from typing import Annotated, Optional

import typer

from ...core.progress import format_duration
from ...io.preferences_store import duration_options
from ...io.serializers import ValidationError
from .. import views
from ..app import PreferencesPathOption, app, get_preferences_store

durations_app = typer.Typer(help="Warmup and cooldown step durations.", no_args_is_help=True)
app.add_typer(durations_app, name="durations")


@durations_app.command("show")
def show(preferences_path: PreferencesPathOption = None) -> None:
    """Show the current warmup/cooldown step durations."""
    store = get_preferences_store(preferences_path)
    views.print_preferences(store.load())
    options = ", ".join(format_duration(s) for s in duration_options())
    views.console.print(f"[dim]Suggested values: {options}[/dim]")


@durations_app.command("set")
def set_durations(
    warmup: Annotated[
        Optional[int],
        typer.Option("--warmup", "-w", help="Seconds per warmup exercise (10-300)"),
    ] = None,
    cooldown: Annotated[
        Optional[int],
        typer.Option("--cooldown", "-c", help="Seconds per cooldown exercise (10-300)"),
    ] = None,
    preferences_path: PreferencesPathOption = None,
) -> None:
    """Change warmup and/or cooldown step durations."""
    if warmup is None and cooldown is None:
        views.print_error("Give --warmup and/or --cooldown")
        raise typer.Exit(1)

    store = get_preferences_store(preferences_path)
    try:
        prefs = store.save(warmup_duration=warmup, cooldown_duration=cooldown)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(
        f"Saved: warmup {format_duration(prefs.warmup_duration)}, "
        f"cooldown {format_duration(prefs.cooldown_duration)}"
    )


@durations_app.command("reset")
def reset(preferences_path: PreferencesPathOption = None) -> None:
    """Restore the default durations."""
    store = get_preferences_store(preferences_path)
    store.reset_to_defaults()
    prefs = store.load()
    views.print_success(
        f"Reset to defaults: warmup {format_duration(prefs.warmup_duration)}, "
        f"cooldown {format_duration(prefs.cooldown_duration)}"
    )
