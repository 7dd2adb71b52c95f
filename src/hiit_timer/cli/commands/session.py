"""Session commands: run, preview, simulate."""

from pathlib import Path
from typing import Annotated

import typer
from loguru import logger
from rich.live import Live

from ...core.config_loader import TimerSettings, load_timer_settings
from ...core.driver import SessionDriver
from ...core.engine import SessionEngine
from ...core.events import attach_audio
from ...core.models import SessionPlan
from ...core.progress import format_time, remaining_times, total_duration, upcoming
from ...core.scheduler import Scheduler, TimerHandle
from ...core.simulation import simulate_session
from ...io.plan_loader import DEFAULT_PLAN, load_plan
from ...io.serializers import ValidationError
from .. import views
from ..app import PlanArgument, PreferencesPathOption, app, get_preferences_store
from ..audio import TerminalBell

NoWarmupOption = Annotated[bool, typer.Option("--no-warmup", help="Skip the warmup exercises")]
NoCooldownOption = Annotated[bool, typer.Option("--no-cooldown", help="Skip the cooldown exercises")]

# Live screen redraws per time unit
_REFRESHES_PER_TICK = 4


def _load_session_plan(
    plan: str,
    preferences_path: Path | None,
    no_warmup: bool,
    no_cooldown: bool,
) -> SessionPlan:
    """Load the plan with the user's duration preferences, exiting with code 1 on error."""
    store = get_preferences_store(preferences_path)
    try:
        return load_plan(
            plan,
            store.load(),
            include_warmup=not no_warmup,
            include_cooldown=not no_cooldown,
        )
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)


def _render(engine: SessionEngine):
    return views.render_session(
        engine.view(),
        engine.plan.name,
        upcoming(engine.state, engine.plan, prepare_seconds=engine.prepare_seconds),
        remaining_times(engine.state, engine.plan, engine.prepare_seconds),
    )


def _control_prompt() -> str:
    """
    Ask what to do after Ctrl+C.

    Returns:
        "r" (resume), "s" (skip) or "q" (stop)
    """
    views.console.print()
    views.console.print("[bold]Paused.[/bold]  [r] resume   [s] skip phase   [q] stop")
    while True:
        try:
            choice = views.console.input("Choose [r]: ").strip().lower() or "r"
        except (KeyboardInterrupt, EOFError):
            return "q"
        if choice in ("r", "s", "q"):
            return choice
        views.print_error(f"Unknown choice: {choice}")


def _run_live(engine: SessionEngine, settings: TimerSettings, sound: bool) -> bool:
    """
    Drive *engine* in real time until it completes or the user stops it.

    Returns:
        True if the session reached completion, even when the user stopped
        during the completion display
    """
    scheduler = Scheduler()
    audio = TerminalBell(views.console, enabled=sound)
    attach_audio(engine.bus, audio)

    callback_fired = False
    refresher: TimerHandle | None = None

    def on_complete() -> None:
        nonlocal callback_fired
        callback_fired = True
        if refresher is not None:
            refresher.cancel()

    with Live(_render(engine), console=views.console, auto_refresh=False) as live, SessionDriver(
        engine,
        scheduler,
        on_complete=on_complete,
        audio=audio,
        tick_interval=settings.tick_interval_seconds,
        completion_delay=settings.completion_delay_seconds,
    ) as driver:

        def redraw() -> None:
            live.update(_render(engine), refresh=True)

        def start_refresher() -> TimerHandle:
            return scheduler.call_every(settings.tick_interval_seconds / _REFRESHES_PER_TICK, redraw)

        refresher = start_refresher()
        driver.start()

        while not scheduler.empty():
            try:
                scheduler.run()
            except KeyboardInterrupt:
                driver.pause()
                refresher.cancel()
                live.stop()
                choice = _control_prompt()
                live.start()
                if choice == "q":
                    driver.stop()
                    logger.info(f"Session stopped at {engine.phase.value}[{engine.step_index}]")
                    break
                if choice == "s":
                    driver.skip()
                driver.resume()
                if not callback_fired:
                    refresher = start_refresher()
                redraw()

        refresher.cancel()
        redraw()

    return engine.is_complete


@app.command("run")
def run(
    plan: PlanArgument = DEFAULT_PLAN,
    no_warmup: NoWarmupOption = False,
    no_cooldown: NoCooldownOption = False,
    silent: Annotated[bool, typer.Option("--silent", help="Disable the terminal bell")] = False,
    preferences_path: PreferencesPathOption = None,
) -> None:
    """
    Run a live interval session.

    Press Ctrl+C at any time to pause; you can then resume, skip the
    current phase, or stop.
    """
    settings = load_timer_settings()
    session_plan = _load_session_plan(plan, preferences_path, no_warmup, no_cooldown)
    engine = SessionEngine(session_plan, prepare_seconds=settings.prepare_seconds)

    if _run_live(engine, settings, sound=settings.sound and not silent):
        views.print_success(
            f"Workout complete! {len(session_plan.main_steps)} intervals, "
            f"{format_time(total_duration(session_plan, settings.prepare_seconds))} planned."
        )
    else:
        views.print_info(
            f"Stopped during {engine.phase.value} with {format_time(engine.remaining_seconds)} left."
        )


@app.command("preview")
def preview(
    plan: PlanArgument = DEFAULT_PLAN,
    no_warmup: NoWarmupOption = False,
    no_cooldown: NoCooldownOption = False,
    preferences_path: PreferencesPathOption = None,
) -> None:
    """List every phase of a plan and the total session time."""
    settings = load_timer_settings()
    session_plan = _load_session_plan(plan, preferences_path, no_warmup, no_cooldown)
    views.print_plan_preview(session_plan, settings.prepare_seconds)


@app.command("simulate")
def simulate(
    plan: PlanArgument = DEFAULT_PLAN,
    no_warmup: NoWarmupOption = False,
    no_cooldown: NoCooldownOption = False,
    preferences_path: PreferencesPathOption = None,
) -> None:
    """Run a plan instantly on a virtual clock and print the phase timeline."""
    settings = load_timer_settings()
    session_plan = _load_session_plan(plan, preferences_path, no_warmup, no_cooldown)
    timeline, completed_at = simulate_session(
        session_plan,
        prepare_seconds=settings.prepare_seconds,
        completion_delay=settings.completion_delay_seconds,
    )
    views.print_timeline(timeline, completed_at)
