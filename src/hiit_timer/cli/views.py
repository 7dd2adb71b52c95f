"""
CLI view formatters using Rich for pretty console output.

Handles the live session screen, plan previews and preference display.
"""

from rich.console import Console, Group
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from ..core.engine import step_label
from ..core.models import Phase, RemainingTimes, SessionPlan, SessionView, TimelineEntry, UpcomingItem
from ..core.progress import format_duration, format_minutes, format_time, iter_phases
from ..io.serializers import DurationPreferences

console = Console()

PHASE_STYLES: dict[Phase, str] = {
    Phase.WARMUP: "magenta",
    Phase.PREPARE: "yellow",
    Phase.WORK: "green",
    Phase.REST: "red",
    Phase.COOLDOWN: "cyan",
    Phase.COMPLETE: "green",
}


def _phase_cell(phase: Phase) -> str:
    style = PHASE_STYLES[phase]
    return f"[bold {style}]{phase.value.upper()}[/bold {style}]"


def render_session(
    view: SessionView,
    plan_name: str,
    next_up: list[UpcomingItem],
    remaining: RemainingTimes,
) -> Panel:
    """
    Build the live session screen.

    Args:
        view: Current display projection
        plan_name: Workout name for the panel title
        next_up: Upcoming phases preview
        remaining: Work/rest time left
    """
    style = PHASE_STYLES[view.phase]

    status = ""
    if view.is_paused:
        status = "  [bold yellow]PAUSED[/bold yellow]"
    elif not view.is_active and view.phase is not Phase.COMPLETE:
        status = "  [dim]stopped[/dim]"

    header = Text.from_markup(f"{_phase_cell(view.phase)}{status}")
    if view.step_count:
        header.append(f"   {view.step_number}/{view.step_count}", style="dim")

    clock = Text(format_time(view.remaining_seconds), style=f"bold {style}", justify="center")
    label = Text(view.current_step_label, style="bold", justify="center")
    bar = ProgressBar(total=1.0, completed=view.progress_fraction, complete_style=style)

    totals = Text.from_markup(
        f"[green]Work[/green] {format_minutes(remaining.work_seconds)}   "
        f"[red]Rest[/red] {format_minutes(remaining.rest_seconds)}   "
        f"[dim]{round(view.progress_fraction * 100)}% done[/dim]"
    )

    parts = [header, Text(), clock, label, Text(), bar, totals]
    if next_up:
        nxt = Table.grid(padding=(0, 2))
        nxt.add_column(style="dim")
        nxt.add_column()
        nxt.add_column(justify="right")
        for item in next_up:
            duration = format_time(item.duration_seconds) if item.phase is not Phase.COMPLETE else ""
            nxt.add_row("next", f"{_phase_cell(item.phase)} {item.label}", duration)
        parts.extend([Text(), nxt])

    return Panel(
        Group(*parts),
        title=f"[bold]{plan_name}[/bold]",
        subtitle="[dim]Ctrl+C: pause / skip / stop[/dim]",
        border_style=style,
    )


def print_plan_preview(plan: SessionPlan, prepare_seconds: int) -> None:
    """Print every phase the plan will go through and the total time."""
    table = Table(title=plan.name, show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Phase")
    table.add_column("Step")
    table.add_column("Time", justify="right")

    total = 0
    for n, state in enumerate(iter_phases(plan, prepare_seconds=prepare_seconds), 1):
        total += state.remaining_seconds
        table.add_row(str(n), _phase_cell(state.phase), step_label(state, plan), format_time(state.remaining_seconds))

    console.print(table)
    console.print(
        f"Warmup: {len(plan.warmup)}  Intervals: {len(plan.main_steps)}  "
        f"Cooldown: {len(plan.cooldown)}  Total: [bold]{format_time(total)}[/bold]"
    )


_EVENT_SHORT = {
    "countdown_warning": "beep",
    "phase_start": "start",
    "phase_label": "label",
    "completion": "done",
}


def _fmt_events(events: list[str]) -> str:
    """['phase_start', 'countdown_warning', 'countdown_warning'] -> 'start, beep×2'."""
    parts: list[str] = []
    counts: dict[str, int] = {}
    for name in events:
        short = _EVENT_SHORT.get(name, name)
        if short not in counts:
            parts.append(short)
        counts[short] = counts.get(short, 0) + 1
    return ", ".join(p if counts[p] == 1 else f"{p}×{counts[p]}" for p in parts)


def print_timeline(timeline: list[TimelineEntry], completed_at: int) -> None:
    """Print the result of a simulated session."""
    table = Table(title="Simulated session")
    table.add_column("At", justify="right")
    table.add_column("Phase")
    table.add_column("Step")
    table.add_column("Length", justify="right")
    table.add_column("Events", style="dim")

    for entry in timeline:
        length = format_time(entry.duration_seconds) if entry.phase is not Phase.COMPLETE else ""
        table.add_row(
            format_time(entry.elapsed_seconds),
            _phase_cell(entry.phase),
            entry.label,
            length,
            _fmt_events(entry.events),
        )

    console.print(table)
    console.print(f"Session complete callback at [bold]{format_time(completed_at)}[/bold]")


def print_preferences(prefs: DurationPreferences) -> None:
    """Print current warmup/cooldown step durations."""
    table = Table(title="Duration preferences")
    table.add_column("Setting")
    table.add_column("Value", justify="right")
    table.add_row("Warmup step", format_duration(prefs.warmup_duration))
    table.add_row("Cooldown step", format_duration(prefs.cooldown_duration))
    table.add_row("Last updated", prefs.last_updated)
    console.print(table)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")
