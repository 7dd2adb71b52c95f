"""
Session progress summaries: durations, remaining time, upcoming phases.

Everything here is derived from advance_state() so previews and totals
always agree with what the engine will actually do.
"""

from __future__ import annotations

from .config import PREPARE_SECONDS, PREVIEW_COUNT
from .engine import advance_state, initial_state, step_label
from .models import EngineState, Phase, RemainingTimes, SessionPlan, UpcomingItem


def iter_phases(
    plan: SessionPlan,
    state: EngineState | None = None,
    prepare_seconds: int = PREPARE_SECONDS,
):
    """
    Yield every phase position from *state* (default: session start) until complete.

    The given state itself is yielded first; complete is not yielded.
    """
    current = state if state is not None else initial_state(plan, prepare_seconds)
    while not current.is_complete:
        yield current
        current = advance_state(current, plan, prepare_seconds)


def total_duration(plan: SessionPlan, prepare_seconds: int = PREPARE_SECONDS) -> int:
    """Seconds from the first tick to completion when nothing is skipped."""
    return sum(s.remaining_seconds for s in iter_phases(plan, prepare_seconds=prepare_seconds))


def remaining_times(
    state: EngineState,
    plan: SessionPlan,
    prepare_seconds: int = PREPARE_SECONDS,
) -> RemainingTimes:
    """
    Work, rest and other time left, counting the current phase's remaining seconds.

    The rest interval after the last main step is included because the
    engine runs it before moving on.
    """
    times = RemainingTimes()
    for position in iter_phases(plan, state, prepare_seconds):
        if position.phase is Phase.WORK:
            times.work_seconds += position.remaining_seconds
        elif position.phase is Phase.REST:
            times.rest_seconds += position.remaining_seconds
        else:
            times.other_seconds += position.remaining_seconds
    return times


def upcoming(
    state: EngineState,
    plan: SessionPlan,
    count: int = PREVIEW_COUNT,
    prepare_seconds: int = PREPARE_SECONDS,
) -> list[UpcomingItem]:
    """
    Next *count* phases after the current one.

    When the session ends within the window a final complete item is
    included and the list stops there.
    """
    items: list[UpcomingItem] = []
    current = state
    while len(items) < count and not current.is_complete:
        current = advance_state(current, plan, prepare_seconds)
        items.append(
            UpcomingItem(
                phase=current.phase,
                label=step_label(current, plan),
                duration_seconds=current.remaining_seconds,
            )
        )
    return items


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def format_time(seconds: int) -> str:
    """Countdown display: 125 -> '02:05'."""
    seconds = max(0, int(seconds))
    minutes, secs = divmod(seconds, 60)
    return f"{minutes:02d}:{secs:02d}"


def format_minutes(seconds: int) -> str:
    """Rounded minutes: 170 -> '3min'."""
    return f"{round(seconds / 60)}min"


def format_duration(seconds: int) -> str:
    """Preference display: 45 -> '45s', 60 -> '1m', 90 -> '1m 30s'."""
    if seconds < 60:
        return f"{seconds}s"
    minutes, secs = divmod(seconds, 60)
    return f"{minutes}m" if secs == 0 else f"{minutes}m {secs}s"
