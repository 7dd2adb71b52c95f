"""
Data models for hiit-timer.

SessionPlan and its steps are immutable inputs built once before a session
starts. EngineState is an immutable snapshot of where the session engine
is; the engine replaces it on every transition.
"""

from dataclasses import dataclass, field
from enum import Enum


class Phase(str, Enum):
    """Discrete stage of an interval-training session."""

    PREPARE = "prepare"
    WARMUP = "warmup"
    WORK = "work"
    REST = "rest"
    COOLDOWN = "cooldown"
    COMPLETE = "complete"


def _humanize(step_id: str) -> str:
    """'arm_circles' -> 'Arm Circles'."""
    return step_id.replace("_", " ").replace("-", " ").strip().title()


@dataclass(frozen=True)
class TimedStep:
    """
    One warmup or cooldown exercise.

    ``name`` defaults to a humanised ``id`` when not given.
    """

    id: str
    duration_seconds: int
    name: str = ""

    def __post_init__(self) -> None:
        """Validate step data."""
        if not self.id:
            raise ValueError("TimedStep.id must be non-empty")
        if self.duration_seconds < 1:
            raise ValueError(f"duration_seconds must be >= 1 (step '{self.id}')")
        if not self.name:
            object.__setattr__(self, "name", _humanize(self.id))


@dataclass(frozen=True)
class MainStep:
    """One work interval followed by its rest interval."""

    name: str
    work_duration_seconds: int
    rest_duration_seconds: int

    def __post_init__(self) -> None:
        """Validate interval durations."""
        if self.work_duration_seconds < 1:
            raise ValueError(f"work_duration_seconds must be >= 1 ('{self.name}')")
        if self.rest_duration_seconds < 1:
            raise ValueError(f"rest_duration_seconds must be >= 1 ('{self.name}')")


@dataclass(frozen=True)
class SessionPlan:
    """
    Ordered description of every phase a session traverses.

    A plan always has at least one main step. Warmup and cooldown lists
    may be empty, in which case the engine skips those phases entirely.
    """

    main_steps: tuple[MainStep, ...]
    warmup: tuple[TimedStep, ...] = ()
    cooldown: tuple[TimedStep, ...] = ()
    name: str = "Workout"

    def __post_init__(self) -> None:
        """Freeze the step sequences and validate the plan shape."""
        object.__setattr__(self, "main_steps", tuple(self.main_steps))
        object.__setattr__(self, "warmup", tuple(self.warmup))
        object.__setattr__(self, "cooldown", tuple(self.cooldown))
        if not self.main_steps:
            raise ValueError("SessionPlan needs at least one main step")


@dataclass(frozen=True)
class EngineState:
    """
    Snapshot of the session engine.

    step_index points into warmup / cooldown during those phases and into
    main_steps during work / rest. It is 0 and carries no meaning during
    prepare and complete.
    """

    phase: Phase
    remaining_seconds: int
    step_index: int = 0
    is_active: bool = False
    is_paused: bool = False

    @property
    def is_complete(self) -> bool:
        return self.phase is Phase.COMPLETE

    @property
    def is_running(self) -> bool:
        """True when the countdown driver should be ticking."""
        return self.is_active and not self.is_paused


@dataclass(frozen=True)
class SessionView:
    """Display projection of the engine at one instant."""

    phase: Phase
    remaining_seconds: int
    current_step_label: str
    progress_fraction: float
    step_number: int = 0  # 1-based position within the phase's list (0 when n/a)
    step_count: int = 0
    is_active: bool = False
    is_paused: bool = False


@dataclass(frozen=True)
class UpcomingItem:
    """One entry of the 'next up' preview."""

    phase: Phase
    label: str
    duration_seconds: int


@dataclass
class RemainingTimes:
    """Work and rest time left in the session, in seconds."""

    work_seconds: int = 0
    rest_seconds: int = 0
    other_seconds: int = 0  # prepare, warmup and cooldown

    @property
    def total_seconds(self) -> int:
        return self.work_seconds + self.rest_seconds + self.other_seconds


@dataclass
class TimelineEntry:
    """A phase instant recorded by a simulated run."""

    elapsed_seconds: int
    phase: Phase
    step_index: int
    label: str
    duration_seconds: int
    events: list[str] = field(default_factory=list)
