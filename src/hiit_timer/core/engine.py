"""
Session phase state machine.

The transition table lives in advance_state(), a pure function from one
EngineState to the next. SessionEngine wraps it with the control
operations (start, pause, skip, stop, tick) and publishes FeedbackEvents
for each transition.

Transition table (on countdown expiry or skip):

  warmup[i]   -> warmup[i+1]              while more warmup steps remain
  warmup[last]-> prepare (PREPARE_SECONDS)
  prepare     -> work[0]
  work[i]     -> rest[i]
  rest[i]     -> work[i+1]                while more main steps remain
  rest[last]  -> cooldown[0]              if the plan has a cooldown
  rest[last]  -> complete                 otherwise
  cooldown[i] -> cooldown[i+1]            while more cooldown steps remain
  cooldown[last] -> complete

complete is terminal and always inactive.
"""

from __future__ import annotations

from dataclasses import replace

from loguru import logger

from .config import COUNTDOWN_WARNING_SECONDS, PREPARE_SECONDS
from .events import EventBus, EventKind, FeedbackEvent
from .models import EngineState, Phase, SessionPlan, SessionView


def initial_state(plan: SessionPlan, prepare_seconds: int = PREPARE_SECONDS) -> EngineState:
    """Warmup step 0 when the plan has a warmup, otherwise the prepare countdown."""
    if plan.warmup:
        return EngineState(phase=Phase.WARMUP, remaining_seconds=plan.warmup[0].duration_seconds)
    return EngineState(phase=Phase.PREPARE, remaining_seconds=prepare_seconds)


def duration_of(
    phase: Phase,
    step_index: int,
    plan: SessionPlan,
    prepare_seconds: int = PREPARE_SECONDS,
) -> int:
    """Full countdown length of the given phase position."""
    if phase is Phase.PREPARE:
        return prepare_seconds
    if phase is Phase.WARMUP:
        return plan.warmup[step_index].duration_seconds
    if phase is Phase.WORK:
        return plan.main_steps[step_index].work_duration_seconds
    if phase is Phase.REST:
        return plan.main_steps[step_index].rest_duration_seconds
    if phase is Phase.COOLDOWN:
        return plan.cooldown[step_index].duration_seconds
    return 0


def advance_state(
    state: EngineState,
    plan: SessionPlan,
    prepare_seconds: int = PREPARE_SECONDS,
) -> EngineState:
    """
    Compute the state that follows *state*, ignoring its remaining time.

    Run-state flags are carried over except on completion, which always
    deactivates the session. complete maps to itself.
    """
    phase, i = state.phase, state.step_index

    if phase is Phase.WARMUP:
        if i + 1 < len(plan.warmup):
            return replace(state, step_index=i + 1, remaining_seconds=plan.warmup[i + 1].duration_seconds)
        return replace(state, phase=Phase.PREPARE, step_index=0, remaining_seconds=prepare_seconds)

    if phase is Phase.PREPARE:
        return replace(
            state,
            phase=Phase.WORK,
            step_index=0,
            remaining_seconds=plan.main_steps[0].work_duration_seconds,
        )

    if phase is Phase.WORK:
        return replace(state, phase=Phase.REST, remaining_seconds=plan.main_steps[i].rest_duration_seconds)

    if phase is Phase.REST:
        if i + 1 < len(plan.main_steps):
            return replace(
                state,
                phase=Phase.WORK,
                step_index=i + 1,
                remaining_seconds=plan.main_steps[i + 1].work_duration_seconds,
            )
        if plan.cooldown:
            return replace(
                state,
                phase=Phase.COOLDOWN,
                step_index=0,
                remaining_seconds=plan.cooldown[0].duration_seconds,
            )
        return _completed(state)

    if phase is Phase.COOLDOWN:
        if i + 1 < len(plan.cooldown):
            return replace(state, step_index=i + 1, remaining_seconds=plan.cooldown[i + 1].duration_seconds)
        return _completed(state)

    return state


def _completed(state: EngineState) -> EngineState:
    return EngineState(phase=Phase.COMPLETE, remaining_seconds=0, step_index=0, is_active=False, is_paused=False)


def step_label(state: EngineState, plan: SessionPlan) -> str:
    """Human-readable name of the current position."""
    phase, i = state.phase, state.step_index
    if phase is Phase.WARMUP:
        return f"Warmup: {plan.warmup[i].name}"
    if phase is Phase.COOLDOWN:
        return f"Cooldown: {plan.cooldown[i].name}"
    if phase is Phase.WORK:
        return plan.main_steps[i].name
    if phase is Phase.REST:
        return "Rest"
    if phase is Phase.PREPARE:
        return "Get ready"
    return "Workout complete"


def progress_fraction(state: EngineState, plan: SessionPlan) -> float:
    """
    Fraction of the current list already behind the user.

    A main step counts as done once its work interval is over, so rest at
    index i reports (i + 1) / len(main_steps).
    """
    phase, i = state.phase, state.step_index
    if phase is Phase.WARMUP:
        return i / len(plan.warmup)
    if phase is Phase.COOLDOWN:
        return i / len(plan.cooldown)
    if phase is Phase.WORK:
        return i / len(plan.main_steps)
    if phase is Phase.REST:
        return (i + 1) / len(plan.main_steps)
    if phase is Phase.COMPLETE:
        return 1.0
    return 0.0


def _step_position(state: EngineState, plan: SessionPlan) -> tuple[int, int]:
    if state.phase is Phase.WARMUP:
        return state.step_index + 1, len(plan.warmup)
    if state.phase is Phase.COOLDOWN:
        return state.step_index + 1, len(plan.cooldown)
    if state.phase in (Phase.WORK, Phase.REST):
        return state.step_index + 1, len(plan.main_steps)
    return 0, 0


class SessionEngine:
    """
    Mutable owner of one session's position and run-state.

    All operations are total: calling any of them in any state is valid,
    and those that make no sense in the current state are no-ops.
    """

    def __init__(
        self,
        plan: SessionPlan,
        bus: EventBus | None = None,
        prepare_seconds: int = PREPARE_SECONDS,
    ):
        """
        Initialize the engine at the start of *plan*.

        Args:
            plan: Validated session plan (never mutated)
            bus: Event bus for feedback hooks; a private one is created if omitted
            prepare_seconds: Length of the prepare countdown
        """
        if prepare_seconds < 1:
            raise ValueError("prepare_seconds must be >= 1")
        self.plan = plan
        self.bus = bus if bus is not None else EventBus()
        self.prepare_seconds = prepare_seconds
        self._state = initial_state(plan, prepare_seconds)

    # -- read-only accessors -------------------------------------------------

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def step_index(self) -> int:
        return self._state.step_index

    @property
    def remaining_seconds(self) -> int:
        return self._state.remaining_seconds

    @property
    def is_active(self) -> bool:
        return self._state.is_active

    @property
    def is_paused(self) -> bool:
        return self._state.is_paused

    @property
    def is_complete(self) -> bool:
        return self._state.is_complete

    def view(self) -> SessionView:
        """Project the current state for display."""
        number, count = _step_position(self._state, self.plan)
        return SessionView(
            phase=self._state.phase,
            remaining_seconds=self._state.remaining_seconds,
            current_step_label=step_label(self._state, self.plan),
            progress_fraction=progress_fraction(self._state, self.plan),
            step_number=number,
            step_count=count,
            is_active=self._state.is_active,
            is_paused=self._state.is_paused,
        )

    # -- control operations --------------------------------------------------

    def start(self) -> None:
        """Activate the countdown. No-op if already active or complete."""
        if self._state.is_active or self._state.is_complete:
            return
        self._state = replace(self._state, is_active=True)
        logger.debug(f"Session started at {self._state.phase.value}[{self._state.step_index}]")

    def pause(self) -> None:
        if self._state.is_complete:
            return
        self._state = replace(self._state, is_paused=True)

    def resume(self) -> None:
        self._state = replace(self._state, is_paused=False)

    def toggle_pause(self) -> None:
        if self._state.is_paused:
            self.resume()
        else:
            self.pause()

    def skip(self) -> None:
        """Discard the rest of the current phase. No-op once complete."""
        if self._state.is_complete:
            return
        logger.debug(f"Skipping {self._state.phase.value} with {self._state.remaining_seconds}s left")
        self.advance()

    def stop(self) -> None:
        """
        Halt the countdown in place.

        Position is kept, so a later start() continues where the session
        stopped rather than starting over.
        """
        self._state = replace(self._state, is_active=False, is_paused=False)

    def tick(self) -> None:
        """
        Account for one elapsed time unit.

        The countdown warning fires after the decrement, on the ticks that
        leave 3, 2 and 1 units. Checking before the decrement instead would
        beep only on the ticks that start from 3 and 2, one tick later, and
        never on the tick that ends the phase.
        """
        state = self._state
        if not state.is_active or state.is_paused:
            return
        if state.remaining_seconds <= 1:
            self.advance()
            return
        self._state = replace(state, remaining_seconds=state.remaining_seconds - 1)
        if self._state.remaining_seconds in COUNTDOWN_WARNING_SECONDS:
            self._emit(EventKind.COUNTDOWN_WARNING)

    def advance(self) -> None:
        """Move to the next phase position and publish the transition."""
        previous = self._state
        if previous.is_complete:
            return
        self._state = advance_state(previous, self.plan, self.prepare_seconds)
        logger.debug(
            f"{previous.phase.value}[{previous.step_index}] -> "
            f"{self._state.phase.value}[{self._state.step_index}] ({self._state.remaining_seconds}s)"
        )

        if self._state.is_complete:
            self._emit(EventKind.COMPLETION)
            return
        self._emit(EventKind.PHASE_START)
        if self._state.phase in (Phase.WARMUP, Phase.COOLDOWN, Phase.WORK):
            self._emit(EventKind.PHASE_LABEL)

    def _emit(self, kind: EventKind) -> None:
        self.bus.emit(
            FeedbackEvent(
                kind=kind,
                phase=self._state.phase,
                step_index=self._state.step_index,
                remaining_seconds=self._state.remaining_seconds,
                label=step_label(self._state, self.plan),
            )
        )
