"""
Conversion between JSON/YAML documents and hiit-timer models.

Handles plan documents and duration preferences.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ..core.config import (
    DEFAULT_COOLDOWN_DURATION,
    DEFAULT_WARMUP_DURATION,
    MAX_STEP_DURATION,
    MIN_STEP_DURATION,
)
from ..core.models import MainStep, SessionPlan, TimedStep


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


@dataclass
class DurationPreferences:
    """Per-step durations for generated warmup and cooldown lists."""

    warmup_duration: int = DEFAULT_WARMUP_DURATION  # seconds
    cooldown_duration: int = DEFAULT_COOLDOWN_DURATION  # seconds
    last_updated: str = field(default_factory=lambda: datetime.now().isoformat(timespec="seconds"))


# =============================================================================
# Validation
# =============================================================================


def validate_step_duration(value: Any, label: str) -> int:
    """
    Validate a warmup/cooldown preference.

    Args:
        value: Duration in seconds
        label: "Warmup" or "Cooldown", used in the error message

    Returns:
        The duration as int

    Raises:
        ValidationError: If value is not a whole number in [10, 300]
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)) or int(value) != value:
        raise ValidationError(f"{label} duration must be a whole number of seconds")
    if value < MIN_STEP_DURATION or value > MAX_STEP_DURATION:
        raise ValidationError(
            f"{label} duration must be between {MIN_STEP_DURATION}-{MAX_STEP_DURATION} seconds"
        )
    return int(value)


def validate_preferences(prefs: DurationPreferences) -> DurationPreferences:
    validate_step_duration(prefs.warmup_duration, "Warmup")
    validate_step_duration(prefs.cooldown_duration, "Cooldown")
    return prefs


# =============================================================================
# Preferences
# =============================================================================


def preferences_to_dict(prefs: DurationPreferences) -> dict[str, Any]:
    return {
        "warmup_duration": prefs.warmup_duration,
        "cooldown_duration": prefs.cooldown_duration,
        "last_updated": prefs.last_updated,
    }


def dict_to_preferences(data: dict[str, Any]) -> DurationPreferences:
    """
    Build preferences from a stored dict, filling missing keys with defaults.

    Raises:
        ValidationError: If neither duration is present or a value is out of range
    """
    if not isinstance(data, dict) or not (
        "warmup_duration" in data or "cooldown_duration" in data
    ):
        raise ValidationError("Preferences must contain warmup_duration or cooldown_duration")

    defaults = DurationPreferences()
    prefs = DurationPreferences(
        warmup_duration=data.get("warmup_duration", defaults.warmup_duration),
        cooldown_duration=data.get("cooldown_duration", defaults.cooldown_duration),
        last_updated=str(data.get("last_updated", defaults.last_updated)),
    )
    return validate_preferences(prefs)


# =============================================================================
# Plan documents
# =============================================================================


def _positive_int(value: Any, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{where}: expected a whole number of seconds, got {value!r}")
    if value < 1:
        raise ValidationError(f"{where}: duration must be at least 1 second")
    return value


def _timed_steps(raw: Any, default_duration: int, section: str) -> tuple[TimedStep, ...]:
    """
    Parse a warmup/cooldown list.

    Each entry is either a bare id string or a mapping with ``id`` and
    optional ``name`` / ``duration``.
    """
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ValidationError(f"'{section}' must be a list")

    steps: list[TimedStep] = []
    for n, entry in enumerate(raw, 1):
        where = f"{section} #{n}"
        if isinstance(entry, str):
            entry = {"id": entry}
        if not isinstance(entry, dict) or not entry.get("id"):
            raise ValidationError(f"{where}: expected an id string or a mapping with 'id'")
        duration = entry.get("duration", default_duration)
        steps.append(
            TimedStep(
                id=str(entry["id"]),
                name=str(entry.get("name", "")),
                duration_seconds=_positive_int(duration, where),
            )
        )
    return tuple(steps)


def _main_steps(raw: Any) -> tuple[MainStep, ...]:
    if not isinstance(raw, list) or not raw:
        raise ValidationError("'exercises' must be a non-empty list")

    steps: list[MainStep] = []
    for n, entry in enumerate(raw, 1):
        where = f"exercises #{n}"
        if not isinstance(entry, dict):
            raise ValidationError(f"{where}: expected a mapping with name, work and rest")
        missing = {"work", "rest"} - set(entry)
        if missing:
            raise ValidationError(f"{where}: missing fields {sorted(missing)}")
        steps.append(
            MainStep(
                name=str(entry.get("name") or f"Exercise {n}"),
                work_duration_seconds=_positive_int(entry["work"], f"{where} work"),
                rest_duration_seconds=_positive_int(entry["rest"], f"{where} rest"),
            )
        )
    return tuple(steps)


def build_plan(
    doc: dict[str, Any],
    preferences: DurationPreferences | None = None,
    include_warmup: bool = True,
    include_cooldown: bool = True,
) -> SessionPlan:
    """
    Build a SessionPlan from a plan document.

    Warmup and cooldown steps without an explicit ``duration`` take the
    per-step duration from *preferences* (defaults when omitted).

    Raises:
        ValidationError: If the document is malformed
    """
    if not isinstance(doc, dict):
        raise ValidationError("Plan document must be a mapping")
    prefs = preferences if preferences is not None else DurationPreferences()

    warmup = _timed_steps(doc.get("warmup"), prefs.warmup_duration, "warmup") if include_warmup else ()
    cooldown = (
        _timed_steps(doc.get("cooldown"), prefs.cooldown_duration, "cooldown") if include_cooldown else ()
    )
    try:
        return SessionPlan(
            main_steps=_main_steps(doc.get("exercises")),
            warmup=warmup,
            cooldown=cooldown,
            name=str(doc.get("name") or "Workout"),
        )
    except ValueError as e:
        raise ValidationError(str(e)) from e


def plan_to_dict(plan: SessionPlan) -> dict[str, Any]:
    """Serialize a plan back to the plan-document shape (explicit durations)."""
    return {
        "name": plan.name,
        "warmup": [{"id": s.id, "name": s.name, "duration": s.duration_seconds} for s in plan.warmup],
        "exercises": [
            {"name": s.name, "work": s.work_duration_seconds, "rest": s.rest_duration_seconds}
            for s in plan.main_steps
        ],
        "cooldown": [{"id": s.id, "name": s.name, "duration": s.duration_seconds} for s in plan.cooldown],
    }
