"""
JSON storage for warmup/cooldown duration preferences.

Preferences are read once when a plan is built; the running session never
touches this store.
"""

import json
from datetime import datetime
from pathlib import Path

from loguru import logger

from ..core.config import DURATION_OPTION_MAX, DURATION_OPTION_MIN, DURATION_OPTION_STEP
from ..core.config_loader import get_data_dir
from .serializers import (
    DurationPreferences,
    ValidationError,
    dict_to_preferences,
    preferences_to_dict,
    validate_preferences,
)


class DurationPreferencesStore:
    """
    Manages the preferences.json file.

    Missing or unreadable files yield default preferences. A file holding
    only one of the two durations is merged over the defaults.
    """

    def __init__(self, path: str | Path):
        """
        Initialize the store.

        Args:
            path: Path to the preferences JSON file
        """
        self.path = Path(path)

    def load(self) -> DurationPreferences:
        """Return stored preferences, or defaults when none are usable."""
        if not self.path.exists():
            return DurationPreferences()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return dict_to_preferences(data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Failed to load duration preferences from {self.path}: {e}")
            return DurationPreferences()

    def save(
        self,
        warmup_duration: int | None = None,
        cooldown_duration: int | None = None,
    ) -> DurationPreferences:
        """
        Merge the given durations over the stored ones and write the result.

        Returns:
            The preferences now on disk

        Raises:
            ValidationError: If a duration is outside [10, 300] seconds
        """
        current = self.load()
        updated = DurationPreferences(
            warmup_duration=current.warmup_duration if warmup_duration is None else warmup_duration,
            cooldown_duration=current.cooldown_duration if cooldown_duration is None else cooldown_duration,
            last_updated=datetime.now().isoformat(timespec="seconds"),
        )
        validate_preferences(updated)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(preferences_to_dict(updated), f, indent=2)
        logger.info(
            f"Saved duration preferences: warmup={updated.warmup_duration}s "
            f"cooldown={updated.cooldown_duration}s"
        )
        return updated

    def set_warmup_duration(self, duration: int) -> DurationPreferences:
        return self.save(warmup_duration=duration)

    def set_cooldown_duration(self, duration: int) -> DurationPreferences:
        return self.save(cooldown_duration=duration)

    def reset_to_defaults(self) -> None:
        """Delete the stored preferences so defaults apply again."""
        if self.path.exists():
            self.path.unlink()


def duration_options() -> list[int]:
    """Durations offered in pickers: 10s to 120s in 5s steps."""
    return list(range(DURATION_OPTION_MIN, DURATION_OPTION_MAX + 1, DURATION_OPTION_STEP))


def get_default_preferences_path() -> Path:
    """<data dir>/preferences.json."""
    return get_data_dir() / "preferences.json"
