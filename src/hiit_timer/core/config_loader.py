"""
YAML → timer settings loader.

Loads defaults from timer.yaml (bundled with the package) and optionally
merges user overrides from ~/.hiit-timer/timer.yaml.

Usage:
    from hiit_timer.core.config_loader import load_timer_settings
    settings = load_timer_settings()
    settings.prepare_seconds

If the bundled YAML cannot be parsed, the Python defaults from config.py
are used. If the user override file has parse errors, a warning is logged
and the file is ignored.
"""

from __future__ import annotations

import importlib.resources
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from .config import COMPLETION_DISPLAY_SECONDS, PREPARE_SECONDS, TICK_INTERVAL_SECONDS

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML mapping; return {} (with a warning) on any error."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Ignoring unreadable config file {path}: {e}")
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring config file {path}: top level must be a mapping")
        return {}
    return data


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TimerSettings:
    """Runtime settings for live sessions."""

    prepare_seconds: int = PREPARE_SECONDS
    completion_delay_seconds: int = COMPLETION_DISPLAY_SECONDS
    tick_interval_seconds: float = TICK_INTERVAL_SECONDS
    sound: bool = True
    log_level: str = "WARNING"


def get_data_dir() -> Path:
    """Return the per-user data directory (HIIT_TIMER_HOME or ~/.hiit-timer)."""
    override = os.environ.get("HIIT_TIMER_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".hiit-timer"


def get_bundled_yaml_path() -> Path | None:
    """Return the path to the bundled timer.yaml, or None if not found."""
    try:
        ref = importlib.resources.files("hiit_timer").joinpath("timer.yaml")
        with importlib.resources.as_file(ref) as p:
            return p if p.exists() else None
    except (ModuleNotFoundError, FileNotFoundError):
        candidate = Path(__file__).parent.parent / "timer.yaml"
        return candidate if candidate.exists() else None


def get_user_yaml_path() -> Path | None:
    """Return <data dir>/timer.yaml if it exists, else None."""
    p = get_data_dir() / "timer.yaml"
    return p if p.exists() else None


def load_timer_config() -> dict[str, Any]:
    """
    Load and merge raw configuration from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/hiit_timer/timer.yaml
    2. User override at <data dir>/timer.yaml

    Returns:
        Merged dict of config keys. Empty dict if no YAML available.
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_yaml_path()
    if bundled is not None:
        config = _deep_merge(config, _load_yaml_file(bundled))

    user = get_user_yaml_path()
    if user is not None:
        user_cfg = _load_yaml_file(user)
        if user_cfg:
            config = _deep_merge(config, user_cfg)

    return config


def settings_from_dict(cfg: dict[str, Any]) -> TimerSettings:
    """
    Build TimerSettings from a raw config dict.

    Unknown keys are ignored; invalid values fall back to defaults with a warning.
    """
    defaults = TimerSettings()
    timer = cfg.get("timer") if isinstance(cfg.get("timer"), dict) else {}
    logging_cfg = cfg.get("logging") if isinstance(cfg.get("logging"), dict) else {}

    def _int(key: str, default: int) -> int:
        raw = timer.get(key, default)
        try:
            value = int(raw)
        except (TypeError, ValueError):
            logger.warning(f"timer.{key}={raw!r} is not an integer; using {default}")
            return default
        if value < 1:
            logger.warning(f"timer.{key} must be >= 1; using {default}")
            return default
        return value

    raw_interval = timer.get("tick_interval_seconds", defaults.tick_interval_seconds)
    try:
        tick_interval = float(raw_interval)
    except (TypeError, ValueError):
        tick_interval = -1.0
    if tick_interval <= 0:
        logger.warning(f"timer.tick_interval_seconds={raw_interval!r} is invalid; using default")
        tick_interval = defaults.tick_interval_seconds

    log_level = str(logging_cfg.get("level", defaults.log_level)).upper()
    try:
        logger.level(log_level)
    except ValueError:
        logger.warning(f"logging.level={log_level!r} is not a known level; using {defaults.log_level}")
        log_level = defaults.log_level

    return TimerSettings(
        prepare_seconds=_int("prepare_seconds", defaults.prepare_seconds),
        completion_delay_seconds=_int("completion_delay_seconds", defaults.completion_delay_seconds),
        tick_interval_seconds=tick_interval,
        sound=bool(timer.get("sound", defaults.sound)),
        log_level=log_level,
    )


def load_timer_settings() -> TimerSettings:
    """Load merged YAML config and convert it to TimerSettings."""
    return settings_from_dict(load_timer_config())
