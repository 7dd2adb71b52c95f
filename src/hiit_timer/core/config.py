"""
Configuration constants for the interval-training session engine.

All adjustable timing parameters are centralized here. Values that users
may override live in timer.yaml (see config_loader.py).
"""

from typing import Final

# =============================================================================
# SESSION TIMING
# =============================================================================

PREPARE_SECONDS: Final[int] = 5  # "Get ready" countdown before the first work interval
COMPLETION_DISPLAY_SECONDS: Final[int] = 2  # Completion screen shown before the callback fires
TICK_INTERVAL_SECONDS: Final[float] = 1.0  # One time unit of the countdown driver

COUNTDOWN_WARNING_SECONDS: Final[frozenset[int]] = frozenset({3, 2, 1})

# =============================================================================
# WARMUP / COOLDOWN DURATION PREFERENCES
# =============================================================================

DEFAULT_WARMUP_DURATION: Final[int] = 20
DEFAULT_COOLDOWN_DURATION: Final[int] = 20

MIN_STEP_DURATION: Final[int] = 10  # Lower bound accepted by the preferences layer
MAX_STEP_DURATION: Final[int] = 300  # Upper bound accepted by the preferences layer

DURATION_OPTION_MIN: Final[int] = 10  # Options offered in pickers
DURATION_OPTION_MAX: Final[int] = 120
DURATION_OPTION_STEP: Final[int] = 5

# =============================================================================
# UPCOMING PREVIEW
# =============================================================================

PREVIEW_COUNT: Final[int] = 2  # Number of upcoming phases shown during a session
