"""Day rules: virtual calendar, experience/levels, streaks."""

from .calendar import day_key, next_reset, previous_day_key, time_until_reset
from .progression import (
    EXP_PER_LEVEL,
    EXP_PER_QUEST,
    STAT_POINTS_PER_LEVEL,
    ToggleResult,
    apply_toggle,
    exp_for_next_level,
    exp_in_current_level,
)
from .streak import active_streak, refresh_streak

__all__ = [
    "EXP_PER_LEVEL",
    "EXP_PER_QUEST",
    "STAT_POINTS_PER_LEVEL",
    "ToggleResult",
    "active_streak",
    "apply_toggle",
    "day_key",
    "exp_for_next_level",
    "exp_in_current_level",
    "next_reset",
    "previous_day_key",
    "refresh_streak",
    "time_until_reset",
]
