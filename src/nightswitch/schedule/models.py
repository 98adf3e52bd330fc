"""Day/night state types shared by the engine and its consumers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class TimeState(str, Enum):
    UNKNOWN = "unknown"
    DAY = "day"
    NIGHT = "night"

    def opposite(self) -> TimeState:
        """Night for Day and Day for anything else."""
        return TimeState.DAY if self is TimeState.NIGHT else TimeState.NIGHT


class Authority(str, Enum):
    """Who currently decides the held state.

    AUTOMATIC: the schedule drives every transition.
    MANUAL_UNTIL_MATCH: a user forced the state; schedule results that differ
    are suppressed until one agrees with the held state.
    """

    AUTOMATIC = "automatic"
    MANUAL_UNTIL_MATCH = "manual_until_match"


@dataclass(frozen=True)
class TimerState:
    time: TimeState = TimeState.UNKNOWN
    authority: Authority = Authority.AUTOMATIC
    last_computed_at: datetime | None = None

    @property
    def manually_set(self) -> bool:
        return self.authority is Authority.MANUAL_UNTIL_MATCH


COLOR_SCHEME_DARK = "prefer-dark"
COLOR_SCHEME_DEFAULT = "default"


def color_scheme_to_time(color_scheme: str) -> TimeState:
    return TimeState.NIGHT if color_scheme == COLOR_SCHEME_DARK else TimeState.DAY


def time_to_color_scheme(time: TimeState) -> str:
    return COLOR_SCHEME_DARK if time is TimeState.NIGHT else COLOR_SCHEME_DEFAULT
