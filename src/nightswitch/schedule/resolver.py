"""Map the hour of day onto a day/night state for a sunrise/sunset pair."""

from __future__ import annotations

from datetime import datetime

from nightswitch.schedule.models import TimeState


def decimal_hour(dt: datetime) -> float:
    """Wall-clock hour of `dt` as a float in [0, 24)."""
    return dt.hour + dt.minute / 60 + dt.second / 3600


def resolve_time(now_hour: float, sunrise: float, sunset: float) -> TimeState | None:
    """Return DAY or NIGHT for `now_hour`, or None when sunrise == sunset.

    With sunrise < sunset the day window is [sunrise, sunset). With
    sunrise > sunset the day window wraps around midnight. Equal times carry
    no information; the caller keeps whatever state it already holds.
    """
    if sunrise < sunset:
        return TimeState.DAY if sunrise <= now_hour < sunset else TimeState.NIGHT
    if sunrise > sunset:
        return TimeState.DAY if now_hour >= sunrise or now_hour < sunset else TimeState.NIGHT
    return None
