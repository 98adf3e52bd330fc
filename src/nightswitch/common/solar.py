"""Sunrise/sunset calculation for the day/night schedule.

The main computation follows the NOAA solar calculator spreadsheet
(https://gml.noaa.gov/grad/solcalc/calcdetails.html). astral is used as an
independent reference for display and cross-checks.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime

from astral import Observer
from astral.sun import sun

# Spreadsheet day zero: 1899-12-30 00:00 is Julian day 2415018.5.
_EPOCH = datetime(1899, 12, 30)
_EPOCH_JULIAN_DAY = 2415018.5
_J2000 = 2451545.0
# Zenith of the sun's upper limb at sunrise, including refraction.
_SUNRISE_ZENITH = 90.833


@dataclass(frozen=True)
class SunTimes:
    sunrise: float  # decimal hours, local time, [0, 24)
    sunset: float


def is_valid_location(latitude: float, longitude: float) -> bool:
    return -90 <= latitude <= 90 and -180 <= longitude <= 180


def _rad(degrees: float) -> float:
    return math.radians(degrees)


def _deg(radians: float) -> float:
    return math.degrees(radians)


def _wrap_hours(hours: float) -> float:
    # Floored modulo can round up to exactly 24.0 for tiny negative inputs.
    wrapped = hours % 24
    return 0.0 if wrapped >= 24 else wrapped


def utc_offset_hours(now: datetime) -> float:
    if now.tzinfo is None:
        now = now.astimezone()
    offset = now.utcoffset()
    return offset.total_seconds() / 3600 if offset else 0.0


def compute_sun_times(
    now: datetime,
    latitude: float,
    longitude: float,
    offset: float = 0.0,
) -> SunTimes:
    """Compute local sunrise/sunset hours for the day of `now`.

    `offset` (hours) is added to sunrise and subtracted from sunset, so a
    positive offset shortens the night at both ends. Both results are reduced
    into [0, 24).

    Inside the polar circles the hour angle is clamped, so on days without a
    sunrise or sunset both results land on the same hour (solar noon in
    polar night, solar midnight under the midnight sun). The schedule then
    keeps whatever state it holds.
    """
    if now.tzinfo is None:
        now = now.astimezone()
    tz_offset = utc_offset_hours(now)

    local_days = (now.replace(tzinfo=None) - _EPOCH).total_seconds() / 86400
    julian_day = local_days + _EPOCH_JULIAN_DAY - tz_offset / 24
    jc = (julian_day - _J2000) / 36525

    geom_mean_long = (280.46646 + jc * (36000.76983 + jc * 0.0003032)) % 360
    geom_mean_anom = 357.52911 + jc * (35999.05029 - 0.0001537 * jc)
    eccent = 0.016708634 - jc * (0.000042037 + 0.0000001267 * jc)
    eq_of_center = (
        math.sin(_rad(geom_mean_anom)) * (1.914602 - jc * (0.004817 + 0.000014 * jc))
        + math.sin(_rad(2 * geom_mean_anom)) * (0.019993 - 0.000101 * jc)
        + math.sin(_rad(3 * geom_mean_anom)) * 0.000289
    )
    true_long = geom_mean_long + eq_of_center
    apparent_long = true_long - 0.00569 - 0.00478 * math.sin(_rad(125.04 - 1934.136 * jc))
    mean_obliq = 23 + (26 + (21.448 - jc * (46.815 + jc * (0.00059 - jc * 0.001813))) / 60) / 60
    obliq_corr = mean_obliq + 0.00256 * math.cos(_rad(125.04 - 1934.136 * jc))
    declination = _deg(math.asin(math.sin(_rad(obliq_corr)) * math.sin(_rad(apparent_long))))

    var_y = math.tan(_rad(obliq_corr / 2)) ** 2
    eq_of_time = 4 * _deg(
        var_y * math.sin(2 * _rad(geom_mean_long))
        - 2 * eccent * math.sin(_rad(geom_mean_anom))
        + 4 * eccent * var_y * math.sin(_rad(geom_mean_anom)) * math.cos(2 * _rad(geom_mean_long))
        - 0.5 * var_y * var_y * math.sin(4 * _rad(geom_mean_long))
        - 1.25 * eccent * eccent * math.sin(2 * _rad(geom_mean_anom))
    )

    cos_ha = (
        math.cos(_rad(_SUNRISE_ZENITH)) / (math.cos(_rad(latitude)) * math.cos(_rad(declination)))
        - math.tan(_rad(latitude)) * math.tan(_rad(declination))
    )
    hour_angle = _deg(math.acos(max(-1.0, min(1.0, cos_ha))))
    solar_noon = (720 - 4 * longitude - eq_of_time + tz_offset * 60) / 1440

    sunrise_day_fraction = solar_noon - hour_angle * 4 / 1440
    sunset_day_fraction = solar_noon + hour_angle * 4 / 1440

    return SunTimes(
        sunrise=_wrap_hours(sunrise_day_fraction * 24 + offset),
        sunset=_wrap_hours(sunset_day_fraction * 24 - offset),
    )


def reference_sun_times(now: datetime, latitude: float, longitude: float) -> SunTimes | None:
    """Sunrise/sunset from astral for the same day, None where the sun does not rise or set."""
    if now.tzinfo is None:
        now = now.astimezone()
    try:
        s = sun(Observer(latitude=latitude, longitude=longitude), date=now.date(), tzinfo=now.tzinfo)
    except ValueError:
        return None
    rise, set_ = s["sunrise"], s["sunset"]
    return SunTimes(
        sunrise=(rise.hour + rise.minute / 60 + rise.second / 3600) % 24,
        sunset=(set_.hour + set_.minute / 60 + set_.second / 3600) % 24,
    )
