from datetime import datetime, timedelta, timezone

import pytest

from nightswitch.common.solar import (
    compute_sun_times,
    is_valid_location,
    reference_sun_times,
    utc_offset_hours,
)


def _at(year, month, day, hour=12, tz_hours=0.0):
    return datetime(year, month, day, hour, tzinfo=timezone(timedelta(hours=tz_hours)))


def test_paris_june_solstice():
    times = compute_sun_times(_at(2024, 6, 21, tz_hours=2), 48.85, 2.35)
    # 05:47 and 21:58 CEST
    assert times.sunrise == pytest.approx(5.78, abs=0.1)
    assert times.sunset == pytest.approx(21.96, abs=0.1)


def test_paris_winter_solstice():
    times = compute_sun_times(_at(2024, 12, 21, tz_hours=1), 48.85, 2.35)
    # 08:42 and 16:56 CET
    assert times.sunrise == pytest.approx(8.70, abs=0.1)
    assert times.sunset == pytest.approx(16.94, abs=0.1)


@pytest.mark.parametrize(
    "latitude, longitude, tz_hours, month",
    [
        (48.85, 2.35, 2, 6),  # Paris
        (40.71, -74.01, -4, 9),  # New York
        (35.68, 139.69, 9, 3),  # Tokyo
        (-33.87, 151.21, 11, 12),  # Sydney
        (-22.91, -43.17, -3, 7),  # Rio de Janeiro
    ],
)
def test_matches_astral(latitude, longitude, tz_hours, month):
    now = _at(2024, month, 15, tz_hours=tz_hours)
    times = compute_sun_times(now, latitude, longitude)
    reference = reference_sun_times(now, latitude, longitude)
    assert reference is not None
    assert times.sunrise == pytest.approx(reference.sunrise, abs=0.05)
    assert times.sunset == pytest.approx(reference.sunset, abs=0.05)


def test_results_always_within_a_day():
    for latitude in range(-90, 91, 15):
        for longitude in range(-180, 181, 45):
            for month in (1, 3, 6, 9, 12):
                for tz_hours in (-12, -5, 0, 5.5, 14):
                    times = compute_sun_times(_at(2025, month, 1, tz_hours=tz_hours), latitude, longitude, 1.5)
                    assert 0 <= times.sunrise < 24
                    assert 0 <= times.sunset < 24


def test_polar_night_collapses_to_solar_noon():
    times = compute_sun_times(_at(2024, 12, 21, tz_hours=1), 78.22, 15.65)  # Longyearbyen
    assert times.sunrise == pytest.approx(times.sunset)


def test_midnight_sun_collapses_to_solar_midnight():
    times = compute_sun_times(_at(2024, 6, 21, tz_hours=2), 78.22, 15.65)  # Longyearbyen
    assert times.sunrise == pytest.approx(times.sunset, abs=1e-9)
    noon = compute_sun_times(_at(2024, 12, 21, tz_hours=2), 78.22, 15.65).sunrise
    assert abs(times.sunrise - noon) == pytest.approx(12, abs=0.5)


def test_identical_inputs_give_identical_output():
    now = _at(2024, 3, 20, hour=9, tz_hours=1)
    assert compute_sun_times(now, 52.52, 13.40, 0.5) == compute_sun_times(now, 52.52, 13.40, 0.5)


def test_offset_moves_sunrise_later_and_sunset_earlier():
    now = _at(2024, 6, 21, tz_hours=2)
    plain = compute_sun_times(now, 48.85, 2.35)
    shifted = compute_sun_times(now, 48.85, 2.35, offset=1.0)
    assert shifted.sunrise == pytest.approx(plain.sunrise + 1.0)
    assert shifted.sunset == pytest.approx(plain.sunset - 1.0)


def test_offset_wraps_around_midnight():
    now = _at(2024, 6, 21, tz_hours=2)
    shifted = compute_sun_times(now, 48.85, 2.35, offset=-6.0)
    assert shifted.sunrise == pytest.approx(compute_sun_times(now, 48.85, 2.35).sunrise - 6.0 + 24)


def test_reference_returns_none_when_sun_never_sets():
    assert reference_sun_times(_at(2024, 6, 21, tz_hours=2), 78.22, 15.65) is None


def test_location_range():
    assert is_valid_location(90, 180)
    assert is_valid_location(-90, -180)
    assert not is_valid_location(90.5, 0)
    assert not is_valid_location(0, -181)


def test_utc_offset_hours():
    assert utc_offset_hours(_at(2024, 1, 1, tz_hours=5.5)) == 5.5
    assert utc_offset_hours(_at(2024, 1, 1)) == 0.0
