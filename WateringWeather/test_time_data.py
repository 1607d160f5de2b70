"""Tests for time zone and sunrise/sunset computation."""
from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from time_data import get_time_data, lookup_timezone, sun_times, utc_offset_minutes
from weather_data import Coordinates, TimeData


NEW_YORK = Coordinates(lat=40.71, lon=-74.01)
LONGYEARBYEN = Coordinates(lat=78.22, lon=15.65)
WINTER = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
SUMMER = datetime(2024, 6, 21, 12, 0, tzinfo=timezone.utc)


def test_lookup_timezone():
    assert lookup_timezone(NEW_YORK) == "America/New_York"


def test_utc_offset_follows_daylight_saving():
    assert utc_offset_minutes("America/New_York", WINTER) == -300
    assert utc_offset_minutes("America/New_York", SUMMER) == -240
    assert utc_offset_minutes("Asia/Kolkata", WINTER) == 330


def test_get_time_data_new_york_winter():
    data = get_time_data(NEW_YORK, now=WINTER)

    assert isinstance(data, TimeData)
    assert data.timezone == -300
    # Local sunrise is around 07:18 and sunset around 16:58 in mid January
    assert 425 <= data.sunrise <= 450
    assert 1005 <= data.sunset <= 1030


def test_sun_times_without_offset():
    equator = Coordinates(lat=0.0, lon=0.0)

    sunrise, sunset = sun_times(equator, WINTER, 0)

    assert 350 <= sunrise <= 380
    assert 1070 <= sunset <= 1100


def test_sun_times_wrap_within_day():
    """Shifting past midnight wraps instead of going negative."""
    sunrise, sunset = sun_times(NEW_YORK, WINTER, 0)
    # 07:18 local is 12:18 UTC
    assert 725 <= sunrise <= 750

    shifted_rise, _ = sun_times(NEW_YORK, WINTER, -13 * 60)
    assert 0 <= shifted_rise < 1440
    assert shifted_rise == (sunrise - 13 * 60) % 1440


def test_polar_night():
    assert sun_times(LONGYEARBYEN, datetime(2024, 12, 21, 12, 0, tzinfo=timezone.utc), 60) == (0, 0)


def test_polar_day():
    assert sun_times(LONGYEARBYEN, SUMMER, 120) == (0, 1439)


def test_missing_timezone_is_fatal():
    with patch("time_data._timezone_finder") as finder:
        finder.return_value.timezone_at.return_value = None

        with pytest.raises(RuntimeError):
            get_time_data(NEW_YORK, now=WINTER)
