"""Time zone offset and sunrise/sunset computation for a coordinate."""
import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from astral import Observer
from astral.sun import elevation, noon, sunrise, sunset
from timezonefinder import TimezoneFinder

from weather_data import Coordinates, TimeData

MINUTES_PER_DAY = 24 * 60


@lru_cache(maxsize=1)
def _timezone_finder() -> TimezoneFinder:
    # Loading the boundary data is slow, the finder itself is read-only
    return TimezoneFinder()


def lookup_timezone(coords: Coordinates) -> str:
    """
    Return the IANA zone name for a coordinate.

    Every valid coordinate has a zone (oceans map to Etc/GMT zones), so a
    failed lookup is a bug rather than a recoverable condition.
    """
    name = _timezone_finder().timezone_at(lng=coords.lon, lat=coords.lat)
    if name is None:
        raise RuntimeError(f"No time zone found for {coords.lat},{coords.lon}")
    return name


def utc_offset_minutes(zone_name: str, now: datetime) -> int:
    offset = now.astimezone(ZoneInfo(zone_name)).utcoffset()
    return int(offset.total_seconds() // 60)


def _minute_of_day(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute


def sun_times(coords: Coordinates, now: datetime, offset: int) -> Tuple[int, int]:
    """
    Sunrise and sunset for the UTC date of `now`, as minutes past midnight
    after shifting by `offset` minutes.
    """
    observer = Observer(latitude=coords.lat, longitude=coords.lon)
    day = now.astimezone(timezone.utc).date()
    shift = timedelta(minutes=offset)

    try:
        rise = sunrise(observer, date=day, tzinfo=timezone.utc)
        set_ = sunset(observer, date=day, tzinfo=timezone.utc)
    except ValueError:
        # Polar day or polar night
        if elevation(observer, noon(observer, date=day)) > 0:
            logging.debug(f"Sun does not set at {coords.lat},{coords.lon} on {day}")
            return 0, MINUTES_PER_DAY - 1
        logging.debug(f"Sun does not rise at {coords.lat},{coords.lon} on {day}")
        return 0, 0

    return _minute_of_day(rise + shift), _minute_of_day(set_ + shift)


def get_time_data(coords: Coordinates, now: Optional[datetime] = None) -> TimeData:
    """Compute the UTC offset and shifted sunrise/sunset for a coordinate."""
    if now is None:
        now = datetime.now(timezone.utc)

    zone_name = lookup_timezone(coords)
    offset = utc_offset_minutes(zone_name, now)
    rise, set_ = sun_times(coords, now, offset)

    logging.debug(f"Time data for {coords.lat},{coords.lon}: zone={zone_name} offset={offset} sunrise={rise} sunset={set_}")
    return TimeData(timezone=offset, sunrise=rise, sunset=set_)
