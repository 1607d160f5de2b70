"""Weather domain model - pure data structures independent of any API."""
import math
from dataclasses import dataclass, field
from typing import Any, List, Optional


# Providers use this value for numeric fields they have no reading for
MISSING_VALUE = -999


def to_number(value: Any) -> Optional[float]:
    """
    Convert a raw provider value to a float, or None when it carries no data.

    Missing keys, the -999 sentinel, NaN or infinite values, booleans and
    non-numeric types all map to None so that "no data" stays distinguishable from 0.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return None
    if not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value) or value == MISSING_VALUE:
        return None
    return float(value)


def to_int(value: Any) -> Optional[int]:
    """Like to_number() but truncates toward zero."""
    number = to_number(value)
    return int(number) if number is not None else None


@dataclass
class Coordinates:
    """A resolved geographic point."""
    lat: float
    lon: float

    def as_list(self) -> List[float]:
        return [self.lat, self.lon]


@dataclass
class TimeData:
    """Solar and timezone facts for a point at the current moment."""
    timezone: int  # UTC offset in minutes
    sunrise: int  # minutes past midnight, already shifted by the offset
    sunset: int

    def to_dict(self) -> dict:
        return {
            "timezone": self.timezone,
            "sunrise": self.sunrise,
            "sunset": self.sunset,
        }


@dataclass
class WateringData(TimeData):
    """Short-horizon weather averaged for the watering scale calculation."""
    temp: Optional[float] = None  # °F
    humidity: Optional[float] = None  # percent
    precip: Optional[float] = None  # inches
    raining: bool = False


@dataclass
class ForecastDay:
    temp_min: Optional[int]
    temp_max: Optional[int]
    date: Optional[int]  # UNIX timestamp (UTC)
    icon: str
    description: str

    def to_dict(self) -> dict:
        return {
            "temp_min": self.temp_min,
            "temp_max": self.temp_max,
            "date": self.date,
            "icon": self.icon,
            "description": self.description,
        }


@dataclass
class WeatherSnapshot(TimeData):
    """Current conditions plus the daily forecast, served to the mobile app."""
    temp: Optional[int] = None
    humidity: Optional[int] = None
    wind: Optional[int] = None
    description: str = ""
    icon: str = ""
    region: Optional[str] = None
    city: Optional[str] = None
    min_temp: Optional[int] = None
    max_temp: Optional[int] = None
    precip: Optional[float] = None
    forecast: List[ForecastDay] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            "temp": self.temp,
            "humidity": self.humidity,
            "wind": self.wind,
            "description": self.description,
            "icon": self.icon,
            "region": self.region,
            "city": self.city,
            "minTemp": self.min_temp,
            "maxTemp": self.max_temp,
            "precip": self.precip,
            "forecast": [day.to_dict() for day in self.forecast],
        })
        return data


# Provider response schemas. These only hold what the aggregator consumes.

@dataclass
class CurrentConditions:
    temp: Optional[float]
    humidity: Optional[float]
    wind_speed: Optional[float]
    description: str
    icon: str


@dataclass
class DailyForecastEntry:
    temp_min: Optional[float]
    temp_max: Optional[float]
    date: Optional[int]
    icon: str
    description: str
    rain_mm: float = 0.0


@dataclass
class DailyForecast:
    city: Optional[str]
    country: Optional[str]
    days: List[DailyForecastEntry]


@dataclass
class ForecastPeriod:
    """One short forecast slice (3 hours for OpenWeather)."""
    temp: Optional[float]
    humidity: Optional[float]
    rain_mm: float = 0.0
