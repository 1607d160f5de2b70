"""
Watering scale and restriction logic.

The controller sends its adjustment method packed in one byte: bits 0-6 are
the method id and bit 7 enables the California restriction. Adjustment
options arrive as a mangled JSON fragment and are decoded here.

Methods:
    0  manual, no weather adjustment
    1  Zimmerman (humidity, temperature and rain against baselines)
    2  rain delay only
"""
import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple
from urllib.parse import unquote

from weather_data import MISSING_VALUE

MANUAL = 0
ZIMMERMAN = 1
RAIN_DELAY = 2

RESTRICTION_BIT = 7
# Returned by calculate_weather_scale() for methods it does not implement
UNSUPPORTED_METHOD = -1
NO_RAIN_DELAY = -1
DEFAULT_RAIN_DELAY_HOURS = 24
# California restriction threshold, inches of rain over the window
RESTRICTION_PRECIP_INCHES = 0.1

HUMIDITY_BASE = 30
TEMP_BASE = 70
PRECIP_BASE = 0


def _numeric(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _reject_constant(name: str):
    # NaN and Infinity are not JSON, the firmware never sends them
    raise ValueError(f"Invalid JSON constant {name}")


@dataclass
class AdjustmentOptions:
    """Formula overrides supplied by the controller. None means "not given"."""
    humidity_base: Optional[float] = None  # bh
    temp_base: Optional[float] = None  # bt
    precip_base: Optional[float] = None  # br
    humidity_pct: Optional[float] = None  # h
    temp_pct: Optional[float] = None  # t
    precip_pct: Optional[float] = None  # r
    rain_delay: Optional[float] = None  # d

    KEYS = {
        "bh": "humidity_base",
        "bt": "temp_base",
        "br": "precip_base",
        "h": "humidity_pct",
        "t": "temp_pct",
        "r": "precip_pct",
        "d": "rain_delay",
    }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AdjustmentOptions":
        values = {}
        for key, attr in cls.KEYS.items():
            if key in data and _numeric(data[key]):
                values[attr] = data[key]
            elif key in data:
                logging.debug(f"Ignoring non-numeric adjustment option {key}={data[key]!r}")
        return cls(**values)


def decode_adjustment_options(raw: Optional[str]) -> Optional[AdjustmentOptions]:
    """
    Decode the `wto` fragment sent by the firmware.

    The firmware escapes some characters as \\xNN and strips the outer braces,
    e.g. `"h":100,"t":\\x32\\x30`. Anything that does not decode to a JSON
    object yields None, meaning no overrides.
    """
    if not raw:
        return None

    try:
        text = unquote(raw.replace("\\x", "%"), errors="strict")
        data = json.loads("{" + text + "}", parse_constant=_reject_constant)
    except ValueError as e:
        logging.debug(f"Discarding malformed adjustment options {raw!r}: {e}")
        return None

    if not isinstance(data, dict):
        return None
    return AdjustmentOptions.from_dict(data)


def decode_method_byte(value: int) -> Tuple[int, bool]:
    """Split the encoded byte into (method id, restriction enabled)."""
    method = value & ~(1 << RESTRICTION_BIT)
    restriction = bool((value >> RESTRICTION_BIT) & 1)
    return method, restriction


def validate_values(weather: Any, *names: str) -> bool:
    """True when every named attribute is a real number and not the sentinel."""
    for name in names:
        value = getattr(weather, name, None)
        if not _numeric(value) or value == MISSING_VALUE:
            return False
    return True


def calculate_weather_scale(method: int, options: Optional[AdjustmentOptions], weather: Any) -> int:
    """
    Compute the watering scale (0-200) for the given method.

    Only the Zimmerman method is implemented; any other method returns
    UNSUPPORTED_METHOD. Missing temperature, humidity or precipitation gives
    100, i.e. no adjustment.
    """
    if method != ZIMMERMAN:
        return UNSUPPORTED_METHOD

    if not validate_values(weather, "temp", "humidity", "precip"):
        logging.info("Weather data incomplete, using 100% scale")
        return 100

    options = options or AdjustmentOptions()
    humidity_base = options.humidity_base if options.humidity_base is not None else HUMIDITY_BASE
    temp_base = options.temp_base if options.temp_base is not None else TEMP_BASE
    precip_base = options.precip_base if options.precip_base is not None else PRECIP_BASE

    # Mean of the day's range when the provider gives one
    if validate_values(weather, "min_temp", "max_temp"):
        temp = (weather.min_temp + weather.max_temp) / 2
    else:
        temp = weather.temp

    humidity_factor = humidity_base - weather.humidity
    temp_factor = (temp - temp_base) * 4
    precip_factor = (precip_base - weather.precip) * 200

    if options.humidity_pct is not None:
        humidity_factor *= options.humidity_pct / 100
    if options.temp_pct is not None:
        temp_factor *= options.temp_pct / 100
    if options.precip_pct is not None:
        precip_factor *= options.precip_pct / 100

    scale = 100 + humidity_factor + temp_factor + precip_factor
    return math.floor(min(max(0, scale), 200))


def check_weather_restriction(method_byte: int, weather: Any) -> bool:
    """
    California restriction: no watering once more than 0.1" of rain has
    accumulated over the evaluation window.
    """
    _, restriction = decode_method_byte(method_byte)
    if not restriction:
        return False
    precip = getattr(weather, "precip", None)
    return _numeric(precip) and precip > RESTRICTION_PRECIP_INCHES


@dataclass
class AdjustmentResult:
    scale: int
    restricted: bool = False
    rain_delay: float = NO_RAIN_DELAY


def evaluate_adjustment(method_byte: int, options: Optional[AdjustmentOptions], weather: Any) -> AdjustmentResult:
    """Run the scale formula, then apply the restriction and rain responses."""
    method, _ = decode_method_byte(method_byte)
    scale = calculate_weather_scale(method, options, weather)
    if scale == UNSUPPORTED_METHOD and method != MANUAL:
        logging.info(f"Adjustment method {method} is not supported, no scale computed")

    result = AdjustmentResult(scale=scale)

    if check_weather_restriction(method_byte, weather):
        logging.info("Watering restriction met, forcing scale to 0")
        result.restricted = True
        result.scale = 0

    if method > MANUAL and getattr(weather, "raining", False):
        if method == RAIN_DELAY:
            if options is not None and options.rain_delay is not None:
                result.rain_delay = options.rain_delay
            else:
                result.rain_delay = DEFAULT_RAIN_DELAY_HOURS
        else:
            # The scale recovers by itself once the rain stops
            result.scale = 0

    return result
