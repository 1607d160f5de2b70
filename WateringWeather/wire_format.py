"""Encoding of watering results for OpenSprinkler firmware."""
import json
import logging
import math
import re
from typing import Any, Dict, Optional, Union

from adjustment import AdjustmentResult

ISO_TIME_PATTERN = re.compile(r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})([+-])(\d{2})(\d{2})")
BARE_OFFSET_PATTERN = re.compile(r"^()()()()()()([+-])(\d{2})(\d{2})")


def _split_offset(value: Union[int, float, str]):
    if isinstance(value, (int, float)):
        hour = math.floor(value / 60)
        # Remainder keeps the sign of the offset
        minute = math.fmod(value, 60)
        return hour, minute

    match = ISO_TIME_PATTERN.search(value) or BARE_OFFSET_PATTERN.search(value)
    if match is None:
        raise ValueError(f"Unrecognized time zone value: {value!r}")
    hour = int(match.group(7) + match.group(8))
    minute = int(match.group(9))
    return hour, minute


def get_timezone(value: Union[int, float, str], use_minutes: bool = False) -> int:
    """
    Convert a UTC offset to minutes or to the firmware's encoded form.

    `value` is an offset in minutes, an ISO-8601 timestamp with an offset
    (2019-03-05T10:00:00-0500) or a bare offset (-0500). The encoded form
    counts quarter hours from -12:00, so UTC is 48.
    """
    hour, minute = _split_offset(value)

    if use_minutes:
        return int(hour * 60 + minute)

    quarter = int(minute / 15) / 4
    hour = hour + (quarter if hour >= 0 else -quarter)
    return int((hour + 12) * 4)


def parse_remote_address(value: Optional[str]) -> str:
    """Forwarding headers may hold a chain of addresses; the client is first."""
    if not value:
        return ""
    return value.split(",")[0].strip()


def ip_to_int(ip: str) -> int:
    """Pack a dotted-quad IPv4 address into a 32-bit integer."""
    try:
        octets = [int(part) for part in ip.split(".")]
    except ValueError:
        octets = []
    if len(octets) != 4 or any(not 0 <= octet <= 255 for octet in octets):
        logging.debug(f"Cannot encode non-IPv4 address {ip!r}")
        return 0

    result = 0
    for octet in octets:
        result = result * 256 + octet
    return result


def _compact_number(value: Optional[float]) -> Optional[Union[int, float]]:
    """Whole floats become ints so they print as 48, not 48.0; non-finite gives None."""
    if value is None or not math.isfinite(value):
        return None
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _round_half_up(value: Optional[float], places: int) -> Optional[Union[int, float]]:
    if value is None or not math.isfinite(value):
        return None
    factor = 10 ** places
    scaled = value * factor + 0.5
    if not math.isfinite(scaled):
        return None
    return _compact_number(math.floor(scaled) / factor)


def build_watering_response(result: AdjustmentResult, weather: Any, remote_address: str) -> Dict[str, Any]:
    """Assemble the payload returned to the controller."""
    raw_data = {
        "p": _round_half_up(getattr(weather, "precip", None), 2),
        "t": _round_half_up(getattr(weather, "temp", None), 1),
        "raining": 1 if getattr(weather, "raining", False) else 0,
    }
    # Humidity is left out entirely when there is no reading
    humidity = _compact_number(getattr(weather, "humidity", None))
    if humidity is not None:
        raw_data = {"h": humidity, **raw_data}

    return {
        "scale": result.scale,
        "rd": _compact_number(result.rain_delay),
        "tz": get_timezone(weather.timezone),
        "sunrise": weather.sunrise,
        "sunset": weather.sunset,
        "eip": ip_to_int(remote_address),
        "rawData": raw_data,
    }


def format_watering_response(data: Dict[str, Any], output_format: Optional[str]) -> Union[Dict[str, Any], str]:
    """Return the payload as-is for JSON clients, else the legacy string form."""
    if output_format == "json":
        return data

    return (
        f"&scale={data['scale']}"
        f"&rd={data['rd']}"
        f"&tz={data['tz']}"
        f"&sunrise={data['sunrise']}"
        f"&sunset={data['sunset']}"
        f"&eip={data['eip']}"
        f"&rawData={json.dumps(data['rawData'], separators=(',', ':'))}"
    )
