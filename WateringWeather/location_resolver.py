"""Resolve the location string sent by a controller to geographic coordinates."""
import logging
import re
from typing import Optional

import requests

from weather_data import Coordinates
from weather_provider import WeatherProviderError


GPS_PATTERN = re.compile(
    r"^[-+]?([1-8]?\d(\.\d+)?|90(\.0+)?),\s*[-+]?(180(\.0+)?|((1[0-7]\d)|([1-9]?\d))(\.\d+)?)$"
)
LEGACY_STATION_PATTERN = re.compile(r"^(?:pws|icao|zmw):")

# Marker the autocomplete service puts in "tz" when a result has no zone
MISSING_TIMEZONE = "MISSING"


class UnresolvableLocation(Exception):
    """Raised when a location cannot be turned into coordinates."""

    def __init__(self, message: str = "Unable to resolve location"):
        super().__init__(message)


def parse_gps(location: str) -> Optional[Coordinates]:
    """Return coordinates for a "lat,lon" string, or None if it is not one."""
    if not GPS_PATTERN.match(location):
        return None
    lat, lon = location.split(",")
    return Coordinates(lat=float(lat), lon=float(lon))


def is_legacy_station(location: str) -> bool:
    """True for Weather Underground PWS, ICAO and ZMW identifiers."""
    return bool(LEGACY_STATION_PATTERN.match(location))


class LocationResolver:
    """
    Classifies a location string and resolves it to coordinates.

    GPS pairs are parsed locally. Legacy Weather Underground station ids are
    rejected since that service is gone. Anything else is looked up with the
    autocomplete geocoder and the first result is used.
    """

    DEFAULT_GEOCODER_URL = "http://autocomplete.wunderground.com/aq"

    def __init__(self, geocoder_url: str = DEFAULT_GEOCODER_URL, timeout: int = 10):
        self.geocoder_url = geocoder_url
        self.timeout = timeout

    def resolve(self, location: str) -> Coordinates:
        """
        Resolve a location string.

        Raises:
            UnresolvableLocation: No match, or the match has no time zone
            WeatherProviderError: The geocoding request itself failed
        """
        coords = parse_gps(location)
        if coords is not None:
            logging.debug(f"Location '{location}' parsed as GPS coordinates")
            return coords

        if is_legacy_station(location):
            logging.info(f"Rejecting legacy station location '{location}'")
            raise UnresolvableLocation("Weather Underground is discontinued.")

        return self.geocode(location)

    def geocode(self, query: str) -> Coordinates:
        params = {"h": 0, "query": query}
        try:
            logging.info(f"Resolving location '{query}' with {self.geocoder_url}")
            response = requests.get(self.geocoder_url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            logging.error(f"Geocoding request failed: {e}")
            raise WeatherProviderError(f"Geocoding request failed: {str(e)}")
        except ValueError as e:
            logging.error(f"Failed to parse geocoding response: {e}")
            raise WeatherProviderError(f"Failed to parse geocoding response: {str(e)}")

        results = data.get("RESULTS") if isinstance(data, dict) else None
        if not isinstance(results, list) or not results or not isinstance(results[0], dict):
            logging.info(f"No geocoding match for '{query}'")
            raise UnresolvableLocation()

        best = results[0]
        if best.get("tz") == MISSING_TIMEZONE:
            logging.info(f"Geocoding match for '{query}' has no time zone")
            raise UnresolvableLocation()

        try:
            coords = Coordinates(lat=float(best["lat"]), lon=float(best["lon"]))
        except (KeyError, TypeError, ValueError):
            raise UnresolvableLocation()

        logging.info(f"Resolved '{query}' to {coords.lat},{coords.lon}")
        return coords
