"""Service configuration, built once at startup and passed to components."""
from dataclasses import dataclass

from location_resolver import LocationResolver
from openweather_provider import OpenWeatherProvider


@dataclass
class ServiceConfig:
    owm_api_key: str
    owm_base_url: str = OpenWeatherProvider.BASE_URL
    geocoder_url: str = LocationResolver.DEFAULT_GEOCODER_URL
    units: str = "imperial"
    timeout: int = 10  # seconds, per outbound request
