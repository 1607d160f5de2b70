"""Request orchestration for the controller and mobile-app protocols."""
import logging
from typing import Any, Dict, Optional, Union

from adjustment import decode_adjustment_options, evaluate_adjustment
from location_resolver import LocationResolver, UnresolvableLocation
from openweather_provider import OpenWeatherProvider
from service_config import ServiceConfig
from weather_data import Coordinates
from weather_provider import WeatherProviderError
from weather_service import WeatherService
from wire_format import build_watering_response, format_watering_response, parse_remote_address

Response = Union[Dict[str, Any], str]


def error_message(message: str) -> str:
    return f"Error: {message}"


class RequestHandler:
    """
    Runs one request through resolution, aggregation, adjustment and
    encoding. Dicts are returned for JSON responses and plain strings for
    everything else, error messages included.
    """

    def __init__(self, resolver: LocationResolver, service: WeatherService):
        self.resolver = resolver
        self.service = service

    @classmethod
    def from_config(cls, config: ServiceConfig) -> "RequestHandler":
        provider = OpenWeatherProvider(
            api_key=config.owm_api_key,
            base_url=config.owm_base_url,
            units=config.units,
            timeout=config.timeout,
        )
        resolver = LocationResolver(geocoder_url=config.geocoder_url, timeout=config.timeout)
        return cls(resolver, WeatherService(provider))

    def _resolve(self, location: str) -> Union[Coordinates, str]:
        try:
            return self.resolver.resolve(location)
        except UnresolvableLocation as e:
            logging.info(f"Location '{location}' not resolved: {e}")
            return error_message(str(e))
        except WeatherProviderError as e:
            logging.warning(f"Location '{location}' not resolved: {e}")
            return error_message(str(UnresolvableLocation()))

    def get_watering_data(
        self,
        method_byte: int,
        location: Optional[str],
        options: Optional[str] = None,
        output_format: Optional[str] = None,
        remote_address: Optional[str] = None,
    ) -> Response:
        """
        Handle a controller request.

        Args:
            method_byte: Adjustment method id with the restriction flag in bit 7
            location: GPS pair, place name or legacy station id
            options: Raw `wto` fragment from the firmware
            output_format: "json" for a JSON body, anything else for the legacy string
            remote_address: Forwarding header value or connection address
        """
        if not location:
            return error_message("No location provided.")

        adjustment_options = decode_adjustment_options(options)

        coords = self._resolve(location)
        if isinstance(coords, str):
            return coords

        weather = self.service.get_watering_data(coords)
        result = evaluate_adjustment(method_byte, adjustment_options, weather)
        data = build_watering_response(result, weather, parse_remote_address(remote_address))

        logging.info(f"Watering response for {coords.lat},{coords.lon}: scale={data['scale']} rd={data['rd']}")
        return format_watering_response(data, output_format)

    def get_weather_data(self, location: Optional[str]) -> Response:
        """Handle a mobile-app request for current conditions and forecast."""
        if not location:
            return error_message("No location provided.")

        coords = self._resolve(location)
        if isinstance(coords, str):
            return coords

        weather = self.service.get_weather_data(coords)
        data = weather.to_dict()
        data["location"] = coords.as_list()
        return data
