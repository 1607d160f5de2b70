"""OpenWeather API provider implementation."""
import logging
import requests
from typing import Any, Dict, List
from weather_provider import WeatherProviderBase, WeatherProviderError
from weather_data import (
    Coordinates,
    CurrentConditions,
    DailyForecast,
    DailyForecastEntry,
    ForecastPeriod,
    to_int,
    to_number,
)


class OpenWeatherProvider(WeatherProviderBase):
    """
    Weather provider using the OpenWeather 2.5 APIs.

    Three endpoints are used:
      - /weather         current conditions
      - /forecast/daily  multi-day forecast for the mobile app
      - /forecast        3-hour forecast slices used for watering decisions

    Responses are validated for every nested field the service consumes; an
    incomplete payload raises WeatherProviderError just like a network failure.
    """

    BASE_URL = "https://api.openweathermap.org/data/2.5"

    def __init__(
        self,
        api_key: str,
        base_url: str = BASE_URL,
        units: str = "imperial",
        timeout: int = 10
    ):
        """
        Initialize OpenWeather provider.

        Args:
            api_key: OpenWeather API key
            base_url: API root, without trailing slash
            units: Temperature units ("metric", "imperial", or "standard")
            timeout: HTTP request timeout in seconds
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.units = units
        self.timeout = timeout

    def get_current(self, coords: Coordinates) -> CurrentConditions:
        data = self._get_json("/weather", coords)

        main_data = data.get("main")
        if not isinstance(main_data, dict):
            raise WeatherProviderError("Response missing 'main' block")
        wind_data = data.get("wind")
        if not isinstance(wind_data, dict):
            raise WeatherProviderError("Response missing 'wind' block")
        weather = self._first_condition(data)

        return CurrentConditions(
            temp=to_number(main_data.get("temp")),
            humidity=to_number(main_data.get("humidity")),
            wind_speed=to_number(wind_data.get("speed")),
            description=weather.get("description", ""),
            icon=weather.get("icon", ""),
        )

    def get_daily_forecast(self, coords: Coordinates) -> DailyForecast:
        data = self._get_json("/forecast/daily", coords)

        city = data.get("city")
        if not isinstance(city, dict):
            raise WeatherProviderError("Response missing 'city' block")
        entries = self._forecast_list(data)

        days = []
        for entry in entries:
            temp = entry.get("temp")
            if not isinstance(temp, dict):
                raise WeatherProviderError("Forecast entry missing 'temp' block")
            weather = self._first_condition(entry)
            # Daily entries report rain as a bare number of millimeters
            rain = to_number(entry.get("rain"))
            days.append(DailyForecastEntry(
                temp_min=to_number(temp.get("min")),
                temp_max=to_number(temp.get("max")),
                date=to_int(entry.get("dt")),
                icon=weather.get("icon", ""),
                description=weather.get("description", ""),
                rain_mm=rain or 0.0,
            ))

        return DailyForecast(city=city.get("name"), country=city.get("country"), days=days)

    def get_forecast(self, coords: Coordinates) -> List[ForecastPeriod]:
        data = self._get_json("/forecast", coords)
        entries = self._forecast_list(data)

        periods = []
        for entry in entries:
            main_data = entry.get("main")
            if not isinstance(main_data, dict):
                raise WeatherProviderError("Forecast entry missing 'main' block")
            rain = entry.get("rain")
            rain_mm = to_number(rain.get("3h")) if isinstance(rain, dict) else None
            periods.append(ForecastPeriod(
                temp=to_number(main_data.get("temp")),
                humidity=to_number(main_data.get("humidity")),
                rain_mm=rain_mm or 0.0,
            ))

        logging.debug(f"Parsed {len(periods)} forecast periods")
        return periods

    def _get_json(self, path: str, coords: Coordinates) -> Dict[str, Any]:
        """Perform a GET against the API and return the decoded JSON object."""
        url = self.base_url + path
        params = {
            "lat": coords.lat,
            "lon": coords.lon,
            "appid": self.api_key,
            "units": self.units,
        }

        try:
            logging.info(f"Making OpenWeather API request: {url}")
            logging.debug(f"Request parameters: lat={coords.lat}, lon={coords.lon}, units={self.units}")

            response = requests.get(url, params=params, timeout=self.timeout)

            logging.info(f"API response status: {response.status_code}")

            if not response.ok:
                logging.error(f"API request failed with status {response.status_code}")
                self._handle_error_response(response)

            data = response.json()
        except requests.exceptions.RequestException as e:
            logging.error(f"Network error during API request: {e}")
            raise WeatherProviderError(f"Network error: {str(e)}")
        except ValueError as e:
            logging.error(f"Failed to parse API response: {e}")
            raise WeatherProviderError(f"Failed to parse response: {str(e)}")

        if not isinstance(data, dict):
            raise WeatherProviderError("Response is not a JSON object")
        logging.debug(f"API response data keys: {list(data.keys())}")
        return data

    @staticmethod
    def _forecast_list(data: Dict[str, Any]) -> List[Dict[str, Any]]:
        entries = data.get("list")
        if not isinstance(entries, list) or not entries:
            raise WeatherProviderError("Response missing 'list' array")
        if not all(isinstance(entry, dict) for entry in entries):
            raise WeatherProviderError("Malformed entry in 'list' array")
        return entries

    @staticmethod
    def _first_condition(data: Dict[str, Any]) -> Dict[str, Any]:
        weather_array = data.get("weather")
        if not isinstance(weather_array, list) or not weather_array or not isinstance(weather_array[0], dict):
            raise WeatherProviderError("Response missing 'weather' array")
        return weather_array[0]

    def _handle_error_response(self, response: requests.Response) -> None:
        """Parse and raise error from OpenWeather error response."""
        try:
            error_data = response.json()
        except ValueError:
            # Not JSON, use HTTP status
            logging.error(f"Non-JSON error response: HTTP {response.status_code}, body: {response.text[:500]}")
            raise WeatherProviderError(
                f"HTTP {response.status_code}: {response.text[:200]}"
            )
        if not isinstance(error_data, dict):
            error_data = {}

        cod = error_data.get("cod", response.status_code)
        message = error_data.get("message", "Unknown error")
        logging.error(f"OpenWeather API error response: {error_data}")
        raise WeatherProviderError(f"OpenWeather API error {cod}: {message}")
