"""Weather provider abstraction - allows swapping different weather APIs."""
from abc import ABC, abstractmethod
from typing import List

from weather_data import Coordinates, CurrentConditions, DailyForecast, ForecastPeriod


class WeatherProviderBase(ABC):
    """Abstract base class for weather data providers."""

    @abstractmethod
    def get_current(self, coords: Coordinates) -> CurrentConditions:
        """
        Fetch current conditions for a location.

        Raises:
            WeatherProviderError: If the provider fails to fetch data
        """
        pass

    @abstractmethod
    def get_daily_forecast(self, coords: Coordinates) -> DailyForecast:
        """
        Fetch the multi-day forecast for a location.

        Raises:
            WeatherProviderError: If the provider fails to fetch data
        """
        pass

    @abstractmethod
    def get_forecast(self, coords: Coordinates) -> List[ForecastPeriod]:
        """
        Fetch the short-interval forecast periods for a location, oldest first.

        Raises:
            WeatherProviderError: If the provider fails to fetch data
        """
        pass


class WeatherProviderError(Exception):
    """Exception raised when a weather or geocoding provider fails."""
    pass
