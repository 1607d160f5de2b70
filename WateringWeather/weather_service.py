"""Weather aggregation for the watering and mobile-app endpoints."""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Union
from weather_provider import WeatherProviderBase, WeatherProviderError
from weather_data import (
    Coordinates,
    CurrentConditions,
    DailyForecast,
    ForecastDay,
    ForecastPeriod,
    TimeData,
    WateringData,
    WeatherSnapshot,
    to_int,
)
from time_data import get_time_data

MM_PER_INCH = 25.4
# Number of forecast slices considered for watering (30 hours of 3h slices)
WATERING_PERIODS = 10


def _average(values: List) -> Union[float, None]:
    # A single missing reading makes the whole average unknown
    if any(value is None for value in values):
        return None
    return sum(values) / len(values)


def summarize_forecast(periods: List[ForecastPeriod], time_data: TimeData) -> WateringData:
    """
    Reduce the leading forecast slices to the features the scale formula uses.

    Temperature and humidity are averaged and rain is summed over the first
    WATERING_PERIODS slices, then converted from millimeters to inches.
    """
    window = periods[:WATERING_PERIODS]
    precip_mm = sum(period.rain_mm for period in window)

    return WateringData(
        timezone=time_data.timezone,
        sunrise=time_data.sunrise,
        sunset=time_data.sunset,
        temp=_average([period.temp for period in window]),
        humidity=_average([period.humidity for period in window]),
        precip=precip_mm / MM_PER_INCH,
        raining=window[0].rain_mm > 0,
    )


def merge_snapshot(current: CurrentConditions, forecast: DailyForecast, time_data: TimeData) -> WeatherSnapshot:
    """Combine current conditions and the daily forecast into one snapshot."""
    today = forecast.days[0]
    return WeatherSnapshot(
        timezone=time_data.timezone,
        sunrise=time_data.sunrise,
        sunset=time_data.sunset,
        temp=to_int(current.temp),
        humidity=to_int(current.humidity),
        wind=to_int(current.wind_speed),
        description=current.description,
        icon=current.icon,
        region=forecast.country,
        city=forecast.city,
        min_temp=to_int(today.temp_min),
        max_temp=to_int(today.temp_max),
        precip=today.rain_mm / MM_PER_INCH,
        forecast=[
            ForecastDay(
                temp_min=to_int(day.temp_min),
                temp_max=to_int(day.temp_max),
                date=day.date,
                icon=day.icon,
                description=day.description,
            )
            for day in forecast.days
        ],
    )


class WeatherService:
    """
    Aggregates provider data for a single request.

    Neither method raises provider errors: when weather cannot be fetched or
    is incomplete, the bare TimeData for the location is returned so the
    controller still receives its timezone and sunrise/sunset.
    """

    def __init__(
        self,
        provider: WeatherProviderBase,
        time_source: Callable[[Coordinates], TimeData] = get_time_data
    ):
        """
        Initialize weather service.

        Args:
            provider: Weather provider to use
            time_source: Computes the TimeData for a coordinate
        """
        self.provider = provider
        self.time_source = time_source

    def get_watering_data(self, coords: Coordinates) -> Union[WateringData, TimeData]:
        time_data = self.time_source(coords)

        try:
            periods = self.provider.get_forecast(coords)
        except WeatherProviderError as e:
            logging.warning(f"Forecast unavailable, returning time data only: {e}")
            return time_data

        if not periods:
            logging.warning("Forecast has no periods, returning time data only")
            return time_data

        weather = summarize_forecast(periods, time_data)
        logging.info(
            f"Watering data: temp={weather.temp} humidity={weather.humidity} "
            f"precip={weather.precip:.2f}in raining={weather.raining}"
        )
        return weather

    def get_weather_data(self, coords: Coordinates) -> Union[WeatherSnapshot, TimeData]:
        time_data = self.time_source(coords)

        # Both calls are independent; run them together and require both
        with ThreadPoolExecutor(max_workers=2) as pool:
            current_future = pool.submit(self.provider.get_current, coords)
            forecast_future = pool.submit(self.provider.get_daily_forecast, coords)
            try:
                current = current_future.result()
                forecast = forecast_future.result()
            except WeatherProviderError as e:
                logging.warning(f"Weather unavailable, returning time data only: {e}")
                return time_data

        if not forecast.days:
            logging.warning("Daily forecast is empty, returning time data only")
            return time_data

        return merge_snapshot(current, forecast, time_data)
