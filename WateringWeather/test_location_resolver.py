"""Tests for location classification and geocoding."""
import pytest
import requests
from unittest.mock import Mock, patch

from location_resolver import LocationResolver, UnresolvableLocation, is_legacy_station, parse_gps
from weather_data import Coordinates
from weather_provider import WeatherProviderError


@pytest.fixture
def resolver():
    return LocationResolver(geocoder_url="http://geocoder.test/aq", timeout=5)


def mock_ok(data):
    mock_response = Mock()
    mock_response.json.return_value = data
    mock_response.raise_for_status.return_value = None
    return mock_response


@pytest.mark.parametrize("text, lat, lon", [
    ("40.0,-75.0", 40.0, -75.0),
    ("-33.8688, 151.2093", -33.8688, 151.2093),
    ("+90,180", 90.0, 180.0),
    ("-90.0,-180.0", -90.0, -180.0),
    ("0,0", 0.0, 0.0),
])
def test_parse_gps(text, lat, lon):
    assert parse_gps(text) == Coordinates(lat=lat, lon=lon)


@pytest.mark.parametrize("text", ["91,0", "45,181", "Boston, MA", "40.0", "40.0;-75.0", "40.0 ,-75.0"])
def test_parse_gps_rejects(text):
    assert parse_gps(text) is None


@pytest.mark.parametrize("text", ["pws:KMAHANOV10", "icao:KBOS", "zmw:00000.1.71508"])
def test_legacy_station(text):
    assert is_legacy_station(text)


def test_not_legacy_station():
    assert not is_legacy_station("Boston, MA")


def test_resolve_gps_makes_no_request(resolver):
    with patch('location_resolver.requests.get') as mock_get:
        coords = resolver.resolve("40.0,-75.0")

        assert coords == Coordinates(lat=40.0, lon=-75.0)
        mock_get.assert_not_called()


def test_resolve_legacy_station_fails(resolver):
    with patch('location_resolver.requests.get') as mock_get:
        with pytest.raises(UnresolvableLocation) as exc_info:
            resolver.resolve("pws:KMAHANOV10")

        assert "discontinued" in str(exc_info.value)
        mock_get.assert_not_called()


def test_resolve_free_text(resolver):
    with patch('location_resolver.requests.get') as mock_get:
        mock_get.return_value = mock_ok({
            "RESULTS": [
                {"name": "Boston, Massachusetts", "tz": "America/New_York", "lat": "42.358910", "lon": "-71.059776"},
                {"name": "Boston, United Kingdom", "tz": "Europe/London", "lat": "52.97", "lon": "-0.02"},
            ]
        })

        coords = resolver.resolve("Boston")

        assert coords == Coordinates(lat=42.35891, lon=-71.059776)
        args, kwargs = mock_get.call_args
        assert args[0] == "http://geocoder.test/aq"
        assert kwargs["params"] == {"h": 0, "query": "Boston"}
        assert kwargs["timeout"] == 5


def test_resolve_missing_timezone(resolver):
    with patch('location_resolver.requests.get') as mock_get:
        mock_get.return_value = mock_ok({"RESULTS": [{"tz": "MISSING", "lat": "1", "lon": "2"}]})

        with pytest.raises(UnresolvableLocation):
            resolver.resolve("Nowhere")


@pytest.mark.parametrize("payload", [{"RESULTS": []}, {}, [], {"RESULTS": [{"tz": "UTC"}]}])
def test_resolve_no_match(resolver, payload):
    with patch('location_resolver.requests.get') as mock_get:
        mock_get.return_value = mock_ok(payload)

        with pytest.raises(UnresolvableLocation):
            resolver.resolve("zzzz")


def test_resolve_provider_failure(resolver):
    with patch('location_resolver.requests.get') as mock_get:
        mock_get.side_effect = requests.exceptions.ConnectionError("Name or service not known")

        with pytest.raises(WeatherProviderError):
            resolver.resolve("Boston")


def test_resolve_http_error(resolver):
    with patch('location_resolver.requests.get') as mock_get:
        mock_response = Mock()
        mock_response.raise_for_status.side_effect = requests.exceptions.HTTPError("503 Server Error")
        mock_get.return_value = mock_response

        with pytest.raises(WeatherProviderError):
            resolver.resolve("Boston")
