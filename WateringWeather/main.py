"""Weather adjustment service for OpenSprinkler controllers."""
import argparse
import logging
import os
import sys

from dotenv import load_dotenv

from app import create_app
from location_resolver import LocationResolver
from openweather_provider import OpenWeatherProvider
from service_config import ServiceConfig

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DEFAULT_LOG_FILE = os.path.join(BASE_DIR, "watering-weather.log")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser("OpenSprinkler weather adjustment service")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=3000)
    parser.add_argument("--log-file", default=DEFAULT_LOG_FILE)
    parser.add_argument("--units", choices=["metric", "imperial", "standard"], default="imperial",
                        help="Units requested from OpenWeather; the scale formula expects imperial")
    parser.add_argument("--timeout", type=int, default=10, help="HTTP timeout in seconds")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args()


def setup_logging(log_file: str, verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file)
        ]
    )


def load_config(args: argparse.Namespace) -> ServiceConfig:
    load_dotenv()
    api_key = os.getenv("OWM_API_KEY")
    if not api_key:
        raise SystemExit("Missing OWM_API_KEY in environment")

    config = ServiceConfig(
        owm_api_key=api_key,
        owm_base_url=os.getenv("OWM_BASE_URL", OpenWeatherProvider.BASE_URL),
        geocoder_url=os.getenv("GEOCODER_URL", LocationResolver.DEFAULT_GEOCODER_URL),
        units=args.units,
        timeout=args.timeout,
    )
    logging.info("Configuration loaded: weather=%s geocoder=%s units=%s timeout=%ss",
                 config.owm_base_url, config.geocoder_url, config.units, config.timeout)
    return config


def main() -> None:
    args = parse_args()
    setup_logging(args.log_file, args.verbose)
    config = load_config(args)

    app = create_app(config)
    logging.info("Listening on %s:%s", args.host, args.port)
    app.run(host=args.host, port=args.port)


if __name__ == "__main__":
    main()
