"""HTTP routes for controllers and the mobile app."""
from typing import Optional

from flask import Flask, Response, jsonify, request

from request_handler import RequestHandler
from service_config import ServiceConfig


def _respond(body):
    if isinstance(body, dict):
        return jsonify(body)
    return Response(body, mimetype="text/plain")


def create_app(config: ServiceConfig, handler: Optional[RequestHandler] = None) -> Flask:
    app = Flask(__name__)
    handler = handler or RequestHandler.from_config(config)

    @app.get("/")
    def root():
        return Response("Watering weather service is up.", mimetype="text/plain")

    # The firmware requests weatherN.py where N is the encoded method byte
    @app.get("/weather<int:method_byte>.py")
    def watering_data(method_byte: int):
        remote_address = request.headers.get("X-Forwarded-For") or request.remote_addr
        body = handler.get_watering_data(
            method_byte,
            request.args.get("loc"),
            options=request.args.get("wto"),
            output_format=request.args.get("format"),
            remote_address=remote_address,
        )
        return _respond(body)

    @app.get("/weatherData")
    def weather_data():
        return _respond(handler.get_weather_data(request.args.get("loc")))

    return app
