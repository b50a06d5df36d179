"""
Tests for parsing OpenWeatherMap current weather payloads.

Tests parse_weather_payload(), which turns the decoded JSON body into a
WeatherObservationSchema or raises WeatherParseError.
"""

import copy

import pytest

from core import WeatherParseError
from utils.weather_client import parse_weather_payload


class TestValidPayloads:
    """Payloads that carry everything a diary needs."""

    def test_extracts_condition_icon_and_temperature(self, weather_payload):
        """Should read weather[0].main, weather[0].icon and main.temp."""
        result = parse_weather_payload(weather_payload)

        assert result.condition == "Clear"
        assert result.icon == "01d"
        assert result.temperature == 291.46

    def test_integer_temperature_becomes_float(self, weather_payload):
        """Providers may send whole numbers."""
        weather_payload["main"]["temp"] = 18

        result = parse_weather_payload(weather_payload)

        assert result.temperature == 18.0
        assert isinstance(result.temperature, float)

    def test_uses_first_weather_item(self, weather_payload):
        """Only the first condition is kept when several are reported."""
        weather_payload["weather"].append(
            {"id": 701, "main": "Mist", "description": "mist", "icon": "50d"}
        )

        result = parse_weather_payload(weather_payload)

        assert result.condition == "Clear"
        assert result.icon == "01d"


class TestMalformedPayloads:
    """Payloads that must be rejected, never turned into a weather record."""

    def test_missing_weather_array(self, weather_payload):
        """Should raise WeatherParseError when `weather` is absent."""
        del weather_payload["weather"]

        with pytest.raises(WeatherParseError) as exc_info:
            parse_weather_payload(weather_payload)

        assert exc_info.value.context["field"] == "weather"
        assert exc_info.value.retryable is False

    def test_empty_weather_array(self, weather_payload):
        weather_payload["weather"] = []

        with pytest.raises(WeatherParseError):
            parse_weather_payload(weather_payload)

    @pytest.mark.parametrize("mutate,field", [
        (lambda p: p.pop("main"), "main"),
        (lambda p: p["main"].pop("temp"), "main.temp"),
        (lambda p: p["main"].update(temp="warm"), "main.temp"),
        (lambda p: p["main"].update(temp=True), "main.temp"),
        (lambda p: p["weather"][0].pop("main"), "weather[0].main"),
        (lambda p: p["weather"][0].pop("icon"), "weather[0].icon"),
        (lambda p: p["weather"].__setitem__(0, "Clear"), "weather[0]"),
        (lambda p: p.update(weather={"main": "Clear"}), "weather"),
    ])
    def test_reports_offending_field(self, weather_payload, mutate, field):
        """Each missing or ill-typed field is named in the error context."""
        payload = copy.deepcopy(weather_payload)
        mutate(payload)

        with pytest.raises(WeatherParseError) as exc_info:
            parse_weather_payload(payload)

        assert exc_info.value.context["field"] == field

    @pytest.mark.parametrize("payload", [None, [], "failed to get response", 42])
    def test_non_object_body(self, payload):
        """A body that is not a JSON object is a parse error."""
        with pytest.raises(WeatherParseError):
            parse_weather_payload(payload)
