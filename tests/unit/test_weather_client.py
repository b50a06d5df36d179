"""
Tests for the weather client's HTTP behaviour.

Uses httpx.MockTransport so no request leaves the process.
"""

import httpx
import pytest

from core import (
    ConfigurationError,
    WeatherHTTPStatusError,
    WeatherNetworkError,
    WeatherParseError,
)
from utils.weather_client import WeatherClient, WeatherClientConfig


def make_client(handler, **overrides) -> WeatherClient:
    config = WeatherClientConfig(
        api_key=overrides.pop("api_key", "secret"),
        retry_backoff_seconds=0,
        **overrides,
    )
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return WeatherClient(config, http_client=http_client)


class TestRequest:
    """Shape of the outbound request."""

    async def test_sends_city_and_api_key(self, weather_payload):
        """Should GET the endpoint with q=<city> and appid=<key>."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=weather_payload)

        client = make_client(handler)
        await client.fetch_current_weather()

        assert len(seen) == 1
        request = seen[0]
        assert request.method == "GET"
        assert request.url.host == "api.openweathermap.org"
        assert request.url.path == "/data/2.5/weather"
        assert request.url.params["q"] == "seoul"
        assert request.url.params["appid"] == "secret"
        assert "units" not in request.url.params

    async def test_adds_units_when_not_standard(self, weather_payload):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=weather_payload)

        client = make_client(handler, units="metric", city="busan")
        await client.fetch_current_weather()

        assert seen[0].url.params["units"] == "metric"
        assert seen[0].url.params["q"] == "busan"

    def test_empty_api_key_is_rejected(self):
        """The client refuses to start without a key."""
        with pytest.raises(ConfigurationError):
            WeatherClient(WeatherClientConfig(api_key=""))


class TestResponses:
    """Mapping provider answers onto observations and error kinds."""

    async def test_success_returns_observation(self, weather_payload):
        client = make_client(lambda request: httpx.Response(200, json=weather_payload))

        result = await client.fetch_current_weather()

        assert result.condition == "Clear"
        assert result.icon == "01d"
        assert result.temperature == 291.46

    @pytest.mark.parametrize("status_code,retryable", [
        (401, False),
        (404, False),
        (429, True),
        (500, True),
        (503, True),
    ])
    async def test_non_2xx_raises_status_error_without_retry(self, status_code, retryable):
        """HTTP status errors are raised on the first answer, never retried."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(status_code, json={"cod": status_code, "message": "nope"})

        client = make_client(handler, max_attempts=3)

        with pytest.raises(WeatherHTTPStatusError) as exc_info:
            await client.fetch_current_weather()

        assert exc_info.value.status_code == status_code
        assert exc_info.value.retryable is retryable
        assert len(calls) == 1

    async def test_invalid_json_raises_parse_error(self):
        client = make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))

        with pytest.raises(WeatherParseError):
            await client.fetch_current_weather()

    async def test_undecodable_body_raises_parse_error_without_retry(self):
        """A body that fails content decoding is a parse failure, not a crash."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"not gzip")

        client = make_client(handler, max_attempts=3)

        with pytest.raises(WeatherParseError) as exc_info:
            await client.fetch_current_weather()

        assert exc_info.value.context["field"] == "$"
        assert len(calls) == 1

    async def test_missing_weather_array_raises_parse_error(self, weather_payload):
        del weather_payload["weather"]
        client = make_client(lambda request: httpx.Response(200, json=weather_payload))

        with pytest.raises(WeatherParseError):
            await client.fetch_current_weather()


class TestNetworkFailures:
    """Connection failures and timeouts are retried, then surfaced."""

    async def test_connection_error_retried_then_raised(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler, max_attempts=3)

        with pytest.raises(WeatherNetworkError) as exc_info:
            await client.fetch_current_weather()

        assert len(calls) == 3
        assert exc_info.value.retryable is True

    async def test_timeout_is_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("too slow", request=request)

        client = make_client(handler, max_attempts=1)

        with pytest.raises(WeatherNetworkError):
            await client.fetch_current_weather()

    async def test_redirect_loop_is_network_error(self):
        """Request errors outside the transport layer still map to a typed error."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.TooManyRedirects("redirect loop", request=request)

        client = make_client(handler, max_attempts=1)

        with pytest.raises(WeatherNetworkError):
            await client.fetch_current_weather()

    async def test_recovers_after_transient_failure(self, weather_payload):
        """A later attempt that succeeds yields the observation."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ConnectError("reset", request=request)
            return httpx.Response(200, json=weather_payload)

        client = make_client(handler, max_attempts=3)

        result = await client.fetch_current_weather()

        assert result.condition == "Clear"
        assert len(calls) == 2
