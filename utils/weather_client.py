"""
Weather client for the OpenWeatherMap current weather endpoint.

Fetches the current weather for one configured city and parses it into a
WeatherObservationSchema. Failures surface as typed exceptions:

    - WeatherNetworkError: connection failure or timeout (retried)
    - WeatherHTTPStatusError: non-2xx answer from the provider
    - WeatherParseError: body cannot be decoded, is not JSON, or lacks
      main.temp / weather[0]
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from config.settings import Settings, settings
from core import (
    get_logger,
    ConfigurationError,
    WeatherNetworkError,
    WeatherHTTPStatusError,
    WeatherParseError,
)
from schemas import WeatherObservationSchema

logger = get_logger(__name__)


@dataclass(frozen=True)
class WeatherClientConfig:
    """Everything the weather client needs, injected at construction."""

    api_key: str
    api_url: str = "https://api.openweathermap.org/data/2.5/weather"
    city: str = "seoul"
    units: str = "standard"
    timeout_seconds: float = 5.0
    max_attempts: int = 3
    retry_backoff_seconds: float = 1.0

    @classmethod
    def from_settings(cls, app_settings: Settings) -> "WeatherClientConfig":
        return cls(
            api_key=app_settings.OPENWEATHER_API_KEY,
            api_url=app_settings.WEATHER_API_URL,
            city=app_settings.WEATHER_CITY,
            units=app_settings.WEATHER_UNITS,
            timeout_seconds=app_settings.WEATHER_TIMEOUT_SECONDS,
            max_attempts=app_settings.WEATHER_MAX_ATTEMPTS,
            retry_backoff_seconds=app_settings.WEATHER_RETRY_BACKOFF_SECONDS,
        )


def parse_weather_payload(payload: Any) -> WeatherObservationSchema:
    """
    Extract condition, icon and temperature from a current weather payload.

    Args:
        payload: Decoded JSON body

    Returns:
        WeatherObservationSchema

    Raises:
        WeatherParseError: If a required field is missing or has the wrong type
    """
    if not isinstance(payload, dict):
        raise WeatherParseError("$", "expected a JSON object")

    main = payload.get("main")
    if not isinstance(main, dict):
        raise WeatherParseError("main", "missing or not an object")

    temperature = main.get("temp")
    # bool is an int subclass
    if isinstance(temperature, bool) or not isinstance(temperature, (int, float)):
        raise WeatherParseError("main.temp", "missing or not a number")

    weather = payload.get("weather")
    if not isinstance(weather, list) or not weather:
        raise WeatherParseError("weather", "missing or empty array")

    first = weather[0]
    if not isinstance(first, dict):
        raise WeatherParseError("weather[0]", "not an object")

    condition = first.get("main")
    if not isinstance(condition, str) or not condition:
        raise WeatherParseError("weather[0].main", "missing or not a string")

    icon = first.get("icon")
    if not isinstance(icon, str) or not icon:
        raise WeatherParseError("weather[0].icon", "missing or not a string")

    return WeatherObservationSchema(
        condition=condition,
        icon=icon,
        temperature=float(temperature),
    )


class WeatherClient:
    """
    Current weather fetcher for a single city.

    Usage:
        client = WeatherClient(WeatherClientConfig.from_settings(settings))
        observation = await client.fetch_current_weather()
    """

    def __init__(
        self,
        config: WeatherClientConfig,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            config: Provider settings
            http_client: Shared client to use instead of one per request
        """
        if not config.api_key:
            raise ConfigurationError("OPENWEATHER_API_KEY", "must not be empty")
        self.config = config
        self._http_client = http_client
        logger.info("Weather client initialized", city=config.city, units=config.units)

    def _params(self) -> Dict[str, str]:
        params = {"q": self.config.city, "appid": self.config.api_key}
        if self.config.units != "standard":
            params["units"] = self.config.units
        return params

    async def fetch_current_weather(self) -> WeatherObservationSchema:
        """
        Fetch and parse the current weather.

        Network failures are retried up to `max_attempts` times with
        exponential backoff. HTTP status and parse failures are raised at once.

        Returns:
            WeatherObservationSchema

        Raises:
            WeatherNetworkError, WeatherHTTPStatusError, WeatherParseError
        """
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.config.max_attempts),
            wait=wait_exponential(multiplier=self.config.retry_backoff_seconds, max=10),
            retry=retry_if_exception_type(WeatherNetworkError),
            reraise=True,
        ):
            with attempt:
                payload = await self._request()

        observation = parse_weather_payload(payload)
        logger.info(
            "Fetched current weather",
            city=self.config.city,
            condition=observation.condition,
            temperature=observation.temperature,
        )
        return observation

    async def _request(self) -> Any:
        """Perform one GET and return the decoded JSON body."""
        try:
            if self._http_client is not None:
                response = await self._http_client.get(
                    self.config.api_url,
                    params=self._params(),
                    timeout=self.config.timeout_seconds,
                )
            else:
                async with httpx.AsyncClient(timeout=self.config.timeout_seconds) as client:
                    response = await client.get(self.config.api_url, params=self._params())

        except httpx.TimeoutException as e:
            logger.warning("Weather request timed out", city=self.config.city, error=str(e))
            raise WeatherNetworkError(f"timed out after {self.config.timeout_seconds}s")
        except httpx.TransportError as e:
            logger.warning("Weather request failed", city=self.config.city, error=str(e))
            raise WeatherNetworkError(str(e))
        except httpx.DecodingError as e:
            logger.error("Weather response could not be decoded", city=self.config.city, error=str(e))
            raise WeatherParseError("$", f"body could not be decoded: {e}")
        except httpx.RequestError as e:
            logger.warning("Weather request failed", city=self.config.city, error=str(e))
            raise WeatherNetworkError(str(e))

        if not response.is_success:
            logger.error(
                "Weather provider error",
                status_code=response.status_code,
                body=response.text[:200],
            )
            raise WeatherHTTPStatusError(response.status_code, response.text[:200])

        try:
            return response.json()
        except ValueError as e:
            raise WeatherParseError("$", f"body is not valid JSON: {e}")


# Singleton instance
weather_client = WeatherClient(WeatherClientConfig.from_settings(settings))
