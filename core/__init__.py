"""
Core utilities and infrastructure for the Weather Diary service.
"""

from core.exceptions import (
    WeatherDiaryException,
    DatabaseException,
    RecordNotFoundError,
    DiaryNotFoundError,
    WeatherProviderException,
    WeatherNetworkError,
    WeatherHTTPStatusError,
    WeatherParseError,
    WeatherNotCachedError,
    ValidationException,
    InvalidInputError,
    ConfigurationError,
)
from core.logging_config import configure_logging, get_logger

__all__ = [
    "WeatherDiaryException",
    "DatabaseException",
    "RecordNotFoundError",
    "DiaryNotFoundError",
    "WeatherProviderException",
    "WeatherNetworkError",
    "WeatherHTTPStatusError",
    "WeatherParseError",
    "WeatherNotCachedError",
    "ValidationException",
    "InvalidInputError",
    "ConfigurationError",
    "configure_logging",
    "get_logger",
]
