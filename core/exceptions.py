"""
Custom exception hierarchy for the Weather Diary service.
Provides structured error handling with proper context.
"""

from datetime import date
from typing import Optional, Dict, Any


class WeatherDiaryException(Exception):
    """Base exception for all Weather Diary errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize exception with message and optional context.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            context: Additional context information
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/API responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "context": self.context,
        }


# ==================== Database Exceptions ====================


class DatabaseException(WeatherDiaryException):
    """Base exception for database-related errors."""

    pass


class RecordNotFoundError(DatabaseException):
    """Raised when a database record is not found."""

    def __init__(self, model: str, identifier: Any):
        super().__init__(
            message=f"{model} not found",
            error_code="RECORD_NOT_FOUND",
            context={"model": model, "identifier": identifier},
        )


class DiaryNotFoundError(RecordNotFoundError):
    """Raised when no diary entry exists for a date."""

    def __init__(self, diary_date: date):
        super().__init__(model="DiaryEntry", identifier=diary_date.isoformat())
        self.error_code = "DIARY_NOT_FOUND"


# ==================== Weather Provider Exceptions ====================


class WeatherProviderException(WeatherDiaryException):
    """Base exception for weather lookups. `retryable` marks transient failures."""

    retryable = False


class WeatherNetworkError(WeatherProviderException):
    """Raised when the weather provider cannot be reached or times out."""

    retryable = True

    def __init__(self, details: Optional[str] = None):
        super().__init__(
            message="Weather provider unreachable",
            error_code="WEATHER_NETWORK_ERROR",
            context={"details": details} if details else {},
        )


class WeatherHTTPStatusError(WeatherProviderException):
    """Raised when the weather provider answers with a non-2xx status."""

    def __init__(self, status_code: int, details: Optional[str] = None):
        super().__init__(
            message=f"Weather provider returned status {status_code}",
            error_code="WEATHER_HTTP_STATUS_ERROR",
            context={"status_code": status_code, "details": details},
        )
        self.status_code = status_code
        self.retryable = status_code == 429 or status_code >= 500


class WeatherParseError(WeatherProviderException):
    """Raised when a weather payload is malformed or missing fields."""

    def __init__(self, field: str, reason: str):
        super().__init__(
            message=f"Malformed weather payload: {field} - {reason}",
            error_code="WEATHER_PARSE_ERROR",
            context={"field": field, "reason": reason},
        )


class WeatherNotCachedError(WeatherProviderException):
    """Raised when weather for a date is required but has not been stored."""

    def __init__(self, weather_date: date):
        super().__init__(
            message=f"No weather stored for {weather_date.isoformat()}",
            error_code="WEATHER_NOT_CACHED",
            context={"date": weather_date.isoformat()},
        )


# ==================== Validation Exceptions ====================


class ValidationException(WeatherDiaryException):
    """Base exception for validation errors."""

    pass


class InvalidInputError(ValidationException):
    """Raised when input validation fails."""

    def __init__(self, field: str, reason: str):
        super().__init__(
            message=f"Invalid input: {field} - {reason}",
            error_code="INVALID_INPUT",
            context={"field": field, "reason": reason},
        )


class ConfigurationError(ValidationException):
    """Raised when configuration is invalid."""

    def __init__(self, setting: str, reason: str):
        super().__init__(
            message=f"Invalid configuration: {setting} - {reason}",
            error_code="CONFIGURATION_ERROR",
            context={"setting": setting, "reason": reason},
        )
