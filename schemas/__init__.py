"""
Pydantic schemas for type-safe data transfer.
"""

from schemas.weather import (
    WeatherObservationSchema,
    DailyWeatherSchema,
    DailyWeatherCreateSchema,
)
from schemas.diary import DiaryEntrySchema, DiaryEntryCreateSchema

__all__ = [
    "WeatherObservationSchema",
    "DailyWeatherSchema",
    "DailyWeatherCreateSchema",
    "DiaryEntrySchema",
    "DiaryEntryCreateSchema",
]
