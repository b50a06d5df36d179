"""
Shared pytest fixtures for Weather Diary tests.
"""

import asyncio
import os

# Settings are validated at import time
os.environ.setdefault("OPENWEATHER_API_KEY", "test-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./weather_diary_test.db")

import pytest
from typing import List, Optional

from schemas import WeatherObservationSchema


# --- Fake weather fetcher ---

class FakeWeatherClient:
    """Stands in for WeatherClient; counts fetches and can fail or stall."""

    def __init__(
        self,
        observations: Optional[List[WeatherObservationSchema]] = None,
        error: Optional[Exception] = None,
        delay: float = 0.0,
    ):
        self.observations = observations or [
            WeatherObservationSchema(condition="Clear", icon="01d", temperature=288.15)
        ]
        self.error = error
        self.delay = delay
        self.call_count = 0

    async def fetch_current_weather(self) -> WeatherObservationSchema:
        self.call_count += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        index = min(self.call_count, len(self.observations)) - 1
        return self.observations[index]


@pytest.fixture
def fetcher_factory():
    """Factory fixture for building fake fetchers."""
    return FakeWeatherClient


@pytest.fixture
def fake_fetcher():
    """Fetcher that always returns clear weather."""
    return FakeWeatherClient()


# --- Database and service ---

@pytest.fixture
async def database(tmp_path):
    """Fresh SQLite database file per test."""
    from storage.database import AsyncDatabase

    database = AsyncDatabase(f"sqlite+aiosqlite:///{tmp_path / 'diary.db'}")
    await database.create_tables()
    yield database
    await database.dispose()


@pytest.fixture
def service(database, fake_fetcher):
    """DiaryService wired to the temporary database and the fake fetcher."""
    from services.diary_service import DiaryService

    return DiaryService(
        database=database,
        fetcher=fake_fetcher,
        timezone="Asia/Seoul",
        fetch_for_other_dates=True,
    )


@pytest.fixture
def today(service):
    """Today's date as the service sees it."""
    return service.today()


# --- Provider payloads ---

@pytest.fixture
def weather_payload():
    """Trimmed OpenWeatherMap current weather response for Seoul."""
    return {
        "coord": {"lon": 126.9778, "lat": 37.5683},
        "weather": [
            {"id": 800, "main": "Clear", "description": "clear sky", "icon": "01d"}
        ],
        "base": "stations",
        "main": {
            "temp": 291.46,
            "feels_like": 290.65,
            "temp_min": 290.84,
            "temp_max": 292.84,
            "pressure": 1021,
            "humidity": 52,
        },
        "name": "Seoul",
        "cod": 200,
    }
