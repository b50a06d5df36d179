"""
Diary Service - weather-annotated diary operations.
Decides whether a diary's weather comes from the store or from the provider,
and runs diary CRUD against the async database.
"""

from datetime import date, datetime
from typing import List, Optional

import pytz
from sqlalchemy.exc import SQLAlchemyError

from config.settings import settings
from core import (
    get_logger,
    DatabaseException,
    DiaryNotFoundError,
    InvalidInputError,
    WeatherNotCachedError,
)
from schemas import (
    DailyWeatherSchema,
    DailyWeatherCreateSchema,
    DiaryEntrySchema,
    DiaryEntryCreateSchema,
)
from storage.database import AsyncDatabase, db
from utils.weather_client import WeatherClient, weather_client

logger = get_logger(__name__)


def validate_text(text: str) -> str:
    """Reject non-string or blank diary text."""
    if not isinstance(text, str):
        raise InvalidInputError("text", "must be a string")
    if not text.strip():
        raise InvalidInputError("text", "must not be blank")
    return text


class DiaryService:
    """
    Diary operations with a per-day weather cache.

    Weather for a day is fetched from the provider at most once: the first
    diary (or the daily job) for a date stores it, later diaries reuse it.
    """

    def __init__(
        self,
        database: Optional[AsyncDatabase] = None,
        fetcher: Optional[WeatherClient] = None,
        timezone: Optional[str] = None,
        fetch_for_other_dates: Optional[bool] = None,
    ):
        """
        Args:
            database: Store for weather and diary rows
            fetcher: Current weather source
            timezone: IANA name that defines "today"
            fetch_for_other_dates: Whether a cache miss for a day other than
                today may be filled with the current weather
        """
        self.db = database or db
        self.fetcher = fetcher or weather_client
        self.timezone = pytz.timezone(timezone or settings.TIMEZONE)
        self.fetch_for_other_dates = (
            settings.FETCH_WEATHER_FOR_OTHER_DATES
            if fetch_for_other_dates is None
            else fetch_for_other_dates
        )

    def today(self) -> date:
        """Current calendar day in the configured timezone."""
        return datetime.now(self.timezone).date()

    # ==================== Scheduled Weather ====================

    async def save_daily_weather(self) -> DailyWeatherSchema:
        """
        Fetch the current weather and store it for today.

        If today already has a stored row, it is returned without calling the
        provider. A row stored by a concurrent writer is kept (first wins).

        Returns:
            The stored DailyWeatherSchema for today

        Raises:
            WeatherProviderException: If the provider lookup fails
            DatabaseException: If the store fails
        """
        today = self.today()
        cached = await self.db.get_daily_weather(today)
        if cached is not None:
            logger.info("Daily weather already stored, skipping fetch", date=str(today))
            return cached

        observation = await self.fetcher.fetch_current_weather()
        stored, inserted = await self.db.save_daily_weather(
            DailyWeatherCreateSchema.from_observation(today, observation)
        )

        if inserted:
            logger.info("Stored daily weather", date=str(today), condition=stored.weather_condition)
        else:
            logger.info("Daily weather already stored, keeping first", date=str(today))
        return stored

    # ==================== Diary CRUD ====================

    async def create_diary(self, diary_date: date, text: str) -> DiaryEntrySchema:
        """
        Create a diary entry with the weather for its date.

        Weather lookup, weather insert and diary insert share one transaction.
        A provider failure aborts the whole operation.

        Args:
            diary_date: Day the entry belongs to
            text: Entry text

        Returns:
            DiaryEntrySchema for the new entry

        Raises:
            InvalidInputError: If text is blank
            WeatherNotCachedError: If the date has no weather and fetching
                current weather for other dates is disabled
            WeatherProviderException: If the provider lookup fails
        """
        validate_text(text)
        logger.info("Creating diary entry", date=str(diary_date))

        try:
            async with self.db.get_session() as session:
                weather = await self.db.find_daily_weather(session, diary_date)

                if weather is None:
                    weather = await self._fetch_and_store_weather(session, diary_date)

                entry = await self.db.add_diary_entry(
                    session,
                    DiaryEntryCreateSchema(
                        date=diary_date,
                        text=text,
                        weather_condition=weather.weather_condition,
                        weather_icon=weather.weather_icon,
                        temperature=weather.temperature,
                    ),
                )

        except SQLAlchemyError as e:
            logger.error("Failed to create diary entry", date=str(diary_date), error=str(e))
            raise DatabaseException(f"Failed to create diary entry: {e}")

        logger.info("Created diary entry", date=str(diary_date), entry_id=entry.id)
        return entry

    async def _fetch_and_store_weather(self, session, diary_date: date) -> DailyWeatherSchema:
        """Fill a weather cache miss for a date inside the caller's transaction."""
        if diary_date != self.today():
            if not self.fetch_for_other_dates:
                raise WeatherNotCachedError(diary_date)
            logger.warning(
                "No stored weather for date; using current weather",
                date=str(diary_date),
                today=str(self.today()),
            )

        observation = await self.fetcher.fetch_current_weather()
        await self.db.insert_daily_weather_if_absent(
            session, DailyWeatherCreateSchema.from_observation(diary_date, observation)
        )
        # Another writer may have stored the date first; its row wins
        return await self.db.find_daily_weather(session, diary_date)

    async def read_diary(self, diary_date: date) -> List[DiaryEntrySchema]:
        """All entries for a date, in storage order."""
        logger.debug("Reading diary", date=str(diary_date))
        return await self.db.get_diary_entries_by_date(diary_date)

    async def read_diaries(self, start_date: date, end_date: date) -> List[DiaryEntrySchema]:
        """All entries dated within [start_date, end_date]. Empty when start > end."""
        if start_date > end_date:
            return []
        return await self.db.get_diary_entries_between(start_date, end_date)

    async def update_diary(self, diary_date: date, text: str) -> DiaryEntrySchema:
        """
        Replace the text of the first entry for a date.
        The weather snapshot is left as it was.

        Raises:
            InvalidInputError: If text is blank
            DiaryNotFoundError: If the date has no entry
        """
        validate_text(text)
        entry = await self.db.update_first_diary_text(diary_date, text)
        if entry is None:
            logger.warning("No diary entry to update", date=str(diary_date))
            raise DiaryNotFoundError(diary_date)

        logger.info("Updated diary entry", date=str(diary_date), entry_id=entry.id)
        return entry

    async def delete_diary(self, diary_date: date) -> int:
        """Delete every entry for a date. Returns how many were removed; zero is fine."""
        deleted = await self.db.delete_diary_entries_by_date(diary_date)
        logger.info("Deleted diary entries", date=str(diary_date), count=deleted)
        return deleted


# Singleton instance
diary_service = DiaryService()
