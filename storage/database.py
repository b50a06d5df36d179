"""
Async database operations for the Weather Diary store.
Async SQLAlchemy with per-operation transactions, typed results and error wrapping.
"""

from contextlib import asynccontextmanager
from datetime import date
from typing import List, Optional, AsyncIterator, Tuple

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
    AsyncEngine,
)
from sqlalchemy import select, delete
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError

from config.settings import settings
from core import get_logger, DatabaseException
from storage.models import Base, DailyWeather, DiaryEntry, utcnow
from schemas import (
    DailyWeatherSchema,
    DailyWeatherCreateSchema,
    DiaryEntrySchema,
    DiaryEntryCreateSchema,
)

logger = get_logger(__name__)


def to_async_url(db_url: str) -> str:
    """Map a plain sqlite/postgresql URL onto its async driver."""
    if db_url.startswith("postgresql://"):
        return db_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if db_url.startswith("sqlite://"):
        return db_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return db_url


class AsyncDatabase:
    """
    Async database interface for daily weather and diary entries.

    Session-scoped methods take an open AsyncSession so callers can group
    several steps into one transaction; the remaining methods open their own.
    """

    def __init__(self, database_url: Optional[str] = None):
        """Initialize async database engine and session factory."""
        db_url = to_async_url(database_url or settings.DATABASE_URL)

        engine_kwargs = {
            "echo": settings.LOG_LEVEL == "DEBUG",
            "pool_pre_ping": True,  # Verify connections before use
        }
        if db_url.startswith("postgresql"):
            engine_kwargs.update(pool_size=10, max_overflow=20, pool_recycle=3600)

        self.engine: AsyncEngine = create_async_engine(db_url, **engine_kwargs)

        self.async_session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

        logger.info("Async database engine initialized", db_url=db_url.split("@")[-1])

    @asynccontextmanager
    async def get_session(self) -> AsyncIterator[AsyncSession]:
        """
        Context manager for database sessions with automatic cleanup.
        Commits when the block exits normally, rolls back on any error.

        Yields:
            AsyncSession instance
        """
        async with self.async_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception as e:
                await session.rollback()
                logger.error("Session rolled back", error=str(e))
                raise

    async def create_tables(self) -> None:
        """Create all database tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created")

    async def drop_tables(self) -> None:
        """Drop all database tables (use with caution)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.warning("Database tables dropped")

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self.engine.dispose()

    # ==================== Daily Weather (session-scoped) ====================

    async def find_daily_weather(
        self, session: AsyncSession, weather_date: date
    ) -> Optional[DailyWeatherSchema]:
        """First stored weather for a date, or None."""
        result = await session.execute(
            select(DailyWeather)
            .where(DailyWeather.date == weather_date)
            .order_by(DailyWeather.id)
            .limit(1)
        )
        weather = result.scalar_one_or_none()
        return DailyWeatherSchema.model_validate(weather) if weather else None

    async def insert_daily_weather_if_absent(
        self, session: AsyncSession, weather: DailyWeatherCreateSchema
    ) -> bool:
        """
        Insert a weather row unless one already exists for its date.

        Relies on the unique constraint on `daily_weather.date`, so two
        concurrent writers for the same day end up with a single row.

        Returns:
            True if a row was inserted, False if the date was already taken
        """
        values = weather.model_dump()
        values["created_at"] = utcnow()

        if self.engine.dialect.name == "postgresql":
            stmt = pg_insert(DailyWeather).values(**values)
        else:
            stmt = sqlite_insert(DailyWeather).values(**values)
        stmt = stmt.on_conflict_do_nothing(index_elements=[DailyWeather.date])

        result = await session.execute(stmt)
        return result.rowcount == 1

    # ==================== Diary Entries (session-scoped) ====================

    async def add_diary_entry(
        self, session: AsyncSession, entry: DiaryEntryCreateSchema
    ) -> DiaryEntrySchema:
        """Add a diary entry within the caller's transaction."""
        diary_entry = DiaryEntry(
            **entry.model_dump(),
            created_at=utcnow(),
        )
        session.add(diary_entry)
        await session.flush()  # Get the ID
        return DiaryEntrySchema.model_validate(diary_entry)

    # ==================== Daily Weather ====================

    async def get_daily_weather(self, weather_date: date) -> Optional[DailyWeatherSchema]:
        """Get the stored weather for a date."""
        try:
            async with self.get_session() as session:
                return await self.find_daily_weather(session, weather_date)

        except SQLAlchemyError as e:
            logger.error("Failed to get daily weather", date=str(weather_date), error=str(e))
            raise DatabaseException(f"Failed to get daily weather: {e}")

    async def save_daily_weather(
        self, weather: DailyWeatherCreateSchema
    ) -> Tuple[DailyWeatherSchema, bool]:
        """
        Store weather for a date, keeping any row already stored for it.

        Args:
            weather: Observation to store

        Returns:
            (stored row, whether it was newly inserted)

        Raises:
            DatabaseException: If database operation fails
        """
        try:
            async with self.get_session() as session:
                inserted = await self.insert_daily_weather_if_absent(session, weather)
                stored = await self.find_daily_weather(session, weather.date)
                return stored, inserted

        except SQLAlchemyError as e:
            logger.error("Failed to save daily weather", date=str(weather.date), error=str(e))
            raise DatabaseException(f"Failed to save daily weather: {e}")

    # ==================== Diary Entries ====================

    async def get_diary_entries_by_date(self, diary_date: date) -> List[DiaryEntrySchema]:
        """Get all diary entries for a date in storage order."""
        try:
            async with self.get_session() as session:
                result = await session.execute(
                    select(DiaryEntry)
                    .where(DiaryEntry.date == diary_date)
                    .order_by(DiaryEntry.id)
                )
                entries = result.scalars().all()
                return [DiaryEntrySchema.model_validate(e) for e in entries]

        except SQLAlchemyError as e:
            logger.error("Failed to get diary entries", date=str(diary_date), error=str(e))
            raise DatabaseException(f"Failed to get diary entries: {e}")

    async def get_diary_entries_between(
        self, start_date: date, end_date: date
    ) -> List[DiaryEntrySchema]:
        """Get diary entries with start_date <= date <= end_date, oldest first."""
        try:
            async with self.get_session() as session:
                result = await session.execute(
                    select(DiaryEntry)
                    .where(DiaryEntry.date >= start_date, DiaryEntry.date <= end_date)
                    .order_by(DiaryEntry.date, DiaryEntry.id)
                )
                entries = result.scalars().all()
                logger.debug(
                    "Retrieved diary range",
                    start_date=str(start_date),
                    end_date=str(end_date),
                    count=len(entries),
                )
                return [DiaryEntrySchema.model_validate(e) for e in entries]

        except SQLAlchemyError as e:
            logger.error("Failed to get diary range", error=str(e))
            raise DatabaseException(f"Failed to get diary range: {e}")

    async def update_first_diary_text(
        self, diary_date: date, text: str
    ) -> Optional[DiaryEntrySchema]:
        """
        Replace the text of the first diary entry for a date.

        Returns:
            Updated entry, or None if the date has no entry
        """
        try:
            async with self.get_session() as session:
                result = await session.execute(
                    select(DiaryEntry)
                    .where(DiaryEntry.date == diary_date)
                    .order_by(DiaryEntry.id)
                    .limit(1)
                )
                entry = result.scalar_one_or_none()
                if not entry:
                    return None

                entry.text = text
                entry.updated_at = utcnow()
                await session.flush()
                return DiaryEntrySchema.model_validate(entry)

        except SQLAlchemyError as e:
            logger.error("Failed to update diary entry", date=str(diary_date), error=str(e))
            raise DatabaseException(f"Failed to update diary entry: {e}")

    async def delete_diary_entries_by_date(self, diary_date: date) -> int:
        """Delete every diary entry for a date. Returns the number removed."""
        try:
            async with self.get_session() as session:
                result = await session.execute(
                    delete(DiaryEntry).where(DiaryEntry.date == diary_date)
                )
                return result.rowcount or 0

        except SQLAlchemyError as e:
            logger.error("Failed to delete diary entries", date=str(diary_date), error=str(e))
            raise DatabaseException(f"Failed to delete diary entries: {e}")


# Singleton instance
db = AsyncDatabase()
