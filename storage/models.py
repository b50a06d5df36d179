"""
SQLAlchemy models for the Weather Diary store.
Defines the cached daily weather table and the diary entry table.
"""

from datetime import datetime, timezone
from sqlalchemy import (
    Column,
    Index,
    Integer,
    String,
    Text,
    Date,
    DateTime,
    Float,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class DailyWeather(Base):
    """Daily weather - one cached observation per calendar day."""

    __tablename__ = "daily_weather"
    __table_args__ = (
        UniqueConstraint("date", name="uq_daily_weather_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, index=True)
    weather_condition = Column(String(50), nullable=False)  # e.g., "Clear", "Rain"
    weather_icon = Column(String(20), nullable=False)  # e.g., "01d"
    temperature = Column(Float, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<DailyWeather(date={self.date}, condition='{self.weather_condition}', temperature={self.temperature})>"


class DiaryEntry(Base):
    """Diary entries - text for a day plus the weather snapshot taken at creation."""

    __tablename__ = "diary_entries"
    __table_args__ = (
        Index("idx_diary_entries_date_id", "date", "id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, index=True)
    text = Column(Text, nullable=False)

    # Snapshot copied from DailyWeather; never refreshed on update
    weather_condition = Column(String(50), nullable=False)
    weather_icon = Column(String(20), nullable=False)
    temperature = Column(Float, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<DiaryEntry(id={self.id}, date={self.date}, condition='{self.weather_condition}')>"
