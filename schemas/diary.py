"""Diary entry schemas."""

import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict


class DiaryEntryBaseSchema(BaseModel):
    """Base diary entry schema."""

    date: dt.date = Field(..., description="Calendar day of the entry")
    text: str = Field(..., description="Entry text")
    weather_condition: str = Field(..., max_length=50, description="Weather category at creation")
    weather_icon: str = Field(..., max_length=20, description="Weather icon code at creation")
    temperature: float = Field(..., description="Temperature at creation")


class DiaryEntryCreateSchema(DiaryEntryBaseSchema):
    """Schema for creating a diary entry."""

    pass


class DiaryEntrySchema(DiaryEntryBaseSchema):
    """Complete diary entry schema."""

    id: int = Field(..., description="Diary entry ID")
    created_at: dt.datetime = Field(..., description="Creation timestamp")
    updated_at: Optional[dt.datetime] = Field(None, description="Last text update")

    model_config = ConfigDict(from_attributes=True)
