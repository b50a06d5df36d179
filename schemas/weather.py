"""Weather schemas."""

import datetime as dt

from pydantic import BaseModel, Field, ConfigDict


class WeatherObservationSchema(BaseModel):
    """Current weather as parsed from one provider response."""

    condition: str = Field(..., max_length=50, description="Weather category (e.g., 'Clear', 'Rain')")
    icon: str = Field(..., max_length=20, description="Provider icon code (e.g., '01d')")
    temperature: float = Field(..., description="Temperature in the configured unit system")


class DailyWeatherBaseSchema(BaseModel):
    """Base daily weather schema."""

    date: dt.date = Field(..., description="Calendar day the weather is stored for")
    weather_condition: str = Field(..., max_length=50, description="Weather category")
    weather_icon: str = Field(..., max_length=20, description="Provider icon code")
    temperature: float = Field(..., description="Temperature")


class DailyWeatherCreateSchema(DailyWeatherBaseSchema):
    """Schema for storing a daily weather observation."""

    @classmethod
    def from_observation(
        cls, weather_date: dt.date, observation: WeatherObservationSchema
    ) -> "DailyWeatherCreateSchema":
        return cls(
            date=weather_date,
            weather_condition=observation.condition,
            weather_icon=observation.icon,
            temperature=observation.temperature,
        )


class DailyWeatherSchema(DailyWeatherBaseSchema):
    """Complete daily weather schema."""

    id: int = Field(..., description="Daily weather ID")
    created_at: dt.datetime = Field(..., description="When the observation was stored")

    model_config = ConfigDict(from_attributes=True)
