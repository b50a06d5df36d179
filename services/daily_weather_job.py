"""
Daily weather job - stores the day's weather once a day at a fixed local time.
Runs as a single asyncio task next to the API server.
"""

import asyncio
from datetime import datetime, timedelta
from typing import Optional

import pytz

from config.settings import settings
from core import get_logger, WeatherDiaryException
from services.diary_service import DiaryService

logger = get_logger(__name__)


def next_run_after(now: datetime, hour: int, minute: int) -> datetime:
    """
    Next time the clock reads hour:minute, strictly after `now`.

    Args:
        now: Timezone-aware current time
        hour: Local hour (0-23)
        minute: Local minute (0-59)
    """
    tz = now.tzinfo
    candidate = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if candidate <= now:
        candidate += timedelta(days=1)
    # Re-localize so DST transitions resolve to the right offset
    if hasattr(tz, "localize"):
        candidate = tz.normalize(tz.localize(candidate.replace(tzinfo=None)))
    return candidate


class DailyWeatherJob:
    """Calls DiaryService.save_daily_weather() every day at hour:minute."""

    def __init__(
        self,
        service: DiaryService,
        hour: Optional[int] = None,
        minute: Optional[int] = None,
        timezone: Optional[str] = None,
    ):
        self.service = service
        self.hour = settings.DAILY_FETCH_HOUR if hour is None else hour
        self.minute = settings.DAILY_FETCH_MINUTE if minute is None else minute
        self.timezone = pytz.timezone(timezone or settings.TIMEZONE)
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def seconds_until_next_run(self, now: Optional[datetime] = None) -> float:
        now = now or datetime.now(self.timezone)
        return (next_run_after(now, self.hour, self.minute) - now).total_seconds()

    async def run_once(self) -> bool:
        """
        Store today's weather once.

        Returns:
            True on success, False if the run failed (the failure is logged)
        """
        try:
            weather = await self.service.save_daily_weather()
            logger.info("Daily weather job finished", date=str(weather.date))
            return True
        except WeatherDiaryException as e:
            logger.error("Daily weather job failed", **e.to_dict())
            return False

    async def _run_forever(self) -> None:
        while True:
            delay = self.seconds_until_next_run()
            logger.info("Next daily weather fetch scheduled", in_seconds=round(delay))
            await asyncio.sleep(delay)
            try:
                await self.run_once()
            except Exception:
                # Unexpected failure: log it and keep the daily schedule alive
                logger.exception("Daily weather job crashed, waiting for next run")

    def start(self) -> None:
        """Start the job loop on the running event loop."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run_forever(), name="daily_weather_job")
        logger.info(
            "Daily weather job started",
            at=f"{self.hour:02d}:{self.minute:02d}",
            timezone=self.timezone.zone,
        )

    async def stop(self) -> None:
        """Cancel the job loop and wait for it to exit."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Daily weather job stopped")
