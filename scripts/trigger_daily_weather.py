#!/usr/bin/env python3
"""
Manually trigger the daily weather fetch.

Runs the same logic as the scheduled job: fetch the current weather and
store it for today unless today already has a stored row.

Usage:
    python scripts/trigger_daily_weather.py
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.settings import settings
from core import configure_logging, get_logger
from services.daily_weather_job import DailyWeatherJob
from services.diary_service import diary_service

logger = get_logger(__name__)


async def main() -> int:
    configure_logging(log_level=settings.LOG_LEVEL)

    await diary_service.db.create_tables()
    try:
        ok = await DailyWeatherJob(diary_service).run_once()
    finally:
        await diary_service.db.dispose()

    if ok:
        print(f"✓ Weather stored for {diary_service.today()} ({settings.WEATHER_CITY})")
        return 0
    print("✗ Daily weather fetch failed, see log above")
    return 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
