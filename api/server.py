from contextlib import asynccontextmanager
from datetime import date
from typing import List

from fastapi import FastAPI, Request, Query, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config.settings import settings
from core import (
    configure_logging,
    get_logger,
    WeatherDiaryException,
    InvalidInputError,
    RecordNotFoundError,
    ValidationException,
    WeatherNetworkError,
    WeatherNotCachedError,
    WeatherProviderException,
)
from schemas import DiaryEntrySchema
from services.daily_weather_job import DailyWeatherJob
from services.diary_service import DiaryService, diary_service

configure_logging(log_level=settings.LOG_LEVEL, json_logs=settings.is_production)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifecycle manager for the FastAPI app.
    Creates tables and runs the daily weather job alongside the API.
    """
    # Startup
    logger.info("Starting up Weather Diary API...")
    await diary_service.db.create_tables()

    job = DailyWeatherJob(diary_service)
    if settings.DAILY_FETCH_ENABLED:
        job.start()

    yield

    # Shutdown
    logger.info("Shutting down...")
    await job.stop()
    await diary_service.db.dispose()


app = FastAPI(title="Weather Diary API", lifespan=lifespan)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all for now, restrict in prod if needed
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_diary_service() -> DiaryService:
    return diary_service


def _status_for(exc: WeatherDiaryException) -> int:
    if isinstance(exc, ValidationException):
        return 400
    if isinstance(exc, RecordNotFoundError):
        return 404
    if isinstance(exc, WeatherNotCachedError):
        return 409
    if isinstance(exc, WeatherNetworkError):
        return 503
    if isinstance(exc, WeatherProviderException):
        return 502
    return 500


@app.exception_handler(WeatherDiaryException)
async def weather_diary_exception_handler(request: Request, exc: WeatherDiaryException):
    status_code = _status_for(exc)
    if status_code >= 500:
        logger.error("Request failed", path=request.url.path, **exc.to_dict())
    return JSONResponse(status_code=status_code, content=exc.to_dict())


async def _read_text(request: Request) -> str:
    """Diary text is sent as the raw request body."""
    try:
        return (await request.body()).decode("utf-8")
    except UnicodeDecodeError:
        raise InvalidInputError("text", "body must be UTF-8 text")


# API Endpoints
@app.get("/api/health")
async def health_check():
    return {"status": "ok"}


@app.post("/create/diary", response_model=DiaryEntrySchema, status_code=201)
async def create_diary(
    request: Request,
    date: date = Query(..., description="Diary day, yyyy-MM-dd"),
    service: DiaryService = Depends(get_diary_service),
):
    """Store a diary entry for a day together with that day's weather."""
    return await service.create_diary(date, await _read_text(request))


@app.get("/read/diary", response_model=List[DiaryEntrySchema])
async def read_diary(
    date: date = Query(..., description="Diary day, yyyy-MM-dd"),
    service: DiaryService = Depends(get_diary_service),
):
    """All diary entries for a day."""
    return await service.read_diary(date)


@app.get("/read/diaries", response_model=List[DiaryEntrySchema])
async def read_diaries(
    start_date: date = Query(..., description="First day of the range, yyyy-MM-dd", examples=["2020-01-20"]),
    end_date: date = Query(..., description="Last day of the range, yyyy-MM-dd", examples=["2020-01-20"]),
    service: DiaryService = Depends(get_diary_service),
):
    """All diary entries between two days, both included."""
    return await service.read_diaries(start_date, end_date)


@app.put("/update/diary", response_model=DiaryEntrySchema)
async def update_diary(
    request: Request,
    date: date = Query(..., description="Diary day, yyyy-MM-dd"),
    service: DiaryService = Depends(get_diary_service),
):
    """Replace the text of the first diary entry for a day."""
    return await service.update_diary(date, await _read_text(request))


@app.delete("/delete/diary")
async def delete_diary(
    date: date = Query(..., description="Diary day, yyyy-MM-dd"),
    service: DiaryService = Depends(get_diary_service),
):
    """Delete every diary entry for a day."""
    deleted = await service.delete_diary(date)
    return {"deleted": deleted}
