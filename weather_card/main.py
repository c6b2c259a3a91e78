"""Main FastAPI application entry point."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from weather_card.config import settings
from weather_card.core.card_manager import card_manager
from weather_card.core.weather_api import OpenWeatherClient
from weather_card.middleware.session import SessionMiddleware
from weather_card.api.weather import router as weather_router
import logging

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manages application startup and shutdown events."""
    # Startup
    logger.info("Starting Detailed Weather API")
    app.state.weather_source = None
    if settings.openweather_api_key:
        app.state.weather_source = OpenWeatherClient()
        logger.info("OpenWeather client ready")
    else:
        logger.warning("OPENWEATHER_API_KEY is not set, weather cards are disabled")

    await card_manager.start()

    yield

    # Shutdown
    logger.info("Shutting down Detailed Weather API")
    await card_manager.stop()

    if app.state.weather_source is not None:
        await app.state.weather_source.aclose()
        logger.info("OpenWeather client closed")


app = FastAPI(
    title="Detailed Weather API",
    description="Weather and air quality cards aggregated per location",
    version="1.0.0",
    debug=settings.debug,
    lifespan=lifespan,
)

app.add_middleware(SessionMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(weather_router)


@app.get("/")
async def root():
    """Provides basic information about the running API."""
    return {
        "message": "Detailed Weather API",
        "status": "running",
        "features": {
            "openweather": bool(settings.openweather_api_key),
        },
    }


@app.get("/health")
async def health_check():
    """Performs a health check of the API."""
    return {
        "status": "healthy",
        "active_cards": card_manager.active_cards,
    }


@app.get("/cards")
async def get_cards():
    """(Admin) Gets information about all live cards."""
    return card_manager.get_card_info()
