"""Application configuration management using Pydantic's BaseSettings."""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Defines all configuration settings for the API, loaded from .env file."""

    # API Keys
    openweather_api_key: Optional[str] = None

    # App settings
    debug: bool = True
    log_level: str = "INFO"

    # OpenWeather settings (current weather + air pollution)
    openweather_base_url: str = "https://api.openweathermap.org/data/2.5"
    openweather_units: str = "metric"
    request_timeout_seconds: float = 10.0

    # Card rendering
    icon_url_template: str = "https://openweathermap.org/img/wn/{icon}@2x.png"
    display_timezone: Optional[str] = None  # IANA name, host local zone if unset
    fetch_error_message: str = "Failed to load weather information."

    # Card registry housekeeping
    card_idle_timeout_minutes: int = 15
    card_cleanup_interval_seconds: int = 60

    class Config:
        """Pydantic model configuration."""

        env_file = ".env"


settings = Settings()
