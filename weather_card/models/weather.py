"""Pydantic models for the detailed weather card.

Three groups live here:

- the raw OpenWeather payload shapes, validated at the source boundary,
- the unified record and the ``FetchState`` lifecycle produced by the aggregator,
- the view models returned by the API.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Annotated, List, Literal, Optional, Union


class Coordinate(BaseModel):
    """A (latitude, longitude) pair. Compared by value, usable as a dict key."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)


# --- Raw source payloads ---


class RawWeatherMain(BaseModel):
    temp: float
    feels_like: float
    humidity: int
    pressure: int


class RawWind(BaseModel):
    speed: float


class RawCondition(BaseModel):
    """One entry of the ``weather`` list."""

    description: str
    icon: str


class RawSun(BaseModel):
    sunrise: int
    sunset: int


class RawWeatherReading(BaseModel):
    """Current weather payload (``/weather``)."""

    main: RawWeatherMain
    wind: RawWind
    weather: List[RawCondition] = Field(default_factory=list)
    sys: RawSun


class RawAirQualityMain(BaseModel):
    aqi: int


class RawAirQualityComponents(BaseModel):
    """Pollutant concentrations in µg/m³. Only the particulates are kept."""

    pm2_5: float
    pm10: float


class RawAirQualityReading(BaseModel):
    """One entry of the ``/air_pollution`` ``list``."""

    main: RawAirQualityMain
    components: RawAirQualityComponents


# --- Aggregated record and lifecycle ---


class UnifiedWeatherRecord(BaseModel):
    """Weather and air quality for one coordinate, merged from both sources."""

    model_config = ConfigDict(frozen=True)

    temp: int
    feels_like: int
    humidity: int
    wind_speed: float
    pressure: int
    description: str
    icon: str
    sunrise: int
    sunset: int
    aqi: int
    pm25: float
    pm10: float


class Loading(BaseModel):
    """A cycle is in flight (or none has finished yet)."""

    model_config = ConfigDict(frozen=True)

    status: Literal["loading"] = "loading"


class Failed(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["failed"] = "failed"
    message: str


class Ready(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["ready"] = "ready"
    record: UnifiedWeatherRecord


FetchState = Annotated[Union[Loading, Failed, Ready], Field(discriminator="status")]


# --- API view models ---


class DetailedWeatherCard(BaseModel):
    """Display-ready card built from a ``Ready`` record."""

    location: str
    temp: int
    feels_like: int
    humidity: int
    pressure: int
    wind_speed: float
    description: str
    icon: str
    icon_url: Optional[str] = None
    aqi: int
    aqi_label: str
    pm25: float
    pm10: float
    sunrise: str  # "HH:mm"
    sunset: str  # "HH:mm"


class DetailedWeatherResponse(BaseModel):
    """API Response for a location card"""

    location: str
    coordinate: Optional[Coordinate] = None
    state: FetchState
    card: Optional[DetailedWeatherCard] = None
