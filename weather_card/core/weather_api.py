"""Clients for the two remote data sources: current weather and air pollution."""

import httpx
from pydantic import BaseModel, ValidationError
from typing import Any, Dict, Optional, Protocol, Type, TypeVar
from weather_card.config import settings
from weather_card.core.exceptions import WeatherConfigError, WeatherFetchError
from weather_card.models.weather import RawAirQualityReading, RawWeatherReading
import logging

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class WeatherSource(Protocol):
    """Anything that can fetch both readings for a coordinate.

    Both methods raise ``WeatherFetchError`` on failure.
    """

    async def fetch_weather(self, lat: float, lon: float) -> RawWeatherReading: ...

    async def fetch_air_quality(self, lat: float, lon: float) -> RawAirQualityReading: ...


class OpenWeatherClient:
    """Weather source backed by the OpenWeather ``/weather`` and ``/air_pollution`` APIs"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        *,
        units: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initializes the client. An ``httpx.AsyncClient`` is created unless one is passed in."""
        self.api_key = api_key or settings.openweather_api_key
        if not self.api_key:
            raise WeatherConfigError("OpenWeather API key is not configured")

        self.base_url = (base_url or settings.openweather_base_url).rstrip("/")
        self.units = units or settings.openweather_units
        self.timeout = timeout if timeout is not None else settings.request_timeout_seconds
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self.timeout)

    async def __aenter__(self) -> "OpenWeatherClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self):
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def fetch_weather(self, lat: float, lon: float) -> RawWeatherReading:
        """Current conditions for a coordinate."""
        data = await self._get_json(
            "weather", {"lat": lat, "lon": lon, "units": self.units}
        )
        return self._parse(RawWeatherReading, data, "weather")

    async def fetch_air_quality(self, lat: float, lon: float) -> RawAirQualityReading:
        """Current air pollution for a coordinate (first entry of the ``list``)."""
        data = await self._get_json("air_pollution", {"lat": lat, "lon": lon})

        entries = data.get("list") if isinstance(data, dict) else None
        if not entries:
            raise WeatherFetchError(
                "Air pollution response contains no readings", endpoint="air_pollution"
            )
        return self._parse(RawAirQualityReading, entries[0], "air_pollution")

    async def _get_json(self, endpoint: str, params: Dict[str, Any]) -> Any:
        url = f"{self.base_url}/{endpoint}"
        logger.debug(f"GET {url} lat={params.get('lat')} lon={params.get('lon')}")

        try:
            response = await self._client.get(
                url,
                params={**params, "appid": self.api_key},
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise WeatherFetchError(
                f"Request to {endpoint} failed: {e.__class__.__name__}",
                endpoint=endpoint,
            ) from e

        if response.status_code != 200:
            raise WeatherFetchError(
                f"{endpoint} returned HTTP {response.status_code}",
                endpoint=endpoint,
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise WeatherFetchError(
                f"{endpoint} returned invalid JSON",
                endpoint=endpoint,
                status_code=response.status_code,
            ) from e

    @staticmethod
    def _parse(model: Type[ModelT], data: Any, endpoint: str) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise WeatherFetchError(
                f"{endpoint} response has an unexpected shape: {e.error_count()} error(s)",
                endpoint=endpoint,
            ) from e
