"""Shared fixtures: raw OpenWeather payloads and an in-memory weather source."""

import asyncio
from typing import Any, Dict, List, Optional, Tuple

import pytest

from weather_card.core.exceptions import WeatherFetchError
from weather_card.models.weather import RawAirQualityReading, RawWeatherReading


def weather_payload(
    temp: float = 21.4,
    feels_like: float = 20.6,
    humidity: int = 55,
    pressure: int = 1012,
    wind_speed: float = 3.6,
    conditions: Optional[List[Dict[str, Any]]] = None,
    sunrise: int = 1700000000,
    sunset: int = 1700030000,
) -> Dict[str, Any]:
    """A ``/weather`` response body as OpenWeather sends it."""
    if conditions is None:
        conditions = [
            {"id": 800, "main": "Clear", "description": "clear sky", "icon": "01d"}
        ]
    return {
        "coord": {"lon": 127.0, "lat": 37.5},
        "weather": conditions,
        "main": {
            "temp": temp,
            "feels_like": feels_like,
            "temp_min": temp - 1,
            "temp_max": temp + 1,
            "pressure": pressure,
            "humidity": humidity,
        },
        "wind": {"speed": wind_speed, "deg": 270},
        "sys": {"country": "KR", "sunrise": sunrise, "sunset": sunset},
        "name": "Seoul",
    }


def air_quality_payload(aqi: int = 2, pm2_5: float = 12.3, pm10: float = 20.1) -> Dict[str, Any]:
    """One entry of an ``/air_pollution`` response ``list``."""
    return {
        "dt": 1700000000,
        "main": {"aqi": aqi},
        "components": {
            "co": 201.94,
            "no": 0.02,
            "no2": 0.77,
            "o3": 68.66,
            "so2": 0.64,
            "pm2_5": pm2_5,
            "pm10": pm10,
            "nh3": 0.12,
        },
    }


class FakeWeatherSource:
    """In-memory ``WeatherSource``.

    Readings can be set per coordinate; ``hold`` returns an event that blocks
    both requests for that coordinate until it is set.
    """

    def __init__(
        self,
        weather: Any = None,
        air_quality: Any = None,
        weather_error: Optional[Exception] = None,
        air_quality_error: Optional[Exception] = None,
    ):
        self.weather = weather or RawWeatherReading.model_validate(weather_payload())
        self.air_quality = air_quality or RawAirQualityReading.model_validate(
            air_quality_payload()
        )
        self.weather_error = weather_error
        self.air_quality_error = air_quality_error
        self.weather_by_coordinate: Dict[Tuple[float, float], Any] = {}
        self.air_quality_by_coordinate: Dict[Tuple[float, float], Any] = {}
        self.calls: List[Tuple[str, float, float]] = []
        self._gates: Dict[Tuple[float, float], asyncio.Event] = {}

    def hold(self, lat: float, lon: float) -> asyncio.Event:
        gate = asyncio.Event()
        self._gates[(lat, lon)] = gate
        return gate

    def count(self, kind: str) -> int:
        return sum(1 for call in self.calls if call[0] == kind)

    async def fetch_weather(self, lat: float, lon: float):
        self.calls.append(("weather", lat, lon))
        await self._wait_gate(lat, lon)
        if self.weather_error:
            raise self.weather_error
        return self.weather_by_coordinate.get((lat, lon), self.weather)

    async def fetch_air_quality(self, lat: float, lon: float):
        self.calls.append(("air_quality", lat, lon))
        await self._wait_gate(lat, lon)
        if self.air_quality_error:
            raise self.air_quality_error
        return self.air_quality_by_coordinate.get((lat, lon), self.air_quality)

    async def _wait_gate(self, lat: float, lon: float):
        gate = self._gates.get((lat, lon))
        if gate is not None:
            await gate.wait()


@pytest.fixture
def make_weather():
    """Factory for validated weather readings."""

    def factory(**kwargs) -> RawWeatherReading:
        return RawWeatherReading.model_validate(weather_payload(**kwargs))

    return factory


@pytest.fixture
def make_air_quality():
    """Factory for validated air quality readings."""

    def factory(**kwargs) -> RawAirQualityReading:
        return RawAirQualityReading.model_validate(air_quality_payload(**kwargs))

    return factory


@pytest.fixture
def raw_weather_payload():
    return weather_payload()


@pytest.fixture
def raw_air_quality_payload():
    return air_quality_payload()


@pytest.fixture
def fake_source():
    return FakeWeatherSource()


@pytest.fixture
def failing_air_quality_source():
    return FakeWeatherSource(
        air_quality_error=WeatherFetchError("connection reset", endpoint="air_pollution")
    )
