"""Aggregation of current weather and air quality into one card record.

A ``WeatherAggregator`` is bound to one location. Every coordinate change starts
a new fetch cycle: both sources are queried concurrently, joined, and merged into
a ``UnifiedWeatherRecord``. Each cycle carries a generation number and only the
newest generation may commit its result, so a slow stale cycle can never
overwrite a newer one.
"""

import asyncio
import logging
import math
from typing import Any, Callable, List, Optional, Type, TypeVar

from pydantic import BaseModel

from weather_card.config import settings
from weather_card.core.weather_api import WeatherSource
from weather_card.models.weather import (
    Coordinate,
    Failed,
    FetchState,
    Loading,
    RawAirQualityReading,
    RawWeatherReading,
    Ready,
    UnifiedWeatherRecord,
)

logger = logging.getLogger(__name__)

Listener = Callable[[FetchState], None]
ModelT = TypeVar("ModelT", bound=BaseModel)

# Used when the weather payload carries no condition entry
DEFAULT_DESCRIPTION = "Unknown"
DEFAULT_ICON = ""


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards +inf (18.5 -> 19, -2.5 -> -2)."""
    return math.floor(value + 0.5)


def _coerce(model: Type[ModelT], value: Any) -> ModelT:
    if isinstance(value, model):
        return value
    return model.model_validate(value)


def build_record(
    weather: RawWeatherReading, air_quality: RawAirQualityReading
) -> UnifiedWeatherRecord:
    """Merge both readings into a new record."""
    condition = weather.weather[0] if weather.weather else None

    return UnifiedWeatherRecord(
        temp=round_half_up(weather.main.temp),
        feels_like=round_half_up(weather.main.feels_like),
        humidity=weather.main.humidity,
        wind_speed=weather.wind.speed,
        pressure=weather.main.pressure,
        description=condition.description if condition else DEFAULT_DESCRIPTION,
        icon=condition.icon if condition else DEFAULT_ICON,
        sunrise=weather.sys.sunrise,
        sunset=weather.sys.sunset,
        aqi=air_quality.main.aqi,
        pm25=air_quality.components.pm2_5,
        pm10=air_quality.components.pm10,
    )


class WeatherAggregator:
    """Fetches and merges weather data for one location.

    Must be driven from a running event loop: ``update`` and ``refresh``
    schedule the cycle as an ``asyncio.Task``.
    """

    def __init__(
        self,
        location: str,
        source: WeatherSource,
        *,
        failure_message: Optional[str] = None,
    ):
        self.location = location
        self.source = source
        self.failure_message = failure_message or settings.fetch_error_message
        self._state: FetchState = Loading()
        self._coordinate: Optional[Coordinate] = None
        self._generation = 0
        self._task: Optional[asyncio.Task] = None
        self._listeners: List[Listener] = []

    @property
    def state(self) -> FetchState:
        return self._state

    @property
    def coordinate(self) -> Optional[Coordinate]:
        return self._coordinate

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_loading(self) -> bool:
        return isinstance(self._state, Loading)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a callback for every state change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def update(self, coordinate: Coordinate) -> bool:
        """Start a cycle if ``coordinate`` differs by value from the current one.

        Returns True when a new cycle was started.
        """
        if self._task is not None and coordinate == self._coordinate:
            return False
        self.refresh(coordinate)
        return True

    def refresh(self, coordinate: Optional[Coordinate] = None) -> asyncio.Task:
        """Unconditionally start a new cycle, superseding any cycle in flight."""
        coordinate = coordinate or self._coordinate
        if coordinate is None:
            raise ValueError(f"No coordinate to fetch for {self.location}")

        if self._task is not None and not self._task.done():
            logger.info(
                f"Superseding cycle {self._generation} for {self.location}"
            )
            self._task.cancel()

        self._generation += 1
        self._coordinate = coordinate
        self._set_state(Loading())
        self._task = asyncio.create_task(self._run_cycle(self._generation, coordinate))
        return self._task

    async def wait(self) -> FetchState:
        """Wait for the newest cycle to settle and return the resulting state.

        Cancelling the caller does not cancel the cycle itself.
        """
        while self._task is not None:
            task = self._task
            try:
                await asyncio.shield(task)
            except asyncio.CancelledError:
                # Superseded cycles are cancelled; follow the newer one
                if not task.cancelled() or task is self._task:
                    raise
            if task is self._task:
                break
        return self._state

    async def close(self):
        """Cancel any cycle in flight."""
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._listeners.clear()

    async def _run_cycle(self, generation: int, coordinate: Coordinate):
        logger.info(
            f"Fetching detailed weather for {self.location} "
            f"({coordinate.lat}, {coordinate.lon}), cycle {generation}"
        )

        try:
            weather, air_quality = await asyncio.gather(
                self.source.fetch_weather(coordinate.lat, coordinate.lon),
                self.source.fetch_air_quality(coordinate.lat, coordinate.lon),
                return_exceptions=True,
            )
        except Exception as e:
            logger.error(f"Could not start requests for {self.location}: {e}", exc_info=True)
            self._commit(generation, Failed(message=self.failure_message))
            return

        failed = False
        for name, result in (("Weather", weather), ("Air quality", air_quality)):
            if isinstance(result, BaseException):
                failed = True
                logger.error(
                    f"{name} request failed for {self.location}: {result}",
                    exc_info=result,
                )
        if failed:
            self._commit(generation, Failed(message=self.failure_message))
            return

        try:
            record = build_record(
                _coerce(RawWeatherReading, weather),
                _coerce(RawAirQualityReading, air_quality),
            )
        except Exception as e:
            logger.error(
                f"Could not normalize weather data for {self.location}: {e}",
                exc_info=True,
            )
            self._commit(generation, Failed(message=self.failure_message))
            return

        self._commit(generation, Ready(record=record))

    def _commit(self, generation: int, state: FetchState) -> bool:
        if generation != self._generation:
            logger.debug(
                f"Discarding stale cycle {generation} for {self.location} "
                f"(current is {self._generation})"
            )
            return False

        logger.info(f"Cycle {generation} for {self.location} finished: {state.status}")
        self._set_state(state)
        return True

    def _set_state(self, state: FetchState):
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                logger.error(f"State listener failed for {self.location}: {e}")
