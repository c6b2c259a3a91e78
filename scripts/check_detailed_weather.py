"""
check_detailed_weather.py
Runs one live aggregation cycle against OpenWeather and prints the card.
Run:
    OPENWEATHER_API_KEY=... python scripts/check_detailed_weather.py
"""

import asyncio
import json
import logging

from weather_card.api.weather import render_card
from weather_card.core.aggregator import WeatherAggregator
from weather_card.core.weather_api import OpenWeatherClient
from weather_card.models.weather import Coordinate, Ready

# ------------------ PARAMETERS ------------------
LOCATION = "Seoul"
LAT = 37.5665
LON = 126.9780
# ------------------------------------------

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s %(levelname)s - %(message)s"
)


async def main():
    async with OpenWeatherClient() as client:
        aggregator = WeatherAggregator(LOCATION, client)
        aggregator.subscribe(lambda state: logging.info(f"State -> {state.status}"))
        aggregator.update(Coordinate(lat=LAT, lon=LON))
        state = await aggregator.wait()

    if isinstance(state, Ready):
        card = render_card(LOCATION, state.record)
        print(json.dumps(card.model_dump(), indent=2, ensure_ascii=False))
    else:
        print(json.dumps(state.model_dump(), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    asyncio.run(main())
