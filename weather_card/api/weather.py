from fastapi import APIRouter, Depends, HTTPException, Query, Request
from typing import Optional
from weather_card.config import settings
from weather_card.core.air_quality import classify
from weather_card.core.card_manager import WeatherCard, card_manager
from weather_card.core.formatting import format_clock
from weather_card.core.weather_api import WeatherSource
from weather_card.models.weather import (
    Coordinate,
    DetailedWeatherCard,
    DetailedWeatherResponse,
    Ready,
    UnifiedWeatherRecord,
)

router = APIRouter(prefix="/weather", tags=["weather"])


def get_weather_source(request: Request) -> WeatherSource:
    """The source configured at startup"""
    source = getattr(request.app.state, "weather_source", None)
    if source is None:
        raise HTTPException(status_code=503, detail="Weather source is not configured")
    return source


def get_session_id(request: Request) -> str:
    return getattr(request.state, "session_id", None) or "anonymous"


def icon_url(icon: str) -> Optional[str]:
    """Image URL for an icon code, None when there is no icon"""
    if not icon:
        return None
    return settings.icon_url_template.format(icon=icon)


def render_card(location: str, record: UnifiedWeatherRecord) -> DetailedWeatherCard:
    """Turn a unified record into the display-ready card"""
    return DetailedWeatherCard(
        location=location,
        temp=record.temp,
        feels_like=record.feels_like,
        humidity=record.humidity,
        pressure=record.pressure,
        wind_speed=record.wind_speed,
        description=record.description,
        icon=record.icon,
        icon_url=icon_url(record.icon),
        aqi=record.aqi,
        aqi_label=classify(record.aqi),
        pm25=record.pm25,
        pm10=record.pm10,
        sunrise=format_clock(record.sunrise),
        sunset=format_clock(record.sunset),
    )


def build_response(card: WeatherCard) -> DetailedWeatherResponse:
    state = card.aggregator.state
    return DetailedWeatherResponse(
        location=card.location,
        coordinate=card.aggregator.coordinate,
        state=state,
        card=render_card(card.location, state.record) if isinstance(state, Ready) else None,
    )


async def require_card(session_id: str, location: str) -> WeatherCard:
    card = await card_manager.get_card(session_id, location)
    if not card:
        raise HTTPException(status_code=404, detail=f"No card for '{location}'")
    return card


@router.get("/detail", response_model=DetailedWeatherResponse)
async def get_detailed_weather(
    location: str = Query(min_length=1),
    lat: float = Query(ge=-90, le=90),
    lon: float = Query(ge=-180, le=180),
    wait: bool = True,
    session_id: str = Depends(get_session_id),
    source: WeatherSource = Depends(get_weather_source),
):
    """Detailed weather card for a location, refetched only when the coordinate changes"""
    card = await card_manager.get_or_create_card(session_id, location, source)
    card.aggregator.update(Coordinate(lat=lat, lon=lon))

    if wait:
        await card.aggregator.wait()

    return build_response(card)


@router.get("/detail/state", response_model=DetailedWeatherResponse)
async def get_card_state(
    location: str = Query(min_length=1),
    session_id: str = Depends(get_session_id),
):
    """Current state of an existing card, without triggering a fetch"""
    card = await require_card(session_id, location)
    return build_response(card)


@router.post("/detail/refresh", response_model=DetailedWeatherResponse)
async def refresh_card(
    location: str = Query(min_length=1),
    session_id: str = Depends(get_session_id),
):
    """Force a new fetch cycle for an existing card"""
    card = await require_card(session_id, location)
    card.aggregator.refresh()
    await card.aggregator.wait()
    return build_response(card)


@router.delete("/detail")
async def delete_card(
    location: str = Query(min_length=1),
    session_id: str = Depends(get_session_id),
):
    """Drop a card"""
    if not await card_manager.destroy_card(session_id, location):
        raise HTTPException(status_code=404, detail=f"No card for '{location}'")
    return {"message": "Card removed", "location": location}
