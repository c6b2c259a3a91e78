"""Tests for the OpenWeather client, with HTTP mocked by httpx.MockTransport."""

import httpx
import pytest
from weather_card.config import settings
from weather_card.core.exceptions import WeatherConfigError, WeatherFetchError
from weather_card.core.weather_api import OpenWeatherClient

BASE_URL = "https://api.test/data/2.5"


def make_client(handler) -> OpenWeatherClient:
    return OpenWeatherClient(
        api_key="test-key",
        base_url=BASE_URL,
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


@pytest.mark.asyncio
async def test_fetch_weather_parses_payload(raw_weather_payload):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=raw_weather_payload)

    client = make_client(handler)
    reading = await client.fetch_weather(37.5, 127.0)

    assert reading.main.temp == 21.4
    assert reading.weather[0].description == "clear sky"
    request = seen[0]
    assert request.url.path == "/data/2.5/weather"
    assert request.url.params["lat"] == "37.5"
    assert request.url.params["lon"] == "127.0"
    assert request.url.params["appid"] == "test-key"
    assert request.url.params["units"] == "metric"


@pytest.mark.asyncio
async def test_fetch_air_quality_takes_first_entry(raw_air_quality_payload):
    later = dict(raw_air_quality_payload, main={"aqi": 5})

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/data/2.5/air_pollution"
        assert "units" not in request.url.params
        return httpx.Response(
            200,
            json={"coord": {"lon": 127.0, "lat": 37.5}, "list": [raw_air_quality_payload, later]},
        )

    reading = await make_client(handler).fetch_air_quality(37.5, 127.0)

    assert reading.main.aqi == 2
    assert reading.components.pm10 == 20.1


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{"list": []}, {"coord": {}}, []])
async def test_empty_air_quality_response(body):
    client = make_client(lambda request: httpx.Response(200, json=body))

    with pytest.raises(WeatherFetchError) as exc_info:
        await client.fetch_air_quality(37.5, 127.0)
    assert exc_info.value.endpoint == "air_pollution"


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [401, 404, 429, 500])
async def test_http_error_status(status_code):
    client = make_client(
        lambda request: httpx.Response(status_code, json={"cod": status_code, "message": "nope"})
    )

    with pytest.raises(WeatherFetchError) as exc_info:
        await client.fetch_weather(37.5, 127.0)
    assert exc_info.value.status_code == status_code
    assert exc_info.value.endpoint == "weather"


@pytest.mark.asyncio
async def test_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(WeatherFetchError) as exc_info:
        await make_client(handler).fetch_weather(37.5, 127.0)
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
    assert "test-key" not in str(exc_info.value)


@pytest.mark.asyncio
async def test_invalid_json():
    client = make_client(lambda request: httpx.Response(200, content=b"<html>oops</html>"))

    with pytest.raises(WeatherFetchError, match="invalid JSON"):
        await client.fetch_weather(37.5, 127.0)


@pytest.mark.asyncio
async def test_unexpected_shape(raw_weather_payload):
    del raw_weather_payload["sys"]
    client = make_client(lambda request: httpx.Response(200, json=raw_weather_payload))

    with pytest.raises(WeatherFetchError, match="unexpected shape"):
        await client.fetch_weather(37.5, 127.0)


def test_missing_api_key(monkeypatch):
    monkeypatch.setattr(settings, "openweather_api_key", None)
    with pytest.raises(WeatherConfigError):
        OpenWeatherClient()


@pytest.mark.asyncio
async def test_aclose_leaves_injected_client_open(raw_weather_payload):
    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=raw_weather_payload))
    )

    async with OpenWeatherClient(api_key="test-key", client=http_client):
        pass

    assert not http_client.is_closed
    await http_client.aclose()


@pytest.mark.asyncio
async def test_aclose_closes_owned_client():
    client = OpenWeatherClient(api_key="test-key")
    await client.aclose()
    assert client._client.is_closed
