"""Exception hierarchy for the weather card service."""

from typing import Optional


class WeatherCardError(Exception):
    """Base exception for all weather card errors."""


class WeatherConfigError(WeatherCardError):
    """Invalid or missing configuration."""


class WeatherFetchError(WeatherCardError):
    """A data source request failed (network, non-2xx, malformed payload)."""

    def __init__(
        self,
        message: str,
        *,
        endpoint: str = "",
        status_code: Optional[int] = None,
    ):
        self.endpoint = endpoint
        self.status_code = status_code
        super().__init__(message)
