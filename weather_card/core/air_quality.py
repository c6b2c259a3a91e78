"""Air quality index classification."""

from typing import Any

# OpenWeather air pollution scale (1 = best, 5 = worst)
AQI_LABELS = {
    1: "Good",
    2: "Fair",
    3: "Moderate",
    4: "Poor",
    5: "Very Poor",
}

UNKNOWN_AQI_LABEL = "Unknown"


def classify(aqi: Any) -> str:
    """Map an AQI category code to its display label.

    Codes outside 1-5 (and non-integers) map to ``"Unknown"``; this never raises.
    """
    if isinstance(aqi, bool) or not isinstance(aqi, int):
        return UNKNOWN_AQI_LABEL
    return AQI_LABELS.get(aqi, UNKNOWN_AQI_LABEL)
