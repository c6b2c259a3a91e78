"""Tests for AQI classification."""

import pytest
from weather_card.core.air_quality import AQI_LABELS, UNKNOWN_AQI_LABEL, classify


@pytest.mark.parametrize(
    "aqi, label",
    [(1, "Good"), (2, "Fair"), (3, "Moderate"), (4, "Poor"), (5, "Very Poor")],
)
def test_known_codes(aqi, label):
    """Each code on the 1-5 scale has its own label."""
    assert classify(aqi) == label


@pytest.mark.parametrize("aqi", [0, 6, -1, 100, None, "2", 2.0, True])
def test_out_of_range_falls_back_to_unknown(aqi):
    """Anything outside the scale is labelled Unknown instead of raising."""
    assert classify(aqi) == UNKNOWN_AQI_LABEL


def test_labels_are_stable_and_distinct():
    """Repeated calls give the same non-empty label."""
    first = [classify(code) for code in range(1, 6)]
    second = [classify(code) for code in range(1, 6)]

    assert first == second
    assert all(first)
    assert len(set(first)) == len(AQI_LABELS)
