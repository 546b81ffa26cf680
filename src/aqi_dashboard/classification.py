# src/aqi_dashboard/classification.py
from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping, NamedTuple


class AQITier(str, Enum):
    GOOD = "good"
    MODERATE = "moderate"
    UNHEALTHY_FOR_SENSITIVE = "unhealthy_for_sensitive"
    UNHEALTHY = "unhealthy"
    VERY_UNHEALTHY = "very_unhealthy"
    HAZARDOUS = "hazardous"


class Category(str, Enum):
    POLLUTANT = "pollutant"
    WEATHER = "weather"


class AQIStatus(NamedTuple):
    """Display status for an AQI value."""
    tier: AQITier
    label: str
    description: str
    color: str


class PollutantDisplayMeta(NamedTuple):
    """Display metadata for one measurement key."""
    name: str
    unit: str
    category: Category


# (inclusive upper bound, status); values above the last bound are hazardous
_BREAKPOINTS: tuple[tuple[float, AQIStatus], ...] = (
    (50, AQIStatus(AQITier.GOOD, "Good", "Air quality is satisfactory", "#22c55e")),
    (100, AQIStatus(AQITier.MODERATE, "Moderate", "Acceptable for most people", "#eab308")),
    (
        150,
        AQIStatus(
            AQITier.UNHEALTHY_FOR_SENSITIVE,
            "Unhealthy for Sensitive Groups",
            "Sensitive groups may experience effects",
            "#f97316",
        ),
    ),
    (200, AQIStatus(AQITier.UNHEALTHY, "Unhealthy", "Everyone may experience health effects", "#ef4444")),
    (300, AQIStatus(AQITier.VERY_UNHEALTHY, "Very Unhealthy", "Health alert: everyone at risk", "#9333ea")),
)

_HAZARDOUS = AQIStatus(
    AQITier.HAZARDOUS,
    "Hazardous",
    "Emergency conditions: entire population at risk",
    "#7f1d1d",
)

_P = Category.POLLUTANT
_W = Category.WEATHER

POLLUTANT_META: Mapping[str, PollutantDisplayMeta] = MappingProxyType({
    # Pollutants
    "pm25": PollutantDisplayMeta("PM2.5", "µg/m³", _P),
    "pm10": PollutantDisplayMeta("PM10", "µg/m³", _P),
    "o3": PollutantDisplayMeta("Ozone (O3)", "µg/m³", _P),
    "no2": PollutantDisplayMeta("Nitrogen Dioxide", "µg/m³", _P),
    "so2": PollutantDisplayMeta("Sulfur Dioxide", "µg/m³", _P),
    "co": PollutantDisplayMeta("Carbon Monoxide", "mg/m³", _P),

    # Weather
    "h": PollutantDisplayMeta("Humidity", "%", _W),
    "t": PollutantDisplayMeta("Temperature", "°C", _W),
    "p": PollutantDisplayMeta("Pressure", "hPa", _W),
    "w": PollutantDisplayMeta("Wind Speed", "m/s", _W),
    "wg": PollutantDisplayMeta("Wind Gust", "m/s", _W),
    "dew": PollutantDisplayMeta("Dew Point", "°C", _W),
    "r": PollutantDisplayMeta("Rain", "mm", _W),
})


def classify_index(aqi: float) -> AQIStatus:
    """
    Map an AQI value to its status tier.

    Bounds are inclusive (50 is Good, 51 is Moderate). Negative values fall in
    the first tier and anything above 300 is Hazardous. Callers must reject
    non-numeric input before getting here.
    """
    for upper, status in _BREAKPOINTS:
        if aqi <= upper:
            return status
    return _HAZARDOUS


def display_meta_for(key: str) -> PollutantDisplayMeta:
    """Look up display metadata; unknown keys render as an uppercased pollutant."""
    meta = POLLUTANT_META.get(key)
    if meta is None:
        return PollutantDisplayMeta(key.upper(), "", Category.POLLUTANT)
    return meta


def is_weather_key(key: str) -> bool:
    return display_meta_for(key).category is Category.WEATHER
