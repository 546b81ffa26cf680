# src/aqi_dashboard/view_model.py
"""Presentation-ready values derived from one AirQualitySnapshot.

Everything here is pure: ``assemble`` reads the snapshot and returns new frozen
objects; it never writes back to the snapshot.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

import pandas as pd

from .classification import AQIStatus, Category, classify_index, display_meta_for
from .config import DashboardConfig
from .snapshot import AirQualitySnapshot, Attribution, ForecastDay, Location

_HUMIDITY_KEY = "h"


@dataclass(frozen=True)
class MeasurementCard:
    key: str
    name: str
    unit: str
    value: float
    gauge_percent: Optional[float]  # None = no gauge for this metric
    is_dominant: bool = False


@dataclass(frozen=True)
class ForecastPoint:
    day: str
    min: float
    avg: float
    max: float
    weekday: str  # axis label, e.g. "Mon"
    date_label: str  # tooltip label, e.g. "Mon, May 06 2024"


@dataclass(frozen=True)
class ForecastSeries:
    key: str
    name: str
    points: tuple[ForecastPoint, ...]

    @property
    def is_empty(self) -> bool:
        return not self.points

    def to_frame(self) -> pd.DataFrame:
        """Chart-ready frame with columns day, weekday, date_label, min, avg, max."""
        cols = ["day", "weekday", "date_label", "min", "avg", "max"]
        if not self.points:
            return pd.DataFrame(columns=cols)
        return pd.DataFrame(
            [
                {
                    "day": p.day,
                    "weekday": p.weekday,
                    "date_label": p.date_label,
                    "min": p.min,
                    "avg": p.avg,
                    "max": p.max,
                }
                for p in self.points
            ],
            columns=cols,
        )


@dataclass(frozen=True)
class ViewModel:
    aqi: int
    status: AQIStatus
    scale_position: float
    dominant_pollutant: str
    dominant_label: str
    location: Location
    observed_label: str
    station_idx: Optional[int]
    pollutant_cards: tuple[MeasurementCard, ...]
    weather_cards: tuple[MeasurementCard, ...]
    forecast: tuple[ForecastSeries, ...]
    sources: tuple[Attribution, ...]


def gauge_percent(reading: float, cap: float) -> float:
    """Fill percentage of a gauge; clamps to [0, 100]."""
    if cap <= 0:
        raise ValueError(f"gauge cap must be > 0, got {cap}")
    if math.isnan(reading):
        return 0.0
    return max(min(reading / cap, 1.0), 0.0) * 100


def scale_position(aqi: float, cap: float = 500.0) -> float:
    """Marker position (percent) on the 0-500 AQI scale bar."""
    return gauge_percent(aqi, cap)


def is_dominant(key: str, snapshot: AirQualitySnapshot) -> bool:
    return key == snapshot.dominant_pollutant


def partition_measurements(
    measurements: Mapping[str, float],
) -> tuple[dict[str, float], dict[str, float]]:
    """Split readings into (pollutants, weather); unknown keys are pollutants."""
    pollutants: dict[str, float] = {}
    weather: dict[str, float] = {}
    for key, value in measurements.items():
        if display_meta_for(key).category is Category.WEATHER:
            weather[key] = value
        else:
            pollutants[key] = value
    return pollutants, weather


def _weekday_labels(day: str) -> tuple[str, str]:
    ts = pd.to_datetime(day, errors="coerce")
    if pd.isna(ts):
        return day, day
    return ts.strftime("%a"), ts.strftime("%a, %b %d %Y")


def forecast_series(snapshot: AirQualitySnapshot, key: str) -> ForecastSeries:
    """Forecast for one pollutant; missing keys yield an empty series."""
    days: Sequence[ForecastDay] = snapshot.forecast.get(key, ())
    points = []
    for d in days:
        weekday, date_label = _weekday_labels(d.day)
        points.append(
            ForecastPoint(day=d.day, min=d.min, avg=d.avg, max=d.max, weekday=weekday, date_label=date_label)
        )
    return ForecastSeries(key=key, name=display_meta_for(key).name, points=tuple(points))


def format_observed(snapshot: AirQualitySnapshot) -> str:
    """Station-local observation time, e.g. "2024-05-06 14:00 (+08:00)"."""
    observed = snapshot.observed_at
    ts = pd.to_datetime(observed.iso, errors="coerce") if observed.iso else pd.NaT
    if pd.isna(ts):
        return observed.s or "unknown"
    label = ts.strftime("%Y-%m-%d %H:%M")
    return f"{label} ({observed.tz})" if observed.tz else label


def assemble(
    snapshot: AirQualitySnapshot,
    series_keys: Optional[Sequence[str]] = None,
    config: Optional[DashboardConfig] = None,
) -> ViewModel:
    config = config or DashboardConfig()
    if series_keys is None:
        series_keys = config.forecast_series
    pollutants, weather = partition_measurements(snapshot.measurements)

    pollutant_cards = tuple(
        MeasurementCard(
            key=key,
            name=display_meta_for(key).name,
            unit=display_meta_for(key).unit,
            value=value,
            gauge_percent=gauge_percent(value, config.pollutant_gauge_cap),
            is_dominant=is_dominant(key, snapshot),
        )
        for key, value in pollutants.items()
    )

    weather_cards = tuple(
        MeasurementCard(
            key=key,
            name=display_meta_for(key).name,
            unit=display_meta_for(key).unit,
            value=value,
            gauge_percent=(
                gauge_percent(value, config.humidity_gauge_cap) if key == _HUMIDITY_KEY else None
            ),
        )
        for key, value in weather.items()
    )

    return ViewModel(
        aqi=snapshot.aqi,
        status=classify_index(snapshot.aqi),
        scale_position=scale_position(snapshot.aqi, config.aqi_scale_cap),
        dominant_pollutant=snapshot.dominant_pollutant,
        dominant_label=(
            display_meta_for(snapshot.dominant_pollutant).name if snapshot.dominant_pollutant else "n/a"
        ),
        location=snapshot.location,
        observed_label=format_observed(snapshot),
        station_idx=snapshot.station_idx,
        pollutant_cards=pollutant_cards,
        weather_cards=weather_cards,
        forecast=tuple(forecast_series(snapshot, key) for key in series_keys),
        sources=snapshot.sources,
    )
