# src/aqi_dashboard/snapshot.py
"""Immutable snapshot of one WAQI feed response.

The feed payload (the envelope's ``data`` object) is parsed once into frozen
dataclasses with read-only mappings, so every derived view is computed from
the same untouched values.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from numbers import Real
from types import MappingProxyType
from typing import Any, Mapping, Optional

from .errors import ProtocolError

logger = logging.getLogger(__name__)

_EMPTY: Mapping = MappingProxyType({})


@dataclass(frozen=True)
class ForecastDay:
    day: str  # ISO date, e.g. "2024-05-01"
    min: float
    avg: float
    max: float


@dataclass(frozen=True)
class Attribution:
    name: str
    url: str


@dataclass(frozen=True)
class Location:
    name: str
    geo: Optional[tuple[float, float]] = None
    url: str = ""


@dataclass(frozen=True)
class ObservedAt:
    s: str = ""
    tz: str = ""
    iso: str = ""


@dataclass(frozen=True)
class AirQualitySnapshot:
    aqi: int
    dominant_pollutant: str
    measurements: Mapping[str, float]
    location: Location
    observed_at: ObservedAt
    forecast: Mapping[str, tuple[ForecastDay, ...]] = field(default_factory=lambda: _EMPTY)
    sources: tuple[Attribution, ...] = ()
    station_idx: Optional[int] = None

    @classmethod
    def from_payload(cls, data: Any) -> "AirQualitySnapshot":
        """
        Build a snapshot from the envelope's ``data`` object.

        Raises ProtocolError when the core fields (aqi, iaqi) are missing or
        malformed. Optional sections (forecast, attributions, city, time)
        degrade to empty values.
        """
        if not isinstance(data, dict):
            raise ProtocolError(f"WAQI data is not an object. type={type(data).__name__}")

        aqi = _parse_aqi(data.get("aqi"))

        iaqi = data.get("iaqi")
        if not isinstance(iaqi, dict):
            raise ProtocolError(f"WAQI data['iaqi'] is not an object. type={type(iaqi).__name__}")

        # Upstream spells it "dominentpol"; accept the corrected spelling too.
        dominant = data.get("dominentpol", data.get("dominantpol")) or ""
        if not isinstance(dominant, str):
            raise ProtocolError(f"WAQI dominentpol is not a string. type={type(dominant).__name__}")

        idx = data.get("idx")
        station_idx = idx if isinstance(idx, int) and not isinstance(idx, bool) else None

        return cls(
            aqi=aqi,
            dominant_pollutant=dominant,
            measurements=MappingProxyType(_parse_measurements(iaqi)),
            location=_parse_location(data.get("city")),
            observed_at=_parse_time(data.get("time")),
            forecast=MappingProxyType(_parse_forecast(data.get("forecast"))),
            sources=_parse_attributions(data.get("attributions")),
            station_idx=station_idx,
        )


def _as_number(value: Any) -> Optional[float]:
    """Finite float or None; NaN, inf and ints too large for a float are rejected."""
    if isinstance(value, bool) or not isinstance(value, (Real, str)):
        return None
    try:
        number = float(value)
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _parse_aqi(raw: Any) -> int:
    value = _as_number(raw)
    if value is None:
        # WAQI reports "-" for stations with no current reading
        raise ProtocolError(f"WAQI aqi is not numeric. value={raw!r}")
    return int(round(value))


def _parse_measurements(iaqi: dict) -> dict[str, float]:
    out: dict[str, float] = {}
    for key, entry in iaqi.items():
        raw = entry.get("v") if isinstance(entry, dict) else None
        value = _as_number(raw)
        if value is None:
            logger.warning("[snapshot] skipping iaqi[%s]: no numeric 'v' (got %r)", key, entry)
            continue
        out[str(key)] = value
    return out


def _parse_location(city: Any) -> Location:
    if not isinstance(city, dict):
        return Location(name="Unknown location")

    geo = None
    raw_geo = city.get("geo")
    if isinstance(raw_geo, (list, tuple)) and len(raw_geo) == 2:
        lat, lon = _as_number(raw_geo[0]), _as_number(raw_geo[1])
        if lat is not None and lon is not None:
            geo = (lat, lon)

    return Location(
        name=str(city.get("name") or "Unknown location"),
        geo=geo,
        url=str(city.get("url") or ""),
    )


def _parse_time(raw: Any) -> ObservedAt:
    if not isinstance(raw, dict):
        return ObservedAt()
    return ObservedAt(
        s=str(raw.get("s") or ""),
        tz=str(raw.get("tz") or ""),
        iso=str(raw.get("iso") or ""),
    )


def _parse_forecast(raw: Any) -> dict[str, tuple[ForecastDay, ...]]:
    if not isinstance(raw, dict):
        return {}
    daily = raw.get("daily")
    if not isinstance(daily, dict):
        return {}

    out: dict[str, tuple[ForecastDay, ...]] = {}
    for key, entries in daily.items():
        if not isinstance(entries, list):
            logger.warning("[snapshot] forecast[%s] is not a list; ignoring", key)
            continue

        days: list[ForecastDay] = []
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            day = entry.get("day")
            lo, avg, hi = (_as_number(entry.get(k)) for k in ("min", "avg", "max"))
            if not isinstance(day, str) or None in (lo, avg, hi):
                logger.warning("[snapshot] forecast[%s] dropping malformed entry %r", key, entry)
                continue
            days.append(ForecastDay(day=day, min=lo, avg=avg, max=hi))

        out[str(key)] = tuple(sorted(days, key=lambda d: d.day))
    return out


def _parse_attributions(raw: Any) -> tuple[Attribution, ...]:
    if not isinstance(raw, list):
        return ()
    return tuple(
        Attribution(name=str(a.get("name") or ""), url=str(a.get("url") or ""))
        for a in raw
        if isinstance(a, dict)
    )
