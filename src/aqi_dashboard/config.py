from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import find_dotenv, load_dotenv

logger = logging.getLogger(__name__)

TOKEN_ENV_VAR = "WAQI_TOKEN"


@dataclass(frozen=True)
class DashboardConfig:
    # Upstream feed
    feed_base_url: str = "https://api.waqi.info/feed"
    station: str = "here"  # "here" = geolocated from caller IP
    request_timeout: int = 30
    transport_retries: int = 0
    retry_statuses: Tuple[int, ...] = (429, 500, 502, 503, 504)

    # Gauges
    pollutant_gauge_cap: float = 200.0
    humidity_gauge_cap: float = 100.0
    aqi_scale_cap: float = 500.0

    # Forecast charts
    forecast_series: Tuple[str, ...] = ("pm25", "pm10")

    # Presentation
    page_title: str = "Air Quality Dashboard"

    def feed_url(self, station: Optional[str] = None) -> str:
        station = (station or self.station).strip("/")
        return f"{self.feed_base_url.rstrip('/')}/{station}/"


def _load_env_once() -> Optional[str]:
    dotenv_path = find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path, override=False)
        logger.debug("Loaded .env via find_dotenv: %s", dotenv_path)
        return dotenv_path
    return None


def load_waqi_token(token: Optional[str] = None) -> str:
    """
    Resolve the WAQI access token.

    Explicit argument wins, then WAQI_TOKEN from the environment or a .env file.
    """
    if token:
        return token

    loaded_env = _load_env_once()
    token = os.getenv(TOKEN_ENV_VAR)
    if not token:
        raise EnvironmentError(
            f"{TOKEN_ENV_VAR} is missing. Add it to your environment or .env file. "
            f"Loaded .env path: {loaded_env}"
        )
    return token


def mask_token(token: str) -> str:
    return token[:4] + "..." + token[-4:] if len(token) >= 8 else "***"
