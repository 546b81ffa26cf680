"""Shared fixtures for the air quality dashboard tests.

The envelope mirrors a real ``feed/here`` response from WAQI, including the
upstream ``dominentpol`` spelling.
"""

import copy
import json

import pytest
import requests

from src.aqi_dashboard.config import DashboardConfig
from src.aqi_dashboard.snapshot import AirQualitySnapshot
from src.aqi_dashboard.waqi import WAQIClient

TEST_TOKEN = "test-token-0123456789"

WAQI_OK_ENVELOPE = {
    "status": "ok",
    "data": {
        "aqi": 87,
        "idx": 1437,
        "attributions": [
            {"url": "http://www.semc.gov.cn/", "name": "Shanghai Environment Monitoring Center"},
            {"url": "https://waqi.info/", "name": "World Air Quality Index Project"},
        ],
        "city": {
            "geo": [31.2047372, 121.4489017],
            "name": "Shanghai (上海)",
            "url": "https://aqicn.org/city/shanghai",
            "location": "",
        },
        "dominentpol": "pm25",
        "iaqi": {
            "co": {"v": 6.4},
            "h": {"v": 68},
            "no2": {"v": 21.1},
            "o3": {"v": 30.5},
            "p": {"v": 1012},
            "pm10": {"v": 46},
            "pm25": {"v": 87},
            "so2": {"v": 3.6},
            "t": {"v": -2.5},
            "w": {"v": 3.1},
        },
        "time": {
            "s": "2024-05-06 14:00:00",
            "tz": "+08:00",
            "v": 1714996800,
            "iso": "2024-05-06T14:00:00+08:00",
        },
        "forecast": {
            "daily": {
                "o3": [
                    {"avg": 22, "day": "2024-05-06", "max": 35, "min": 9},
                    {"avg": 25, "day": "2024-05-07", "max": 40, "min": 11},
                ],
                "pm10": [
                    {"avg": 40, "day": "2024-05-06", "max": 55, "min": 28},
                    {"avg": 38, "day": "2024-05-07", "max": 49, "min": 30},
                    {"avg": 52, "day": "2024-05-08", "max": 70, "min": 33},
                ],
                "pm25": [
                    # Deliberately out of order; the parser sorts by day.
                    {"avg": 91, "day": "2024-05-08", "max": 120, "min": 70},
                    {"avg": 80, "day": "2024-05-06", "max": 98, "min": 61},
                    {"avg": 76, "day": "2024-05-07", "max": 90, "min": 58},
                ],
                "uvi": [],
            }
        },
        "debug": {"sync": "2024-05-06T15:20:41+09:00"},
    },
}

WAQI_ERROR_ENVELOPE = {"status": "error", "data": "Invalid key"}


@pytest.fixture
def ok_envelope():
    """Fresh deep copy of a successful feed envelope."""
    return copy.deepcopy(WAQI_OK_ENVELOPE)


@pytest.fixture
def error_envelope():
    return copy.deepcopy(WAQI_ERROR_ENVELOPE)


@pytest.fixture
def snapshot(ok_envelope):
    return AirQualitySnapshot.from_payload(ok_envelope["data"])


def _build_response(status_code=200, body=None, text=None):
    resp = requests.Response()
    resp.status_code = status_code
    raw = text if text is not None else json.dumps(body)
    resp._content = raw.encode("utf-8")
    resp.encoding = "utf-8"
    resp.url = "https://api.waqi.info/feed/here/"
    return resp


@pytest.fixture
def make_response():
    """Factory for real requests.Response objects that never touch the network."""
    return _build_response


@pytest.fixture
def fake_session(monkeypatch):
    """
    requests.Session whose send() returns (or raises) a queued outcome.

    Usage:
        fake_session.outcomes.append(make_response(body=...))
    """
    session = requests.Session()
    session.outcomes = []
    session.sent = []

    def _send(prepared, **kwargs):
        session.sent.append((prepared, kwargs))
        outcome = session.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr(session, "send", _send)
    return session


@pytest.fixture
def token():
    return TEST_TOKEN


@pytest.fixture
def client(fake_session):
    """WAQIClient wired to the fake session."""
    return WAQIClient(DashboardConfig(), token=TEST_TOKEN, session=fake_session)
