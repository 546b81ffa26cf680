# src/aqi_dashboard/waqi.py
from __future__ import annotations

import logging
import time
from typing import Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import DashboardConfig, load_waqi_token, mask_token
from .errors import FeedHTTPError, ProtocolError, SemanticError, TransportError
from .snapshot import AirQualitySnapshot

logger = logging.getLogger(__name__)


def _sanitize_url(url: str) -> str:
    parts = urlsplit(url)
    q = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k.lower() != "token"]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(q), parts.fragment))


class WAQIClient:
    """
    Fetch the WAQI station feed and parse it into an AirQualitySnapshot.

    Every failure is raised as a FeedError subclass:
    - TransportError: connection/DNS/timeout
    - FeedHTTPError: non-2xx status
    - ProtocolError: invalid JSON or unexpected envelope shape
    - SemanticError: envelope status != "ok"

    The token is never logged; request URLs are sanitized first.
    """

    def __init__(
        self,
        config: Optional[DashboardConfig] = None,
        token: Optional[str] = None,
        *,
        session: Optional[requests.Session] = None,
    ):
        self.config = config or DashboardConfig()
        self.token = load_waqi_token(token)
        self.session = session or self._create_session()
        logger.debug("[waqi] token loaded (masked): %s", mask_token(self.token))

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        retries = Retry(
            total=self.config.transport_retries,
            backoff_factor=0.5,
            status_forcelist=self.config.retry_statuses,
            allowed_methods=frozenset(["GET"]),
            raise_on_status=False,
        )
        session.mount("https://", HTTPAdapter(max_retries=retries))
        return session

    def fetch_envelope(self, station: Optional[str] = None) -> dict:
        """GET the feed and return the decoded JSON envelope (status not checked)."""
        req = requests.Request(
            "GET",
            self.config.feed_url(station),
            params={"token": self.token},
        )
        prepared = self.session.prepare_request(req)
        safe_url = _sanitize_url(prepared.url)

        start_ts = time.monotonic()
        try:
            resp = self.session.send(prepared, timeout=self.config.request_timeout)
        except (requests.ConnectionError, requests.Timeout) as e:
            elapsed = time.monotonic() - start_ts
            logger.warning(
                "[waqi][REQUEST_FAIL] elapsed=%.2fs error=%s url=%s",
                elapsed, type(e).__name__, safe_url,
            )
            raise TransportError(f"{type(e).__name__} while requesting {safe_url}") from e
        except requests.RequestException as e:
            raise TransportError(f"{type(e).__name__} while requesting {safe_url}") from e

        elapsed = time.monotonic() - start_ts
        logger.info("[waqi][REQUEST_OK] status=%s elapsed=%.2fs url=%s", resp.status_code, elapsed, safe_url)

        if not 200 <= resp.status_code < 300:
            raise FeedHTTPError(
                f"WAQI returned HTTP {resp.status_code}. url={safe_url}",
                status_code=resp.status_code,
            )

        try:
            payload = resp.json()
        except ValueError as e:
            content_preview = resp.text[:200] if resp.text else "(empty)"
            raise ProtocolError(
                f"[waqi] Invalid JSON response. status={resp.status_code} "
                f"content_preview={content_preview}"
            ) from e

        if not isinstance(payload, dict):
            raise ProtocolError(f"[waqi] envelope is not an object. type={type(payload).__name__}")
        return payload

    def fetch_snapshot(self, station: Optional[str] = None) -> AirQualitySnapshot:
        envelope = self.fetch_envelope(station)

        status = envelope.get("status")
        if status != "ok":
            # On error WAQI puts a reason string in "data" (e.g. "Invalid key")
            reason = envelope.get("data")
            raise SemanticError(
                f"WAQI status={status!r} reason={reason!r}",
                status=str(status),
                reason=str(reason),
            )

        if "data" not in envelope:
            raise ProtocolError(f"WAQI envelope missing 'data'. keys={list(envelope.keys())[:25]}")

        return AirQualitySnapshot.from_payload(envelope["data"])
