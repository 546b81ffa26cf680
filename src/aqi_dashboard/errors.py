"""Error taxonomy for the WAQI feed.

Every failure to obtain a usable snapshot is a FeedError. The load state
machine collapses all of them into one user-facing message, so the text
carried here is for diagnostics only.
"""

from __future__ import annotations

from typing import Optional


class FeedError(Exception):
    """Base class for anything that prevents a snapshot from loading."""


class TransportError(FeedError):
    """Network unreachable, DNS failure, connection reset or timeout."""


class FeedHTTPError(FeedError):
    """Upstream answered with a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ProtocolError(FeedError):
    """Body is not JSON, or the envelope/snapshot has an unexpected shape."""


class SemanticError(FeedError):
    """Envelope parsed but its status is not "ok"."""

    def __init__(self, message: str, status: Optional[str] = None, reason: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.reason = reason
