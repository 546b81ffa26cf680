# src/aqi_dashboard/load_state.py
"""Load lifecycle for one feed request.

State flows NOT_STARTED -> LOADING -> READY | FAILED and is terminal once
settled. Each load takes a new generation number; results from a generation
that is no longer the latest are discarded, so a slow, superseded request can
never overwrite a newer state.

Usage:
    controller = LoadController()
    for state in controller.load(client.fetch_snapshot):
        render(state)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, Optional, Union

from .errors import FeedError
from .snapshot import AirQualitySnapshot

logger = logging.getLogger(__name__)

USER_FAILURE_MESSAGE = "Failed to load air quality data. Please try again."


class LoadPhase(str, Enum):
    NOT_STARTED = "not_started"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class LoadState:
    phase: LoadPhase
    generation: int = 0
    snapshot: Optional[AirQualitySnapshot] = None
    message: Optional[str] = None

    @property
    def is_settled(self) -> bool:
        return self.phase in (LoadPhase.READY, LoadPhase.FAILED)


NOT_STARTED = LoadState(LoadPhase.NOT_STARTED)


@dataclass(frozen=True)
class LoadStarted:
    generation: int


@dataclass(frozen=True)
class LoadSucceeded:
    generation: int
    snapshot: AirQualitySnapshot


@dataclass(frozen=True)
class LoadFailed:
    generation: int
    message: str = USER_FAILURE_MESSAGE


LoadEvent = Union[LoadStarted, LoadSucceeded, LoadFailed]


def transition(state: LoadState, event: LoadEvent) -> LoadState:
    """
    Pure reducer for the load lifecycle.

    - LoadStarted enters LOADING if its generation is newer than the state's.
    - LoadSucceeded/LoadFailed settle the state only when they belong to the
      generation currently LOADING; anything else is stale and ignored.
    """
    if isinstance(event, LoadStarted):
        if event.generation <= state.generation:
            return state
        return LoadState(LoadPhase.LOADING, generation=event.generation)

    if state.phase is not LoadPhase.LOADING or event.generation != state.generation:
        return state

    if isinstance(event, LoadSucceeded):
        return LoadState(LoadPhase.READY, generation=event.generation, snapshot=event.snapshot)
    if isinstance(event, LoadFailed):
        return LoadState(LoadPhase.FAILED, generation=event.generation, message=event.message)

    raise TypeError(f"Unknown load event: {type(event).__name__}")


class LoadController:
    """State container owned by the composition root (the page or the CLI)."""

    def __init__(self) -> None:
        self.state: LoadState = NOT_STARTED
        self.history: list[LoadState] = []
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def _apply(self, event: LoadEvent) -> bool:
        new_state = transition(self.state, event)
        if new_state is self.state:
            return False
        self.state = new_state
        self.history.append(new_state)
        return True

    def load(self, fetch: Callable[[], AirQualitySnapshot]) -> Iterator[LoadState]:
        """
        Lazily run one load: yields LOADING, then READY or FAILED.

        Nothing happens (not even taking a generation number) until the
        iterator is first advanced. If another load
        starts before ``fetch`` returns, this one's outcome is dropped and the
        iterator ends after LOADING.
        """
        self._generation += 1
        generation = self._generation

        self._apply(LoadStarted(generation))
        yield self.state

        try:
            snapshot = fetch()
        except FeedError as e:
            logger.warning(
                "[load][FAILED] generation=%d cause=%s: %s",
                generation, type(e).__name__, e,
            )
            outcome: LoadEvent = LoadFailed(generation)
        else:
            outcome = LoadSucceeded(generation, snapshot)

        if not self._apply(outcome):
            logger.info(
                "[load][STALE] generation=%d superseded by %d; result discarded",
                generation, self._generation,
            )
            return

        yield self.state

    def run(self, fetch: Callable[[], AirQualitySnapshot]) -> LoadState:
        """Drain one load and return the controller's final state."""
        for _ in self.load(fetch):
            pass
        return self.state

    def retry(self, fetch: Callable[[], AirQualitySnapshot]) -> LoadState:
        """Start a fresh load; same semantics as a remount."""
        return self.run(fetch)
