"""ExpansionController: at most one expanded row with lazily loaded chart bars.

Expanding a row starts a chart fetch scoped to that row's ticker and to the
primary filter window as it is *at that moment*. Expanding the same row again
collapses it. Expanding a different row discards the previous data. A change
of the primary window collapses the row, because bars fetched for the old
window are stale.

A failed load yields an empty bar list, not an error banner, so "no data"
and "still loading" remain distinct states.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from pydantic import BaseModel, ConfigDict, ValidationError

from Market_Lens.models.api import ApiFailure, ApiResponse, ChartEnvelope
from Market_Lens.models.enums import ExpansionView
from Market_Lens.models.filters import ChartWindow
from Market_Lens.models.market_data import IntradayBar
from Market_Lens.models.watchlist import normalize_ticker
from Market_Lens.query.composer import compose_chart_params

logger = logging.getLogger(__name__)


class ExpansionState(BaseModel):
    """Immutable snapshot of the expanded row.

    ``data`` is ``None`` until a load completes and a (possibly empty) tuple
    afterwards.
    """

    model_config = ConfigDict(frozen=True)

    active_key: str | None = None
    data: tuple[IntradayBar, ...] | None = None
    loading: bool = False
    window: ChartWindow | None = None
    failed: bool = False

    @property
    def view(self) -> ExpansionView:
        if self.active_key is None:
            return ExpansionView.COLLAPSED
        if self.loading or self.data is None:
            return ExpansionView.LOADING
        if not self.data:
            return ExpansionView.NO_DATA
        return ExpansionView.READY


class ExpansionController:
    """Owns the single expanded row and its chart data.

    Args:
        loader: Coroutine function fetching chart bars for ``(ticker, params)``.
        window_provider: Returns the current primary filter window.
    """

    def __init__(
        self,
        loader: Callable[[str, dict[str, str]], Awaitable[ApiResponse]],
        window_provider: Callable[[], ChartWindow],
    ) -> None:
        self._loader = loader
        self._window_provider = window_provider
        self._state = ExpansionState()
        self._generation = 0

    @property
    def state(self) -> ExpansionState:
        return self._state

    async def set_expanded(self, key: str | None) -> ExpansionState:
        """Toggle *key*: collapse if it is already expanded, otherwise expand and load it."""
        if key is None:
            return self.collapse()
        normalized = normalize_ticker(key)
        if normalized == self._state.active_key:
            return self.collapse()
        return await self.load(normalized)

    async def load(self, key: str) -> ExpansionState:
        """Fetch chart bars for *key* within the current primary window.

        Replaces whatever was expanded before. If the row is collapsed or
        replaced while the fetch is in flight, the response is discarded.
        """
        key = normalize_ticker(key)
        window = self._window_provider()
        self._generation += 1
        generation = self._generation
        self._state = ExpansionState(active_key=key, loading=True, window=window)

        outcome = await self._loader(key, compose_chart_params(window))

        if generation != self._generation:
            logger.debug("Discarding superseded chart response for %s", key)
            return self._state

        if isinstance(outcome, ApiFailure):
            logger.warning(
                "Failed to load intraday chart for %s (status=%s): %s",
                key,
                outcome.status_code,
                outcome.error or outcome.detail,
            )
            self._state = self._state.model_copy(
                update={"data": (), "loading": False, "failed": True}
            )
            return self._state

        try:
            envelope = ChartEnvelope.model_validate(outcome.payload)
        except ValidationError as exc:
            logger.warning("Malformed chart payload for %s: %s", key, exc)
            self._state = self._state.model_copy(
                update={"data": (), "loading": False, "failed": True}
            )
            return self._state

        if "data" not in envelope.model_fields_set:
            logger.warning("Chart response for %s has no data field", key)
        bars = tuple(envelope.data.bars)
        logger.debug("Loaded %d bars for %s", len(bars), key)
        self._state = self._state.model_copy(update={"data": bars, "loading": False})
        return self._state

    async def refresh(self) -> ExpansionState:
        """Reload the expanded row against the current window, if a row is expanded."""
        if self._state.active_key is None:
            return self._state
        return await self.load(self._state.active_key)

    def collapse(self) -> ExpansionState:
        """Collapse the row and discard any in-flight load."""
        self._generation += 1
        self._state = ExpansionState()
        return self._state

    def on_window_changed(self, window: ChartWindow) -> ExpansionState:
        """Collapse the expanded row if its data was scoped to a different window."""
        if self._state.active_key is not None and self._state.window != window:
            logger.debug("Primary window changed; collapsing %s", self._state.active_key)
            return self.collapse()
        return self._state
