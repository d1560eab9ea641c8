"""IntradayController: intraday movers search plus the expanded-row chart.

Editing any field of the chart window (date, times, timespan, multiplier)
collapses the expanded row. Editing ``direction`` or ``minChange`` does
not, since those never affect a ticker's bars.
"""

from __future__ import annotations

import logging
from typing import Any

from Market_Lens.config import ClientSettings
from Market_Lens.controllers.expansion import ExpansionController, ExpansionState
from Market_Lens.controllers.lifecycle import (
    INTRADAY_MESSAGES,
    LifecycleState,
    PageOutcome,
    ResultLifecycle,
)
from Market_Lens.models.api import IntradayEnvelope
from Market_Lens.models.filters import IntradayFilters, Paging
from Market_Lens.models.market_data import IntradayMeta, IntradayMover
from Market_Lens.query.composer import compose_intraday_params
from Market_Lens.query.presets import get_intraday_preset
from Market_Lens.services.api_client import DashboardApiClient
from Market_Lens.utils.exceptions import UnknownFilterError

logger = logging.getLogger(__name__)


def _filter_field_names() -> dict[str, str]:
    """Map every accepted filter name (snake_case and camelCase) to its field."""
    names: dict[str, str] = {}
    for field_name, info in IntradayFilters.model_fields.items():
        names[field_name] = field_name
        if info.alias:
            names[info.alias] = field_name
    return names


_FILTER_FIELDS: dict[str, str] = _filter_field_names()


def parse_intraday_payload(payload: Any, paging: Paging) -> PageOutcome[IntradayMover]:
    """Extract movers and metadata from a ``{data, meta}`` body.

    A missing ``meta`` is replaced by one describing the rows actually
    received, and recorded in ``missing_fields``.
    """
    envelope = IntradayEnvelope.model_validate(payload)
    missing = tuple(name for name in ("data", "meta") if name not in envelope.model_fields_set)
    meta = envelope.meta
    if meta is None:
        meta = IntradayMeta(total=len(envelope.data), page=paging.page, limit=paging.limit)
    return PageOutcome(
        items=list(envelope.data),
        total=meta.total,
        total_pages=meta.total_pages,
        meta=meta,
        missing_fields=missing,
    )


class IntradayController:
    """Filter state, result lifecycle and row expansion for intraday movers.

    Args:
        api: Dashboard API client.
        settings: Page size and default sort. Defaults to ``ClientSettings()``.
        filters: Initial filters. Defaults to the previous weekday, 09:30-16:00.
    """

    def __init__(
        self,
        api: DashboardApiClient,
        settings: ClientSettings | None = None,
        filters: IntradayFilters | None = None,
    ) -> None:
        self._settings = settings or ClientSettings()
        self._filters = filters or IntradayFilters()
        self._lifecycle: ResultLifecycle[IntradayMover] = ResultLifecycle(
            fetch=api.get_intraday_movers,
            parse=parse_intraday_payload,
            messages=INTRADAY_MESSAGES,
            paging=Paging(
                limit=self._settings.page_limit,
                sort=self._settings.intraday_default_sort,
            ),
            label="intraday",
        )
        self._expansion = ExpansionController(
            loader=api.get_intraday_chart,
            window_provider=lambda: self._filters.chart_window(),
        )

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    @property
    def filters(self) -> IntradayFilters:
        return self._filters

    @property
    def state(self) -> LifecycleState[IntradayMover]:
        return self._lifecycle.state

    @property
    def expansion(self) -> ExpansionState:
        return self._expansion.state

    @property
    def meta(self) -> IntradayMeta | None:
        meta = self._lifecycle.state.meta
        return meta if isinstance(meta, IntradayMeta) else None

    def compose(self) -> dict[str, str]:
        """The parameter map the next ``search()`` would send."""
        return compose_intraday_params(self._filters, self._lifecycle.paging)

    # ------------------------------------------------------------------
    # Filter edits (no fetch)
    # ------------------------------------------------------------------

    def set_filter(self, name: str, value: object) -> IntradayFilters:
        """Set one filter field by snake_case or camelCase name.

        Raises:
            UnknownFilterError: If *name* is not an intraday filter.
            pydantic.ValidationError: If *value* is out of range for the field.
        """
        field_name = _FILTER_FIELDS.get(name)
        if field_name is None:
            raise UnknownFilterError(name, kind="intraday_filter")
        return self._replace_filters({field_name: value})

    def apply_preset(self, name: str) -> IntradayFilters:
        """Set the time window from a named preset such as ``"market_open"``."""
        preset = get_intraday_preset(name)
        logger.debug("Applying intraday preset %s", preset.key)
        return self._replace_filters(preset.as_filter_update())

    def reset_filters(self) -> IntradayFilters:
        """Restore baseline filters and go to page 1."""
        self._filters = IntradayFilters()
        self._lifecycle.reset_page()
        self._expansion.on_window_changed(self._filters.chart_window())
        return self._filters

    def _replace_filters(self, update: dict[str, object]) -> IntradayFilters:
        self._filters = IntradayFilters.model_validate({**self._filters.model_dump(), **update})
        self._expansion.on_window_changed(self._filters.chart_window())
        return self._filters

    # ------------------------------------------------------------------
    # Paging and sort (no fetch)
    # ------------------------------------------------------------------

    def set_sort(self, key: str) -> LifecycleState[IntradayMover]:
        return self._lifecycle.set_sort(key)

    def set_page(self, page: int) -> LifecycleState[IntradayMover]:
        return self._lifecycle.set_page(page)

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    async def search(self) -> LifecycleState[IntradayMover]:
        """Dispatch the current filters, paging and sort."""
        return await self._lifecycle.run(self.compose())

    async def go_to_page(self, page: int) -> LifecycleState[IntradayMover]:
        """Move to *page* and fetch it. Does nothing if that page was the last one requested."""
        if page == self._lifecycle.state.requested_paging.page:
            return self._lifecycle.state
        self._lifecycle.set_page(page)
        return await self.search()

    async def apply_filters(self) -> LifecycleState[IntradayMover]:
        """Return to page 1 and search with the edited filters."""
        self._lifecycle.reset_page()
        return await self.search()

    async def toggle_sort(self, key: str) -> LifecycleState[IntradayMover]:
        """Apply ``set_sort`` and search again."""
        self._lifecycle.set_sort(key)
        return await self.search()

    # ------------------------------------------------------------------
    # Expansion
    # ------------------------------------------------------------------

    async def set_expanded(self, ticker: str | None) -> ExpansionState:
        """Toggle the expanded row for *ticker* and load its chart."""
        return await self._expansion.set_expanded(ticker)

    async def refresh_expanded(self) -> ExpansionState:
        """Reload the expanded row's chart for the current window."""
        return await self._expansion.refresh()
