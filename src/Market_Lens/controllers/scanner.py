"""ScannerController: multi-day gap scan filters, paging and results.

Filter edits (``set_bound``, ``set_close_direction``, ``set_date_window``,
``reset_filters``) and the plain paging mutators never fetch; several edits
can be batched into one ``scan()``. ``go_to_page``, ``apply_filters`` and
``toggle_sort`` pair an edit with the fetch it implies.
"""

from __future__ import annotations

import logging
from typing import Any

from Market_Lens.config import ClientSettings
from Market_Lens.controllers.lifecycle import (
    SCANNER_MESSAGES,
    LifecycleState,
    PageOutcome,
    ResultLifecycle,
)
from Market_Lens.models.api import ScanEnvelope
from Market_Lens.models.enums import Bound, CloseDirection, DateMode, DatePreset, DayGroup, Metric
from Market_Lens.models.filters import DateWindow, Paging, ScannerFilters
from Market_Lens.models.market_data import ScanMeta, ScanResult
from Market_Lens.query import range_filters
from Market_Lens.query.composer import compose_scan_params
from Market_Lens.services.api_client import DashboardApiClient

logger = logging.getLogger(__name__)


def parse_scan_payload(payload: Any, paging: Paging) -> PageOutcome[ScanResult]:
    """Extract scan rows and paging metadata from a ``{data, meta}`` body."""
    envelope = ScanEnvelope.model_validate(payload)
    missing = tuple(name for name in ("data", "meta") if name not in envelope.model_fields_set)
    return PageOutcome(
        items=list(envelope.data),
        total=envelope.meta.total,
        total_pages=envelope.meta.total_pages,
        meta=envelope.meta,
        missing_fields=missing,
    )


class ScannerController:
    """Filter state and result lifecycle for the gap scanner.

    Usage::

        scanner = ScannerController(api, settings)
        scanner.set_bound("gd", "gap", "min", "10")
        scanner.set_bound("gd", "volume", "max", "1000000")
        state = await scanner.apply_filters()

    Args:
        api: Dashboard API client.
        settings: Page size and default sort. Defaults to ``ClientSettings()``.
    """

    def __init__(self, api: DashboardApiClient, settings: ClientSettings | None = None) -> None:
        self._settings = settings or ClientSettings()
        self._filters = ScannerFilters()
        self._date_window = DateWindow()
        self._lifecycle: ResultLifecycle[ScanResult] = ResultLifecycle(
            fetch=api.scan,
            parse=parse_scan_payload,
            messages=SCANNER_MESSAGES,
            paging=Paging(
                limit=self._settings.page_limit,
                sort=self._settings.scanner_default_sort,
            ),
            label="scanner",
        )

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    @property
    def filters(self) -> ScannerFilters:
        return self._filters

    @property
    def date_window(self) -> DateWindow:
        return self._date_window

    @property
    def state(self) -> LifecycleState[ScanResult]:
        return self._lifecycle.state

    @property
    def active_filter_count(self) -> int:
        """Badge count across all day-groups."""
        return range_filters.count_active_total(self._filters)

    @property
    def scanned_dates(self) -> list[str]:
        """Business days the server evaluated in the last successful scan."""
        meta = self._lifecycle.state.meta
        return list(meta.scanned_dates) if isinstance(meta, ScanMeta) else []

    def compose(self) -> dict[str, str]:
        """The parameter map the next ``scan()`` would send."""
        return compose_scan_params(self._filters, self._lifecycle.paging, self._date_window)

    # ------------------------------------------------------------------
    # Filter edits (no fetch)
    # ------------------------------------------------------------------

    def set_bound(
        self,
        group: str | DayGroup,
        metric: str | Metric,
        bound: str | Bound,
        value: str,
    ) -> ScannerFilters:
        """Replace one bound of one metric in one day-group."""
        self._filters = range_filters.set_bound(self._filters, group, metric, bound, value)
        return self._filters

    def set_close_direction(
        self,
        group: str | DayGroup,
        direction: str | CloseDirection,
    ) -> ScannerFilters:
        """Set or clear the close-direction filter of one day-group."""
        self._filters = range_filters.set_close_direction(self._filters, group, direction)
        return self._filters

    def set_date_window(
        self,
        mode: str | DateMode,
        *,
        preset: str | DatePreset | None = None,
        gap_date: str = "",
        date_from: str = "",
        date_to: str = "",
    ) -> DateWindow:
        """Choose how the gap day is selected (preset, single date or range)."""
        self._date_window = DateWindow.model_validate(
            {
                "mode": mode,
                "preset": preset,
                "gap_date": gap_date,
                "date_from": date_from,
                "date_to": date_to,
            }
        )
        return self._date_window

    def reset_filters(self) -> ScannerFilters:
        """Restore every day-group and the date window to empty, and go to page 1."""
        self._filters = ScannerFilters()
        self._date_window = DateWindow()
        self._lifecycle.reset_page()
        return self._filters

    # ------------------------------------------------------------------
    # Paging and sort (no fetch)
    # ------------------------------------------------------------------

    def set_sort(self, key: str) -> LifecycleState[ScanResult]:
        return self._lifecycle.set_sort(key)

    def set_page(self, page: int) -> LifecycleState[ScanResult]:
        return self._lifecycle.set_page(page)

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    async def scan(self) -> LifecycleState[ScanResult]:
        """Dispatch the current filters, paging and sort as one scan request."""
        return await self._lifecycle.run(self.compose())

    async def go_to_page(self, page: int) -> LifecycleState[ScanResult]:
        """Move to *page* and fetch it. Does nothing if that page was the last one requested."""
        if page == self._lifecycle.state.requested_paging.page:
            return self._lifecycle.state
        self._lifecycle.set_page(page)
        return await self.scan()

    async def apply_filters(self) -> LifecycleState[ScanResult]:
        """Return to page 1 and scan with the edited filters."""
        self._lifecycle.reset_page()
        return await self.scan()

    async def toggle_sort(self, key: str) -> LifecycleState[ScanResult]:
        """Apply ``set_sort`` and rescan."""
        self._lifecycle.set_sort(key)
        return await self.scan()
