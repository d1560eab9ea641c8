"""QueryComposer: turn filter and paging state into canonical request parameters.

The composed maps are flat ``dict[str, str]`` ready to be sent as a query
string. Scanner maps never contain an empty-string value: unset bounds,
an unset close direction and an unset date window are omitted entirely.
Intraday time fields always have a value and are always sent.
"""

from __future__ import annotations

import logging

from Market_Lens.models.enums import DateMode, DayGroup
from Market_Lens.models.filters import (
    ChartWindow,
    DateWindow,
    DayFilters,
    IntradayFilters,
    Paging,
    ScannerFilters,
)

logger = logging.getLogger(__name__)


def _format_number(value: float | int) -> str:
    """Render a number the way a form field would: ``2.0`` -> ``"2"``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _paging_params(paging: Paging) -> dict[str, str]:
    return {
        "page": str(paging.page),
        "limit": str(paging.limit),
        "sort": paging.sort,
        "sortDir": paging.sort_dir.value,
    }


def compose_day_params(prefix: DayGroup, day_filters: DayFilters) -> dict[str, str]:
    """Parameters contributed by one day-group: only the bounds that are set."""
    params: dict[str, str] = {}
    for metric, range_filter in day_filters.ranges.items():
        if range_filter.min:
            params[f"{prefix.value}_{metric.value}Min"] = range_filter.min
        if range_filter.max:
            params[f"{prefix.value}_{metric.value}Max"] = range_filter.max
    if day_filters.close_direction:
        params[f"{prefix.value}_closeDirection"] = day_filters.close_direction.value
    return params


def compose_date_params(window: DateWindow) -> dict[str, str]:
    """Parameters contributed by the scanner date window, if one is chosen."""
    if window.mode == DateMode.NONE:
        return {}

    params: dict[str, str] = {"dateMode": window.mode.value}
    if window.mode == DateMode.PRESET and window.preset is not None:
        params["dateRange"] = window.preset.value
    elif window.mode == DateMode.SINGLE and window.gap_date:
        params["gapDate"] = window.gap_date
    elif window.mode == DateMode.RANGE:
        if window.date_from:
            params["dateFrom"] = window.date_from
        if window.date_to:
            params["dateTo"] = window.date_to
    return params


def compose_scan_params(
    filters: ScannerFilters,
    paging: Paging,
    date_window: DateWindow | None = None,
) -> dict[str, str]:
    """Compose the gap-scan request for the given filters, paging and date window.

    Args:
        filters: Range and direction filters for all four day-groups.
        paging: Page, page size and sort order.
        date_window: Optional gap-day date selection.

    Returns:
        A flat parameter map with no empty-string values.
    """
    params = _paging_params(paging)
    for day_group in DayGroup:
        params.update(compose_day_params(day_group, filters.group(day_group)))
    if date_window is not None:
        params.update(compose_date_params(date_window))
    logger.debug("Composed scan params: %s", params)
    return params


def compose_chart_params(window: ChartWindow) -> dict[str, str]:
    """Compose the per-ticker chart request for a date/time window."""
    return {
        "date": window.date.isoformat(),
        "fromHour": str(window.from_hour),
        "fromMinute": str(window.from_minute),
        "toHour": str(window.to_hour),
        "toMinute": str(window.to_minute),
        "timespan": window.timespan.value,
        "multiplier": str(window.multiplier),
    }


def compose_intraday_params(filters: IntradayFilters, paging: Paging) -> dict[str, str]:
    """Compose the intraday movers request.

    Time fields, ``direction``, ``minChange``, ``timespan`` and
    ``multiplier`` are sent unconditionally.
    """
    params = compose_chart_params(filters.chart_window())
    params["direction"] = filters.direction.value
    params["minChange"] = _format_number(filters.min_change)
    params.update(_paging_params(paging))
    logger.debug("Composed intraday params: %s", params)
    return params
