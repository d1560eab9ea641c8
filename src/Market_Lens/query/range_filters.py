"""RangeFilterSet operations over ``DayFilters`` and ``ScannerFilters``.

Every edit returns a new model; inputs are never mutated. Bound values are
stored exactly as given. Whether ``"abc"`` is a valid minimum is for the
remote service to decide.
"""

from __future__ import annotations

import logging

from Market_Lens.models.enums import Bound, CloseDirection, DayGroup, Metric
from Market_Lens.models.filters import DayFilters, ScannerFilters
from Market_Lens.utils.exceptions import UnknownFilterError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Name resolution
# ---------------------------------------------------------------------------


def parse_metric(name: str | Metric) -> Metric:
    """Resolve a metric name, rejecting anything outside the fixed schema."""
    try:
        return Metric(name)
    except ValueError:
        raise UnknownFilterError(str(name), kind="metric") from None


def parse_day_group(name: str | DayGroup) -> DayGroup:
    """Resolve a day-group prefix (``gd``, ``pd``, ``d2``, ``d3``)."""
    try:
        return DayGroup(name)
    except ValueError:
        raise UnknownFilterError(str(name), kind="day_group") from None


def _parse_bound(name: str | Bound) -> Bound:
    try:
        return Bound(name)
    except ValueError:
        raise UnknownFilterError(str(name), kind="bound") from None


# ---------------------------------------------------------------------------
# Edits
# ---------------------------------------------------------------------------


def set_day_bound(
    day_filters: DayFilters,
    metric: str | Metric,
    bound: str | Bound,
    value: str,
) -> DayFilters:
    """Replace exactly one bound of one metric in a single ``DayFilters``."""
    resolved_metric = parse_metric(metric)
    resolved_bound = _parse_bound(bound)
    current = day_filters.range_for(resolved_metric)
    updated = current.model_copy(update={resolved_bound.value: value})
    ranges = dict(day_filters.ranges)
    ranges[resolved_metric] = updated
    return day_filters.model_copy(update={"ranges": ranges})


def set_bound(
    filters: ScannerFilters,
    group: str | DayGroup,
    metric: str | Metric,
    bound: str | Bound,
    value: str,
) -> ScannerFilters:
    """Replace exactly one scalar in one ``RangeFilter`` of one day-group."""
    day_group = parse_day_group(group)
    updated = set_day_bound(filters.group(day_group), metric, bound, value)
    logger.debug("Set %s.%s.%s=%r", day_group.value, metric, bound, value)
    return filters.with_group(day_group, updated)


def set_close_direction(
    filters: ScannerFilters,
    group: str | DayGroup,
    direction: str | CloseDirection,
) -> ScannerFilters:
    """Set (or clear, with ``""``) the close-direction filter of one day-group."""
    day_group = parse_day_group(group)
    try:
        resolved = CloseDirection(direction)
    except ValueError:
        raise UnknownFilterError(str(direction), kind="close_direction") from None
    updated = filters.group(day_group).model_copy(update={"close_direction": resolved})
    return filters.with_group(day_group, updated)


# ---------------------------------------------------------------------------
# Derived counts
# ---------------------------------------------------------------------------


def count_active(day_filters: DayFilters) -> int:
    """Number of metrics with at least one bound set, plus one for close direction.

    A metric with both bounds set counts once.
    """
    count = sum(1 for range_filter in day_filters.ranges.values() if range_filter.is_active)
    if day_filters.close_direction:
        count += 1
    return count


def count_active_total(filters: ScannerFilters) -> int:
    """Sum of ``count_active`` across all day-groups."""
    return sum(count_active(filters.group(day_group)) for day_group in DayGroup)
