"""Tests for RangeFilterSet edits and active-filter counting."""

from __future__ import annotations

import pytest

from Market_Lens.models.enums import CloseDirection, DayGroup, Metric
from Market_Lens.models.filters import DayFilters, RangeFilter, ScannerFilters
from Market_Lens.query.range_filters import (
    count_active,
    count_active_total,
    parse_day_group,
    parse_metric,
    set_bound,
    set_close_direction,
    set_day_bound,
)
from Market_Lens.utils.exceptions import UnknownFilterError


class TestSetBound:
    """set_bound() replaces exactly one scalar."""

    def test_sets_single_bound(self) -> None:
        filters = set_bound(ScannerFilters(), "gd", "gap", "min", "10")
        assert filters.gd.range_for(Metric.GAP) == RangeFilter(min="10", max="")

    def test_leaves_other_scalars_untouched(self) -> None:
        filters = set_bound(ScannerFilters(), "gd", "gap", "min", "10")
        filters = set_bound(filters, "gd", "gap", "max", "50")
        filters = set_bound(filters, "pd", "volume", "min", "1000")
        assert filters.gd.range_for(Metric.GAP) == RangeFilter(min="10", max="50")
        assert filters.pd.range_for(Metric.VOLUME).min == "1000"
        assert filters.pd.range_for(Metric.GAP) == RangeFilter()
        assert not filters.d2.range_for(Metric.VOLUME).is_active

    def test_does_not_mutate_input(self) -> None:
        original = ScannerFilters()
        set_bound(original, DayGroup.DAY_3, Metric.VWAP, "max", "5")
        assert count_active_total(original) == 0

    def test_passes_text_through_unvalidated(self) -> None:
        filters = set_bound(ScannerFilters(), "gd", "gap", "min", "abc")
        assert filters.gd.range_for(Metric.GAP).min == "abc"

    def test_clearing_bound_with_empty_string(self) -> None:
        filters = set_bound(ScannerFilters(), "gd", "gap", "min", "10")
        filters = set_bound(filters, "gd", "gap", "min", "")
        assert not filters.gd.range_for(Metric.GAP).is_active

    @pytest.mark.parametrize(
        ("group", "metric", "bound", "kind"),
        [
            ("gx", "gap", "min", "day_group"),
            ("gd", "gapPct", "min", "metric"),
            ("gd", "gap", "lower", "bound"),
        ],
    )
    def test_unknown_names_rejected(self, group: str, metric: str, bound: str, kind: str) -> None:
        with pytest.raises(UnknownFilterError) as exc_info:
            set_bound(ScannerFilters(), group, metric, bound, "1")
        assert exc_info.value.kind == kind


class TestCloseDirection:
    """set_close_direction() sets and clears the categorical filter."""

    def test_set_and_clear(self) -> None:
        filters = set_close_direction(ScannerFilters(), "pd", "green")
        assert filters.pd.close_direction == CloseDirection.GREEN
        filters = set_close_direction(filters, "pd", "")
        assert filters.pd.close_direction == CloseDirection.ANY

    def test_unknown_direction_rejected(self) -> None:
        with pytest.raises(UnknownFilterError):
            set_close_direction(ScannerFilters(), "gd", "purple")


class TestCountActive:
    """count_active() is exact: one per active metric plus one for direction."""

    def test_empty_is_zero(self) -> None:
        assert count_active(DayFilters()) == 0

    def test_metric_with_both_bounds_counts_once(self) -> None:
        day = set_day_bound(DayFilters(), "gap", "min", "10")
        day = set_day_bound(day, "gap", "max", "20")
        assert count_active(day) == 1

    def test_direction_adds_one(self) -> None:
        day = set_day_bound(DayFilters(), "volume", "max", "1000000")
        day = set_day_bound(day, "range", "min", "2")
        day = day.model_copy(update={"close_direction": CloseDirection.RED})
        assert count_active(day) == 3

    def test_matches_definition_for_every_single_metric(self) -> None:
        for metric in Metric:
            day = set_day_bound(DayFilters(), metric, "max", "1")
            assert count_active(day) == 1

    def test_total_across_groups(self) -> None:
        filters = set_bound(ScannerFilters(), "gd", "gap", "min", "10")
        filters = set_bound(filters, "d2", "gap", "min", "1")
        filters = set_close_direction(filters, "d3", "green")
        assert count_active_total(filters) == 3


class TestNameResolution:
    """parse_metric / parse_day_group accept enum values and members."""

    def test_parse_metric(self) -> None:
        assert parse_metric("highSpike") is Metric.HIGH_SPIKE
        assert parse_metric(Metric.CHANGE) is Metric.CHANGE

    def test_parse_day_group(self) -> None:
        assert parse_day_group("d2") is DayGroup.DAY_2
