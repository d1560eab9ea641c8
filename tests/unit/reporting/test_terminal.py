"""Tests for Rich-based terminal output rendering.

Uses a captured Rich Console to inspect output content.
"""

from __future__ import annotations

import datetime
import re
from io import StringIO
from typing import Any
from unittest.mock import patch

from rich.console import Console

from Market_Lens.controllers.expansion import ExpansionState
from Market_Lens.controllers.lifecycle import LifecycleState
from Market_Lens.controllers.membership import MembershipState
from Market_Lens.models.enums import LifecycleStatus
from Market_Lens.models.filters import IntradayFilters, Paging
from Market_Lens.models.market_data import IntradayBar, IntradayMover, ScanResult
from Market_Lens.models.watchlist import WatchlistGroup, WatchlistItem
from Market_Lens.reporting.terminal import (
    RELAX_FILTERS_HINT,
    render_chart_bars,
    render_intraday_movers,
    render_scan_results,
    render_watchlists,
)

# Regex to strip ANSI escape codes from Rich output
_ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*m")


def _strip_ansi(text: str) -> str:
    """Remove ANSI escape codes from Rich console output."""
    return _ANSI_ESCAPE.sub("", text)


def _make_captured_console() -> Console:
    """Create a Console that captures output to a StringIO buffer."""
    return Console(file=StringIO(), force_terminal=True, width=160)


def _output(console: Console) -> str:
    return _strip_ansi(console.file.getvalue())  # type: ignore[attr-defined]


def _scan_state(**overrides: Any) -> LifecycleState[ScanResult]:
    fields: dict[str, Any] = {"status": LifecycleStatus.SUCCESS, "paging": Paging(sort="gd_volume")}
    fields.update(overrides)
    return LifecycleState[ScanResult](**fields)


class TestRenderScanResults:
    """Tests for render_scan_results()."""

    def test_renders_rows(self, scan_row: dict[str, Any]) -> None:
        captured = _make_captured_console()
        state = _scan_state(results=[ScanResult.model_validate(scan_row)], total=1, total_pages=1)
        with patch("Market_Lens.reporting.terminal.console", captured):
            render_scan_results(state, ["2024-03-01"])
        text = _output(captured)
        assert "ABCD" in text
        assert "+34.20%" in text
        assert "412.00M" in text
        assert "Scanned dates: 2024-03-01" in text

    def test_empty_shows_relax_hint(self) -> None:
        captured = _make_captured_console()
        with patch("Market_Lens.reporting.terminal.console", captured):
            render_scan_results(_scan_state())
        assert RELAX_FILTERS_HINT in _output(captured).replace("\n", " ")

    def test_error_shows_message(self) -> None:
        captured = _make_captured_console()
        state = _scan_state(status=LifecycleStatus.ERROR, error="Scan failed")
        with patch("Market_Lens.reporting.terminal.console", captured):
            render_scan_results(state)
        text = _output(captured)
        assert "Scan failed" in text
        assert "retry" in text


class TestRenderIntraday:
    """Tests for render_intraday_movers() and render_chart_bars()."""

    def test_renders_movers(self, mover_row: dict[str, Any]) -> None:
        captured = _make_captured_console()
        state = LifecycleState[IntradayMover](
            status=LifecycleStatus.SUCCESS,
            paging=Paging(sort="changePct"),
            results=[IntradayMover.model_validate(mover_row)],
            total=1,
            total_pages=1,
        )
        with patch("Market_Lens.reporting.terminal.console", captured):
            render_intraday_movers(state)
        text = _output(captured)
        assert "WXYZ" in text
        assert "+15.00%" in text

    def test_no_data_differs_from_loading(self) -> None:
        window = IntradayFilters(date=datetime.date(2024, 3, 1)).chart_window()
        loading = ExpansionState(active_key="AAPL", loading=True, window=window)
        empty = ExpansionState(active_key="AAPL", data=(), window=window)

        captured = _make_captured_console()
        with patch("Market_Lens.reporting.terminal.console", captured):
            render_chart_bars(loading)
            render_chart_bars(empty)
        text = _output(captured)
        assert "Loading chart for AAPL" in text
        assert "No chart data for AAPL" in text

    def test_renders_bars(self, chart_payload: dict[str, Any]) -> None:
        bars = tuple(IntradayBar.model_validate(bar) for bar in chart_payload["data"]["bars"])
        captured = _make_captured_console()
        with patch("Market_Lens.reporting.terminal.console", captured):
            render_chart_bars(ExpansionState(active_key="WXYZ", data=bars))
        text = _output(captured)
        assert "14:30" in text
        assert "$11.50" in text

    def test_collapsed_prints_nothing(self) -> None:
        captured = _make_captured_console()
        with patch("Market_Lens.reporting.terminal.console", captured):
            render_chart_bars(ExpansionState())
        assert _output(captured) == ""


class TestRenderWatchlists:
    """Tests for render_watchlists()."""

    def test_marks_active_list(self) -> None:
        state = MembershipState(
            lists=(
                WatchlistGroup(
                    id=1, name="Tech", color="#6366f1", items=[WatchlistItem(ticker="AAPL")]
                ),
                WatchlistGroup(id=2, name="Gappers", color="#10b981"),
            ),
            active_list_id=1,
        )
        captured = _make_captured_console()
        with patch("Market_Lens.reporting.terminal.console", captured):
            render_watchlists(state)
        text = _output(captured)
        assert "Tech" in text
        assert "Gappers" in text
        assert "AAPL" in text
        assert "1 tracked symbols" in text

    def test_no_lists(self) -> None:
        captured = _make_captured_console()
        with patch("Market_Lens.reporting.terminal.console", captured):
            render_watchlists(MembershipState())
        assert "No watchlists yet" in _output(captured)
