"""Rich-based terminal output for scan results, intraday movers, charts and watchlists.

Uses ``rich.console.Console`` for all output. Color scheme:
green = up, red = down, yellow = notices.
"""

from __future__ import annotations

import logging
from typing import TypeAlias

from rich.console import Console
from rich.table import Table

from Market_Lens.controllers.expansion import ExpansionState
from Market_Lens.controllers.lifecycle import LifecycleState
from Market_Lens.controllers.membership import MembershipState
from Market_Lens.models.enums import ExpansionView, ResultView
from Market_Lens.models.market_data import IntradayMover, ScanResult
from Market_Lens.reporting.formatters import (
    MISSING,
    change_color,
    format_bar_time,
    format_number,
    format_percent,
    format_price,
    format_volume,
)

logger = logging.getLogger(__name__)

# Shared console instance for terminal output
console = Console()

# --- Color scheme ---
COLOR_HEADER: str = "bold cyan"
COLOR_NOTICE: str = "yellow"
COLOR_ERROR: str = "bold red"
COLOR_MUTED: str = "dim"

RELAX_FILTERS_HINT: str = "No results match these filters. Try relaxing or clearing some of them."
RETRY_HINT: str = "Run the command again to retry."

SearchState: TypeAlias = "LifecycleState[ScanResult] | LifecycleState[IntradayMover]"


def render_error(message: str) -> None:
    """Print an error message with a retry hint."""
    console.print(f"[{COLOR_ERROR}]Error:[/{COLOR_ERROR}] {message}")
    console.print(f"[{COLOR_MUTED}]{RETRY_HINT}[/{COLOR_MUTED}]")


def _render_empty_or_error(state: SearchState) -> bool:
    """Print the error or empty notice. Returns True when there is nothing else to show."""
    view = state.view
    if view == ResultView.ERROR:
        render_error(state.error or "Request failed")
        return True
    if view == ResultView.EMPTY:
        console.print(f"[{COLOR_NOTICE}]{RELAX_FILTERS_HINT}[/{COLOR_NOTICE}]")
        return True
    if view != ResultView.RESULTS:
        console.print(f"[{COLOR_MUTED}]No results loaded.[/{COLOR_MUTED}]")
        return True
    if state.data_missing:
        logger.debug("Rendering results from an incomplete response: %s", state.missing_fields)
    return False


def _paging_caption(state: SearchState) -> str:
    paging = state.requested_paging
    return (
        f"Page {paging.page} of {max(state.total_pages, 1)} | {state.total} total | "
        f"sorted by {paging.sort} {paging.sort_dir.value}"
    )


def render_scan_results(
    state: LifecycleState[ScanResult],
    scanned_dates: list[str] | None = None,
) -> None:
    """Render one page of gap scanner results as a table.

    Args:
        state: Scanner lifecycle snapshot.
        scanned_dates: Business days the server evaluated, shown under the table.
    """
    if _render_empty_or_error(state):
        return

    table = Table(title="Gap Scanner", caption=_paging_caption(state))
    table.add_column("Ticker", style="bold")
    table.add_column("Gap Date")
    table.add_column("Gap %", justify="right")
    table.add_column("Volume", justify="right")
    table.add_column("Open", justify="right")
    table.add_column("Close", justify="right")
    table.add_column("Return", justify="right")
    table.add_column("Mkt Cap", justify="right")
    table.add_column("Float", justify="right")

    for row in state.results:
        day = row.gap_day
        table.add_row(
            row.ticker,
            row.gap_date or MISSING,
            f"[{change_color(day.gap)}]{format_percent(day.gap)}[/]",
            format_volume(day.volume),
            format_price(day.open_price),
            format_price(day.close_price),
            f"[{change_color(day.return_pct)}]{format_percent(day.return_pct)}[/]",
            format_number(row.market_cap),
            format_number(row.float_shares),
        )

    console.print(table)
    if scanned_dates:
        console.print(f"[{COLOR_MUTED}]Scanned dates: {', '.join(scanned_dates)}[/{COLOR_MUTED}]")


def render_intraday_movers(state: LifecycleState[IntradayMover]) -> None:
    """Render one page of intraday movers as a table."""
    if _render_empty_or_error(state):
        return

    table = Table(title="Intraday Movers", caption=_paging_caption(state))
    table.add_column("Ticker", style="bold")
    table.add_column("Name")
    table.add_column("Start", justify="right")
    table.add_column("End", justify="right")
    table.add_column("Change", justify="right")
    table.add_column("Volume", justify="right")
    table.add_column("Peak")
    table.add_column("Trough")

    for mover in state.results:
        table.add_row(
            mover.ticker,
            mover.name or "",
            format_price(mover.start_price),
            format_price(mover.end_price),
            f"[{change_color(mover.change_pct)}]{format_percent(mover.change_pct)}[/]",
            format_volume(mover.total_volume),
            mover.peak_time or MISSING,
            mover.trough_time or MISSING,
        )

    console.print(table)


def render_chart_bars(expansion: ExpansionState) -> None:
    """Render the expanded row's intraday bars, or its loading/no-data notice."""
    view = expansion.view
    if view == ExpansionView.COLLAPSED:
        return
    if view == ExpansionView.LOADING:
        console.print(f"[{COLOR_MUTED}]Loading chart for {expansion.active_key}...[/{COLOR_MUTED}]")
        return
    if view == ExpansionView.NO_DATA:
        console.print(
            f"[{COLOR_NOTICE}]No chart data for {expansion.active_key} "
            f"in this window.[/{COLOR_NOTICE}]"
        )
        return

    table = Table(title=f"{expansion.active_key} Intraday")
    table.add_column("Time")
    table.add_column("Open", justify="right")
    table.add_column("High", justify="right")
    table.add_column("Low", justify="right")
    table.add_column("Close", justify="right")
    table.add_column("Volume", justify="right")
    table.add_column("VWAP", justify="right")

    for bar in expansion.data or ():
        style = change_color(bar.close - bar.open)
        table.add_row(
            format_bar_time(bar.time),
            format_price(bar.open),
            format_price(bar.high),
            format_price(bar.low),
            f"[{style}]{format_price(bar.close)}[/]",
            format_volume(bar.volume),
            format_price(bar.vwap),
        )

    console.print(table)


def render_watchlists(state: MembershipState) -> None:
    """Render every watchlist with its tickers; the active list is marked."""
    if state.error:
        render_error(state.error)
        return
    if not state.lists:
        console.print(f"[{COLOR_MUTED}]No watchlists yet.[/{COLOR_MUTED}]")
        return

    table = Table(title="Watchlists", caption=f"{state.total_items} tracked symbols")
    table.add_column("", width=1)
    table.add_column("ID", justify="right")
    table.add_column("Name", style="bold")
    table.add_column("Items", justify="right")
    table.add_column("Tickers")

    for group in state.lists:
        marker = "*" if group.id == state.active_list_id else ""
        table.add_row(
            marker,
            str(group.id),
            f"[{group.color}]{group.name}[/]",
            str(len(group.items)),
            ", ".join(group.tickers),
        )

    console.print(table)
