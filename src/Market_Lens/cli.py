"""CLI entry point for Market Lens, a terminal client for the market dashboard API.

Provides the ``market-lens`` command with subcommands for the gap scanner,
intraday movers, per-ticker intraday charts, and watchlist management.

This is the ONLY module (besides ``reporting.terminal``) that writes to the
console. All other modules use ``logging``. Async controllers are bridged to
typer's synchronous interface via ``asyncio.run()``.
"""

from __future__ import annotations

import asyncio
import datetime
from collections.abc import Awaitable, Callable
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console

from Market_Lens.config import ClientSettings, load_settings
from Market_Lens.controllers.intraday import IntradayController
from Market_Lens.controllers.membership import MembershipController
from Market_Lens.controllers.scanner import ScannerController
from Market_Lens.logging_config import configure_logging
from Market_Lens.models.enums import DateMode, ResultView, SortDirection
from Market_Lens.models.filters import IntradayFilters
from Market_Lens.models.watchlist import WatchlistPatch
from Market_Lens.query.presets import get_date_preset
from Market_Lens.reporting.terminal import (
    render_chart_bars,
    render_error,
    render_intraday_movers,
    render_scan_results,
    render_watchlists,
)
from Market_Lens.services.api_client import DashboardApiClient
from Market_Lens.utils.exceptions import MarketLensError

# ---------------------------------------------------------------------------
# Typer app and sub-apps
# ---------------------------------------------------------------------------

app = typer.Typer(name="market-lens", help="Terminal client for the market dashboard API")
watchlist_app = typer.Typer(help="Manage watchlists")
app.add_typer(watchlist_app, name="watchlist")

# Rich console for formatted output
console = Console()


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Suppress info logging")] = False,
) -> None:
    """Query the gap scanner and intraday movers, and manage watchlists."""
    configure_logging(verbose=verbose, quiet=quiet)


def _build_client(settings: ClientSettings) -> DashboardApiClient:
    """Create the API client. Replaced in tests to inject a mock transport."""
    return DashboardApiClient(settings)


# ---------------------------------------------------------------------------
# Option parsing helpers
# ---------------------------------------------------------------------------


def _parse_clock(value: str, option: str) -> tuple[int, int]:
    """Parse ``HH:MM`` into ``(hour, minute)``."""
    try:
        parsed = datetime.datetime.strptime(value, "%H:%M")
    except ValueError as exc:
        raise typer.BadParameter(f"expected HH:MM, got '{value}'", param_hint=option) from exc
    return parsed.hour, parsed.minute


def _apply_scan_filter(scanner: ScannerController, expression: str) -> None:
    """Apply ``group.metric.bound=value`` or ``group.direction=green|red``."""
    key, sep, value = expression.partition("=")
    parts = key.strip().split(".")
    if not sep:
        raise typer.BadParameter(f"expected KEY=VALUE, got '{expression}'", param_hint="--filter")
    try:
        if len(parts) == 2 and parts[1] in ("direction", "closeDirection"):
            scanner.set_close_direction(parts[0], value.strip())
        elif len(parts) == 3:
            scanner.set_bound(parts[0], parts[1], parts[2], value.strip())
        else:
            raise typer.BadParameter(
                f"expected group.metric.bound=value, got '{expression}'", param_hint="--filter"
            )
    except (MarketLensError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--filter") from exc


def _apply_sort(
    controller: ScannerController | IntradayController,
    sort: str | None,
    order: SortDirection,
) -> None:
    """Set the sort key, then flip the direction if it does not match *order*."""
    if sort and sort != controller.state.sort:
        controller.set_sort(sort)
    if controller.state.sort_dir != order:
        controller.set_sort(controller.state.sort)


# ---------------------------------------------------------------------------
# scan command
# ---------------------------------------------------------------------------


@app.command()
def scan(
    filters: Annotated[
        list[str] | None,
        typer.Option(
            "--filter",
            "-f",
            help="Filter as group.metric.bound=value (gd.gap.min=10) or group.direction=green",
        ),
    ] = None,
    date_preset: Annotated[
        str | None,
        typer.Option(help="yesterday, lastWeek, last2Weeks, lastMonth, last3Months"),
    ] = None,
    gap_date: Annotated[str | None, typer.Option(help="Specific gap date (YYYY-MM-DD)")] = None,
    date_from: Annotated[str | None, typer.Option(help="Range start (YYYY-MM-DD)")] = None,
    date_to: Annotated[str | None, typer.Option(help="Range end (YYYY-MM-DD)")] = None,
    page: Annotated[int, typer.Option(min=1, help="Result page")] = 1,
    sort: Annotated[str | None, typer.Option(help="Sort key, e.g. gd_gap")] = None,
    order: Annotated[SortDirection, typer.Option(help="Sort direction")] = SortDirection.DESC,
) -> None:
    """Run the multi-day gap scanner."""
    code = asyncio.run(
        _scan_async(
            filters=filters or [],
            date_preset=date_preset,
            gap_date=gap_date,
            date_from=date_from,
            date_to=date_to,
            page=page,
            sort=sort,
            order=order,
        )
    )
    if code:
        raise typer.Exit(code=code)


async def _scan_async(
    *,
    filters: list[str],
    date_preset: str | None,
    gap_date: str | None,
    date_from: str | None,
    date_to: str | None,
    page: int,
    sort: str | None,
    order: SortDirection,
) -> int:
    """Compose the scan, fetch one page, and render it. Returns the exit code."""
    settings = load_settings()
    async with _build_client(settings) as api:
        scanner = ScannerController(api, settings)
        for expression in filters:
            _apply_scan_filter(scanner, expression)

        if date_preset:
            try:
                preset = get_date_preset(date_preset)
            except MarketLensError as exc:
                raise typer.BadParameter(str(exc), param_hint="--date-preset") from exc
            scanner.set_date_window(DateMode.PRESET, preset=preset)
        elif gap_date:
            scanner.set_date_window(DateMode.SINGLE, gap_date=gap_date)
        elif date_from or date_to:
            scanner.set_date_window(
                DateMode.RANGE, date_from=date_from or "", date_to=date_to or ""
            )

        _apply_sort(scanner, sort, order)
        scanner.set_page(page)
        state = await scanner.scan()

    render_scan_results(state, scanner.scanned_dates)
    return 1 if state.view == ResultView.ERROR else 0


# ---------------------------------------------------------------------------
# movers command
# ---------------------------------------------------------------------------


def _build_intraday_filters(
    *,
    date: datetime.datetime | None,
    start: str | None,
    end: str | None,
    preset: str | None,
    extra: dict[str, object],
) -> dict[str, object]:
    """Collect filter edits from CLI options, in application order."""
    edits: dict[str, object] = {}
    if date is not None:
        edits["date"] = date.date()
    if preset is None:
        if start:
            edits["from_hour"], edits["from_minute"] = _parse_clock(start, "--from")
        if end:
            edits["to_hour"], edits["to_minute"] = _parse_clock(end, "--to")
    edits.update({key: value for key, value in extra.items() if value is not None})
    return edits


def _configure_intraday(
    intraday: IntradayController,
    edits: dict[str, object],
    preset: str | None,
) -> None:
    try:
        if preset:
            intraday.apply_preset(preset)
        for key, value in edits.items():
            intraday.set_filter(key, value)
    except (MarketLensError, ValidationError) as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command()
def movers(
    date: Annotated[
        datetime.datetime | None,
        typer.Option(formats=["%Y-%m-%d"], help="Trading day (default: previous weekday)"),
    ] = None,
    start: Annotated[str | None, typer.Option("--from", help="Window start, HH:MM")] = None,
    end: Annotated[str | None, typer.Option("--to", help="Window end, HH:MM")] = None,
    preset: Annotated[
        str | None,
        typer.Option(help="pre_market, market_open, midday, market_close, after_hours, full_day"),
    ] = None,
    direction: Annotated[str | None, typer.Option(help="up, down or both")] = None,
    min_change: Annotated[float | None, typer.Option(help="Minimum % change")] = None,
    timespan: Annotated[str | None, typer.Option(help="minute or hour")] = None,
    multiplier: Annotated[int | None, typer.Option(help="Bar size multiplier")] = None,
    page: Annotated[int, typer.Option(min=1, help="Result page")] = 1,
    sort: Annotated[str | None, typer.Option(help="Sort key, e.g. changePct")] = None,
    order: Annotated[SortDirection, typer.Option(help="Sort direction")] = SortDirection.DESC,
    expand: Annotated[
        str | None, typer.Option(help="Also load the intraday chart of this ticker")
    ] = None,
) -> None:
    """List intraday movers inside a time window."""
    edits = _build_intraday_filters(
        date=date,
        start=start,
        end=end,
        preset=preset,
        extra={
            "direction": direction,
            "min_change": min_change,
            "timespan": timespan,
            "multiplier": multiplier,
        },
    )
    code = asyncio.run(
        _movers_async(edits=edits, preset=preset, page=page, sort=sort, order=order, expand=expand)
    )
    if code:
        raise typer.Exit(code=code)


async def _movers_async(
    *,
    edits: dict[str, object],
    preset: str | None,
    page: int,
    sort: str | None,
    order: SortDirection,
    expand: str | None,
) -> int:
    """Search intraday movers and optionally expand one row. Returns the exit code."""
    settings = load_settings()
    async with _build_client(settings) as api:
        intraday = IntradayController(api, settings)
        _configure_intraday(intraday, edits, preset)
        _apply_sort(intraday, sort, order)
        intraday.set_page(page)
        state = await intraday.search()
        if expand and state.view == ResultView.RESULTS:
            await intraday.set_expanded(expand)

    render_intraday_movers(state)
    render_chart_bars(intraday.expansion)
    return 1 if state.view == ResultView.ERROR else 0


# ---------------------------------------------------------------------------
# chart command
# ---------------------------------------------------------------------------


@app.command()
def chart(
    ticker: Annotated[str, typer.Argument(help="Ticker symbol")],
    date: Annotated[
        datetime.datetime | None,
        typer.Option(formats=["%Y-%m-%d"], help="Trading day (default: previous weekday)"),
    ] = None,
    start: Annotated[str | None, typer.Option("--from", help="Window start, HH:MM")] = None,
    end: Annotated[str | None, typer.Option("--to", help="Window end, HH:MM")] = None,
    preset: Annotated[str | None, typer.Option(help="Named time window, e.g. market_open")] = None,
    timespan: Annotated[str | None, typer.Option(help="minute or hour")] = None,
    multiplier: Annotated[int | None, typer.Option(help="Bar size multiplier")] = None,
) -> None:
    """Show intraday bars for one ticker."""
    edits = _build_intraday_filters(
        date=date,
        start=start,
        end=end,
        preset=preset,
        extra={"timespan": timespan, "multiplier": multiplier},
    )
    code = asyncio.run(_chart_async(ticker=ticker, edits=edits, preset=preset))
    if code:
        raise typer.Exit(code=code)


async def _chart_async(*, ticker: str, edits: dict[str, object], preset: str | None) -> int:
    """Load and render one ticker's bars. Returns 1 when the load failed."""
    settings = load_settings()
    async with _build_client(settings) as api:
        intraday = IntradayController(api, settings, IntradayFilters())
        _configure_intraday(intraday, edits, preset)
        expansion = await intraday.set_expanded(ticker)

    render_chart_bars(expansion)
    if expansion.failed:
        render_error(f"Could not load chart data for {expansion.active_key}")
        return 1
    return 0


# ---------------------------------------------------------------------------
# watchlist subcommands
# ---------------------------------------------------------------------------


WatchlistAction = Callable[[MembershipController], Awaitable[bool]]


async def _with_watchlists(label: str, action: WatchlistAction) -> int:
    """Load the watchlist mirror, run one action, and render the result."""
    settings = load_settings()
    async with _build_client(settings) as api:
        watchlists = MembershipController(api)
        if not await watchlists.fetch_lists():
            render_error(watchlists.error or "Failed to load watchlists")
            return 1
        ok = await action(watchlists)

    if not ok:
        render_error(watchlists.error or f"Watchlist {label} failed")
        return 1
    render_watchlists(watchlists.state)
    return 0


def _run_watchlists(label: str, action: WatchlistAction) -> None:
    code = asyncio.run(_with_watchlists(label, action))
    if code:
        raise typer.Exit(code=code)


@watchlist_app.command("list")
def watchlist_list() -> None:
    """List all watchlists with their tickers."""

    async def _noop(watchlists: MembershipController) -> bool:
        return True

    _run_watchlists("list", _noop)


@watchlist_app.command("create")
def watchlist_create(
    name: Annotated[str, typer.Argument(help="Name for the new watchlist")],
    color: Annotated[str | None, typer.Option(help="Hex color, e.g. #6366f1")] = None,
    ticker: Annotated[str | None, typer.Option(help="Ticker to add to the new list")] = None,
) -> None:
    """Create a new watchlist, optionally seeded with one ticker."""
    if not name.strip():
        raise typer.BadParameter("watchlist name cannot be blank", param_hint="NAME")

    async def _create(watchlists: MembershipController) -> bool:
        if ticker:
            created = await watchlists.create_list_with_item(name, ticker, color=color)
        else:
            created = await watchlists.create_list(name, color)
        if created is None:
            return False
        console.print(f"[green]Watchlist '{created.name}' created (ID: {created.id})[/green]")
        return True

    _run_watchlists("create", _create)


@watchlist_app.command("rename")
def watchlist_rename(
    list_id: Annotated[int, typer.Argument(help="Watchlist ID")],
    name: Annotated[str | None, typer.Argument(help="New name")] = None,
    color: Annotated[str | None, typer.Option(help="New hex color")] = None,
) -> None:
    """Rename or recolor a watchlist."""
    if name is None and color is None:
        raise typer.BadParameter("give a new name or --color")
    patch = WatchlistPatch(name=name, color=color)

    async def _rename(watchlists: MembershipController) -> bool:
        return await watchlists.update_list(list_id, patch) is not None

    _run_watchlists("rename", _rename)


@watchlist_app.command("delete")
def watchlist_delete(
    list_id: Annotated[int, typer.Argument(help="Watchlist ID to delete")],
    force: Annotated[bool, typer.Option("--force", "-f", help="Skip confirmation")] = False,
) -> None:
    """Delete a watchlist and all its items."""
    if not force:
        confirm = typer.confirm(f"Delete watchlist {list_id}? This cannot be undone")
        if not confirm:
            console.print("[yellow]Cancelled.[/yellow]")
            raise typer.Exit(code=0)

    async def _delete(watchlists: MembershipController) -> bool:
        return await watchlists.delete_list(list_id)

    _run_watchlists("delete", _delete)


@watchlist_app.command("add")
def watchlist_add(
    list_id: Annotated[int, typer.Argument(help="Watchlist ID")],
    tickers: Annotated[list[str], typer.Argument(help="Ticker symbols to add")],
) -> None:
    """Add tickers to a watchlist."""

    async def _add(watchlists: MembershipController) -> bool:
        results = [await watchlists.add_item_to_list(list_id, ticker) for ticker in tickers]
        return all(results)

    _run_watchlists("add", _add)


@watchlist_app.command("remove")
def watchlist_remove(
    list_id: Annotated[int, typer.Argument(help="Watchlist ID")],
    tickers: Annotated[list[str], typer.Argument(help="Ticker symbols to remove")],
) -> None:
    """Remove tickers from a watchlist."""

    async def _remove(watchlists: MembershipController) -> bool:
        results = [await watchlists.remove_item_from_list(list_id, ticker) for ticker in tickers]
        return all(results)

    _run_watchlists("remove", _remove)
