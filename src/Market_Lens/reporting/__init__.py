"""Reporting module: display formatters and rich terminal tables.

Re-exports all public functions so consumers can import directly:
    from Market_Lens.reporting import render_scan_results, format_price
"""

from Market_Lens.reporting.formatters import (
    change_color,
    format_bar_time,
    format_number,
    format_percent,
    format_price,
    format_volume,
)
from Market_Lens.reporting.terminal import (
    render_chart_bars,
    render_error,
    render_intraday_movers,
    render_scan_results,
    render_watchlists,
)

__all__ = [
    # Formatters
    "change_color",
    "format_bar_time",
    "format_number",
    "format_percent",
    "format_price",
    "format_volume",
    # Terminal
    "render_chart_bars",
    "render_error",
    "render_intraday_movers",
    "render_scan_results",
    "render_watchlists",
]
