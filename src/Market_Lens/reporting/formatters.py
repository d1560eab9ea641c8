"""Display formatting for prices, percentages and large quantities.

Every helper accepts ``None`` (a field the server left out) and NaN, and
renders both as an em dash so tables never show ``None`` or ``nan``.
Prices arrive as ``Decimal`` and are formatted without a float round-trip.
"""

from __future__ import annotations

import datetime
import math
from decimal import Decimal

MISSING: str = "—"

# --- Magnitude suffixes, largest first ---
_SUFFIXES: tuple[tuple[float, str], ...] = (
    (1e12, "T"),
    (1e9, "B"),
    (1e6, "M"),
    (1e3, "K"),
)


def format_number(value: float | None) -> str:
    """Abbreviate with a T/B/M/K suffix and two decimals: ``1234567 -> "1.23M"``."""
    if value is None or math.isnan(value):
        return MISSING
    for threshold, suffix in _SUFFIXES:
        if abs(value) >= threshold:
            return f"{value / threshold:.2f}{suffix}"
    return f"{value:.2f}"


def format_price(value: Decimal | float | None) -> str:
    """US dollars with thousands separators: ``-1234.5 -> "-$1,234.50"``."""
    if value is None or math.isnan(value):
        return MISSING
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def format_percent(value: float | None) -> str:
    """Signed percentage with two decimals. Zero is shown as ``+0.00%``."""
    if value is None or math.isnan(value):
        return MISSING
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.2f}%"


def format_volume(value: float | None) -> str:
    """Share volume, abbreviated like ``format_number``."""
    return format_number(value)


def format_bar_time(epoch_seconds: int) -> str:
    """``HH:MM`` (UTC) for an intraday bar timestamp."""
    moment = datetime.datetime.fromtimestamp(epoch_seconds, tz=datetime.UTC)
    return moment.strftime("%H:%M")


def change_color(value: Decimal | float | None) -> str:
    """Rich style for a signed change: green up, red down, dim flat or missing."""
    if value is None or math.isnan(value) or value == 0:
        return "dim"
    return "green" if value > 0 else "red"
