"""Result models returned by the scanner, intraday and chart endpoints.

The remote service speaks camelCase JSON; models accept it through an
alias generator and expose snake_case attributes. Unknown fields are
ignored so the service can add columns without breaking the client.

Price fields are Decimal and serialize back to strings, so a price is
never silently rounded through float.
"""

import logging
import math
from decimal import Decimal
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from Market_Lens.models.enums import MoverDirection
from Market_Lens.models.filters import DEFAULT_PAGE_LIMIT

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT")

_WIRE_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class ComputedDay(BaseModel):
    """Server-computed metrics for one day-group of a scan hit."""

    model_config = _WIRE_CONFIG

    gap: float | None = None
    volume: float | None = None
    range: float | None = None
    high_spike: float | None = None
    low_spike: float | None = None
    open_price: Decimal | None = None
    close_price: Decimal | None = None
    high_price: Decimal | None = None
    low_price: Decimal | None = None
    return_pct: float | None = None
    vwap: Decimal | None = None
    change: float | None = None
    close_direction: str | None = None
    high_gap: float | None = None
    high_fade: float | None = None

    @field_serializer("open_price", "close_price", "high_price", "low_price", "vwap")
    def serialize_decimal(self, value: Decimal | None) -> str | None:
        """Serialize Decimal fields as strings to preserve precision."""
        return None if value is None else str(value)


class ScanResult(BaseModel):
    """One row of the gap scanner: fundamentals plus four computed days."""

    model_config = _WIRE_CONFIG

    ticker: str
    gap_date: str | None = None
    name: str | None = None
    sector: str | None = None
    industry: str | None = None
    country: str | None = None
    market_cap: float | None = None
    pe_ratio: float | None = None
    forward_pe: float | None = None
    dividend_yield: float | None = None
    employees: int | None = None
    float_shares: float | None = Field(default=None, alias="float")
    shares_outstanding: float | None = None
    beta: float | None = None
    eps: float | None = None
    gap_day: ComputedDay = Field(default_factory=ComputedDay)
    prev_day: ComputedDay = Field(default_factory=ComputedDay)
    day2: ComputedDay = Field(default_factory=ComputedDay)
    day3: ComputedDay = Field(default_factory=ComputedDay)


class ChartPoint(BaseModel):
    """Sparkline point embedded in an intraday mover row."""

    model_config = _WIRE_CONFIG

    time: int
    close: Decimal
    volume: float = 0.0

    @field_serializer("close")
    def serialize_decimal(self, value: Decimal) -> str:
        """Serialize Decimal fields as strings to preserve precision."""
        return str(value)


class IntradayMover(BaseModel):
    """A ticker whose price moved past the threshold inside the time window."""

    model_config = _WIRE_CONFIG

    ticker: str
    name: str | None = None
    sector: str | None = None
    industry: str | None = None
    start_price: Decimal | None = None
    end_price: Decimal | None = None
    high_price: Decimal | None = None
    low_price: Decimal | None = None
    change_pct: float | None = None
    change_abs: float | None = None
    total_volume: float | None = None
    peak_time: str | None = None
    trough_time: str | None = None
    direction: MoverDirection | None = None
    chart_data: list[ChartPoint] = Field(default_factory=list)

    @field_serializer("start_price", "end_price", "high_price", "low_price")
    def serialize_decimal(self, value: Decimal | None) -> str | None:
        """Serialize Decimal fields as strings to preserve precision."""
        return None if value is None else str(value)


class IntradayBar(BaseModel):
    """One OHLCV bar of a per-ticker intraday chart. ``time`` is epoch seconds."""

    model_config = _WIRE_CONFIG

    time: int
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: float = 0.0
    vwap: Decimal | None = None

    @field_serializer("open", "high", "low", "close", "vwap")
    def serialize_decimal(self, value: Decimal | None) -> str | None:
        """Serialize Decimal fields as strings to preserve precision."""
        return None if value is None else str(value)


class ScanMeta(BaseModel):
    """Paging metadata of a scan response."""

    model_config = _WIRE_CONFIG

    total: int = 0
    total_pages: int = 0
    scanned_dates: list[str] = Field(default_factory=list)


class IntradayMeta(BaseModel):
    """Paging and window metadata of an intraday movers response."""

    model_config = _WIRE_CONFIG

    total: int = 0
    page: int = 1
    limit: int = DEFAULT_PAGE_LIMIT
    total_pages: int = 0
    sort: str | None = None
    sort_dir: str | None = None
    date: str | None = None
    time_range: str | None = None


class ResultPage(BaseModel, Generic[ItemT]):
    """One page of results.

    ``page`` is 1-indexed and ``total_pages`` is ``ceil(total / limit)``.
    """

    model_config = ConfigDict(frozen=True)

    items: list[ItemT] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=DEFAULT_PAGE_LIMIT, gt=0)
    total_pages: int = Field(default=0, ge=0)

    @classmethod
    def build(
        cls,
        items: list[ItemT],
        *,
        total: int,
        page: int,
        limit: int,
        total_pages: int | None = None,
    ) -> "ResultPage[ItemT]":
        """Build a page, deriving ``total_pages`` and capping items at *limit*.

        A server that returns more rows than requested has its surplus
        dropped so the page never exceeds *limit*.
        """
        if len(items) > limit:
            logger.warning("Page returned %d items for limit %d; truncating", len(items), limit)
            items = items[:limit]
        if total_pages is None or total_pages <= 0 < total:
            total_pages = math.ceil(total / limit)
        return cls(
            items=items,
            total=total,
            page=page,
            limit=limit,
            total_pages=total_pages,
        )
