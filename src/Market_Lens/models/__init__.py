"""Pydantic v2 models, enums, and the service-boundary sum type.

Re-exports all public models so consumers can import directly:
    from Market_Lens.models import DayFilters, ScanResult, WatchlistGroup
"""

from Market_Lens.models.api import (
    ApiFailure,
    ApiResponse,
    ApiSuccess,
    ChartEnvelope,
    IntradayEnvelope,
    ScanEnvelope,
)
from Market_Lens.models.enums import (
    Bound,
    CloseDirection,
    DateMode,
    DatePreset,
    DayGroup,
    ExpansionView,
    LifecycleStatus,
    Metric,
    MoverDirection,
    ResultView,
    SortDirection,
    Timespan,
)
from Market_Lens.models.filters import (
    ChartWindow,
    DateWindow,
    DayFilters,
    IntradayFilters,
    Paging,
    RangeFilter,
    ScannerFilters,
)
from Market_Lens.models.market_data import (
    ComputedDay,
    IntradayBar,
    IntradayMeta,
    IntradayMover,
    ResultPage,
    ScanMeta,
    ScanResult,
)
from Market_Lens.models.watchlist import WatchlistGroup, WatchlistItem, WatchlistPatch

__all__ = [
    # Enums
    "Bound",
    "CloseDirection",
    "DateMode",
    "DatePreset",
    "DayGroup",
    "ExpansionView",
    "LifecycleStatus",
    "Metric",
    "MoverDirection",
    "ResultView",
    "SortDirection",
    "Timespan",
    # Filters
    "ChartWindow",
    "DateWindow",
    "DayFilters",
    "IntradayFilters",
    "Paging",
    "RangeFilter",
    "ScannerFilters",
    # Results
    "ComputedDay",
    "IntradayBar",
    "IntradayMeta",
    "IntradayMover",
    "ResultPage",
    "ScanMeta",
    "ScanResult",
    # Watchlists
    "WatchlistGroup",
    "WatchlistItem",
    "WatchlistPatch",
    # Service boundary
    "ApiFailure",
    "ApiResponse",
    "ApiSuccess",
    "ChartEnvelope",
    "IntradayEnvelope",
    "ScanEnvelope",
]
