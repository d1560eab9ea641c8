"""Filter editing and query-parameter composition.

Re-exports the public functions so consumers can import directly:
    from Market_Lens.query import compose_scan_params, set_bound
"""

from Market_Lens.query.composer import (
    compose_chart_params,
    compose_intraday_params,
    compose_scan_params,
)
from Market_Lens.query.presets import (
    INTRADAY_PRESETS,
    SCANNER_DATE_PRESETS,
    TimeWindowPreset,
    get_date_preset,
    get_intraday_preset,
)
from Market_Lens.query.range_filters import (
    count_active,
    count_active_total,
    parse_day_group,
    parse_metric,
    set_bound,
    set_close_direction,
)

__all__ = [
    "INTRADAY_PRESETS",
    "SCANNER_DATE_PRESETS",
    "TimeWindowPreset",
    "compose_chart_params",
    "compose_intraday_params",
    "compose_scan_params",
    "count_active",
    "count_active_total",
    "get_date_preset",
    "get_intraday_preset",
    "parse_day_group",
    "parse_metric",
    "set_bound",
    "set_close_direction",
]
