"""StrEnum types for the market dashboard domain.

Values match the strings the remote service accepts, so members can be
placed in a query parameter map without conversion.
"""

from enum import StrEnum


class DayGroup(StrEnum):
    """Day bucket over which scanner metric filters are evaluated."""

    GAP_DAY = "gd"
    PREV_DAY = "pd"
    DAY_2 = "d2"
    DAY_3 = "d3"


class Metric(StrEnum):
    """Numeric metric that can carry a min/max range filter."""

    GAP = "gap"
    VOLUME = "volume"
    RANGE = "range"
    HIGH_SPIKE = "highSpike"
    LOW_SPIKE = "lowSpike"
    OPEN_PRICE = "openPrice"
    CLOSE_PRICE = "closePrice"
    RETURN_PCT = "returnPct"
    VWAP = "vwap"
    CHANGE = "change"
    HIGH_GAP = "highGap"
    HIGH_FADE = "highFade"


class Bound(StrEnum):
    """Which side of a range filter is being edited."""

    MIN = "min"
    MAX = "max"


class CloseDirection(StrEnum):
    """Categorical close-direction filter. ``ANY`` is the unset value."""

    ANY = ""
    GREEN = "green"
    RED = "red"


class SortDirection(StrEnum):
    """Sort order for paged results."""

    ASC = "asc"
    DESC = "desc"


class MoverDirection(StrEnum):
    """Direction filter for intraday movers."""

    UP = "up"
    DOWN = "down"
    BOTH = "both"


class Timespan(StrEnum):
    """Bar size unit for intraday aggregation."""

    MINUTE = "minute"
    HOUR = "hour"


class DateMode(StrEnum):
    """How the scanner's gap-day date window is chosen. ``NONE`` sends nothing."""

    NONE = ""
    PRESET = "preset"
    SINGLE = "single"
    RANGE = "range"


class DatePreset(StrEnum):
    """Relative date windows understood by the scanner endpoint."""

    YESTERDAY = "yesterday"
    LAST_WEEK = "lastWeek"
    LAST_2_WEEKS = "last2Weeks"
    LAST_MONTH = "lastMonth"
    LAST_3_MONTHS = "last3Months"


class LifecycleStatus(StrEnum):
    """State of a result lifecycle."""

    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class ResultView(StrEnum):
    """What a results surface should render.

    ``ERROR`` comes with a retry affordance; ``EMPTY`` comes with a
    suggestion to relax filters and never with a retry button.
    """

    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"
    EMPTY = "empty"
    RESULTS = "results"


class ExpansionView(StrEnum):
    """What an expanded detail row should render."""

    COLLAPSED = "collapsed"
    LOADING = "loading"
    NO_DATA = "no_data"
    READY = "ready"
