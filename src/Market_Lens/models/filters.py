"""Filter and paging models edited by the scanner and intraday views.

All models are frozen. Edits produce new instances via ``model_copy`` so a
snapshot handed to a caller never changes underneath it.
"""

import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from Market_Lens.models.enums import (
    CloseDirection,
    DateMode,
    DatePreset,
    DayGroup,
    Metric,
    MoverDirection,
    SortDirection,
    Timespan,
)

DEFAULT_PAGE_LIMIT: int = 50


class RangeFilter(BaseModel):
    """Optional min/max bounds on one metric. An empty string means unbounded.

    Bounds are kept as the raw text the user typed; numeric validation is
    left to the remote service.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    min: str = ""
    max: str = ""

    @property
    def is_active(self) -> bool:
        """True when at least one bound is set."""
        return bool(self.min or self.max)


def _empty_ranges() -> dict[Metric, RangeFilter]:
    return {metric: RangeFilter() for metric in Metric}


class DayFilters(BaseModel):
    """Range filters for every metric of one day-group, plus close direction."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ranges: dict[Metric, RangeFilter] = Field(default_factory=_empty_ranges)
    close_direction: CloseDirection = CloseDirection.ANY

    @field_validator("ranges")
    @classmethod
    def _complete_ranges(cls, value: dict[Metric, RangeFilter]) -> dict[Metric, RangeFilter]:
        """Fill in missing metrics and keep declaration order."""
        return {metric: value.get(metric, RangeFilter()) for metric in Metric}

    def range_for(self, metric: Metric) -> RangeFilter:
        """Return the range filter for *metric*."""
        return self.ranges[metric]


class ScannerFilters(BaseModel):
    """One ``DayFilters`` per day-group. Field names are the day-group prefixes."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    gd: DayFilters = Field(default_factory=DayFilters)
    pd: DayFilters = Field(default_factory=DayFilters)
    d2: DayFilters = Field(default_factory=DayFilters)
    d3: DayFilters = Field(default_factory=DayFilters)

    def group(self, day_group: DayGroup) -> DayFilters:
        """Return the filters for *day_group*."""
        day_filters: DayFilters = getattr(self, day_group.value)
        return day_filters

    def with_group(self, day_group: DayGroup, day_filters: DayFilters) -> "ScannerFilters":
        """Return a copy with *day_group* replaced."""
        return self.model_copy(update={day_group.value: day_filters})


class DateWindow(BaseModel):
    """Gap-day date selection for the scanner.

    The baseline (``mode=NONE``) contributes no query parameters, leaving
    the date choice to the server.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    mode: DateMode = DateMode.NONE
    preset: DatePreset | None = None
    gap_date: str = ""
    date_from: str = ""
    date_to: str = ""


def previous_weekday(today: datetime.date | None = None) -> datetime.date:
    """Return the most recent weekday strictly before *today*."""
    day = (today or datetime.date.today()) - datetime.timedelta(days=1)
    while day.weekday() >= 5:  # noqa: PLR2004
        day -= datetime.timedelta(days=1)
    return day


class ChartWindow(BaseModel):
    """The date/time window and bar size that scope a per-ticker chart fetch.

    Two windows compare equal exactly when a chart fetched for one is valid
    for the other.
    """

    model_config = ConfigDict(frozen=True)

    date: datetime.date
    from_hour: int
    from_minute: int
    to_hour: int
    to_minute: int
    timespan: Timespan
    multiplier: int


class IntradayFilters(BaseModel):
    """Filters for the intraday movers search.

    Field names accept both snake_case and the camelCase names the remote
    service uses (``fromHour``, ``minChange``...). Unknown names are rejected.
    Start/end ordering is not checked here; the service validates the window.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    date: datetime.date = Field(default_factory=previous_weekday)
    from_hour: int = Field(default=9, ge=0, le=23)
    from_minute: int = Field(default=30, ge=0, le=59)
    to_hour: int = Field(default=16, ge=0, le=23)
    to_minute: int = Field(default=0, ge=0, le=59)
    direction: MoverDirection = MoverDirection.BOTH
    min_change: float = Field(default=2.0, ge=0)
    timespan: Timespan = Timespan.HOUR
    multiplier: int = Field(default=1, ge=1)

    def chart_window(self) -> ChartWindow:
        """Project the fields that scope a per-ticker chart."""
        return ChartWindow(
            date=self.date,
            from_hour=self.from_hour,
            from_minute=self.from_minute,
            to_hour=self.to_hour,
            to_minute=self.to_minute,
            timespan=self.timespan,
            multiplier=self.multiplier,
        )


class Paging(BaseModel):
    """Page number, page size and sort order of a paged search."""

    model_config = ConfigDict(frozen=True)

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=DEFAULT_PAGE_LIMIT, gt=0)
    sort: str
    sort_dir: SortDirection = SortDirection.DESC
