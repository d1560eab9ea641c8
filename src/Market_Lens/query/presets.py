"""Named intraday time-window presets and scanner date presets."""

from __future__ import annotations

from typing import Final

from pydantic import BaseModel, ConfigDict

from Market_Lens.models.enums import DatePreset
from Market_Lens.utils.exceptions import UnknownPresetError


class TimeWindowPreset(BaseModel):
    """A named wall-clock window, in exchange local time."""

    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    from_hour: int
    from_minute: int
    to_hour: int
    to_minute: int

    def as_filter_update(self) -> dict[str, int]:
        """The four intraday filter fields this preset sets."""
        return {
            "from_hour": self.from_hour,
            "from_minute": self.from_minute,
            "to_hour": self.to_hour,
            "to_minute": self.to_minute,
        }


INTRADAY_PRESETS: Final[tuple[TimeWindowPreset, ...]] = (
    TimeWindowPreset(
        key="pre_market", label="Pre-Market", from_hour=4, from_minute=0, to_hour=9, to_minute=30
    ),
    TimeWindowPreset(
        key="market_open", label="Market Open", from_hour=9, from_minute=30, to_hour=11, to_minute=0
    ),
    TimeWindowPreset(
        key="midday", label="Midday", from_hour=11, from_minute=0, to_hour=14, to_minute=0
    ),
    TimeWindowPreset(
        key="market_close",
        label="Market Close",
        from_hour=14,
        from_minute=0,
        to_hour=16,
        to_minute=0,
    ),
    TimeWindowPreset(
        key="after_hours", label="After Hours", from_hour=16, from_minute=0, to_hour=20, to_minute=0
    ),
    TimeWindowPreset(
        key="full_day", label="Full Day", from_hour=4, from_minute=0, to_hour=20, to_minute=0
    ),
)


def _slug(name: str) -> str:
    return name.strip().lower().replace("-", "_").replace(" ", "_")


def get_intraday_preset(name: str) -> TimeWindowPreset:
    """Look up a preset by key or label (``"market_open"``, ``"Market Open"``).

    Raises:
        UnknownPresetError: If no preset matches.
    """
    wanted = _slug(name)
    for preset in INTRADAY_PRESETS:
        if wanted in (preset.key, _slug(preset.label)):
            return preset
    raise UnknownPresetError(name)


# ---------------------------------------------------------------------------
# Scanner date presets
# ---------------------------------------------------------------------------

SCANNER_DATE_PRESETS: Final[dict[DatePreset, str]] = {
    DatePreset.YESTERDAY: "Yesterday",
    DatePreset.LAST_WEEK: "Last Week",
    DatePreset.LAST_2_WEEKS: "Last 2 Weeks",
    DatePreset.LAST_MONTH: "Last Month",
    DatePreset.LAST_3_MONTHS: "Last 3 Months",
}


def get_date_preset(name: str) -> DatePreset:
    """Look up a scanner date preset by value or label (``"lastWeek"``, ``"Last Week"``).

    Raises:
        UnknownPresetError: If no preset matches.
    """
    wanted = _slug(name)
    for preset, label in SCANNER_DATE_PRESETS.items():
        if wanted in (preset.value.lower(), _slug(label), _slug(label).replace("_", "")):
            return preset
    raise UnknownPresetError(name)
