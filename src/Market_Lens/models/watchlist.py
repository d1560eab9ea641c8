"""Watchlist models: named, colored groups of tracked tickers."""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def normalize_ticker(ticker: str) -> str:
    """Upper-case and strip a ticker symbol."""
    return ticker.upper().strip()


class WatchlistItem(BaseModel):
    """A tracked symbol inside a watchlist group."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    ticker: str
    name: str | None = None
    id: int | None = None
    created_at: str | None = None

    @field_validator("ticker")
    @classmethod
    def _normalize(cls, value: str) -> str:
        return normalize_ticker(value)


class WatchlistGroup(BaseModel):
    """A named watchlist. Items are unique by ticker; the first occurrence wins."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    name: str
    color: str
    items: list[WatchlistItem] = Field(default_factory=list)
    created_at: str | None = None

    @field_validator("items")
    @classmethod
    def _unique_by_ticker(cls, value: list[WatchlistItem]) -> list[WatchlistItem]:
        seen: set[str] = set()
        unique: list[WatchlistItem] = []
        for item in value:
            if item.ticker in seen:
                continue
            seen.add(item.ticker)
            unique.append(item)
        return unique

    @property
    def tickers(self) -> list[str]:
        """Tickers in display order."""
        return [item.ticker for item in self.items]

    def contains(self, ticker: str) -> bool:
        """True when *ticker* is a member of this group."""
        wanted = normalize_ticker(ticker)
        return any(item.ticker == wanted for item in self.items)


class WatchlistPatch(BaseModel):
    """Partial update for a watchlist group. ``None`` fields are left unchanged."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str | None = None
    color: str | None = None

    def as_payload(self) -> dict[str, str]:
        """Request body containing only the fields being changed."""
        return self.model_dump(exclude_none=True)
