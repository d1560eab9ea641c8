"""MembershipController: client-side mirror of the server's watchlist groups.

The controller is the only writer of the mirror. Edits are applied locally
only after the server confirms them, so a failed call leaves the mirror
untouched. Failures never raise; they set the shared ``error`` field
(last write wins) and the operation returns ``None`` or ``False``.
"""

from __future__ import annotations

import logging
from typing import Final

from pydantic import BaseModel, ConfigDict, ValidationError

from Market_Lens.models.api import (
    ApiFailure,
    ApiResponse,
    ApiSuccess,
    ItemEnvelope,
    ListEnvelope,
)
from Market_Lens.models.watchlist import (
    WatchlistGroup,
    WatchlistItem,
    WatchlistPatch,
    normalize_ticker,
)
from Market_Lens.services.api_client import DashboardApiClient

logger = logging.getLogger(__name__)

LIST_COLORS: Final[tuple[str, ...]] = (
    "#6366f1",
    "#10b981",
    "#f59e0b",
    "#ef4444",
    "#8b5cf6",
    "#06b6d4",
    "#ec4899",
    "#f97316",
    "#14b8a6",
    "#a855f7",
)

FETCH_FAILED_MESSAGE: Final[str] = "Failed to load watchlists"
CREATE_FAILED_MESSAGE: Final[str] = "Failed to create watchlist"
UPDATE_FAILED_MESSAGE: Final[str] = "Failed to update watchlist"
DELETE_FAILED_MESSAGE: Final[str] = "Failed to delete watchlist"
ADD_FAILED_MESSAGE: Final[str] = "Failed to add to watchlist"
REMOVE_FAILED_MESSAGE: Final[str] = "Failed to remove from watchlist"


def list_color_for_new(count: int) -> str:
    """Palette color for a new list, given how many lists already exist."""
    return LIST_COLORS[count % len(LIST_COLORS)]


class MembershipState(BaseModel):
    """Immutable snapshot of the watchlist mirror."""

    model_config = ConfigDict(frozen=True)

    lists: tuple[WatchlistGroup, ...] = ()
    active_list_id: int | None = None
    loading: bool = False
    error: str | None = None

    @property
    def active_list(self) -> WatchlistGroup | None:
        return next((group for group in self.lists if group.id == self.active_list_id), None)

    @property
    def total_items(self) -> int:
        """Number of memberships across all lists. A ticker in two lists counts twice."""
        return sum(len(group.items) for group in self.lists)


class MembershipController:
    """Named watchlist groups and the tickers they hold.

    Usage::

        watchlists = MembershipController(api)
        await watchlists.fetch_lists()
        group = await watchlists.create_list("Breakouts")
        if group is not None:
            await watchlists.add_item_to_list(group.id, "aapl", "Apple Inc.")

    Args:
        api: Dashboard API client.
    """

    def __init__(self, api: DashboardApiClient) -> None:
        self._api = api
        self._state = MembershipState()

    @property
    def state(self) -> MembershipState:
        return self._state

    @property
    def lists(self) -> tuple[WatchlistGroup, ...]:
        return self._state.lists

    @property
    def active_list(self) -> WatchlistGroup | None:
        return self._state.active_list

    @property
    def error(self) -> str | None:
        return self._state.error

    @property
    def total_items(self) -> int:
        return self._state.total_items

    # ------------------------------------------------------------------
    # Derived queries
    # ------------------------------------------------------------------

    def get_list(self, list_id: int) -> WatchlistGroup | None:
        return next((group for group in self._state.lists if group.id == list_id), None)

    def is_in_any_list(self, ticker: str) -> bool:
        """True when *ticker* belongs to at least one list."""
        return any(group.contains(ticker) for group in self._state.lists)

    def get_lists_for_ticker(self, ticker: str) -> list[WatchlistGroup]:
        """Every list containing *ticker*, in mirror order."""
        return [group for group in self._state.lists if group.contains(ticker)]

    def set_active_list(self, list_id: int | None) -> MembershipState:
        """Select a list by id, or clear the selection with ``None``."""
        self._update(active_list_id=list_id)
        return self._state

    # ------------------------------------------------------------------
    # Remote operations
    # ------------------------------------------------------------------

    async def fetch_lists(self) -> bool:
        """Replace the mirror with the server's lists.

        Selects the first list if nothing is selected, and moves a selection
        that points at a list which no longer exists.
        """
        self._update(loading=True)
        outcome = await self._api.list_watchlists()
        if isinstance(outcome, ApiFailure):
            self._fail(FETCH_FAILED_MESSAGE, outcome)
            return False
        try:
            envelope = ListEnvelope.model_validate(outcome.payload)
            groups = tuple(WatchlistGroup.model_validate(raw) for raw in envelope.data)
        except ValidationError as exc:
            logger.warning("Malformed watchlist payload: %s", exc)
            self._fail(FETCH_FAILED_MESSAGE, None)
            return False

        active = self._state.active_list_id
        if active is None or all(group.id != active for group in groups):
            active = groups[0].id if groups else None
        self._update(lists=groups, active_list_id=active, loading=False, error=None)
        logger.info("Loaded %d watchlists", len(groups))
        return True

    async def create_list(self, name: str, color: str | None = None) -> WatchlistGroup | None:
        """Create a list and append it to the mirror.

        Returns ``None`` without contacting the server when *name* is blank,
        and ``None`` when the server rejects it (e.g. a duplicate name).
        """
        name = name.strip()
        if not name:
            return None
        color = color or list_color_for_new(len(self._state.lists))
        outcome = await self._api.create_watchlist(name, color)
        group = self._parse_group(outcome, CREATE_FAILED_MESSAGE)
        if group is None:
            return None
        self._update(lists=(*self._state.lists, group), error=None)
        logger.info("Created watchlist %r (id=%d)", group.name, group.id)
        return group

    async def create_list_with_item(
        self,
        list_name: str,
        ticker: str,
        name: str | None = None,
        color: str | None = None,
    ) -> WatchlistGroup | None:
        """Create a list (in *color*, or the next palette color) and add *ticker* to it.

        Returns the list as mirrored afterwards. If the item could not be
        added, the new list is still returned, empty.
        """
        group = await self.create_list(list_name, color)
        if group is None:
            return None
        await self.add_item_to_list(group.id, ticker, name)
        return self.get_list(group.id)

    async def update_list(self, list_id: int, patch: WatchlistPatch) -> WatchlistGroup | None:
        """Rename or recolor a list. Items are kept if the server omits them."""
        current = self.get_list(list_id)
        outcome = await self._api.update_watchlist(list_id, patch)
        if isinstance(outcome, ApiFailure):
            self._fail(UPDATE_FAILED_MESSAGE, outcome)
            return None
        try:
            envelope = ItemEnvelope.model_validate(outcome.payload or {})
        except ValidationError as exc:
            logger.warning("Malformed watchlist update payload: %s", exc)
            self._fail(UPDATE_FAILED_MESSAGE, None)
            return None

        base = current.model_dump(by_alias=True) if current is not None else {}
        returned = envelope.data or {}
        merged = {**base, **patch.as_payload(), **returned}
        if current is not None and "items" not in returned:
            merged["items"] = current.model_dump(by_alias=True)["items"]
        try:
            group = WatchlistGroup.model_validate(merged)
        except ValidationError as exc:
            logger.warning("Cannot apply update to watchlist %d: %s", list_id, exc)
            self._fail(UPDATE_FAILED_MESSAGE, None)
            return None
        self._replace_group(group)
        self._update(error=None)
        return group

    async def delete_list(self, list_id: int) -> bool:
        """Delete a list. A selection pointing at it moves to the first remaining list."""
        outcome = await self._api.delete_watchlist(list_id)
        if isinstance(outcome, ApiFailure):
            self._fail(DELETE_FAILED_MESSAGE, outcome)
            return False
        remaining = tuple(group for group in self._state.lists if group.id != list_id)
        active = self._state.active_list_id
        if active == list_id:
            active = remaining[0].id if remaining else None
        self._update(lists=remaining, active_list_id=active, error=None)
        logger.info("Deleted watchlist %d", list_id)
        return True

    async def add_item_to_list(self, list_id: int, ticker: str, name: str | None = None) -> bool:
        """Add *ticker* to a list once the server accepts it."""
        ticker = normalize_ticker(ticker)
        outcome = await self._api.add_watchlist_item(list_id, ticker, name)
        if isinstance(outcome, ApiFailure):
            self._fail(ADD_FAILED_MESSAGE, outcome)
            return False
        item = self._parse_item(outcome, ticker, name)
        group = self.get_list(list_id)
        if group is not None and not group.contains(ticker):
            self._replace_group(group.model_copy(update={"items": [*group.items, item]}))
        self._update(error=None)
        return True

    async def remove_item_from_list(self, list_id: int, ticker: str) -> bool:
        """Remove *ticker* from a list once the server confirms it."""
        ticker = normalize_ticker(ticker)
        outcome = await self._api.remove_watchlist_item(list_id, ticker)
        if isinstance(outcome, ApiFailure):
            self._fail(REMOVE_FAILED_MESSAGE, outcome)
            return False
        group = self.get_list(list_id)
        if group is not None:
            items = [item for item in group.items if item.ticker != ticker]
            self._replace_group(group.model_copy(update={"items": items}))
        self._update(error=None)
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _parse_group(self, outcome: ApiResponse, message: str) -> WatchlistGroup | None:
        if isinstance(outcome, ApiFailure):
            self._fail(message, outcome)
            return None
        try:
            envelope = ItemEnvelope.model_validate(outcome.payload or {})
            group = WatchlistGroup.model_validate(envelope.data or {})
        except ValidationError as exc:
            logger.warning("Malformed watchlist payload: %s", exc)
            self._fail(message, None)
            return None
        return group

    @staticmethod
    def _parse_item(outcome: ApiResponse, ticker: str, name: str | None) -> WatchlistItem:
        """The server's item if it sent a usable one, otherwise a local record."""
        payload = outcome.payload if isinstance(outcome, ApiSuccess) else None
        try:
            envelope = ItemEnvelope.model_validate(payload or {})
            if envelope.data is not None:
                return WatchlistItem.model_validate(envelope.data)
        except ValidationError as exc:
            logger.debug("Item response for %s not usable, keeping local record: %s", ticker, exc)
        return WatchlistItem(ticker=ticker, name=name)

    def _replace_group(self, group: WatchlistGroup) -> None:
        lists = tuple(
            group if existing.id == group.id else existing for existing in self._state.lists
        )
        self._update(lists=lists)

    def _update(self, **changes: object) -> None:
        self._state = self._state.model_copy(update=changes)

    def _fail(self, message: str, failure: ApiFailure | None) -> None:
        """Record a failure. A server-supplied error string replaces *message*."""
        if failure is not None:
            message = failure.error or message
            logger.warning(
                "Watchlist request failed (status=%s): %s",
                failure.status_code,
                failure.error or failure.detail,
            )
        self._update(loading=False, error=message)
