"""Tests for MembershipController: the client-side watchlist mirror.

Covers:
- fetch_lists() replaces the mirror and fixes the selection
- create / update / delete with server confirmation
- add / remove items only after success
- derived membership queries
"""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from Market_Lens.controllers.membership import (
    LIST_COLORS,
    MembershipController,
    list_color_for_new,
)
from Market_Lens.models.api import ApiFailure, ApiSuccess
from Market_Lens.models.watchlist import WatchlistPatch


def _ok(payload: Any = None, status_code: int = 200) -> ApiSuccess:
    return ApiSuccess(status_code=status_code, payload=payload)


@pytest_asyncio.fixture()
async def loaded(mock_api: AsyncMock, watchlists_payload: dict[str, Any]) -> MembershipController:
    """A controller whose mirror holds the three sample lists."""
    mock_api.list_watchlists.return_value = _ok(watchlists_payload)
    controller = MembershipController(mock_api)
    await controller.fetch_lists()
    return controller


class TestFetchLists:
    """fetch_lists() replaces the mirror wholesale."""

    @pytest.mark.asyncio()
    async def test_auto_selects_first(self, loaded: MembershipController) -> None:
        assert [group.id for group in loaded.lists] == [1, 2, 3]
        assert loaded.state.active_list_id == 1
        assert loaded.error is None

    @pytest.mark.asyncio()
    async def test_keeps_valid_selection(
        self,
        loaded: MembershipController,
        mock_api: AsyncMock,
        watchlists_payload: dict[str, Any],
    ) -> None:
        loaded.set_active_list(2)
        mock_api.list_watchlists.return_value = _ok(watchlists_payload)
        await loaded.fetch_lists()
        assert loaded.state.active_list_id == 2

    @pytest.mark.asyncio()
    async def test_repairs_dangling_selection(
        self,
        loaded: MembershipController,
        mock_api: AsyncMock,
        watchlists_payload: dict[str, Any],
    ) -> None:
        loaded.set_active_list(3)
        mock_api.list_watchlists.return_value = _ok({"data": watchlists_payload["data"][:2]})
        await loaded.fetch_lists()
        assert loaded.state.active_list_id == 1

    @pytest.mark.asyncio()
    async def test_empty_store_selects_nothing(self, mock_api: AsyncMock) -> None:
        mock_api.list_watchlists.return_value = _ok({"data": []})
        controller = MembershipController(mock_api)
        assert await controller.fetch_lists()
        assert controller.active_list is None

    @pytest.mark.asyncio()
    async def test_failure_sets_error_and_keeps_mirror(
        self,
        loaded: MembershipController,
        mock_api: AsyncMock,
    ) -> None:
        mock_api.list_watchlists.return_value = ApiFailure(detail="refused")
        assert not await loaded.fetch_lists()
        assert loaded.error == "Failed to load watchlists"
        assert len(loaded.lists) == 3
        assert not loaded.state.loading


class TestCreateList:
    """create_list() requires a non-blank name and appends the server's group."""

    @pytest.mark.asyncio()
    async def test_blank_name_skips_server(self, mock_api: AsyncMock) -> None:
        controller = MembershipController(mock_api)
        assert await controller.create_list("   ") is None
        mock_api.create_watchlist.assert_not_awaited()

    @pytest.mark.asyncio()
    async def test_appends_server_group(
        self,
        loaded: MembershipController,
        mock_api: AsyncMock,
    ) -> None:
        mock_api.create_watchlist.return_value = _ok(
            {"data": {"id": 9, "name": "Momentum", "color": LIST_COLORS[3], "items": []}},
            status_code=201,
        )

        group = await loaded.create_list("  Momentum ")

        assert group is not None
        assert group.id == 9
        assert loaded.lists[-1] == group
        mock_api.create_watchlist.assert_awaited_once_with("Momentum", LIST_COLORS[3])

    @pytest.mark.asyncio()
    async def test_duplicate_name_returns_none(
        self,
        loaded: MembershipController,
        mock_api: AsyncMock,
    ) -> None:
        mock_api.create_watchlist.return_value = ApiFailure(
            status_code=409, error="Watchlist name already exists"
        )
        assert await loaded.create_list("Tech") is None
        assert loaded.error == "Watchlist name already exists"
        assert len(loaded.lists) == 3

    @pytest.mark.asyncio()
    async def test_create_with_item(self, mock_api: AsyncMock) -> None:
        mock_api.create_watchlist.return_value = _ok(
            {"data": {"id": 5, "name": "Saved", "color": LIST_COLORS[0]}}
        )
        mock_api.add_watchlist_item.return_value = _ok({"data": {"id": 50, "ticker": "TSLA"}})
        controller = MembershipController(mock_api)

        group = await controller.create_list_with_item("Saved", "tsla", "Tesla")

        assert group is not None
        assert group.tickers == ["TSLA"]
        mock_api.add_watchlist_item.assert_awaited_once_with(5, "TSLA", "Tesla")

    @pytest.mark.asyncio()
    async def test_create_with_item_keeps_color(self, mock_api: AsyncMock) -> None:
        mock_api.create_watchlist.return_value = _ok(
            {"data": {"id": 6, "name": "Runners", "color": "#123456"}}
        )
        mock_api.add_watchlist_item.return_value = _ok({"data": {"id": 60, "ticker": "GME"}})
        controller = MembershipController(mock_api)

        group = await controller.create_list_with_item("Runners", "gme", color="#123456")

        assert group is not None
        assert group.color == "#123456"
        mock_api.create_watchlist.assert_awaited_once_with("Runners", "#123456")


class TestUpdateAndDelete:
    """update_list() merges; delete_list() fixes the selection pointer."""

    @pytest.mark.asyncio()
    async def test_rename_keeps_items(
        self,
        loaded: MembershipController,
        mock_api: AsyncMock,
    ) -> None:
        mock_api.update_watchlist.return_value = _ok({"data": {"id": 1, "name": "Big Tech"}})

        group = await loaded.update_list(1, WatchlistPatch(name="Big Tech"))

        assert group is not None
        assert group.name == "Big Tech"
        assert group.color == "#6366f1"
        assert loaded.get_list(1) == group
        assert group.tickers == ["AAPL", "MSFT"]

    @pytest.mark.asyncio()
    async def test_update_failure_leaves_mirror(
        self,
        loaded: MembershipController,
        mock_api: AsyncMock,
    ) -> None:
        mock_api.update_watchlist.return_value = ApiFailure(status_code=500)
        assert await loaded.update_list(1, WatchlistPatch(name="X")) is None
        assert loaded.get_list(1).name == "Tech"  # type: ignore[union-attr]
        assert loaded.error == "Failed to update watchlist"

    @pytest.mark.asyncio()
    async def test_delete_active_with_others_present(
        self,
        loaded: MembershipController,
        mock_api: AsyncMock,
    ) -> None:
        mock_api.delete_watchlist.return_value = _ok(status_code=204)

        assert await loaded.delete_list(1)

        remaining = [group.id for group in loaded.lists]
        assert remaining == [2, 3]
        assert loaded.state.active_list_id in remaining

    @pytest.mark.asyncio()
    async def test_delete_last_list_clears_selection(self, mock_api: AsyncMock) -> None:
        mock_api.list_watchlists.return_value = _ok(
            {"data": [{"id": 7, "name": "Only", "color": "#fff"}]}
        )
        mock_api.delete_watchlist.return_value = _ok(status_code=204)
        controller = MembershipController(mock_api)
        await controller.fetch_lists()

        await controller.delete_list(7)

        assert controller.lists == ()
        assert controller.state.active_list_id is None

    @pytest.mark.asyncio()
    async def test_delete_inactive_keeps_selection(
        self,
        loaded: MembershipController,
        mock_api: AsyncMock,
    ) -> None:
        mock_api.delete_watchlist.return_value = _ok(status_code=204)
        await loaded.delete_list(3)
        assert loaded.state.active_list_id == 1

    @pytest.mark.asyncio()
    async def test_delete_failure(self, loaded: MembershipController, mock_api: AsyncMock) -> None:
        mock_api.delete_watchlist.return_value = ApiFailure(detail="refused")
        assert not await loaded.delete_list(1)
        assert len(loaded.lists) == 3


class TestItems:
    """Items change locally only once the server confirms."""

    @pytest.mark.asyncio()
    async def test_add_failure_leaves_items_unchanged(
        self,
        loaded: MembershipController,
        mock_api: AsyncMock,
    ) -> None:
        before = loaded.get_list(3)
        mock_api.add_watchlist_item.return_value = ApiFailure(detail="connection reset")

        ok = await loaded.add_item_to_list(3, "NVDA")

        assert ok is False
        assert loaded.get_list(3) == before
        assert loaded.error == "Failed to add to watchlist"

    @pytest.mark.asyncio()
    async def test_add_success_updates_mirror(
        self,
        loaded: MembershipController,
        mock_api: AsyncMock,
    ) -> None:
        mock_api.add_watchlist_item.return_value = _ok(
            {"data": {"id": 31, "ticker": "NVDA", "name": "NVIDIA"}}, status_code=201
        )
        assert await loaded.add_item_to_list(3, "nvda", "NVIDIA")
        group = loaded.get_list(3)
        assert group is not None
        assert group.tickers == ["NVDA"]
        assert group.items[0].id == 31

    @pytest.mark.asyncio()
    async def test_add_without_body_uses_local_record(
        self,
        loaded: MembershipController,
        mock_api: AsyncMock,
    ) -> None:
        mock_api.add_watchlist_item.return_value = _ok(status_code=204)
        assert await loaded.add_item_to_list(3, "amd", "AMD Inc")
        assert loaded.get_list(3).items[0].name == "AMD Inc"  # type: ignore[union-attr]

    @pytest.mark.asyncio()
    async def test_remove_success(self, loaded: MembershipController, mock_api: AsyncMock) -> None:
        mock_api.remove_watchlist_item.return_value = _ok(status_code=204)
        assert await loaded.remove_item_from_list(1, "aapl")
        assert loaded.get_list(1).tickers == ["MSFT"]  # type: ignore[union-attr]

    @pytest.mark.asyncio()
    async def test_remove_failure_leaves_items(
        self,
        loaded: MembershipController,
        mock_api: AsyncMock,
    ) -> None:
        mock_api.remove_watchlist_item.return_value = ApiFailure(status_code=404, error="Not found")
        assert not await loaded.remove_item_from_list(1, "AAPL")
        assert loaded.get_list(1).tickers == ["AAPL", "MSFT"]  # type: ignore[union-attr]
        assert loaded.error == "Not found"


class TestDerivedQueries:
    """Pure queries over the mirror."""

    @pytest.mark.asyncio()
    async def test_membership_queries(self, loaded: MembershipController) -> None:
        assert loaded.is_in_any_list("aapl")
        assert not loaded.is_in_any_list("TSLA")
        assert [group.id for group in loaded.get_lists_for_ticker("AAPL")] == [1, 2]

    @pytest.mark.asyncio()
    async def test_total_items(self, loaded: MembershipController) -> None:
        assert loaded.total_items == 3

    @pytest.mark.asyncio()
    async def test_set_active_list(self, loaded: MembershipController) -> None:
        loaded.set_active_list(2)
        assert loaded.active_list is not None
        assert loaded.active_list.name == "Gappers"
        loaded.set_active_list(None)
        assert loaded.active_list is None


class TestPalette:
    """New list colors rotate through the palette."""

    def test_rotation(self) -> None:
        assert list_color_for_new(0) == "#6366f1"
        assert list_color_for_new(len(LIST_COLORS)) == LIST_COLORS[0]
        assert list_color_for_new(11) == LIST_COLORS[1]
