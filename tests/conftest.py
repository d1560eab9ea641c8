"""Shared test fixtures for the Market Lens test suite.

Provides realistic response payloads and a mocked API client so tests don't
need to inline large construction blocks.
"""

from __future__ import annotations

import datetime
from typing import Any
from unittest.mock import AsyncMock

import pytest

from Market_Lens.config import ClientSettings
from Market_Lens.services.api_client import DashboardApiClient


@pytest.fixture()
def settings() -> ClientSettings:
    """Default client settings pointing at a local test server."""
    return ClientSettings(api_base_url="http://testserver/api", request_timeout_seconds=5.0)


@pytest.fixture()
def mock_api() -> AsyncMock:
    """An API client whose every endpoint is an AsyncMock."""
    return AsyncMock(spec=DashboardApiClient)


@pytest.fixture()
def scan_row() -> dict[str, Any]:
    """One gap-scanner row as the server sends it (camelCase)."""
    return {
        "ticker": "ABCD",
        "gapDate": "2024-03-01",
        "name": "Abcd Therapeutics",
        "sector": "Healthcare",
        "marketCap": 412_000_000,
        "float": 18_500_000,
        "gapDay": {
            "gap": 34.2,
            "volume": 12_400_000,
            "openPrice": 3.41,
            "closePrice": 3.02,
            "returnPct": -11.4,
            "closeDirection": "red",
        },
        "prevDay": {"gap": 1.1, "volume": 310_000, "closePrice": 2.54},
        "day2": {"volume": 290_000},
        "day3": {},
    }


@pytest.fixture()
def scan_payload(scan_row: dict[str, Any]) -> dict[str, Any]:
    """A one-row scan response with paging metadata."""
    return {
        "data": [scan_row],
        "meta": {"total": 1, "totalPages": 1, "scannedDates": ["2024-03-01"]},
    }


@pytest.fixture()
def mover_row() -> dict[str, Any]:
    """One intraday mover row."""
    return {
        "ticker": "WXYZ",
        "name": "Wxyz Corp",
        "startPrice": 10.0,
        "endPrice": 11.5,
        "changePct": 15.0,
        "totalVolume": 2_300_000,
        "peakTime": "10:42",
        "direction": "up",
        "chartData": [{"time": 1709301600, "close": 10.2, "volume": 52000}],
    }


@pytest.fixture()
def intraday_payload(mover_row: dict[str, Any]) -> dict[str, Any]:
    """A one-row intraday movers response."""
    return {
        "data": [mover_row],
        "meta": {
            "total": 1,
            "page": 1,
            "limit": 50,
            "totalPages": 1,
            "sort": "changePct",
            "sortDir": "desc",
            "date": "2024-03-01",
            "timeRange": "09:30 - 16:00",
        },
    }


@pytest.fixture()
def chart_payload() -> dict[str, Any]:
    """Two intraday bars for one ticker."""
    return {
        "data": {
            "bars": [
                {
                    "time": 1709303400,
                    "open": 10.0,
                    "high": 10.6,
                    "low": 9.9,
                    "close": 10.5,
                    "volume": 120000,
                    "vwap": 10.3,
                },
                {
                    "time": 1709307000,
                    "open": 10.5,
                    "high": 11.8,
                    "low": 10.4,
                    "close": 11.5,
                    "volume": 340000,
                    "vwap": 11.1,
                },
            ]
        }
    }


@pytest.fixture()
def watchlists_payload() -> dict[str, Any]:
    """Three watchlist groups; AAPL is in two of them."""
    return {
        "data": [
            {
                "id": 1,
                "name": "Tech",
                "color": "#6366f1",
                "items": [{"id": 11, "ticker": "AAPL"}, {"id": 12, "ticker": "MSFT"}],
                "createdAt": "2024-02-01T12:00:00Z",
            },
            {
                "id": 2,
                "name": "Gappers",
                "color": "#10b981",
                "items": [{"id": 21, "ticker": "AAPL", "name": "Apple Inc."}],
                "createdAt": "2024-02-02T12:00:00Z",
            },
            {"id": 3, "name": "Empty", "color": "#f59e0b", "items": []},
        ]
    }


@pytest.fixture()
def trading_day() -> datetime.date:
    """A Friday used as the intraday date in tests."""
    return datetime.date(2024, 3, 1)
