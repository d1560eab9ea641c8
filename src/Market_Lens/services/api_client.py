"""Async HTTP client for the market dashboard API.

Wraps a shared ``httpx.AsyncClient`` and converts every outcome into the
``ApiSuccess | ApiFailure`` sum type. Nothing transport-related is raised
to callers: timeouts, connection errors, HTTP error statuses and
undecodable bodies all come back as ``ApiFailure`` values that the
controllers classify into user-facing messages.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Final

import httpx

from Market_Lens.config import ClientSettings
from Market_Lens.models.api import ApiFailure, ApiResponse, ApiSuccess
from Market_Lens.models.watchlist import WatchlistPatch, normalize_ticker

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SCANNER_PATH: Final[str] = "/scanner"
INTRADAY_PATH: Final[str] = "/intraday"
INTRADAY_CHART_PATH: Final[str] = "/intraday/chart/{ticker}"
WATCHLISTS_PATH: Final[str] = "/watchlists"
WATCHLIST_PATH: Final[str] = "/watchlists/{list_id}"
WATCHLIST_ITEMS_PATH: Final[str] = "/watchlists/{list_id}/items"
WATCHLIST_ITEM_PATH: Final[str] = "/watchlists/{list_id}/items/{ticker}"

HTTP_ERROR_THRESHOLD: Final[int] = 400
HTTP_NO_CONTENT: Final[int] = 204


class DashboardApiClient:
    """Read and watchlist endpoints of the dashboard API.

    Usage::

        settings = load_settings()
        async with DashboardApiClient(settings) as api:
            outcome = await api.scan({"page": "1", "limit": "50"})
            if isinstance(outcome, ApiSuccess):
                ...

    Args:
        settings: Base URL and timeout configuration.
        transport: Optional httpx transport, e.g. ``httpx.MockTransport``
            in tests.
    """

    def __init__(
        self,
        settings: ClientSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._client = httpx.AsyncClient(
            base_url=settings.api_base_url,
            headers={"Content-Type": "application/json"},
            timeout=httpx.Timeout(
                connect=5.0,
                read=settings.request_timeout_seconds,
                write=10.0,
                pool=5.0,
            ),
            limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
            transport=transport,
        )
        logger.info("DashboardApiClient initialized: base_url=%s", settings.api_base_url)

    async def __aenter__(self) -> DashboardApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the shared httpx client."""
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Read endpoints
    # ------------------------------------------------------------------

    async def scan(self, params: dict[str, str]) -> ApiResponse:
        """Run a multi-day gap scan with composed filter parameters."""
        return await self._request("GET", SCANNER_PATH, params=params, label="scan")

    async def get_intraday_movers(self, params: dict[str, str]) -> ApiResponse:
        """Fetch intraday movers for a date/time window."""
        return await self._request("GET", INTRADAY_PATH, params=params, label="intraday")

    async def get_intraday_chart(self, ticker: str, params: dict[str, str]) -> ApiResponse:
        """Fetch intraday bars for one ticker within a date/time window."""
        path = INTRADAY_CHART_PATH.format(ticker=normalize_ticker(ticker))
        return await self._request("GET", path, params=params, label=f"chart({ticker})")

    # ------------------------------------------------------------------
    # Watchlist endpoints
    # ------------------------------------------------------------------

    async def list_watchlists(self) -> ApiResponse:
        """Return every watchlist group with its items."""
        return await self._request("GET", WATCHLISTS_PATH, label="list_watchlists")

    async def create_watchlist(self, name: str, color: str) -> ApiResponse:
        """Create a watchlist group. The server enforces name uniqueness."""
        return await self._request(
            "POST",
            WATCHLISTS_PATH,
            json={"name": name, "color": color},
            label="create_watchlist",
        )

    async def update_watchlist(self, list_id: int, patch: WatchlistPatch) -> ApiResponse:
        """Rename or recolor a watchlist group."""
        return await self._request(
            "PATCH",
            WATCHLIST_PATH.format(list_id=list_id),
            json=patch.as_payload(),
            label=f"update_watchlist({list_id})",
        )

    async def delete_watchlist(self, list_id: int) -> ApiResponse:
        """Delete a watchlist group and its items."""
        return await self._request(
            "DELETE",
            WATCHLIST_PATH.format(list_id=list_id),
            label=f"delete_watchlist({list_id})",
        )

    async def add_watchlist_item(
        self,
        list_id: int,
        ticker: str,
        name: str | None = None,
    ) -> ApiResponse:
        """Add a ticker to a watchlist group."""
        body: dict[str, Any] = {"ticker": normalize_ticker(ticker)}
        if name:
            body["name"] = name
        return await self._request(
            "POST",
            WATCHLIST_ITEMS_PATH.format(list_id=list_id),
            json=body,
            label=f"add_item({list_id}, {ticker})",
        )

    async def remove_watchlist_item(self, list_id: int, ticker: str) -> ApiResponse:
        """Remove a ticker from a watchlist group."""
        return await self._request(
            "DELETE",
            WATCHLIST_ITEM_PATH.format(list_id=list_id, ticker=normalize_ticker(ticker)),
            label=f"remove_item({list_id}, {ticker})",
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        *,
        label: str,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> ApiResponse:
        """Send one request and fold the outcome into ``ApiSuccess | ApiFailure``."""
        try:
            response = await asyncio.wait_for(
                self._client.request(method, path, params=params, json=json),
                timeout=self._settings.request_timeout_seconds,
            )
        except (TimeoutError, httpx.TimeoutException) as exc:
            logger.warning("%s timed out: %s", label, exc)
            return ApiFailure(detail=f"{label} timed out", timed_out=True)
        except httpx.HTTPError as exc:
            logger.warning("%s failed at transport level: %s", label, exc)
            return ApiFailure(detail=str(exc) or type(exc).__name__)

        status = response.status_code
        if status >= HTTP_ERROR_THRESHOLD:
            error = _extract_error(response)
            logger.warning("%s returned HTTP %d: %s", label, status, error or "<no error field>")
            return ApiFailure(status_code=status, error=error, detail=f"HTTP {status}")

        if status == HTTP_NO_CONTENT or not response.content:
            return ApiSuccess(status_code=status, payload=None)

        try:
            payload = response.json()
        except ValueError:
            logger.warning("%s returned a body that is not JSON", label)
            return ApiFailure(status_code=status, detail="Response body is not valid JSON")

        logger.debug("%s -> HTTP %d", label, status)
        return ApiSuccess(status_code=status, payload=payload)


def _extract_error(response: httpx.Response) -> str | None:
    """Return the ``error`` string of a JSON error payload, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, str) and error:
            return error
    return None
