"""ResultLifecycle: the idle -> loading -> success/error machine behind a paged search.

One lifecycle owns one surface's results, paging and error message. Each
dispatch is tagged with a monotonically increasing sequence number; a
response whose number is no longer the latest issued is discarded, so a
slow, older request can never overwrite a newer one. In-flight requests
are not cancelled.

While a request is in flight the previous results stay visible and the
status is ``LOADING`` exactly once per dispatch; issuing another request
while loading does not produce a second transition.

Sort and page edits only store state. Deciding when to fetch is the
caller's job (see the scanner and intraday controllers). Each snapshot
also records the paging of the latest dispatched request, so results are
always labelled with the page and sort they were fetched for, even when
the paging was edited while the request was in flight.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Final, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from Market_Lens.models.api import ApiFailure, ApiResponse
from Market_Lens.models.enums import LifecycleStatus, ResultView, SortDirection
from Market_Lens.models.filters import Paging
from Market_Lens.models.market_data import ResultPage

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT")

# ---------------------------------------------------------------------------
# Error classification
# ---------------------------------------------------------------------------

HTTP_TOO_MANY_REQUESTS: Final[int] = 429
HTTP_INTERNAL_SERVER_ERROR: Final[int] = 500

RATE_LIMITED_MESSAGE: Final[str] = "API rate limited. Please wait a minute and try again."


class ErrorMessages(BaseModel):
    """User-facing strings for one search surface."""

    model_config = ConfigDict(frozen=True)

    rate_limited: str = RATE_LIMITED_MESSAGE
    server_error: str
    generic: str


SCANNER_MESSAGES: Final[ErrorMessages] = ErrorMessages(
    server_error="Server is loading data. Please wait a moment and try again.",
    generic="Scan failed",
)

INTRADAY_MESSAGES: Final[ErrorMessages] = ErrorMessages(
    server_error="Server error loading intraday data. Please try again.",
    generic="Failed to fetch intraday data",
)


def classify_failure(failure: ApiFailure, messages: ErrorMessages) -> str:
    """Map a failed request to the message shown to the user.

    429 is rate limiting and 500 is a transient server state; otherwise a
    server-supplied ``error`` is passed through verbatim, and anything else
    (network failure, timeout, bare status) gets the generic message.
    """
    if failure.status_code == HTTP_TOO_MANY_REQUESTS:
        return messages.rate_limited
    if failure.status_code == HTTP_INTERNAL_SERVER_ERROR:
        return messages.server_error
    if failure.error:
        return failure.error
    return messages.generic


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PageOutcome(Generic[ItemT]):
    """What a response parser extracted from a successful payload.

    ``missing_fields`` names top-level fields the server left out, which
    were filled with empty defaults.
    """

    items: list[ItemT]
    total: int
    total_pages: int | None = None
    meta: Any = None
    missing_fields: tuple[str, ...] = field(default=())


class LifecycleState(BaseModel, Generic[ItemT]):
    """Immutable snapshot of a result lifecycle."""

    model_config = ConfigDict(frozen=True)

    status: LifecycleStatus = LifecycleStatus.IDLE
    paging: Paging
    dispatched_paging: Paging | None = None
    results: list[ItemT] = Field(default_factory=list)
    total: int = 0
    total_pages: int = 0
    meta: Any = None
    error: str | None = None
    missing_fields: tuple[str, ...] = ()

    @property
    def loading(self) -> bool:
        return self.status == LifecycleStatus.LOADING

    @property
    def page(self) -> int:
        return self.paging.page

    @property
    def sort(self) -> str:
        return self.paging.sort

    @property
    def sort_dir(self) -> SortDirection:
        return self.paging.sort_dir

    @property
    def requested_paging(self) -> Paging:
        """Paging of the latest dispatched request, or the edited paging before any."""
        return self.dispatched_paging or self.paging

    @property
    def data_missing(self) -> bool:
        """True when the last successful response omitted expected fields."""
        return bool(self.missing_fields)

    @property
    def view(self) -> ResultView:
        """What to render. Empty success and error are distinct outcomes."""
        if self.status == LifecycleStatus.IDLE:
            return ResultView.IDLE
        if self.status == LifecycleStatus.LOADING:
            return ResultView.LOADING
        if self.status == LifecycleStatus.ERROR:
            return ResultView.ERROR
        return ResultView.RESULTS if self.results else ResultView.EMPTY

    def as_page(self) -> ResultPage[ItemT]:
        """The current results as a ``ResultPage``, labelled with the request's paging."""
        paging = self.requested_paging
        return ResultPage[ItemT].build(
            list(self.results),
            total=self.total,
            page=paging.page,
            limit=paging.limit,
            total_pages=self.total_pages,
        )


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class ResultLifecycle(Generic[ItemT]):
    """Async fetch state machine for one paged search surface.

    Usage::

        lifecycle = ResultLifecycle(
            fetch=api.scan,
            parse=parse_scan_payload,
            messages=SCANNER_MESSAGES,
            paging=Paging(sort="gd_volume"),
            label="scanner",
        )
        lifecycle.set_sort("gd_gap")
        state = await lifecycle.run(compose_scan_params(filters, lifecycle.paging))

    Args:
        fetch: Coroutine function issuing the read request for a parameter map.
        parse: Extracts a ``PageOutcome`` from a successful payload. May raise
            ``ValidationError`` for malformed payloads.
        messages: User-facing error strings for this surface.
        paging: Initial page, limit and sort.
        label: Name used in log messages.
    """

    def __init__(
        self,
        *,
        fetch: Callable[[dict[str, str]], Awaitable[ApiResponse]],
        parse: Callable[[Any, Paging], PageOutcome[ItemT]],
        messages: ErrorMessages,
        paging: Paging,
        label: str,
    ) -> None:
        self._fetch = fetch
        self._parse = parse
        self._messages = messages
        self._label = label
        self._initial_paging = paging
        self._state: LifecycleState[ItemT] = LifecycleState[ItemT](paging=paging)
        self._issued = 0

    @property
    def state(self) -> LifecycleState[ItemT]:
        return self._state

    @property
    def paging(self) -> Paging:
        return self._state.paging

    # ------------------------------------------------------------------
    # Paging and sort (no fetch)
    # ------------------------------------------------------------------

    def set_sort(self, key: str) -> LifecycleState[ItemT]:
        """Toggle direction when re-sorting by the same key; new keys start descending."""
        current = self._state.paging
        if key == current.sort:
            direction = (
                SortDirection.ASC if current.sort_dir == SortDirection.DESC else SortDirection.DESC
            )
        else:
            direction = SortDirection.DESC
        paging = current.model_copy(update={"sort": key, "sort_dir": direction})
        self._state = self._state.model_copy(update={"paging": paging})
        return self._state

    def set_page(self, page: int) -> LifecycleState[ItemT]:
        """Store the page number. Raises ``ValidationError`` for pages below 1."""
        paging = Paging.model_validate({**self._state.paging.model_dump(), "page": page})
        self._state = self._state.model_copy(update={"paging": paging})
        return self._state

    def reset_page(self) -> LifecycleState[ItemT]:
        """Return to page 1, keeping sort and limit."""
        return self.set_page(1)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def run(self, params: dict[str, str]) -> LifecycleState[ItemT]:
        """Issue a read with *params* and fold the response into state.

        Returns the snapshot after this call completes. If a newer call was
        issued meanwhile, this call's response is discarded and the returned
        snapshot reflects the newer call's progress.
        """
        self._issued += 1
        sequence = self._issued
        paging = self._state.paging
        update: dict[str, Any] = {}
        if self._state.status != LifecycleStatus.LOADING:
            update.update(status=LifecycleStatus.LOADING, error=None)
        if self._state.dispatched_paging != paging:
            update["dispatched_paging"] = paging
        if update:
            self._state = self._state.model_copy(update=update)
        logger.debug("%s dispatch #%d: %s", self._label, sequence, params)

        outcome = await self._fetch(params)

        if sequence != self._issued:
            logger.debug(
                "%s discarding response #%d (latest is #%d)", self._label, sequence, self._issued
            )
            return self._state

        if isinstance(outcome, ApiFailure):
            self._fail(classify_failure(outcome, self._messages), outcome)
            return self._state

        try:
            parsed = self._parse(outcome.payload, paging)
            page = ResultPage[ItemT].build(
                parsed.items,
                total=parsed.total,
                page=paging.page,
                limit=paging.limit,
                total_pages=parsed.total_pages,
            )
        except ValidationError as exc:
            logger.warning("%s response payload is malformed: %s", self._label, exc)
            self._fail(self._messages.generic, None)
            return self._state

        if parsed.missing_fields:
            logger.warning(
                "%s response omitted %s; using empty defaults",
                self._label,
                ", ".join(parsed.missing_fields),
            )
        self._state = self._state.model_copy(
            update={
                "status": LifecycleStatus.SUCCESS,
                "results": page.items,
                "total": page.total,
                "total_pages": page.total_pages,
                "meta": parsed.meta,
                "error": None,
                "missing_fields": parsed.missing_fields,
            }
        )
        logger.info(
            "%s fetched %d of %d results (page %d/%d)",
            self._label,
            len(page.items),
            page.total,
            page.page,
            page.total_pages,
        )
        return self._state

    def reset(self) -> LifecycleState[ItemT]:
        """Drop results and return to idle with the initial paging.

        Any in-flight response is discarded when it arrives.
        """
        self._issued += 1
        self._state = LifecycleState[ItemT](paging=self._initial_paging)
        return self._state

    def _fail(self, message: str, failure: ApiFailure | None) -> None:
        if failure is not None:
            logger.warning(
                "%s failed (status=%s, timed_out=%s): %s",
                self._label,
                failure.status_code,
                failure.timed_out,
                message,
            )
        self._state = self._state.model_copy(
            update={"status": LifecycleStatus.ERROR, "error": message, "results": []}
        )
