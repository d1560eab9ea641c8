"""Result-or-error sum type at the remote service boundary, and response envelopes.

Every call to the remote service yields exactly one of ``ApiSuccess`` or
``ApiFailure``; nothing is raised for transport problems. Envelope models
parse successful payloads and keep track of which top-level fields the
server actually sent (``model_fields_set``), so a missing ``data`` key is
recorded rather than silently replaced by an empty list.
"""

from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

from Market_Lens.models.market_data import (
    IntradayBar,
    IntradayMeta,
    IntradayMover,
    ScanMeta,
    ScanResult,
)


class ApiSuccess(BaseModel):
    """A 2xx response with a decoded JSON body."""

    model_config = ConfigDict(frozen=True)

    status_code: int
    payload: Any = None


class ApiFailure(BaseModel):
    """Any outcome other than a decoded 2xx response.

    Attributes:
        status_code: HTTP status, or ``None`` for network-level failures.
        error: The ``error`` field of the server's error payload, if present.
        detail: Diagnostic text for logs (exception message, raw status).
        timed_out: True when the request hit the client-side timeout.
    """

    model_config = ConfigDict(frozen=True)

    status_code: int | None = None
    error: str | None = None
    detail: str = ""
    timed_out: bool = False


ApiResponse: TypeAlias = ApiSuccess | ApiFailure


class ScanEnvelope(BaseModel):
    """Body of a gap-scan response: ``{data: [...], meta: {...}}``."""

    model_config = ConfigDict(frozen=True)

    data: list[ScanResult] = Field(default_factory=list)
    meta: ScanMeta = Field(default_factory=ScanMeta)


class IntradayEnvelope(BaseModel):
    """Body of an intraday movers response."""

    model_config = ConfigDict(frozen=True)

    data: list[IntradayMover] = Field(default_factory=list)
    meta: IntradayMeta | None = None


class ChartData(BaseModel):
    """The ``data`` object of a chart response."""

    model_config = ConfigDict(frozen=True)

    bars: list[IntradayBar] = Field(default_factory=list)


class ChartEnvelope(BaseModel):
    """Body of a per-ticker intraday chart response: ``{data: {bars: [...]}}``."""

    model_config = ConfigDict(frozen=True)

    data: ChartData = Field(default_factory=ChartData)


class ItemEnvelope(BaseModel):
    """Body of a single-resource response: ``{data: {...}}``."""

    model_config = ConfigDict(frozen=True)

    data: dict[str, Any] | None = None


class ListEnvelope(BaseModel):
    """Body of a collection response: ``{data: [...]}``."""

    model_config = ConfigDict(frozen=True)

    data: list[dict[str, Any]] = Field(default_factory=list)
