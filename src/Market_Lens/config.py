"""Client settings: API location, timeouts, page size and default sorts.

Resolution order is settings file > environment variables > defaults.
A missing or unreadable settings file is not an error; the client falls
back to the environment and the built-in defaults.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_API_BASE_URL: Final[str] = "http://localhost:5000/api"
DEFAULT_TIMEOUT_SECONDS: Final[float] = 30.0
DEFAULT_SETTINGS_PATH: Final[Path] = Path("data/market_lens.json")

ENV_API_URL: Final[str] = "MARKET_LENS_API_URL"
ENV_TIMEOUT: Final[str] = "MARKET_LENS_TIMEOUT"
ENV_PAGE_LIMIT: Final[str] = "MARKET_LENS_PAGE_LIMIT"


class ClientSettings(BaseModel):
    """Immutable client configuration handed to services and controllers."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    page_limit: int = Field(default=50, gt=0)
    scanner_default_sort: str = "gd_volume"
    intraday_default_sort: str = "changePct"


def _settings_from_env() -> dict[str, str]:
    """Collect settings overrides from environment variables."""
    overrides: dict[str, str] = {}
    env_map = {
        ENV_API_URL: "api_base_url",
        ENV_TIMEOUT: "request_timeout_seconds",
        ENV_PAGE_LIMIT: "page_limit",
    }
    for env_key, field_name in env_map.items():
        value = os.environ.get(env_key)
        if value:
            overrides[field_name] = value
    return overrides


def _settings_from_file(path: Path) -> dict[str, object]:
    """Load a flat JSON settings object, or an empty dict if unavailable."""
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        logger.warning("Failed to read settings file %s, ignoring it", path)
        return {}
    if not isinstance(data, dict):
        logger.warning("Settings file %s is not a JSON object, ignoring it", path)
        return {}
    return data


def load_settings(path: Path | None = None) -> ClientSettings:
    """Resolve client settings from file, environment and defaults.

    Invalid values from either source are logged and dropped field by field
    so one bad override does not discard the rest.
    """
    merged: dict[str, object] = {}
    merged.update(_settings_from_env())
    merged.update(_settings_from_file(path or DEFAULT_SETTINGS_PATH))

    try:
        return ClientSettings.model_validate(merged)
    except ValidationError as exc:
        bad_fields = {str(err["loc"][0]) for err in exc.errors() if err["loc"]}
        logger.warning("Ignoring invalid settings: %s", ", ".join(sorted(bad_fields)))
        cleaned = {k: v for k, v in merged.items() if k not in bad_fields}
        return ClientSettings.model_validate(cleaned)
