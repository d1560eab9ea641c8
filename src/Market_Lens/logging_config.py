"""Centralized logging configuration for the CLI and embedding applications."""

from __future__ import annotations

import logging
import os

LOG_FORMAT: str = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_MODULE_LOGGERS: dict[str, str] = {
    "CONTROLLERS": "Market_Lens.controllers",
    "QUERY": "Market_Lens.query",
    "SERVICES": "Market_Lens.services",
    "REPORTING": "Market_Lens.reporting",
}


def configure_logging(
    *,
    level: str = "",
    verbose: bool = False,
    quiet: bool = False,
) -> None:
    """Configure the root logger with one format for every entry point.

    Priority: verbose > quiet > level param > LOG_LEVEL env > INFO default.
    Reads LOG_LEVEL_{AREA} env vars for per-area overrides.
    """
    if verbose:
        effective = logging.DEBUG
    elif quiet:
        effective = logging.WARNING
    elif level:
        effective = getattr(logging, level.upper(), logging.INFO)
    else:
        env_level = os.environ.get("LOG_LEVEL", "INFO")
        effective = getattr(logging, env_level.upper(), logging.INFO)

    logging.basicConfig(level=effective, format=LOG_FORMAT, force=True)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    for key, logger_name in _MODULE_LOGGERS.items():
        module_level = os.environ.get(f"LOG_LEVEL_{key}")
        if module_level:
            resolved = getattr(logging, module_level.upper(), None)
            if resolved is not None:
                logging.getLogger(logger_name).setLevel(resolved)
