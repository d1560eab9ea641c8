"""State controllers for the scanner, intraday and watchlist views."""

from Market_Lens.controllers.expansion import ExpansionController, ExpansionState
from Market_Lens.controllers.intraday import IntradayController, parse_intraday_payload
from Market_Lens.controllers.lifecycle import (
    INTRADAY_MESSAGES,
    SCANNER_MESSAGES,
    ErrorMessages,
    LifecycleState,
    PageOutcome,
    ResultLifecycle,
    classify_failure,
)
from Market_Lens.controllers.membership import (
    LIST_COLORS,
    MembershipController,
    MembershipState,
    list_color_for_new,
)
from Market_Lens.controllers.scanner import ScannerController, parse_scan_payload

__all__ = [
    # Lifecycle
    "ErrorMessages",
    "INTRADAY_MESSAGES",
    "LifecycleState",
    "PageOutcome",
    "ResultLifecycle",
    "SCANNER_MESSAGES",
    "classify_failure",
    # Surfaces
    "ExpansionController",
    "ExpansionState",
    "IntradayController",
    "ScannerController",
    "parse_intraday_payload",
    "parse_scan_payload",
    # Watchlists
    "LIST_COLORS",
    "MembershipController",
    "MembershipState",
    "list_color_for_new",
]
