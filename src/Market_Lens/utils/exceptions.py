"""Exception hierarchy for the Market Lens client core.

Transport failures are never raised: they travel as ``ApiFailure`` values and
end up as controller state. The exceptions here cover programming errors at
the seams, where a caller names a filter, day-group or preset that does not
exist.
"""


class MarketLensError(Exception):
    """Base exception for all Market Lens errors."""


class UnknownFilterError(MarketLensError, ValueError):
    """Raised when a filter, metric or day-group name is not part of the schema.

    Attributes:
        name: The offending name as supplied by the caller.
        kind: What kind of name it was (e.g., ``"metric"``, ``"day_group"``).
    """

    def __init__(self, name: str, *, kind: str) -> None:
        self.name = name
        self.kind = kind
        super().__init__(f"Unknown {kind}: '{name}'")


class UnknownPresetError(MarketLensError, ValueError):
    """Raised when a named time-window or date preset does not exist."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown preset: '{name}'")
