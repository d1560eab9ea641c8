"""Market Lens: query, result-lifecycle and watchlist controllers for a market dashboard."""

__version__ = "0.1.0"
