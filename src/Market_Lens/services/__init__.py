"""Remote service access.

Re-exports the public service classes so consumers can import directly:
    from Market_Lens.services import DashboardApiClient
"""

from Market_Lens.services.api_client import DashboardApiClient

__all__ = ["DashboardApiClient"]
