"""ar_services -- dashboard operations over the store and engines."""

from ar_services.dashboard_service import DashboardService

__all__ = ["DashboardService"]
