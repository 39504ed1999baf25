"""
app/services package marker.
"""

from app.services.client_import_service import ClientImportService, get_client_import_service
from app.services.dashboard_service import DashboardService, DashboardSnapshot, get_dashboard_service

__all__ = [
    "ClientImportService",
    "DashboardService",
    "DashboardSnapshot",
    "get_client_import_service",
    "get_dashboard_service",
]
