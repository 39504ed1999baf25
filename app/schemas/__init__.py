"""
app/schemas package marker.
"""

from app.schemas.client_import import (
    ClientMappingRequest,
    ClientRowsRequest,
    ImportPreviewResponse,
    ImportSummaryResponse,
    MappingReviewResponse,
    MappingSuggestionResponse,
)
from app.schemas.dashboard import DashboardResponse, PortfolioAnalyticsResponse, RenewalListResponse

__all__ = [
    "ClientMappingRequest",
    "ClientRowsRequest",
    "DashboardResponse",
    "ImportPreviewResponse",
    "ImportSummaryResponse",
    "MappingReviewResponse",
    "MappingSuggestionResponse",
    "PortfolioAnalyticsResponse",
    "RenewalListResponse",
]
