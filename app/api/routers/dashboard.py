"""
app/api/routers/dashboard.py

Portfolio dashboard, renewal list and analytics endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.dependencies import get_client_store
from app.repositories.client_repository import ClientStore, ClientStoreError
from app.schemas.dashboard import (
    DashboardResponse,
    PortfolioAnalyticsResponse,
    PortfolioTotalsResponse,
    RenewalListResponse,
    RenewalResponse,
)
from app.services.dashboard_service import DashboardService, get_dashboard_service
from kpi.portfolio import RenewalSummary

router = APIRouter(tags=["dashboard"])


def _renewal_response(renewal: RenewalSummary) -> RenewalResponse:
    return RenewalResponse(
        id=renewal.id,
        company_name=renewal.company_name,
        renewal_date=renewal.renewal_date,
        contract_value=renewal.contract_value,
        mrr=renewal.mrr,
        health_score=renewal.health_score,
        churn_risk=renewal.churn_risk,
        contact_name=renewal.contact_name,
        csm_owner=renewal.csm_owner,
        days_until_renewal=renewal.days_until_renewal,
    )


def _store_unavailable() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Unable to load client portfolio.",
    )


@router.get("/companies/{company_id}/dashboard", response_model=DashboardResponse)
def get_dashboard(
    company_id: str,
    store: ClientStore = Depends(get_client_store),
    dashboard_service: DashboardService = Depends(get_dashboard_service),
) -> DashboardResponse:
    """
    Totals, upcoming renewals and unlocked analytics groups for one company.
    """

    try:
        snapshot = dashboard_service.snapshot(store=store, company_id=company_id)
    except ClientStoreError as exc:
        raise _store_unavailable() from exc

    totals = snapshot.totals
    return DashboardResponse(
        company_id=snapshot.company_id,
        totals=PortfolioTotalsResponse(
            total_clients=totals.total_clients,
            at_risk=totals.at_risk,
            total_mrr=totals.total_mrr,
            avg_health=totals.avg_health,
        ),
        renewals=[_renewal_response(renewal) for renewal in snapshot.renewals],
        unlocked_groups=snapshot.unlocked_groups,
    )


@router.get("/companies/{company_id}/renewals", response_model=RenewalListResponse)
def get_renewals(
    company_id: str,
    days: int | None = Query(default=None, ge=0, description="Renewal horizon in days"),
    limit: int | None = Query(default=None, ge=0, description="Maximum renewals returned; 0 for all"),
    store: ClientStore = Depends(get_client_store),
    dashboard_service: DashboardService = Depends(get_dashboard_service),
) -> RenewalListResponse:
    try:
        renewals = dashboard_service.renewals(
            store=store,
            company_id=company_id,
            days=days,
            limit=limit,
        )
    except ClientStoreError as exc:
        raise _store_unavailable() from exc

    return RenewalListResponse(
        company_id=company_id,
        renewals=[_renewal_response(renewal) for renewal in renewals],
    )


@router.get("/companies/{company_id}/analytics", response_model=PortfolioAnalyticsResponse)
def get_analytics(
    company_id: str,
    store: ClientStore = Depends(get_client_store),
    dashboard_service: DashboardService = Depends(get_dashboard_service),
) -> PortfolioAnalyticsResponse:
    try:
        analytics = dashboard_service.analytics(store=store, company_id=company_id)
    except ClientStoreError as exc:
        raise _store_unavailable() from exc

    return PortfolioAnalyticsResponse(company_id=company_id, **analytics)
