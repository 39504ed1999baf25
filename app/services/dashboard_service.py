"""
app/services/dashboard_service.py

Reads a company's clients from the store and runs the portfolio KPIs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from functools import lru_cache
from typing import Any

from app.config import get_dashboard_settings
from app.repositories.client_repository import ClientStore
from kpi.analytics import PortfolioAnalyticsFormula
from kpi.portfolio import PortfolioTotals, RenewalSummary, calc_totals, next_renewals, unlocks

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardSnapshot:
    company_id: str
    totals: PortfolioTotals
    renewals: list[RenewalSummary]
    unlocked_groups: list[str]


class DashboardService:
    """
    Portfolio dashboard, renewal list and analytics for one company.
    """

    def __init__(
        self,
        *,
        renewal_horizon_days: int,
        renewal_list_limit: int | None = None,
        analytics: PortfolioAnalyticsFormula | None = None,
    ) -> None:
        self._renewal_horizon_days = renewal_horizon_days
        self._renewal_list_limit = renewal_list_limit
        self._analytics = analytics or PortfolioAnalyticsFormula()

    def snapshot(
        self,
        *,
        store: ClientStore,
        company_id: str,
        now: datetime | date | None = None,
    ) -> DashboardSnapshot:
        clients = store.list_by_company(company_id)
        logger.info("Dashboard snapshot company_id=%r clients=%d", company_id, len(clients))
        return DashboardSnapshot(
            company_id=company_id,
            totals=calc_totals(clients),
            renewals=next_renewals(
                clients,
                self._renewal_horizon_days,
                self._renewal_list_limit,
                now=now,
            ),
            unlocked_groups=sorted(unlocks(clients)),
        )

    def renewals(
        self,
        *,
        store: ClientStore,
        company_id: str,
        days: int | None = None,
        limit: int | None = None,
        now: datetime | date | None = None,
    ) -> list[RenewalSummary]:
        """
        Upcoming renewals; ``days`` and ``limit`` fall back to the configured defaults.
        """

        clients = store.list_by_company(company_id)
        return next_renewals(
            clients,
            self._renewal_horizon_days if days is None else days,
            self._renewal_list_limit if limit is None else limit,
            now=now,
        )

    def analytics(
        self,
        *,
        store: ClientStore,
        company_id: str,
        now: datetime | date | None = None,
    ) -> dict[str, Any]:
        clients = store.list_by_company(company_id)
        logger.info("Portfolio analytics company_id=%r clients=%d", company_id, len(clients))
        return self._analytics.calculate({"clients": clients, "now": now})


@lru_cache(maxsize=1)
def get_dashboard_service() -> DashboardService:
    """
    Build and cache the dashboard service with env-driven settings.
    """
    settings = get_dashboard_settings()
    return DashboardService(
        renewal_horizon_days=settings.renewal_horizon_days,
        renewal_list_limit=settings.renewal_list_limit,
    )
