"""
kpi/portfolio.py

Dashboard KPIs over an in-memory client portfolio.

Functions
---------
calc_totals    -> client count, at-risk count, total MRR, average health
next_renewals  -> renewals due within a day horizon, soonest first
unlocks        -> analytics groups with enough populated data to display

Every function is pure and read-only. Missing, malformed or non-list input
degrades to zero / empty results instead of raising. "Today" is read from
the clock at call time unless ``now`` is supplied.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Final

from app.domain.client_fields import (
    CHURN_RISK_PATHS,
    CONTACT_NAME_PATHS,
    CONTRACT_VALUE_PATHS,
    CSM_OWNER_PATHS,
    HEALTH_SCORE_PATHS,
    as_date_string,
    get_path,
    number_or_zero,
    parse_date,
    resolve_client_id,
    resolve_company_name,
    resolve_first,
    resolve_renewal_date,
)

AT_RISK_CHURN_LEVELS: Final[frozenset[str]] = frozenset({"high", "critical"})
AT_RISK_HEALTH_BELOW: Final[float] = 50.0
DEFAULT_RENEWAL_HORIZON_DAYS: Final[int] = 90

UNLOCK_THRESHOLD: Final[float] = 0.5
"""Fraction of the portfolio that must support a group before it unlocks."""

REVENUE_ANALYTICS: Final[str] = "Revenue Analytics"
RETENTION_ANALYSIS: Final[str] = "Retention Analysis"
HEALTH_MONITORING: Final[str] = "Health Monitoring"
SATISFACTION_TRACKING: Final[str] = "Satisfaction Tracking"
CONTRACT_MANAGEMENT: Final[str] = "Contract Management"


@dataclass(frozen=True)
class PortfolioTotals:
    total_clients: int
    at_risk: int
    total_mrr: float
    avg_health: int


@dataclass(frozen=True)
class RenewalSummary:
    """
    One upcoming renewal as shown on the dashboard.
    """

    id: Any
    company_name: Any
    renewal_date: str | None
    contract_value: Any
    mrr: Any
    health_score: Any
    churn_risk: Any
    contact_name: Any
    csm_owner: Any
    days_until_renewal: int


def today_from(now: datetime | date | None = None) -> date:
    if now is None:
        return datetime.now(tz=timezone.utc).date()
    if isinstance(now, datetime):
        return now.date()
    return now


def is_at_risk(client: Any) -> bool:
    churn_risk = get_path(client, "churn.risk")
    health_score = number_or_zero(get_path(client, "health.score"))
    if isinstance(churn_risk, str) and churn_risk in AT_RISK_CHURN_LEVELS:
        return True
    return health_score < AT_RISK_HEALTH_BELOW


def calc_totals(clients: Any) -> PortfolioTotals:
    """
    Count clients and at-risk clients, sum MRR, average positive health scores.
    """

    if not isinstance(clients, (list, tuple)) or not clients:
        return PortfolioTotals(total_clients=0, at_risk=0, total_mrr=0, avg_health=0)

    at_risk = sum(1 for client in clients if is_at_risk(client))
    total_mrr = sum(number_or_zero(get_path(client, "mrr")) for client in clients)

    positive_scores = [
        score
        for score in (number_or_zero(get_path(client, "health.score")) for client in clients)
        if score > 0
    ]
    avg_health = _round_half_up(sum(positive_scores) / len(positive_scores)) if positive_scores else 0

    return PortfolioTotals(
        total_clients=len(clients),
        at_risk=at_risk,
        total_mrr=total_mrr,
        avg_health=avg_health,
    )


def next_renewals(
    clients: Any,
    days: int = DEFAULT_RENEWAL_HORIZON_DAYS,
    limit: int | None = None,
    *,
    now: datetime | date | None = None,
) -> list[RenewalSummary]:
    """
    Renewals falling in ``[today, today + days]`` (both ends inclusive), soonest first.

    A positive ``limit`` truncates the sorted list; otherwise the full list is returned.
    """

    if not isinstance(clients, (list, tuple)):
        return []

    today = today_from(now)
    horizon = today + timedelta(days=days)

    upcoming: list[tuple[date, RenewalSummary]] = []
    for client in clients:
        raw_renewal = resolve_renewal_date(client)
        renewal_date = parse_date(raw_renewal)
        if renewal_date is None or not today <= renewal_date <= horizon:
            continue
        upcoming.append((renewal_date, _summarize(client, raw_renewal, renewal_date, today)))

    upcoming.sort(key=lambda item: item[0])
    renewals = [summary for _, summary in upcoming]

    if isinstance(limit, int) and not isinstance(limit, bool) and limit > 0:
        return renewals[:limit]
    return renewals


def _summarize(client: Any, raw_renewal: Any, renewal_date: date, today: date) -> RenewalSummary:
    return RenewalSummary(
        id=resolve_client_id(client),
        company_name=resolve_company_name(client),
        renewal_date=as_date_string(raw_renewal),
        contract_value=resolve_first(client, CONTRACT_VALUE_PATHS) or 0,
        mrr=get_path(client, "mrr") or 0,
        health_score=resolve_first(client, HEALTH_SCORE_PATHS) or 0,
        churn_risk=resolve_first(client, CHURN_RISK_PATHS) or "unknown",
        contact_name=resolve_first(client, CONTACT_NAME_PATHS),
        csm_owner=resolve_first(client, CSM_OWNER_PATHS),
        days_until_renewal=(renewal_date - today).days,
    )


def _defined(client: Any, path: str) -> bool:
    return get_path(client, path) is not None


def _present(client: Any, path: str) -> bool:
    return bool(get_path(client, path))


UNLOCK_RULES: Final[dict[str, Callable[[Any], bool]]] = {
    REVENUE_ANALYTICS: lambda c: _defined(c, "mrr") and _present(c, "renewal.date"),
    RETENTION_ANALYSIS: lambda c: _defined(c, "subscribedMonths") and _present(c, "renewal.date"),
    HEALTH_MONITORING: lambda c: _defined(c, "health.score") and _defined(c, "usage.last30d"),
    SATISFACTION_TRACKING: lambda c: _defined(c, "nps.score") and _present(c, "nps.comment"),
    CONTRACT_MANAGEMENT: lambda c: (
        _present(c, "renewal.date") and _defined(c, "contract.value") and _present(c, "churn.risk")
    ),
}


def unlocks(clients: Any) -> set[str]:
    """
    Analytics groups supported by at least ``UNLOCK_THRESHOLD`` of the portfolio.
    """

    if not isinstance(clients, (list, tuple)) or not clients:
        return set()

    total = len(clients)
    return {
        group
        for group, rule in UNLOCK_RULES.items()
        if sum(1 for client in clients if rule(client)) / total >= UNLOCK_THRESHOLD
    }


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
