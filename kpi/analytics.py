"""
kpi/analytics.py

Portfolio analytics formula for the analytics page.

Expected inputs
---------------
clients : list[dict]
    Canonical client records (nested ``contract.startDate`` etc.).
now : date | datetime | None
    Reference day; defaults to today (UTC).

Outputs
-------
total_mrr, total_ltv, avg_mrr, avg_ltv, avg_retention_period
contract_status         -> {"active": n, "expired": n}
mrr_by_start_month      -> [{"month": "YYYY-MM", "mrr": x}, ...]
renewal_timeline        -> upcoming renewals grouped by month (next 12 months)
renewal_pipeline_30d/60d-> MRR renewing within 30 / 60 days
contracts_renewing_30d/60d -> number of clients renewing in those windows
avg_contract_length     -> mean subscribedMonths
ltv_distribution        -> fixed LTV histogram buckets
top_customers_by_mrr    -> ten largest clients by MRR
contract_age_scatter    -> [{"age": months, "mrr", "ltv", "name"}] for started, paying clients
end_date_distribution   -> contract end dates counted per month (first 12 months)
retention_curve         -> [{"month": 1..24, "retention_rate": pct}] still active among clients at least that old
churned_revenue         -> MRR of ended contracts per end month (last 12 months)
median_ltv              -> upper median of LTV
at_risk_contracts       -> clients with LTV below the median or renewal within 30 days

Averages over an empty portfolio, the median of an empty portfolio and the
retention period with zero MRR return None.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

import pandas as pd

from app.domain.client_fields import (
    get_path,
    number_or_zero,
    parse_date,
    resolve_client_id,
)
from kpi.base import BaseKPIFormula
from kpi.portfolio import today_from

_SENTINEL = None

LTV_BUCKET_EDGES: tuple[float, ...] = (0, 10_000, 25_000, 50_000, 100_000, float("inf"))
LTV_BUCKET_LABELS: tuple[str, ...] = ("0-10k", "10k-25k", "25k-50k", "50k-100k", "100k+")
TOP_CUSTOMER_COUNT = 10
TIMELINE_MONTHS = 12
RETENTION_CURVE_MONTHS = 24
AT_RISK_RENEWAL_DAYS = 30
# Contract age is counted in 30-day months.
DAYS_PER_MONTH = 30

_COLUMNS = (
    "client_id",
    "name",
    "mrr",
    "ltv",
    "subscribed_months",
    "contract_start",
    "contract_end",
    "renewal_date",
)


class PortfolioAnalyticsFormula(BaseKPIFormula):
    """
    Revenue, contract and renewal breakdowns over a client portfolio.
    """

    def calculate(self, inputs: dict[str, Any]) -> dict[str, Any]:
        clients = inputs.get("clients") or []
        today = pd.Timestamp(today_from(inputs.get("now")))
        frame = _build_frame(clients)

        total_mrr = float(frame["mrr"].sum())
        total_ltv = float(frame["ltv"].sum())
        count = len(frame)
        median_ltv = _median_ltv(frame)

        return {
            "total_mrr": total_mrr,
            "total_ltv": total_ltv,
            "avg_mrr": total_mrr / count if count else _SENTINEL,
            "avg_ltv": total_ltv / count if count else _SENTINEL,
            "avg_retention_period": total_ltv / total_mrr if total_mrr else _SENTINEL,
            "active_clients": count,
            "contract_status": _contract_status(frame, today),
            "mrr_by_start_month": _mrr_by_start_month(frame),
            "renewal_timeline": _renewal_timeline(frame, today),
            "renewal_pipeline_30d": _renewal_pipeline(frame, today, days=30),
            "renewal_pipeline_60d": _renewal_pipeline(frame, today, days=60),
            "contracts_renewing_30d": len(_renewal_window(frame, today, days=30)),
            "contracts_renewing_60d": len(_renewal_window(frame, today, days=60)),
            "avg_contract_length": float(frame["subscribed_months"].mean()) if count else _SENTINEL,
            "ltv_distribution": _ltv_distribution(frame),
            "top_customers_by_mrr": _top_customers(frame),
            "contract_age_scatter": _contract_age_scatter(frame, today),
            "end_date_distribution": _end_date_distribution(frame),
            "retention_curve": _retention_curve(frame, today),
            "churned_revenue": _churned_revenue(frame, today),
            "median_ltv": median_ltv,
            "at_risk_contracts": _at_risk_contracts(frame, today, median_ltv),
        }


def _build_frame(clients: list[Any]) -> pd.DataFrame:
    rows = [
        {
            "client_id": resolve_client_id(client),
            "name": get_path(client, "company.name") or "Unknown",
            "mrr": number_or_zero(get_path(client, "mrr")),
            "ltv": number_or_zero(get_path(client, "ltv")),
            "subscribed_months": number_or_zero(get_path(client, "subscribedMonths")),
            "contract_start": parse_date(get_path(client, "contract.startDate")),
            "contract_end": parse_date(get_path(client, "contract.endDate")),
            "renewal_date": parse_date(get_path(client, "renewal.date")),
        }
        for client in clients
    ]
    frame = pd.DataFrame(rows, columns=list(_COLUMNS))
    for column in ("mrr", "ltv", "subscribed_months"):
        frame[column] = frame[column].astype(float)
    for column in ("contract_start", "contract_end", "renewal_date"):
        frame[column] = pd.to_datetime(frame[column], errors="coerce")
    return frame


def _contract_status(frame: pd.DataFrame, today: pd.Timestamp) -> dict[str, int]:
    has_end = frame["contract_end"].notna()
    expired = int((has_end & (frame["contract_end"] < today)).sum())
    return {"active": len(frame) - expired, "expired": expired}


def _month_key(series: pd.Series) -> pd.Series:
    return series.dt.strftime("%Y-%m")


def _mrr_by_start_month(frame: pd.DataFrame) -> list[dict[str, Any]]:
    started = frame[frame["contract_start"].notna() & (frame["mrr"] != 0)]
    if started.empty:
        return []
    grouped = started.groupby(_month_key(started["contract_start"]))["mrr"].sum()
    return [{"month": month, "mrr": float(mrr)} for month, mrr in grouped.items()]


def _renewal_timeline(frame: pd.DataFrame, today: pd.Timestamp) -> list[dict[str, Any]]:
    upcoming = frame[(frame["renewal_date"] >= today) & (frame["mrr"] != 0)]
    if upcoming.empty:
        return []
    grouped = upcoming.groupby(_month_key(upcoming["renewal_date"]))["mrr"].agg(["count", "sum"])
    return [
        {"month": month, "count": int(row["count"]), "mrr": float(row["sum"])}
        for month, row in grouped.head(TIMELINE_MONTHS).iterrows()
    ]


def _renewal_pipeline(frame: pd.DataFrame, today: pd.Timestamp, *, days: int) -> float:
    return float(_renewal_window(frame, today, days=days)["mrr"].sum())


def _ltv_distribution(frame: pd.DataFrame) -> list[dict[str, Any]]:
    buckets = pd.cut(
        frame["ltv"],
        bins=list(LTV_BUCKET_EDGES),
        labels=list(LTV_BUCKET_LABELS),
        right=False,
    )
    counts = buckets.value_counts().reindex(list(LTV_BUCKET_LABELS), fill_value=0)
    return [{"range": label, "count": int(count)} for label, count in counts.items()]


def _top_customers(frame: pd.DataFrame) -> list[dict[str, Any]]:
    top = frame.sort_values("mrr", ascending=False, kind="stable").head(TOP_CUSTOMER_COUNT)
    return [
        {
            "id": row.client_id,
            "name": row.name,
            "mrr": float(row.mrr),
            "ltv": float(row.ltv),
            "end_date": row.contract_end.date().isoformat() if pd.notna(row.contract_end) else None,
        }
        for row in top.itertuples(index=False)
    ]


def _contract_age_months(frame: pd.DataFrame, today: pd.Timestamp) -> pd.Series:
    return (today - frame["contract_start"]).dt.days // DAYS_PER_MONTH


def _contract_age_scatter(frame: pd.DataFrame, today: pd.Timestamp) -> list[dict[str, Any]]:
    ages = _contract_age_months(frame, today)
    points = frame.assign(age=ages)[(ages > 0) & (frame["mrr"] > 0)]
    return [
        {"age": int(row.age), "mrr": float(row.mrr), "ltv": float(row.ltv), "name": row.name}
        for row in points.itertuples(index=False)
    ]


def _end_date_distribution(frame: pd.DataFrame) -> list[dict[str, Any]]:
    ending = frame[frame["contract_end"].notna()]
    if ending.empty:
        return []
    counts = ending.groupby(_month_key(ending["contract_end"])).size()
    return [{"month": month, "count": int(count)} for month, count in counts.head(TIMELINE_MONTHS).items()]


def _retention_curve(frame: pd.DataFrame, today: pd.Timestamp) -> list[dict[str, Any]]:
    ages = _contract_age_months(frame, today)
    still_active = frame["contract_end"].isna() | (frame["contract_end"] >= today)
    curve = []
    for month in range(1, RETENTION_CURVE_MONTHS + 1):
        started = ages >= month
        total = int(started.sum())
        if total:
            active = int((started & still_active).sum())
            curve.append({"month": month, "retention_rate": active / total * 100})
    return curve


def _churned_revenue(frame: pd.DataFrame, today: pd.Timestamp) -> list[dict[str, Any]]:
    churned = frame[(frame["contract_end"] < today) & (frame["mrr"] != 0)]
    if churned.empty:
        return []
    grouped = churned.groupby(_month_key(churned["contract_end"]))["mrr"].sum()
    return [{"month": month, "revenue": float(revenue)} for month, revenue in grouped.tail(TIMELINE_MONTHS).items()]


def _renewal_window(frame: pd.DataFrame, today: pd.Timestamp, *, days: int) -> pd.DataFrame:
    horizon = today + timedelta(days=days)
    return frame[(frame["renewal_date"] >= today) & (frame["renewal_date"] <= horizon)]


def _median_ltv(frame: pd.DataFrame) -> float | None:
    if frame.empty:
        return _SENTINEL
    ordered = frame["ltv"].sort_values(kind="stable").reset_index(drop=True)
    return float(ordered.iloc[len(ordered) // 2])


def _at_risk_contracts(frame: pd.DataFrame, today: pd.Timestamp, median_ltv: float | None) -> int:
    if median_ltv is None:
        return 0
    low_ltv = frame["ltv"] < median_ltv
    renewing_soon = frame["renewal_date"] <= today + timedelta(days=AT_RISK_RENEWAL_DAYS)
    return int((low_ltv | renewing_soon).sum())
