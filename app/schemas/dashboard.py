"""
app/schemas/dashboard.py

Response schemas for dashboard, renewal and analytics endpoints.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class PortfolioTotalsResponse(BaseModel):
    total_clients: int = Field(..., ge=0)
    at_risk: int = Field(..., ge=0)
    total_mrr: float
    avg_health: int


class RenewalResponse(BaseModel):
    """
    One upcoming renewal. Values are passed through from the stored record.
    """

    id: Any = None
    company_name: Any = None
    renewal_date: str | None = None
    contract_value: Any = 0
    mrr: Any = 0
    health_score: Any = 0
    churn_risk: Any = "unknown"
    contact_name: Any = None
    csm_owner: Any = None
    days_until_renewal: int = Field(..., ge=0)


class RenewalListResponse(BaseModel):
    company_id: str
    renewals: list[RenewalResponse] = Field(default_factory=list)


class DashboardResponse(BaseModel):
    company_id: str
    totals: PortfolioTotalsResponse
    renewals: list[RenewalResponse] = Field(default_factory=list)
    unlocked_groups: list[str] = Field(default_factory=list)


class ContractStatusResponse(BaseModel):
    active: int = Field(..., ge=0)
    expired: int = Field(..., ge=0)


class MonthlyMRRResponse(BaseModel):
    month: str
    mrr: float


class RenewalMonthResponse(BaseModel):
    month: str
    count: int = Field(..., ge=0)
    mrr: float


class LTVBucketResponse(BaseModel):
    range: str
    count: int = Field(..., ge=0)


class TopCustomerResponse(BaseModel):
    id: Any = None
    name: Any = None
    mrr: float
    ltv: float
    end_date: str | None = None


class ContractAgePointResponse(BaseModel):
    age: int = Field(..., ge=1)
    mrr: float
    ltv: float
    name: Any = None


class EndDateMonthResponse(BaseModel):
    month: str
    count: int = Field(..., ge=0)


class RetentionPointResponse(BaseModel):
    month: int = Field(..., ge=1)
    retention_rate: float = Field(..., ge=0, le=100)


class ChurnedRevenueResponse(BaseModel):
    month: str
    revenue: float


class PortfolioAnalyticsResponse(BaseModel):
    """
    Analytics page payload. Averages and the median LTV are null for an empty portfolio.
    """

    company_id: str
    total_mrr: float
    total_ltv: float
    avg_mrr: float | None = None
    avg_ltv: float | None = None
    avg_retention_period: float | None = None
    active_clients: int = Field(..., ge=0)
    contract_status: ContractStatusResponse
    mrr_by_start_month: list[MonthlyMRRResponse] = Field(default_factory=list)
    renewal_timeline: list[RenewalMonthResponse] = Field(default_factory=list)
    renewal_pipeline_30d: float
    renewal_pipeline_60d: float
    avg_contract_length: float | None = None
    ltv_distribution: list[LTVBucketResponse] = Field(default_factory=list)
    top_customers_by_mrr: list[TopCustomerResponse] = Field(default_factory=list)
    contracts_renewing_30d: int = Field(..., ge=0)
    contracts_renewing_60d: int = Field(..., ge=0)
    contract_age_scatter: list[ContractAgePointResponse] = Field(default_factory=list)
    end_date_distribution: list[EndDateMonthResponse] = Field(default_factory=list)
    retention_curve: list[RetentionPointResponse] = Field(default_factory=list)
    churned_revenue: list[ChurnedRevenueResponse] = Field(default_factory=list)
    median_ltv: float | None = None
    at_risk_contracts: int = Field(..., ge=0)
