"""
app/mappers/field_mapper.py

Legacy-to-canonical field mapping for client imports.
"""

from __future__ import annotations

import csv
import io
from types import MappingProxyType
from typing import Any, Mapping, Sequence

from app.domain.client_fields import has_path, set_path
from app.domain.client_record import (
    CANONICAL_FIELDS,
    CanonicalRecord,
    FieldMapping,
    FieldPresence,
)

_SYNONYMS: dict[str, tuple[str, ...]] = {
    "client.id": ("client_id", "id", "account_id", "customer_id", "external_id"),
    "company.name": ("client_name", "company_name", "account_name", "organization", "company", "client"),
    "contact.name": ("contact_name", "contact", "name", "primary_contact", "rep"),
    "contact.email": ("contact_email", "email", "primary_email", "contact_mail"),
    "contract.startDate": (
        "contract_start_date",
        "contract_startdate",
        "start_date",
        "contract_start",
        "subscription_start",
    ),
    "contract.endDate": (
        "contract_end_date",
        "contract_enddate",
        "end_date",
        "contract_end",
        "expiry_date",
        "subscription_end",
    ),
    "renewal.date": ("renewal_date", "next_renewal", "renewal", "review_date"),
    "mrr": ("mrr", "monthly_recurring_revenue", "monthly_revenue", "revenue", "monthly_value"),
    "ltv": ("ltv", "lifetime_value", "customer_lifetime_value", "total_value", "clv"),
    "subscribedMonths": (
        "subscribed_months",
        "subscribedmonths",
        "tenure",
        "months_subscribed",
        "subscription_months",
        "months",
    ),
    "health.score": ("health_score", "health"),
    "usage.last30d": ("usage_30d", "usage_last_30d"),
    "churn.risk": ("churn_risk",),
    "nps.score": ("nps_score", "nps"),
    "nps.comment": ("nps_comment",),
    "contract.value": ("contract_value",),
    "csm.owner": ("csm_owner", "csm", "account_owner"),
}

# Read-only legacy name -> canonical path lookup, built once at import.
LEGACY_MAPPING_TABLE: Mapping[str, str] = MappingProxyType(
    {legacy: canonical for canonical, legacy_names in _SYNONYMS.items() for legacy in legacy_names}
)

_TEMPLATE_EXAMPLE_ROW: dict[str, str] = {
    "client.id": "CLIENT_001",
    "company.name": "Example Company Inc",
    "contact.name": "John Doe",
    "contact.email": "john@example.com",
    "contract.startDate": "2023-01-01",
    "contract.endDate": "2024-01-01",
    "renewal.date": "2024-01-01",
    "mrr": "5000",
    "ltv": "60000",
    "subscribedMonths": "12",
}


def suggest_mapping(legacy_field: Any) -> str | None:
    """
    Suggest the canonical path for one legacy column name, or None.
    """

    if not isinstance(legacy_field, str):
        return None
    return LEGACY_MAPPING_TABLE.get(legacy_field.strip().lower())


def suggest_field_mapping(headers: Sequence[str]) -> dict[str, str]:
    """
    Build the initial mapping for a set of headers. Unmatched headers are omitted.
    """

    mapping: dict[str, str] = {}
    for header in headers:
        suggestion = suggest_mapping(header)
        if suggestion:
            mapping[header] = suggestion
    return mapping


def check_field_presence(
    required_paths: Sequence[str],
    dataset: Sequence[Any] | None = None,
) -> FieldPresence:
    """
    Check which required paths hold a value in the first record of ``dataset``.

    Only the first record is sampled.
    """

    if not dataset:
        return FieldPresence(has_all=False, missing=list(required_paths), available=[])

    sample = dataset[0]
    available: list[str] = []
    missing: list[str] = []
    for path in required_paths:
        if has_path(sample, path):
            available.append(path)
        else:
            missing.append(path)

    return FieldPresence(has_all=not missing, missing=missing, available=available)


def transform_to_canonical(
    raw_records: Sequence[Any],
    mapping: FieldMapping,
) -> list[CanonicalRecord]:
    """
    Convert raw rows into canonical nested records, one output per input.

    Empty source values and unmapped columns are dropped.
    """

    pairs = [
        (source_field, target_path)
        for source_field, target_path in mapping.items()
        if target_path
    ]

    canonical_records: list[CanonicalRecord] = []
    for raw in raw_records:
        canonical: CanonicalRecord = {}
        if isinstance(raw, Mapping):
            for source_field, target_path in pairs:
                value = raw.get(source_field)
                if value is None or value == "":
                    continue
                set_path(canonical, target_path, value)
        canonical_records.append(canonical)
    return canonical_records


def template_headers() -> list[str]:
    return [canonical.key.replace(".", "_") for canonical in CANONICAL_FIELDS]


def build_csv_template() -> str:
    """
    Render the import template: registry header row plus one example row.
    """

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(template_headers())
    writer.writerow([_TEMPLATE_EXAMPLE_ROW.get(canonical.key, "") for canonical in CANONICAL_FIELDS])
    return buffer.getvalue()
