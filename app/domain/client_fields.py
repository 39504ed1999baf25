"""
app/domain/client_fields.py

Dot-path access and ordered fallback resolution for client records.

Stored client documents are a mix of canonical nested records
(``company.name``) and older flat shapes (``company_name``). Every logical
field is resolved through one ordered tuple of candidate paths so call sites
never chain lookups themselves.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Any, Mapping, MutableMapping, Sequence

DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
    "%b %d, %Y",
    "%B %d, %Y",
)

CLIENT_ID_PATHS: tuple[str, ...] = ("id", "client.id")
COMPANY_NAME_PATHS: tuple[str, ...] = ("company.name", "companyName", "company_name", "client_name")
RENEWAL_DATE_PATHS: tuple[str, ...] = ("renewal.date", "renewal_date", "contract_end_date")
CONTRACT_VALUE_PATHS: tuple[str, ...] = ("contract.value", "contract_value")
HEALTH_SCORE_PATHS: tuple[str, ...] = ("health.score", "health_score")
CHURN_RISK_PATHS: tuple[str, ...] = ("churn.risk", "churn_risk")
CONTACT_NAME_PATHS: tuple[str, ...] = ("contact.name", "contact_name")
CSM_OWNER_PATHS: tuple[str, ...] = ("csm.owner", "csm_owner")


def get_path(record: Any, path: str) -> Any:
    """
    Read a dot-addressed value; None when any segment is missing.
    """

    current = record
    for key in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
        if current is None:
            return None
    return current


def has_path(record: Any, path: str) -> bool:
    return get_path(record, path) is not None


def set_path(record: MutableMapping[str, Any], path: str, value: Any) -> None:
    """
    Write a dot-addressed value, creating (or replacing non-dict) intermediates.
    """

    keys = path.split(".")
    current = record
    for key in keys[:-1]:
        child = current.get(key)
        if not isinstance(child, MutableMapping):
            child = {}
            current[key] = child
        current = child
    current[keys[-1]] = value


def resolve_first(record: Any, paths: Sequence[str]) -> Any:
    """
    Return the first truthy value found along ``paths``, else None.
    """

    for path in paths:
        value = get_path(record, path)
        if value:
            return value
    return None


def resolve_client_id(record: Any) -> Any:
    return resolve_first(record, CLIENT_ID_PATHS)


def resolve_company_name(record: Any) -> Any:
    return resolve_first(record, COMPANY_NAME_PATHS)


def resolve_renewal_date(record: Any) -> Any:
    return resolve_first(record, RENEWAL_DATE_PATHS)


def coerce_number(value: Any) -> float | None:
    """
    Interpret numbers and numeric strings; None for anything else.
    """

    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return None
        try:
            number = float(stripped)
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def number_or_zero(value: Any) -> float:
    return coerce_number(value) or 0.0


def parse_date(value: Any) -> date | None:
    """
    Parse a calendar date from a date, datetime or date-like string.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    raw = value.strip()
    if not raw:
        return None

    normalized = raw[:-1] + "+00:00" if raw.endswith(("Z", "z")) else raw
    try:
        return datetime.fromisoformat(normalized).date()
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue
    return None


def as_date_string(value: Any) -> str | None:
    """
    Render a stored date value the way it is returned to callers.
    """

    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)
