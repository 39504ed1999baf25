"""
app/domain/client_record.py

Canonical client schema registry and the result types shared by the
mapping, validation and import flows.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class CanonicalField:
    """
    One importable canonical field.
    """

    key: str
    label: str
    description: str
    required: bool
    field_type: str


# Registry order is also the CSV template column order.
CANONICAL_FIELDS: tuple[CanonicalField, ...] = (
    CanonicalField("client.id", "Client ID", "Unique identifier for the client", False, "text"),
    CanonicalField("company.name", "Company Name", "Name of the client company", True, "text"),
    CanonicalField("contact.name", "Contact Name", "Primary contact person name", True, "text"),
    CanonicalField("contact.email", "Contact Email", "Primary contact email address", True, "email"),
    CanonicalField("contract.startDate", "Contract Start Date", "When the contract began", True, "date"),
    CanonicalField("contract.endDate", "Contract End Date", "When the contract expires", True, "date"),
    CanonicalField("renewal.date", "Renewal Date", "Next renewal or review date", True, "date"),
    CanonicalField("mrr", "Monthly Recurring Revenue", "Monthly revenue from this client", True, "currency"),
    CanonicalField("ltv", "Lifetime Value", "Total customer lifetime value", False, "currency"),
    CanonicalField(
        "subscribedMonths",
        "Subscribed Months",
        "Number of months the client has been subscribed",
        False,
        "number",
    ),
)

REQUIRED_CANONICAL_FIELDS: tuple[str, ...] = tuple(
    canonical.key for canonical in CANONICAL_FIELDS if canonical.required
)

# Paths the metrics layer reads that are not part of the import template.
ANALYTICS_CANONICAL_PATHS: tuple[str, ...] = (
    "health.score",
    "usage.last30d",
    "churn.risk",
    "nps.score",
    "nps.comment",
    "contract.value",
    "csm.owner",
)

CANONICAL_PATHS: frozenset[str] = frozenset(
    [canonical.key for canonical in CANONICAL_FIELDS] + list(ANALYTICS_CANONICAL_PATHS)
)

CHURN_RISK_LEVELS: tuple[str, ...] = ("low", "medium", "high", "critical")
SUBSCRIPTION_STATUSES: tuple[str, ...] = ("active", "trial", "suspended", "cancelled")
MOMENTUM_VALUES: tuple[str, ...] = ("up", "down", "stable")


@dataclass(frozen=True)
class FieldPresence:
    """
    Outcome of a required-path presence check over a sample record.
    """

    has_all: bool
    missing: list[str]
    available: list[str]


@dataclass(frozen=True)
class ValidationResult:
    """
    Result of validating one legacy record. Warnings never affect ``is_valid``.
    """

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class InvalidRecord:
    """
    A record rejected by array validation, with its 0-based position.
    """

    index: int
    record: Any
    errors: list[str]


@dataclass(frozen=True)
class ValidationStats:
    total: int
    valid: int
    invalid: int


@dataclass(frozen=True)
class RecordArrayValidation(ValidationResult):
    """
    Array validation result: per-record partition plus aggregated messages.
    """

    valid_records: list[Any] = field(default_factory=list)
    invalid_records: list[InvalidRecord] = field(default_factory=list)
    stats: ValidationStats = field(default_factory=lambda: ValidationStats(total=0, valid=0, invalid=0))


@dataclass(frozen=True)
class MappingSuggestion:
    """
    Source headers of an upload and the mapping suggested for them.
    """

    headers: list[str]
    mapping: dict[str, str]


@dataclass(frozen=True)
class ImportPreview:
    """
    Canonical records as they would be saved, plus the legacy-row validation report.
    """

    records: list[dict[str, Any]]
    validation: RecordArrayValidation


@dataclass(frozen=True)
class ImportFailure:
    """
    One record the document store refused during an import run.
    """

    index: int
    client_id: str
    message: str


@dataclass(frozen=True)
class ImportSummary:
    """
    End-of-run import summary. Partial success is a normal outcome.
    """

    total: int
    succeeded: int
    failed: int
    failures: list[ImportFailure] = field(default_factory=list)

    @property
    def message(self) -> str | None:
        if self.failed == 0:
            return None
        return f"Import completed with {self.failed} failures out of {self.total} clients."


CanonicalRecord = dict[str, Any]
FieldMapping = Mapping[str, str | None]
