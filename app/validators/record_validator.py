"""
app/validators/record_validator.py

Validation and sanitizing of legacy (flat, pre-mapping) client records.

Validation never raises for bad data: every check runs and the caller gets
the full error/warning set in one pass. ``with_record_validation`` is the
one deliberate fail-fast wrapper.
"""

from __future__ import annotations

import functools
import re
from typing import Any, Callable, Mapping, Sequence, TypeVar

from app.domain.client_fields import coerce_number, parse_date
from app.domain.client_record import (
    CHURN_RISK_LEVELS,
    MOMENTUM_VALUES,
    SUBSCRIPTION_STATUSES,
    InvalidRecord,
    RecordArrayValidation,
    ValidationResult,
    ValidationStats,
)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# (field, minimum, maximum or None, message)
NUMERIC_RULES: tuple[tuple[str, float, float | None, str], ...] = (
    ("health_score", 0, 100, "health_score must be a number between 0 and 100"),
    ("mrr", 0, None, "mrr must be a non-negative number"),
    ("usage_30d", 0, 100, "usage_30d must be a number between 0 and 100"),
    ("nps_score", 0, 10, "nps_score must be a number between 0 and 10"),
    ("contract_value", 0, None, "contract_value must be a non-negative number"),
)

DATE_FIELDS: tuple[str, ...] = ("renewal_date", "contract_start_date", "contract_end_date")

SANITIZE_NUMERIC_FIELDS: tuple[str, ...] = ("health_score", "mrr", "usage_30d", "nps_score", "contract_value", "ltv")
SANITIZE_STRING_FIELDS: tuple[str, ...] = ("company_name", "client_name", "churn_risk", "subscription_status")

F = TypeVar("F", bound=Callable[..., Any])


class InvalidRecordError(ValueError):
    """
    Raised by ``with_record_validation`` when the wrapped call gets a bad record.
    """

    def __init__(self, errors: Sequence[str]) -> None:
        self.errors = tuple(errors)
        super().__init__(f"Invalid client data: {', '.join(self.errors)}")


def validate_record(record: Any) -> ValidationResult:
    """
    Validate one legacy client record.
    """

    errors: list[str] = []
    warnings: list[str] = []

    if not isinstance(record, Mapping):
        return ValidationResult(is_valid=False, errors=["Client data must be an object"], warnings=[])

    client_id = record.get("id")
    if not client_id or not isinstance(client_id, str):
        errors.append("Client ID is required and must be a string")

    if not record.get("company_name") and not record.get("client_name"):
        errors.append("Either company_name or client_name is required")

    for field_name, minimum, maximum, message in NUMERIC_RULES:
        value = record.get(field_name)
        if value is None:
            continue
        number = coerce_number(value)
        if number is None or number < minimum or (maximum is not None and number > maximum):
            errors.append(message)

    for field_name in DATE_FIELDS:
        value = record.get(field_name)
        if value is not None and parse_date(value) is None:
            errors.append(f"{field_name} must be a valid ISO date string")

    _check_enum(record, "churn_risk", CHURN_RISK_LEVELS, errors, verb="must")
    _check_enum(record, "subscription_status", SUBSCRIPTION_STATUSES, errors, verb="must")
    _check_enum(record, "call_momentum", MOMENTUM_VALUES, warnings, verb="should")
    _check_enum(record, "login_momentum", MOMENTUM_VALUES, warnings, verb="should")

    email = record.get("contact_email")
    if email is not None and not (isinstance(email, str) and EMAIL_PATTERN.fullmatch(email)):
        warnings.append("contact_email should be a valid email address")

    if not record.get("mrr") and not record.get("contract_value"):
        warnings.append("Neither MRR nor contract_value provided - revenue analytics may be limited")
    if not record.get("health_score"):
        warnings.append("No health_score provided - health monitoring will be unavailable")
    if not record.get("renewal_date"):
        warnings.append("No renewal_date provided - renewal tracking will be unavailable")

    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)


def validate_record_array(records: Any) -> RecordArrayValidation:
    """
    Validate each record independently and partition into valid / invalid.
    """

    if not isinstance(records, (list, tuple)):
        return RecordArrayValidation(
            is_valid=False,
            errors=["Input must be an array of client objects"],
            warnings=[],
        )

    valid_records: list[Any] = []
    invalid_records: list[InvalidRecord] = []
    all_errors: list[str] = []
    all_warnings: list[str] = []

    for index, record in enumerate(records):
        result = validate_record(record)
        prefix = f"Record {index + 1}: "
        if result.is_valid:
            valid_records.append(record)
        else:
            invalid_records.append(InvalidRecord(index=index, record=record, errors=list(result.errors)))
            all_errors.extend(prefix + error for error in result.errors)
        all_warnings.extend(prefix + warning for warning in result.warnings)

    return RecordArrayValidation(
        is_valid=not invalid_records,
        errors=all_errors,
        warnings=all_warnings,
        valid_records=valid_records,
        invalid_records=invalid_records,
        stats=ValidationStats(
            total=len(records),
            valid=len(valid_records),
            invalid=len(invalid_records),
        ),
    )


def sanitize_record(record: Mapping[str, Any]) -> dict[str, Any]:
    """
    Return a normalized copy; the input is never mutated.

    Numeric strings are coerced where they parse as finite numbers and left
    untouched otherwise.
    """

    sanitized = {key: value for key, value in record.items() if value is not None}

    for field_name in SANITIZE_NUMERIC_FIELDS:
        value = sanitized.get(field_name)
        if isinstance(value, str):
            number = coerce_number(value)
            if number is not None:
                sanitized[field_name] = int(number) if number.is_integer() else number

    for field_name in SANITIZE_STRING_FIELDS:
        value = sanitized.get(field_name)
        if isinstance(value, str):
            sanitized[field_name] = value.strip()

    email = sanitized.get("contact_email")
    if isinstance(email, str):
        sanitized["contact_email"] = email.strip().lower()

    return sanitized


def is_legacy_record(candidate: Any) -> bool:
    return validate_record(candidate).is_valid


def with_record_validation(fn: F) -> F:
    """
    Decorate a function whose first argument is a legacy record; raise before
    calling it when the record is invalid.
    """

    @functools.wraps(fn)
    def wrapper(record: Any, *args: Any, **kwargs: Any) -> Any:
        result = validate_record(record)
        if not result.is_valid:
            raise InvalidRecordError(result.errors)
        return fn(record, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


def _check_enum(
    record: Mapping[str, Any],
    field_name: str,
    allowed: Sequence[str],
    sink: list[str],
    *,
    verb: str,
) -> None:
    value = record.get(field_name)
    if value is not None and value not in allowed:
        sink.append(f"{field_name} {verb} be one of: {', '.join(allowed)}")
