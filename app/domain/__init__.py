"""
app/domain package marker.
"""

from app.domain.client_record import (
    CANONICAL_FIELDS,
    REQUIRED_CANONICAL_FIELDS,
    CanonicalField,
    FieldPresence,
    ImportFailure,
    ImportPreview,
    ImportSummary,
    MappingSuggestion,
    RecordArrayValidation,
    ValidationResult,
)

__all__ = [
    "CANONICAL_FIELDS",
    "REQUIRED_CANONICAL_FIELDS",
    "CanonicalField",
    "FieldPresence",
    "ImportFailure",
    "ImportPreview",
    "ImportSummary",
    "MappingSuggestion",
    "RecordArrayValidation",
    "ValidationResult",
]
