"""
app/validators package marker.
"""

from app.validators.mapping_validator import (
    MappingErrorDetail,
    MappingReview,
    MappingValidator,
    SchemaMappingError,
)
from app.validators.record_validator import (
    InvalidRecordError,
    sanitize_record,
    validate_record,
    validate_record_array,
    with_record_validation,
)

__all__ = [
    "InvalidRecordError",
    "MappingErrorDetail",
    "MappingReview",
    "MappingValidator",
    "SchemaMappingError",
    "sanitize_record",
    "validate_record",
    "validate_record_array",
    "with_record_validation",
]
