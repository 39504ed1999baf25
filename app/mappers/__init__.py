"""
app/mappers package marker.
"""

from app.mappers.field_mapper import (
    LEGACY_MAPPING_TABLE,
    build_csv_template,
    check_field_presence,
    suggest_field_mapping,
    suggest_mapping,
    transform_to_canonical,
)

__all__ = [
    "LEGACY_MAPPING_TABLE",
    "build_csv_template",
    "check_field_presence",
    "suggest_field_mapping",
    "suggest_mapping",
    "transform_to_canonical",
]
