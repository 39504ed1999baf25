"""
app/validators/mapping_validator.py

Review and validation of user-chosen legacy-to-canonical field mappings.
"""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass
from typing import Any, Sequence

from app.domain.client_record import (
    CANONICAL_PATHS,
    REQUIRED_CANONICAL_FIELDS,
    FieldMapping,
    FieldPresence,
)
from app.mappers.field_mapper import check_field_presence, transform_to_canonical


@dataclass(frozen=True)
class MappingErrorDetail:
    """
    Structured mapping error detail.
    """

    code: str
    message: str
    canonical_field: str | None = None
    source_column: str | None = None
    context: dict[str, Any] | None = None


class SchemaMappingError(ValueError):
    """
    Raised when a field mapping cannot be applied safely.
    """

    def __init__(self, *, message: str, errors: Sequence[MappingErrorDetail]) -> None:
        super().__init__(message)
        self.message = message
        self.errors = tuple(errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "errors": [
                {
                    "code": error.code,
                    "message": error.message,
                    "canonical_field": error.canonical_field,
                    "source_column": error.source_column,
                    "context": error.context,
                }
                for error in self.errors
            ],
        }


@dataclass(frozen=True)
class MappingReview:
    """
    Non-blocking report shown before an import is executed.
    """

    presence: FieldPresence
    missing_required: list[str]
    unmapped_fields: list[str]
    duplicate_mappings: list[str]

    @property
    def has_required_fields(self) -> bool:
        return not self.missing_required


def find_duplicate_mappings(mapping: FieldMapping) -> list[str]:
    """
    Return every canonical path that a second (or later) column also targets.
    """

    seen: set[str] = set()
    duplicates: list[str] = []
    for target in mapping.values():
        if not target:
            continue
        if target in seen:
            duplicates.append(target)
        seen.add(target)
    return duplicates


class MappingValidator:
    """
    Validates legacy-to-canonical mappings against the canonical registry.
    """

    def __init__(
        self,
        *,
        required_fields: Sequence[str] = REQUIRED_CANONICAL_FIELDS,
        canonical_fields: Collection[str] = CANONICAL_PATHS,
    ) -> None:
        self._required_fields = tuple(required_fields)
        self._canonical_set = frozenset(canonical_fields)

    def review(
        self,
        *,
        mapping: FieldMapping,
        rows: Sequence[Any],
        headers: Sequence[str] | None = None,
    ) -> MappingReview:
        """
        Summarize presence, missing required fields, unmapped columns and duplicates.
        """

        mapped_fields = [target for target in mapping.values() if target]
        sample = transform_to_canonical(rows[:1], mapping)
        presence = check_field_presence(mapped_fields, sample)

        source_headers = list(headers) if headers is not None else _headers_of(rows)
        return MappingReview(
            presence=presence,
            missing_required=[field for field in self._required_fields if field not in mapped_fields],
            unmapped_fields=[header for header in source_headers if not mapping.get(header)],
            duplicate_mappings=find_duplicate_mappings(mapping),
        )

    def validate(
        self,
        *,
        mapping: FieldMapping,
        source_headers: Sequence[str],
        require_all_fields: bool = False,
    ) -> None:
        """
        Raise SchemaMappingError when the mapping is structurally unusable.
        """

        errors: list[MappingErrorDetail] = []
        headers_set = set(source_headers)

        for source_column, canonical_field in mapping.items():
            if not canonical_field:
                continue
            if canonical_field not in self._canonical_set:
                errors.append(
                    MappingErrorDetail(
                        code="invalid_canonical_field",
                        message="Unknown canonical field in mapping.",
                        canonical_field=canonical_field,
                        source_column=source_column,
                    )
                )
            if source_column not in headers_set:
                errors.append(
                    MappingErrorDetail(
                        code="unknown_source_column",
                        message="Mapped source column does not exist in the uploaded data.",
                        canonical_field=canonical_field,
                        source_column=source_column,
                    )
                )

        for duplicate in sorted(set(find_duplicate_mappings(mapping))):
            errors.append(
                MappingErrorDetail(
                    code="duplicate_canonical_field",
                    message="More than one column is mapped to the same canonical field.",
                    canonical_field=duplicate,
                    context={
                        "source_columns": [
                            column for column, target in mapping.items() if target == duplicate
                        ]
                    },
                )
            )

        if require_all_fields:
            mapped = {target for target in mapping.values() if target}
            for required in self._required_fields:
                if required not in mapped:
                    errors.append(
                        MappingErrorDetail(
                            code="required_field_unmapped",
                            message="Required canonical field is not mapped.",
                            canonical_field=required,
                            context={"source_headers": list(source_headers)},
                        )
                    )

        if errors:
            codes = ", ".join(sorted({error.code for error in errors}))
            raise SchemaMappingError(
                message=f"Field mapping validation failed: {codes}.",
                errors=errors,
            )


def _headers_of(rows: Sequence[Any]) -> list[str]:
    if not rows or not isinstance(rows[0], dict):
        return []
    return [str(key) for key in rows[0].keys()]
