"""
app/schemas/client_import.py

Request and response schemas for the client import endpoints.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ClientRowsRequest(BaseModel):
    """
    Raw uploaded rows, already parsed from CSV or JSON by the client.
    """

    rows: list[dict[str, Any]] = Field(default_factory=list)


class ClientMappingRequest(ClientRowsRequest):
    """
    Raw rows plus the user-confirmed legacy-to-canonical mapping.
    """

    mapping: dict[str, str | None] = Field(default_factory=dict)


class MappingSuggestionResponse(BaseModel):
    headers: list[str]
    mapping: dict[str, str]


class FieldPresenceResponse(BaseModel):
    has_all: bool
    missing: list[str]
    available: list[str]


class MappingReviewResponse(BaseModel):
    presence: FieldPresenceResponse
    missing_required: list[str]
    unmapped_fields: list[str]
    duplicate_mappings: list[str]
    has_required_fields: bool


class ValidationStatsResponse(BaseModel):
    total: int = Field(..., ge=0)
    valid: int = Field(..., ge=0)
    invalid: int = Field(..., ge=0)


class InvalidRecordResponse(BaseModel):
    index: int = Field(..., ge=0)
    errors: list[str]


class RecordValidationResponse(BaseModel):
    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    stats: ValidationStatsResponse
    invalid_records: list[InvalidRecordResponse] = Field(default_factory=list)


class ImportPreviewResponse(BaseModel):
    records: list[dict[str, Any]]
    validation: RecordValidationResponse


class ImportFailureResponse(BaseModel):
    index: int = Field(..., ge=0)
    client_id: str
    message: str


class ImportSummaryResponse(BaseModel):
    """
    API response model for one executed import.
    """

    total: int = Field(..., ge=0)
    succeeded: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    failures: list[ImportFailureResponse] = Field(default_factory=list)
    message: str | None = None
