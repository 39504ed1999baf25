"""
app/api/routers/client_import.py

Client import wizard HTTP endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from app.api.dependencies import get_client_store
from app.mappers.field_mapper import build_csv_template
from app.repositories.client_repository import ClientStore, ClientStoreError
from app.schemas.client_import import (
    ClientMappingRequest,
    ClientRowsRequest,
    FieldPresenceResponse,
    ImportFailureResponse,
    ImportPreviewResponse,
    ImportSummaryResponse,
    InvalidRecordResponse,
    MappingReviewResponse,
    MappingSuggestionResponse,
    RecordValidationResponse,
    ValidationStatsResponse,
)
from app.services.client_import_service import ClientImportService, get_client_import_service
from app.validators.mapping_validator import SchemaMappingError

router = APIRouter(tags=["import"])

TEMPLATE_FILENAME = "client_import_template.csv"


@router.get("/import/template")
def download_template() -> Response:
    """
    CSV template with the canonical header row and one example client.
    """

    return Response(
        content=build_csv_template(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{TEMPLATE_FILENAME}"'},
    )


@router.post("/import/suggest", response_model=MappingSuggestionResponse)
def suggest_mapping(
    body: ClientRowsRequest,
    import_service: ClientImportService = Depends(get_client_import_service),
) -> MappingSuggestionResponse:
    suggestion = import_service.suggest(body.rows)
    return MappingSuggestionResponse(headers=suggestion.headers, mapping=suggestion.mapping)


@router.post("/import/review", response_model=MappingReviewResponse)
def review_mapping(
    body: ClientMappingRequest,
    import_service: ClientImportService = Depends(get_client_import_service),
) -> MappingReviewResponse:
    review = import_service.review(body.rows, body.mapping)
    return MappingReviewResponse(
        presence=FieldPresenceResponse(
            has_all=review.presence.has_all,
            missing=review.presence.missing,
            available=review.presence.available,
        ),
        missing_required=review.missing_required,
        unmapped_fields=review.unmapped_fields,
        duplicate_mappings=review.duplicate_mappings,
        has_required_fields=review.has_required_fields,
    )


@router.post("/import/preview", response_model=ImportPreviewResponse)
def preview_import(
    body: ClientMappingRequest,
    import_service: ClientImportService = Depends(get_client_import_service),
) -> ImportPreviewResponse:
    preview = import_service.preview(body.rows, body.mapping)
    validation = preview.validation
    return ImportPreviewResponse(
        records=preview.records,
        validation=RecordValidationResponse(
            is_valid=validation.is_valid,
            errors=validation.errors,
            warnings=validation.warnings,
            stats=ValidationStatsResponse(
                total=validation.stats.total,
                valid=validation.stats.valid,
                invalid=validation.stats.invalid,
            ),
            invalid_records=[
                InvalidRecordResponse(index=invalid.index, errors=invalid.errors)
                for invalid in validation.invalid_records
            ],
        ),
    )


@router.post("/companies/{company_id}/import", response_model=ImportSummaryResponse)
def execute_import(
    company_id: str,
    body: ClientMappingRequest,
    store: ClientStore = Depends(get_client_store),
    import_service: ClientImportService = Depends(get_client_import_service),
) -> ImportSummaryResponse:
    """
    Save every mapped row for one company. Per-record failures are reported, not raised.
    """

    try:
        summary = import_service.execute_import(
            store=store,
            company_id=company_id,
            rows=body.rows,
            mapping=body.mapping,
        )
    except SchemaMappingError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.to_dict(),
        ) from exc
    except ClientStoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to persist imported clients.",
        ) from exc

    return ImportSummaryResponse(
        total=summary.total,
        succeeded=summary.succeeded,
        failed=summary.failed,
        failures=[
            ImportFailureResponse(
                index=failure.index,
                client_id=failure.client_id,
                message=failure.message,
            )
            for failure in summary.failures
        ],
        message=summary.message,
    )
