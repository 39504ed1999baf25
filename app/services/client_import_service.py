"""
app/services/client_import_service.py

Service layer for the client import wizard.

The wizard runs in four steps, each a method here:

    1. suggest         - read headers, propose a legacy-to-canonical mapping
    2. review          - report presence, missing required fields, duplicates
    3. preview         - canonical records as they would be saved
    4. execute_import  - persist every record through the client store

Persistence is one record at a time. A store failure on one record is
counted and logged and never aborts the rest of the batch.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Mapping, Sequence

from app.config import get_import_settings
from app.domain.client_fields import get_path
from app.domain.client_record import (
    CanonicalRecord,
    FieldMapping,
    ImportFailure,
    ImportPreview,
    ImportSummary,
    MappingSuggestion,
)
from app.mappers.field_mapper import suggest_field_mapping, transform_to_canonical
from app.repositories.client_repository import ClientStore, ClientStoreError
from app.validators.mapping_validator import MappingReview, MappingValidator
from app.validators.record_validator import sanitize_record, validate_record_array

logger = logging.getLogger(__name__)


def collect_headers(rows: Sequence[Any]) -> list[str]:
    """
    Column names across all rows, in first-seen order.
    """

    headers: dict[str, None] = {}
    for row in rows:
        if isinstance(row, Mapping):
            for key in row.keys():
                headers.setdefault(str(key), None)
    return list(headers)


def _utc(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(tz=timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def _iso_timestamp(moment: datetime) -> str:
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def prepare_records(
    rows: Sequence[Any],
    mapping: FieldMapping,
    *,
    now: datetime | None = None,
) -> list[CanonicalRecord]:
    """
    Transform rows and stamp each record with a resolved ``id`` and ``importedAt``.

    The id comes from ``client.id``, then ``id``, then a generated
    ``imported_<epoch ms>_<index>``.
    """

    moment = _utc(now)
    epoch_ms = int(moment.timestamp() * 1000)
    imported_at = _iso_timestamp(moment)

    records: list[CanonicalRecord] = []
    for index, record in enumerate(transform_to_canonical(rows, mapping)):
        client_id = get_path(record, "client.id") or record.get("id") or f"imported_{epoch_ms}_{index}"
        record["id"] = str(client_id)
        record["importedAt"] = imported_at
        records.append(record)
    return records


class ClientImportService:
    """
    Coordinates mapping suggestion, review, preview and persistence of client imports.
    """

    def __init__(
        self,
        *,
        max_failure_details: int,
        log_failures: bool,
        require_all_fields: bool = False,
        validator: MappingValidator | None = None,
    ) -> None:
        self._max_failure_details = max(1, max_failure_details)
        self._log_failures = log_failures
        self._require_all_fields = require_all_fields
        self._validator = validator or MappingValidator()

    def suggest(self, rows: Sequence[Any]) -> MappingSuggestion:
        headers = collect_headers(rows)
        return MappingSuggestion(headers=headers, mapping=suggest_field_mapping(headers))

    def review(self, rows: Sequence[Any], mapping: FieldMapping) -> MappingReview:
        return self._validator.review(mapping=mapping, rows=rows, headers=collect_headers(rows))

    def preview(
        self,
        rows: Sequence[Any],
        mapping: FieldMapping,
        *,
        now: datetime | None = None,
    ) -> ImportPreview:
        """
        Canonical records plus a validation report of the sanitized source rows.
        """

        sanitized = [sanitize_record(row) if isinstance(row, Mapping) else row for row in rows]
        return ImportPreview(
            records=prepare_records(rows, mapping, now=now),
            validation=validate_record_array(sanitized),
        )

    def execute_import(
        self,
        *,
        store: ClientStore,
        company_id: str,
        rows: Sequence[Any],
        mapping: FieldMapping,
        now: datetime | None = None,
    ) -> ImportSummary:
        """
        Validate the mapping, then save every record and report how many failed.

        Raises:
            SchemaMappingError: the mapping references unknown fields or columns,
                maps two columns to one field, or (when configured) leaves a
                required field unmapped.
        """

        if not rows:
            logger.info("Client import skipped company_id=%r: no rows supplied", company_id)
            return ImportSummary(total=0, succeeded=0, failed=0)

        self._validator.validate(
            mapping=mapping,
            source_headers=collect_headers(rows),
            require_all_fields=self._require_all_fields,
        )

        records = prepare_records(rows, mapping, now=now)
        logger.info("Client import started company_id=%r records=%d", company_id, len(records))

        succeeded = 0
        failed = 0
        failures: list[ImportFailure] = []

        for index, record in enumerate(records):
            client_id = record["id"]
            try:
                store.upsert(company_id, client_id, record)
            except ClientStoreError as exc:
                failed += 1
                self._record_failure(
                    failures,
                    ImportFailure(index=index, client_id=client_id, message=str(exc)),
                )
                continue
            succeeded += 1

        summary = ImportSummary(
            total=len(records),
            succeeded=succeeded,
            failed=failed,
            failures=failures,
        )
        if summary.failed:
            logger.warning("Client import company_id=%r: %s", company_id, summary.message)
        logger.info(
            "Client import finished company_id=%r succeeded=%d failed=%d",
            company_id,
            summary.succeeded,
            summary.failed,
        )
        return summary

    def _record_failure(self, failures: list[ImportFailure], failure: ImportFailure) -> None:
        if self._log_failures:
            logger.warning(
                "Client import failure index=%s client_id=%r message=%s",
                failure.index,
                failure.client_id,
                failure.message,
            )

        if len(failures) < self._max_failure_details:
            failures.append(failure)


@lru_cache(maxsize=1)
def get_client_import_service() -> ClientImportService:
    """
    Build and cache the import service with env-driven settings.
    """
    settings = get_import_settings()
    return ClientImportService(
        max_failure_details=settings.max_failure_details,
        log_failures=settings.log_failures,
        require_all_fields=settings.require_all_fields,
    )
