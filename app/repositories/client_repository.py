"""
app/repositories/client_repository.py

Document-style persistence for canonical client records.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.models.client_document import ClientDocument

logger = logging.getLogger(__name__)


class ClientStoreError(RuntimeError):
    """
    Raised when a client document cannot be read or written.
    """


class ClientStore(Protocol):
    """
    Minimal document store used by the import and dashboard services.
    """

    def upsert(self, company_id: str, client_id: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        ...

    def get(self, company_id: str, client_id: str) -> dict[str, Any] | None:
        ...

    def list_by_company(self, company_id: str) -> list[dict[str, Any]]:
        ...


class ClientRepository:
    """
    SQLAlchemy-backed ``ClientStore`` over the ``client_documents`` table.

    Every ``upsert`` commits on its own so one failing record never rolls
    back records written before it.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def upsert(self, company_id: str, client_id: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        """
        Merge ``payload`` into the stored document (top-level keys), or create it.
        """

        try:
            document = self._session.get(ClientDocument, (company_id, client_id))
            if document is None:
                document = ClientDocument(
                    company_id=company_id,
                    client_id=client_id,
                    payload={**payload, "id": client_id},
                )
                self._session.add(document)
            else:
                document.payload = {**(document.payload or {}), **payload}
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.error(
                "Client upsert failed company_id=%r client_id=%r: %s",
                company_id,
                client_id,
                exc,
            )
            raise ClientStoreError(f"Failed to save client {client_id!r}.") from exc

        return document.to_record()

    def get(self, company_id: str, client_id: str) -> dict[str, Any] | None:
        try:
            document = self._session.get(ClientDocument, (company_id, client_id))
        except SQLAlchemyError as exc:
            raise ClientStoreError(f"Failed to load client {client_id!r}.") from exc
        return document.to_record() if document is not None else None

    def list_by_company(self, company_id: str) -> list[dict[str, Any]]:
        """
        Return every client record of one company ordered by client id.
        """

        stmt = (
            select(ClientDocument)
            .where(ClientDocument.company_id == company_id)
            .order_by(ClientDocument.client_id)
        )
        try:
            documents = self._session.execute(stmt).scalars().all()
        except SQLAlchemyError as exc:
            raise ClientStoreError(f"Failed to list clients for company {company_id!r}.") from exc
        return [document.to_record() for document in documents]
