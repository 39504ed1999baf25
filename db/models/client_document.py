"""
db/models/client_document.py

Client document: one canonical client record stored per (company, client).
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, JSONDocument, TimestampMixin


class ClientDocument(Base, TimestampMixin):
    """
    Schemaless client payload scoped to a company.

    ``payload`` holds the canonical nested record exactly as produced by the
    import pipeline (``company.name``, ``renewal.date``, ``mrr`` ...). Only
    the addressing keys are columns.
    """

    __tablename__ = "client_documents"

    company_id: Mapped[str] = mapped_column(
        String(128),
        primary_key=True,
        comment="Owning company identifier",
    )

    client_id: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
        comment="Stable client identifier (imported or generated)",
    )

    payload: Mapped[dict[str, Any]] = mapped_column(
        JSONDocument,
        nullable=False,
        default=dict,
        comment="Canonical client record",
    )

    __table_args__ = (
        Index("ix_client_documents_company_id", "company_id"),
    )

    def to_record(self) -> dict[str, Any]:
        """Return the stored payload with the document id applied last."""
        return {**(self.payload or {}), "id": self.client_id}

    def __repr__(self) -> str:
        return f"<ClientDocument company_id={self.company_id!r} client_id={self.client_id!r}>"
