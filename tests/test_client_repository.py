"""
tests/test_client_repository.py

ClientRepository against an in-memory SQLite engine.
"""

from __future__ import annotations

from collections.abc import Iterator
from unittest import mock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.repositories.client_repository import ClientRepository, ClientStoreError
from db.base import Base
from db.models import ClientDocument
from db.session import build_session_factory


@pytest.fixture()
def session() -> Iterator[Session]:
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    db = build_session_factory(engine)()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture()
def repository(session: Session) -> ClientRepository:
    return ClientRepository(session)


def test_upsert_creates_document_with_id(repository: ClientRepository, session: Session) -> None:
    saved = repository.upsert("acme-co", "c-1", {"company": {"name": "Acme"}, "mrr": 1500})

    assert saved == {"company": {"name": "Acme"}, "mrr": 1500, "id": "c-1"}
    document = session.get(ClientDocument, ("acme-co", "c-1"))
    assert document is not None
    assert document.payload["id"] == "c-1"


def test_upsert_merges_top_level_fields(repository: ClientRepository) -> None:
    repository.upsert("acme-co", "c-1", {"company": {"name": "Acme"}, "mrr": 1500, "ltv": 9000})
    merged = repository.upsert("acme-co", "c-1", {"company": {"name": "Acme Corp"}, "mrr": 1800})

    assert merged["company"] == {"name": "Acme Corp"}
    assert merged["mrr"] == 1800
    assert merged["ltv"] == 9000
    assert repository.get("acme-co", "c-1") == merged


def test_get_missing_returns_none(repository: ClientRepository) -> None:
    assert repository.get("acme-co", "nope") is None


def test_list_by_company_is_scoped_and_ordered(repository: ClientRepository) -> None:
    repository.upsert("acme-co", "c-2", {"mrr": 2})
    repository.upsert("acme-co", "c-1", {"mrr": 1})
    repository.upsert("other-co", "c-9", {"mrr": 9})

    clients = repository.list_by_company("acme-co")

    assert [client["id"] for client in clients] == ["c-1", "c-2"]
    assert repository.list_by_company("empty-co") == []


def test_commit_failure_rolls_back_and_raises(repository: ClientRepository, session: Session) -> None:
    with mock.patch.object(session, "commit", side_effect=SQLAlchemyError("disk full")):
        with mock.patch.object(session, "rollback", wraps=session.rollback) as rollback:
            with pytest.raises(ClientStoreError, match="c-1"):
                repository.upsert("acme-co", "c-1", {"mrr": 1})

    rollback.assert_called_once()
    assert repository.get("acme-co", "c-1") is None
