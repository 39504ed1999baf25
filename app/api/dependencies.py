"""
app/api/dependencies.py

Shared FastAPI dependencies.
"""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from app.repositories.client_repository import ClientRepository, ClientStore
from db.session import get_db


def get_client_store(db: Session = Depends(get_db)) -> ClientStore:
    """
    Request-scoped client document store bound to the request's session.
    """

    return ClientRepository(db)
