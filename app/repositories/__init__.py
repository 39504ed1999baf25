"""
app/repositories package marker.
"""

from app.repositories.client_repository import ClientRepository, ClientStore, ClientStoreError

__all__ = [
    "ClientRepository",
    "ClientStore",
    "ClientStoreError",
]
