"""
Client wiring for the callable functions.

Clients are built once per function instance from settings and handed to
the services explicitly; services never look them up themselves.
"""

from __future__ import annotations

from firebase_admin import firestore

from backend.config import Settings, get_settings
from backend.db import DbClient, FirestoreDbClient, InMemoryDbClient
from backend.storage import (
    CosStorageClient,
    FirebaseStorageClient,
    InMemoryStorageClient,
    StorageClient,
)

_db_client: DbClient | None = None
_storage_client: StorageClient | None = None


def create_db_client(settings: Settings) -> DbClient:
    if settings.use_in_memory_backends:
        return InMemoryDbClient()
    return FirestoreDbClient(firestore.client())


def create_storage_client(settings: Settings) -> StorageClient:
    if settings.use_in_memory_backends:
        return InMemoryStorageClient()
    if settings.cos_configured:
        return CosStorageClient(
            bucket=settings.cos_bucket,
            region=settings.cos_region,
            endpoint=settings.cos_endpoint,
            access_key_id=settings.aws_access_key_id,
            secret_access_key=settings.aws_secret_access_key,
        )
    return FirebaseStorageClient(settings.storage_bucket)


def get_db_client() -> DbClient:
    """
    Return the instance-wide DB client so the Firestore connection is reused
    across requests.
    """
    global _db_client
    if _db_client is None:
        _db_client = create_db_client(get_settings())
    return _db_client


def get_storage_client() -> StorageClient:
    global _storage_client
    if _storage_client is None:
        _storage_client = create_storage_client(get_settings())
    return _storage_client


def reset_clients() -> None:
    """Drop the cached clients (useful in tests)."""
    global _db_client, _storage_client
    _db_client = None
    _storage_client = None
