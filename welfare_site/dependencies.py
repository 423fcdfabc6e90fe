"""
Dependency wiring for the FastAPI app.

The document store is built once per application by `create_app` and kept
on `app.state`; handlers receive it through `get_store`.
"""

from __future__ import annotations

import logging

from fastapi import Request

from welfare_site.config import Settings
from welfare_site.store import DocumentStore, InMemoryDocumentStore, SqlDocumentStore

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> DocumentStore:
    """Construct the document store selected by `settings.store_backend`."""
    if settings.store_backend == "firestore":
        # Imported lazily so the memory and SQL backends do not need
        # Firebase credentials at import time.
        from welfare_site.firestore_store import FirestoreDocumentStore

        logger.info("Using Firestore document store")
        return FirestoreDocumentStore(
            project_id=settings.firebase_project_id,
            credentials_path=settings.firebase_credentials_path,
        )
    if settings.store_backend == "sql":
        logger.info("Using SQL document store")
        return SqlDocumentStore(settings.database_url or "")
    logger.info("Using in-memory document store")
    return InMemoryDocumentStore()


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store
