"""
Firestore-backed document store.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core import exceptions as google_exceptions
from google.auth.exceptions import GoogleAuthError
from google.cloud.firestore_v1.base_query import FieldFilter

from welfare_site.store import StoredDocument, StoreError, WriteMode, WriteOp

logger = logging.getLogger(__name__)

APP_NAME = "welfare-site"

# Credential refresh failures are not GoogleAPIErrors.
STORE_ERRORS = (google_exceptions.GoogleAPIError, GoogleAuthError)


def _get_or_create_app(
    project_id: Optional[str], credentials_path: Optional[str]
) -> firebase_admin.App:
    try:
        return firebase_admin.get_app(APP_NAME)
    except ValueError:
        pass
    # Application default credentials unless a service account file is given.
    cred = (
        credentials.Certificate(credentials_path)
        if credentials_path
        else credentials.ApplicationDefault()
    )
    options = {"projectId": project_id} if project_id else None
    app = firebase_admin.initialize_app(cred, options, name=APP_NAME)
    logger.info("Firebase Admin SDK initialized for project %s", project_id)
    return app


class FirestoreDocumentStore:
    """Document store on top of a Firestore client."""

    def __init__(
        self,
        project_id: Optional[str] = None,
        credentials_path: Optional[str] = None,
        client: Any = None,
    ):
        if client is None:
            app = _get_or_create_app(project_id, credentials_path)
            client = firestore.client(app)
        self.client = client

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        try:
            snapshot = self.client.collection(collection).document(doc_id).get()
        except STORE_ERRORS as e:
            raise StoreError(f"Failed to read {collection}/{doc_id}") from e
        if not snapshot.exists:
            return None
        return snapshot.to_dict() or {}

    def set(
        self,
        collection: str,
        doc_id: str,
        data: dict,
        *,
        mode: WriteMode = WriteMode.MERGE,
    ) -> None:
        try:
            self.client.collection(collection).document(doc_id).set(
                data, merge=mode is WriteMode.MERGE
            )
        except STORE_ERRORS as e:
            raise StoreError(f"Failed to write {collection}/{doc_id}") from e

    def add(self, collection: str, data: dict) -> str:
        try:
            _, doc_ref = self.client.collection(collection).add(data)
        except STORE_ERRORS as e:
            raise StoreError(f"Failed to add to {collection}") from e
        return doc_ref.id

    def list(
        self,
        collection: str,
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        where: Optional[tuple[str, Any]] = None,
    ) -> list[StoredDocument]:
        query = self.client.collection(collection)
        if where is not None:
            field_name, value = where
            query = query.where(filter=FieldFilter(field_name, "==", value))
        if order_by:
            direction = (
                firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            )
            query = query.order_by(order_by, direction=direction)
        try:
            return [
                StoredDocument(id=snapshot.id, data=snapshot.to_dict() or {})
                for snapshot in query.stream()
            ]
        except STORE_ERRORS as e:
            raise StoreError(f"Failed to list {collection}") from e

    def delete(self, collection: str, doc_id: str) -> bool:
        doc_ref = self.client.collection(collection).document(doc_id)
        try:
            if not doc_ref.get().exists:
                return False
            doc_ref.delete()
        except STORE_ERRORS as e:
            raise StoreError(f"Failed to delete {collection}/{doc_id}") from e
        return True

    def commit(self, ops: Sequence[WriteOp]) -> None:
        batch = self.client.batch()
        for op in ops:
            doc_ref = self.client.collection(op.collection).document(op.doc_id)
            if op.delete:
                batch.delete(doc_ref)
            else:
                batch.set(doc_ref, op.data or {}, merge=op.mode is WriteMode.MERGE)
        try:
            batch.commit()
        except STORE_ERRORS as e:
            raise StoreError("Failed to commit batch") from e

    def close(self) -> None:
        self.client.close()
