"""
Document store abstraction with in-memory and SQL implementations.

Documents are JSON objects addressed by (collection, doc_id). The Firestore
implementation lives in `welfare_site.firestore_store`.
"""

from __future__ import annotations

import copy
import enum
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Sequence

from sqlalchemy import JSON, Column, Float, String, create_engine, select
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from welfare_site.utils import get_unique_id


class StoreError(Exception):
    """Raised when the underlying store cannot complete a read or write."""


class WriteMode(enum.Enum):
    # Combine submitted fields into the stored document; nested maps are
    # merged key-by-key, lists and scalars are replaced.
    MERGE = "merge"
    # Substitute the stored document entirely.
    REPLACE = "replace"


@dataclass
class StoredDocument:
    id: str
    data: dict

    def as_dict(self) -> dict:
        return {"id": self.id, **self.data}


@dataclass
class WriteOp:
    """One entry of an atomic `commit`."""

    collection: str
    doc_id: str
    data: Optional[dict] = None
    mode: WriteMode = WriteMode.MERGE
    delete: bool = False

    @classmethod
    def set(
        cls, collection: str, doc_id: str, data: dict, mode: WriteMode = WriteMode.MERGE
    ) -> "WriteOp":
        return cls(collection=collection, doc_id=doc_id, data=data, mode=mode)

    @classmethod
    def remove(cls, collection: str, doc_id: str) -> "WriteOp":
        return cls(collection=collection, doc_id=doc_id, delete=True)


class DocumentStore(Protocol):
    """Interface for document persistence."""

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        ...

    def set(
        self,
        collection: str,
        doc_id: str,
        data: dict,
        *,
        mode: WriteMode = WriteMode.MERGE,
    ) -> None:
        ...

    def add(self, collection: str, data: dict) -> str:
        ...

    def list(
        self,
        collection: str,
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        where: Optional[tuple[str, Any]] = None,
    ) -> list[StoredDocument]:
        ...

    def delete(self, collection: str, doc_id: str) -> bool:
        ...

    def commit(self, ops: Sequence[WriteOp]) -> None:
        ...

    def close(self) -> None:
        ...


def deep_merge(existing: dict, incoming: dict) -> dict:
    """Return `existing` with `incoming` merged in, maps merged recursively."""
    merged = copy.deepcopy(existing)
    for key, value in incoming.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _apply_write(existing: Optional[dict], data: dict, mode: WriteMode) -> dict:
    if mode is WriteMode.REPLACE or existing is None:
        return copy.deepcopy(data)
    return deep_merge(existing, data)


def _select(
    docs: list[StoredDocument],
    order_by: Optional[str],
    descending: bool,
    where: Optional[tuple[str, Any]],
) -> list[StoredDocument]:
    if where is not None:
        field_name, value = where
        docs = [doc for doc in docs if doc.data.get(field_name) == value]
    if order_by:
        # Documents missing the field are dropped, matching Firestore ordering.
        docs = [doc for doc in docs if doc.data.get(order_by) is not None]
        docs.sort(key=lambda doc: doc.data[order_by], reverse=descending)
    return docs


class InMemoryDocumentStore:
    """Simple in-memory document store for development and tests."""

    def __init__(self):
        self.collections: Dict[str, Dict[str, dict]] = {}
        self._lock = threading.RLock()

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        with self._lock:
            doc = self.collections.get(collection, {}).get(doc_id)
            return copy.deepcopy(doc) if doc is not None else None

    def set(
        self,
        collection: str,
        doc_id: str,
        data: dict,
        *,
        mode: WriteMode = WriteMode.MERGE,
    ) -> None:
        with self._lock:
            docs = self.collections.setdefault(collection, {})
            docs[doc_id] = _apply_write(docs.get(doc_id), data, mode)

    def add(self, collection: str, data: dict) -> str:
        doc_id = get_unique_id()
        self.set(collection, doc_id, data, mode=WriteMode.REPLACE)
        return doc_id

    def list(
        self,
        collection: str,
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        where: Optional[tuple[str, Any]] = None,
    ) -> list[StoredDocument]:
        with self._lock:
            docs = [
                StoredDocument(id=doc_id, data=copy.deepcopy(data))
                for doc_id, data in self.collections.get(collection, {}).items()
            ]
        return _select(docs, order_by, descending, where)

    def delete(self, collection: str, doc_id: str) -> bool:
        with self._lock:
            return self.collections.get(collection, {}).pop(doc_id, None) is not None

    def commit(self, ops: Sequence[WriteOp]) -> None:
        with self._lock:
            staged = copy.deepcopy(self.collections)
            for op in ops:
                docs = staged.setdefault(op.collection, {})
                if op.delete:
                    docs.pop(op.doc_id, None)
                else:
                    docs[op.doc_id] = _apply_write(
                        docs.get(op.doc_id), op.data or {}, op.mode
                    )
            self.collections = staged

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        with self._lock:
            self.collections.clear()

    def close(self) -> None:
        return None


Base = declarative_base()


class DocumentRow(Base):
    __tablename__ = "documents"

    collection = Column(String, primary_key=True)
    doc_id = Column(String, primary_key=True)
    data = Column(JSON, nullable=False)
    created_at = Column(Float, nullable=False)
    updated_at = Column(Float, nullable=False)


class SqlDocumentStore:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlDocumentStore")
        engine_options: dict = {"pool_pre_ping": True, "pool_recycle": 1800}
        url = make_url(database_url)
        if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
            # One shared connection, otherwise each worker thread opens its
            # own empty in-memory database.
            engine_options = {
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            }
        self.engine = create_engine(database_url, future=True, **engine_options)
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def _write(
        self,
        session: Session,
        collection: str,
        doc_id: str,
        data: dict,
        mode: WriteMode,
    ) -> None:
        now = time.time()
        row = session.get(DocumentRow, (collection, doc_id))
        if row:
            # Assign a fresh object so the JSON column is flagged dirty.
            row.data = _apply_write(row.data, data, mode)
            row.updated_at = now
        else:
            session.add(
                DocumentRow(
                    collection=collection,
                    doc_id=doc_id,
                    data=copy.deepcopy(data),
                    created_at=now,
                    updated_at=now,
                )
            )

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        try:
            with self.Session() as session:
                row = session.get(DocumentRow, (collection, doc_id))
                return copy.deepcopy(row.data) if row else None
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to read {collection}/{doc_id}") from e

    def set(
        self,
        collection: str,
        doc_id: str,
        data: dict,
        *,
        mode: WriteMode = WriteMode.MERGE,
    ) -> None:
        try:
            with self.Session() as session:
                self._write(session, collection, doc_id, data, mode)
                session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to write {collection}/{doc_id}") from e

    def add(self, collection: str, data: dict) -> str:
        doc_id = get_unique_id()
        self.set(collection, doc_id, data, mode=WriteMode.REPLACE)
        return doc_id

    def list(
        self,
        collection: str,
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        where: Optional[tuple[str, Any]] = None,
    ) -> list[StoredDocument]:
        try:
            with self.Session() as session:
                stmt = (
                    select(DocumentRow)
                    .where(DocumentRow.collection == collection)
                    .order_by(DocumentRow.created_at.asc())
                )
                rows = session.execute(stmt).scalars().all()
                docs = [
                    StoredDocument(id=row.doc_id, data=copy.deepcopy(row.data))
                    for row in rows
                ]
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to list {collection}") from e
        # JSON field ordering differs between SQL dialects, so filter and
        # sort in Python.
        return _select(docs, order_by, descending, where)

    def delete(self, collection: str, doc_id: str) -> bool:
        try:
            with self.Session() as session:
                row = session.get(DocumentRow, (collection, doc_id))
                if not row:
                    return False
                session.delete(row)
                session.commit()
                return True
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to delete {collection}/{doc_id}") from e

    def commit(self, ops: Sequence[WriteOp]) -> None:
        try:
            with self.Session() as session:
                for op in ops:
                    if op.delete:
                        row = session.get(DocumentRow, (op.collection, op.doc_id))
                        if row:
                            session.delete(row)
                    else:
                        self._write(
                            session, op.collection, op.doc_id, op.data or {}, op.mode
                        )
                    # Later ops in the batch must see earlier ones.
                    session.flush()
                session.commit()
        except SQLAlchemyError as e:
            raise StoreError("Failed to commit batch") from e

    def close(self) -> None:
        self.engine.dispose()
