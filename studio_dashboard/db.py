"""Document store backed by SQLite.

Every record lives in a single ``documents`` table keyed by
``(collection, id)`` with its fields serialized as JSON, so pages can read
and write loosely-shaped records (contracts carrying legacy fields, budget
envelopes, transactions) the same way a hosted document database would.
Reads return plain dictionaries with the document id merged in under
``'id'``.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import pandas as pd

from .config import DB_PATH
from .exceptions import NotFoundError, StoreError

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=NORMAL;

CREATE TABLE IF NOT EXISTS documents (
    collection TEXT NOT NULL,
    id TEXT NOT NULL,
    data TEXT NOT NULL,
    created_at TEXT,
    updated_at TEXT,
    PRIMARY KEY (collection, id)
);

CREATE INDEX IF NOT EXISTS ix_documents_collection ON documents (collection);
"""

_initialized_paths: set = set()


def _db_path() -> Path:
    return Path(DB_PATH)


def _ensure_dirs(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def new_document_id() -> str:
    return uuid.uuid4().hex[:20]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@contextmanager
def connect() -> Iterator[sqlite3.Connection]:
    path = _db_path()
    _ensure_dirs(path)
    try:
        conn = sqlite3.connect(str(path))
    except sqlite3.Error as exc:
        raise StoreError(f"Could not open document store at {path}: {exc}") from exc
    conn.row_factory = sqlite3.Row
    try:
        if str(path) not in _initialized_paths:
            conn.executescript(SCHEMA_SQL)
            conn.commit()
            _initialized_paths.add(str(path))
        yield conn
    finally:
        conn.close()


def init_db() -> None:
    with connect():
        logger.info("Document store ready at %s", _db_path())


def _serialize(data: Dict[str, Any]) -> str:
    payload = {k: v for k, v in data.items() if k != 'id'}
    return json.dumps(payload, default=str, ensure_ascii=False)


def _row_to_document(row: sqlite3.Row) -> Dict[str, Any]:
    return {'id': row['id'], **json.loads(row['data'])}


def _select_one(conn: sqlite3.Connection, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        "SELECT id, data FROM documents WHERE collection = ? AND id = ?",
        (collection, doc_id),
    ).fetchone()
    return _row_to_document(row) if row else None


def _select_all(
    conn: sqlite3.Connection,
    collection: str,
    order_by: Optional[str] = None,
    descending: bool = False,
) -> List[Dict[str, Any]]:
    sql = "SELECT id, data FROM documents WHERE collection = ?"
    params: List[Any] = [collection]
    if order_by:
        sql += f" ORDER BY json_extract(data, ?) {'DESC' if descending else 'ASC'}, rowid ASC"
        params.append(f"$.{order_by}")
    else:
        sql += " ORDER BY rowid ASC"
    return [_row_to_document(row) for row in conn.execute(sql, params).fetchall()]


def _insert(conn: sqlite3.Connection, collection: str, data: Dict[str, Any], doc_id: Optional[str] = None) -> str:
    doc_id = doc_id or new_document_id()
    stamp = _now()
    conn.execute(
        "INSERT INTO documents (collection, id, data, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
        (collection, doc_id, _serialize(data), stamp, stamp),
    )
    return doc_id


def _upsert(conn: sqlite3.Connection, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
    stamp = _now()
    conn.execute(
        "INSERT INTO documents (collection, id, data, created_at, updated_at) VALUES (?, ?, ?, ?, ?) "
        "ON CONFLICT(collection, id) DO UPDATE SET data = excluded.data, updated_at = excluded.updated_at",
        (collection, doc_id, _serialize(data), stamp, stamp),
    )


def _merge(conn: sqlite3.Connection, collection: str, doc_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    current = _select_one(conn, collection, doc_id)
    if current is None:
        raise NotFoundError(f"No document '{doc_id}' in '{collection}'")
    current.update(fields)
    conn.execute(
        "UPDATE documents SET data = ?, updated_at = ? WHERE collection = ? AND id = ?",
        (_serialize(current), _now(), collection, doc_id),
    )
    return current


def _remove(conn: sqlite3.Connection, collection: str, doc_id: str) -> bool:
    cursor = conn.execute(
        "DELETE FROM documents WHERE collection = ? AND id = ?",
        (collection, doc_id),
    )
    return cursor.rowcount > 0


class DocumentBatch:
    """Writes staged on one connection and committed together by :func:`transaction`."""

    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        return _select_one(self._conn, collection, doc_id)

    def fetch(self, collection: str, order_by: Optional[str] = None, descending: bool = False) -> List[Dict[str, Any]]:
        return _select_all(self._conn, collection, order_by=order_by, descending=descending)

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        return _insert(self._conn, collection, data)

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        _upsert(self._conn, collection, doc_id, data)

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        return _merge(self._conn, collection, doc_id, fields)

    def delete(self, collection: str, doc_id: str) -> bool:
        return _remove(self._conn, collection, doc_id)


@contextmanager
def transaction() -> Iterator[DocumentBatch]:
    """Run several writes as one atomic unit; any exception rolls all of them back."""
    with connect() as conn:
        try:
            conn.execute("BEGIN IMMEDIATE")
            yield DocumentBatch(conn)
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise StoreError(f"Transaction failed: {exc}") from exc
        except Exception:
            conn.rollback()
            raise


def fetch_collection(
    collection: str,
    order_by: Optional[str] = None,
    descending: bool = False,
) -> List[Dict[str, Any]]:
    """Return every document of a collection, optionally ordered by a top-level field."""
    try:
        with connect() as conn:
            return _select_all(conn, collection, order_by=order_by, descending=descending)
    except sqlite3.Error as exc:
        raise StoreError(f"Could not read '{collection}': {exc}") from exc


def fetch_collection_safe(
    collection: str,
    order_by: Optional[str] = None,
    descending: bool = False,
) -> List[Dict[str, Any]]:
    """Like :func:`fetch_collection` but a failed read yields an empty list."""
    try:
        return fetch_collection(collection, order_by=order_by, descending=descending)
    except StoreError as exc:
        logger.warning("Falling back to empty '%s' list: %s", collection, exc)
        return []


def get_document(collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
    try:
        with connect() as conn:
            return _select_one(conn, collection, doc_id)
    except sqlite3.Error as exc:
        raise StoreError(f"Could not read '{collection}/{doc_id}': {exc}") from exc


def add_document(collection: str, data: Dict[str, Any]) -> str:
    """Insert a new document with a generated id and return the id."""
    try:
        with connect() as conn:
            doc_id = _insert(conn, collection, data)
            conn.commit()
    except sqlite3.Error as exc:
        raise StoreError(f"Could not add to '{collection}': {exc}") from exc
    return doc_id


def set_document(collection: str, doc_id: str, data: Dict[str, Any]) -> None:
    try:
        with connect() as conn:
            _upsert(conn, collection, doc_id, data)
            conn.commit()
    except sqlite3.Error as exc:
        raise StoreError(f"Could not write '{collection}/{doc_id}': {exc}") from exc


def update_document(collection: str, doc_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``fields`` into an existing document.

    Raises:
        NotFoundError: If the document does not exist
        StoreError: If the write is rejected
    """
    try:
        with connect() as conn:
            merged = _merge(conn, collection, doc_id, fields)
            conn.commit()
    except sqlite3.Error as exc:
        raise StoreError(f"Could not update '{collection}/{doc_id}': {exc}") from exc
    return merged


def delete_document(collection: str, doc_id: str) -> bool:
    """Delete a document. Returns False when it did not exist."""
    try:
        with connect() as conn:
            removed = _remove(conn, collection, doc_id)
            conn.commit()
    except sqlite3.Error as exc:
        raise StoreError(f"Could not delete '{collection}/{doc_id}': {exc}") from exc
    return removed


def clear_collection(collection: str) -> int:
    """Delete all documents of a collection. Returns the number removed."""
    try:
        with connect() as conn:
            cursor = conn.execute("DELETE FROM documents WHERE collection = ?", (collection,))
            conn.commit()
    except sqlite3.Error as exc:
        raise StoreError(f"Could not clear '{collection}': {exc}") from exc
    return cursor.rowcount


def list_collections() -> List[str]:
    with connect() as conn:
        rows = conn.execute("SELECT DISTINCT collection FROM documents ORDER BY collection").fetchall()
    return [row[0] for row in rows]


def collection_frame(collection: str, order_by: Optional[str] = None, descending: bool = False) -> pd.DataFrame:
    """Collection contents as a DataFrame (one row per document, one column per top-level field)."""
    documents = fetch_collection_safe(collection, order_by=order_by, descending=descending)
    if not documents:
        return pd.DataFrame()
    return pd.DataFrame.from_records(documents)
