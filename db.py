"""
db.py
SQLite-backed document store: collections of JSON documents keyed by opaque ids.
"""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import uuid
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)

DB_FILE = Path(os.getenv("GYM_DB_FILE", Path(__file__).with_name("gym.db")))


class DocumentNotFoundError(LookupError):
    """Raised when updating a document that does not exist."""

    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"{collection}/{doc_id} not found")
        self.collection = collection
        self.doc_id = doc_id


@contextmanager
def get_conn():
    conn = sqlite3.connect(DB_FILE, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()


def execute(sql: str, params: tuple = ()) -> int:
    with get_conn() as conn:
        cur = conn.execute(sql, params)
        return cur.rowcount


def fetch_one(sql: str, params: tuple = ()):
    with get_conn() as conn:
        cur = conn.execute(sql, params)
        return cur.fetchone()


def fetch_all(sql: str, params: tuple = ()) -> list[sqlite3.Row]:
    with get_conn() as conn:
        cur = conn.execute(sql, params)
        return cur.fetchall()


def init_db() -> None:
    execute(
        """
        CREATE TABLE IF NOT EXISTS documents (
            collection TEXT NOT NULL,
            id TEXT NOT NULL,
            data TEXT NOT NULL,
            PRIMARY KEY (collection, id)
        )
        """
    )


def _with_id(row: sqlite3.Row) -> dict:
    doc = json.loads(row["data"])
    doc["id"] = row["id"]
    return doc


def get_doc(collection: str, doc_id: str) -> dict | None:
    row = fetch_one(
        "SELECT id, data FROM documents WHERE collection = ? AND id = ?",
        (collection, doc_id),
    )
    if row is None:
        return None
    return _with_id(row)


def query_docs(
    collection: str,
    field: str,
    value,
    order_by: str | None = None,
    descending: bool = False,
) -> list[dict]:
    """
    Return the documents of a collection whose `field` equals `value`,
    optionally sorted by another field. Documents missing the sort field
    sort first in ascending order.
    """
    rows = fetch_all("SELECT id, data FROM documents WHERE collection = ?", (collection,))
    docs = [d for d in (_with_id(r) for r in rows) if d.get(field) == value]
    if order_by:
        docs.sort(
            key=lambda d: (d.get(order_by) is not None, d.get(order_by) if d.get(order_by) is not None else ""),
            reverse=descending,
        )
    return docs


def add_doc(collection: str, data: dict) -> str:
    doc_id = uuid.uuid4().hex
    payload = {k: v for k, v in data.items() if k != "id"}
    execute(
        "INSERT INTO documents(collection, id, data) VALUES(?,?,?)",
        (collection, doc_id, json.dumps(payload)),
    )
    logger.debug("Inserted %s/%s", collection, doc_id)
    return doc_id


def update_doc(collection: str, doc_id: str, data: dict) -> None:
    """
    Merge `data` into an existing document (last write wins).
    """
    with get_conn() as conn:
        row = conn.execute(
            "SELECT data FROM documents WHERE collection = ? AND id = ?",
            (collection, doc_id),
        ).fetchone()
        if row is None:
            raise DocumentNotFoundError(collection, doc_id)
        merged = json.loads(row["data"])
        merged.update({k: v for k, v in data.items() if k != "id"})
        conn.execute(
            "UPDATE documents SET data = ? WHERE collection = ? AND id = ?",
            (json.dumps(merged), collection, doc_id),
        )
    logger.debug("Updated %s/%s fields=%s", collection, doc_id, sorted(data))
