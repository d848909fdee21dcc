"""Generic document store on top of SQLite JSON rows.

Records live in one ``documents`` table keyed by ``(collection, doc_id)``; each
record body is a JSON object. Queries are a conjunction of ``(field, operator,
value)`` conditions compiled to ``json_extract`` predicates, so callers never
write SQL. Listeners registered through ``subscribe``/``subscribe_one`` receive a
fresh snapshot after every committed write to their collection.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
import json
import logging
import re
import sqlite3
import threading
import uuid
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .database import DatabaseService

logger = logging.getLogger(__name__)

Document = Dict[str, Any]
Unsubscribe = Callable[[], None]

FIELD_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*$")
RESERVED_FIELDS = {"id", "createdAt", "updatedAt"}
COMPARISON_OPERATORS = {"==": "=", "!=": "!=", "<": "<", "<=": "<=", ">": ">", ">=": ">="}
LIST_OPERATORS = {"in", "not-in", "array-contains", "array-contains-any"}


class DocumentStoreError(Exception):
    """Raised when the underlying store rejects an operation."""


class DocumentNotFoundError(DocumentStoreError):
    """Raised when updating a record that does not exist."""

    def __init__(self, collection: str, doc_id: str) -> None:
        super().__init__(f"Document '{doc_id}' not found in '{collection}'")
        self.collection = collection
        self.doc_id = doc_id


@dataclass(frozen=True)
class Condition:
    """Single ``field operator value`` filter."""

    field: str
    operator: str
    value: Any

    def __post_init__(self) -> None:
        if not FIELD_PATTERN.match(self.field):
            raise ValueError(f"Invalid field name: {self.field!r}")
        if self.operator not in COMPARISON_OPERATORS and self.operator not in LIST_OPERATORS:
            raise ValueError(f"Unsupported operator: {self.operator!r}")
        if self.operator in {"in", "not-in", "array-contains-any"}:
            if not isinstance(self.value, (list, tuple)) or not self.value:
                raise ValueError(f"Operator '{self.operator}' requires a non-empty list")


ConditionLike = Condition | Tuple[str, str, Any]


@dataclass
class _Listener:
    collection: str
    callback: Callable[[Any], None]
    conditions: Tuple[Condition, ...] = ()
    doc_id: Optional[str] = None
    active: bool = field(default=True)


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _to_param(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _json_path(field_name: str) -> str:
    return "$." + field_name


def _coerce_conditions(conditions: Optional[Iterable[ConditionLike]]) -> Tuple[Condition, ...]:
    coerced: List[Condition] = []
    for condition in conditions or ():
        if isinstance(condition, Condition):
            coerced.append(condition)
        else:
            field_name, operator, value = condition
            coerced.append(Condition(field_name, operator, value))
    return tuple(coerced)


def _compile_condition(condition: Condition) -> Tuple[str, List[Any]]:
    path = _json_path(condition.field)
    if condition.operator in COMPARISON_OPERATORS:
        sql_op = COMPARISON_OPERATORS[condition.operator]
        return f"json_extract(data, ?) {sql_op} ?", [path, _to_param(condition.value)]

    values = [_to_param(item) for item in condition.value] if isinstance(
        condition.value, (list, tuple)
    ) else [_to_param(condition.value)]
    placeholders = ", ".join("?" for _ in values)

    if condition.operator == "in":
        return f"json_extract(data, ?) IN ({placeholders})", [path, *values]
    if condition.operator == "not-in":
        return f"json_extract(data, ?) NOT IN ({placeholders})", [path, *values]
    if condition.operator == "array-contains":
        return (
            "EXISTS (SELECT 1 FROM json_each(documents.data, ?) WHERE json_each.value = ?)",
            [path, values[0]],
        )
    return (
        f"EXISTS (SELECT 1 FROM json_each(documents.data, ?) WHERE json_each.value IN ({placeholders}))",
        [path, *values],
    )


def _row_to_document(row: sqlite3.Row) -> Document:
    data = json.loads(row["data"])
    data["id"] = row["doc_id"]
    return data


class DocumentStore:
    """Typed-by-convention CRUD, query and subscription access to collections."""

    def __init__(self, db_service: DatabaseService | None = None) -> None:
        self.db_service = db_service or DatabaseService()
        self._listeners: List[_Listener] = []
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, collection: str, data: Dict[str, Any]) -> str:
        """Insert a record under a generated id and return the id."""
        doc_id = uuid.uuid4().hex[:20]
        self._write_new(collection, doc_id, data, upsert=False)
        logger.debug("Created document", extra={"collection": collection, "doc_id": doc_id})
        return doc_id

    def create_with_id(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Insert or overwrite a record under a caller-supplied id."""
        if not doc_id:
            raise ValueError("Document id is required")
        self._write_new(collection, doc_id, data, upsert=True)
        logger.debug("Set document", extra={"collection": collection, "doc_id": doc_id})

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        """Merge ``fields`` into an existing record and re-stamp ``updatedAt``."""
        conn = self.db_service.connect()
        try:
            with conn:
                row = conn.execute(
                    "SELECT data FROM documents WHERE collection = ? AND doc_id = ?",
                    (collection, doc_id),
                ).fetchone()
                if row is None:
                    raise DocumentNotFoundError(collection, doc_id)

                data = json.loads(row["data"])
                data.update(
                    {key: value for key, value in fields.items() if key not in RESERVED_FIELDS}
                )
                now = _utcnow_iso()
                data["updatedAt"] = now
                conn.execute(
                    """
                    UPDATE documents SET data = ?, updated_at = ?
                    WHERE collection = ? AND doc_id = ?
                    """,
                    (json.dumps(data, default=_json_default), now, collection, doc_id),
                )
        except sqlite3.Error as exc:
            logger.error(f"Failed to update {collection}/{doc_id}: {exc}")
            raise DocumentStoreError(f"Document database update failed: {exc}") from exc
        finally:
            conn.close()
        self._notify(collection, doc_id)

    def delete(self, collection: str, doc_id: str) -> None:
        """Remove a record; deleting an unknown id leaves the store untouched."""
        conn = self.db_service.connect()
        try:
            with conn:
                cursor = conn.execute(
                    "DELETE FROM documents WHERE collection = ? AND doc_id = ?",
                    (collection, doc_id),
                )
        except sqlite3.Error as exc:
            logger.error(f"Failed to delete {collection}/{doc_id}: {exc}")
            raise DocumentStoreError(f"Document database delete failed: {exc}") from exc
        finally:
            conn.close()
        if cursor.rowcount:
            self._notify(collection, doc_id)
        else:
            logger.info(
                "Delete of missing document ignored",
                extra={"collection": collection, "doc_id": doc_id},
            )

    def _write_new(
        self, collection: str, doc_id: str, data: Dict[str, Any], *, upsert: bool
    ) -> None:
        now = _utcnow_iso()
        body = {key: value for key, value in data.items() if key not in RESERVED_FIELDS}
        body["createdAt"] = now
        body["updatedAt"] = now
        try:
            payload = json.dumps(body, default=_json_default)
        except TypeError as exc:
            raise DocumentStoreError(f"Document is not serializable: {exc}") from exc

        statement = """
            INSERT INTO documents (collection, doc_id, data, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
        """
        if upsert:
            statement += """
            ON CONFLICT(collection, doc_id) DO UPDATE SET
                data = excluded.data,
                created_at = excluded.created_at,
                updated_at = excluded.updated_at
            """

        conn = self.db_service.connect()
        try:
            with conn:
                conn.execute(statement, (collection, doc_id, payload, now, now))
        except sqlite3.Error as exc:
            logger.error(f"Failed to write {collection}/{doc_id}: {exc}")
            raise DocumentStoreError(f"Document database write failed: {exc}") from exc
        finally:
            conn.close()
        self._notify(collection, doc_id)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        """Return the record or ``None`` when it does not exist."""
        conn = self.db_service.connect()
        try:
            row = conn.execute(
                "SELECT doc_id, data FROM documents WHERE collection = ? AND doc_id = ?",
                (collection, doc_id),
            ).fetchone()
        except sqlite3.Error as exc:
            logger.error(f"Failed to read {collection}/{doc_id}: {exc}")
            raise DocumentStoreError(f"Document database read failed: {exc}") from exc
        finally:
            conn.close()
        return _row_to_document(row) if row else None

    def list(
        self,
        collection: str,
        conditions: Optional[Sequence[ConditionLike]] = None,
        order_by: Optional[str] = None,
        direction: str = "desc",
        limit: Optional[int] = None,
    ) -> List[Document]:
        """
        Return records matching every condition.

        Without ``order_by`` records come back in insertion order.
        """
        compiled = _coerce_conditions(conditions)
        clauses = ["collection = ?"]
        params: List[Any] = [collection]
        for condition in compiled:
            clause, clause_params = _compile_condition(condition)
            clauses.append(clause)
            params.extend(clause_params)

        sql = "SELECT doc_id, data FROM documents WHERE " + " AND ".join(clauses)

        if order_by:
            if not FIELD_PATTERN.match(order_by):
                raise ValueError(f"Invalid order field: {order_by!r}")
            if direction.lower() not in {"asc", "desc"}:
                raise ValueError("Order direction must be 'asc' or 'desc'")
            sql += f" ORDER BY json_extract(data, ?) {direction.upper()}, rowid"
            params.append(_json_path(order_by))
        else:
            sql += " ORDER BY rowid"

        if limit is not None:
            if limit < 1:
                raise ValueError("Limit must be positive")
            sql += " LIMIT ?"
            params.append(limit)

        conn = self.db_service.connect()
        try:
            rows = conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            logger.error(f"Failed to query {collection}: {exc}")
            raise DocumentStoreError(f"Document database query failed: {exc}") from exc
        finally:
            conn.close()
        return [_row_to_document(row) for row in rows]

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(
        self,
        collection: str,
        conditions: Optional[Sequence[ConditionLike]],
        callback: Callable[[List[Document]], None],
    ) -> Unsubscribe:
        """
        Push the matching records to ``callback`` now and after every change.

        The returned callable must be invoked on teardown.
        """
        listener = _Listener(
            collection=collection,
            callback=callback,
            conditions=_coerce_conditions(conditions),
        )
        return self._register(listener)

    def subscribe_one(
        self,
        collection: str,
        doc_id: str,
        callback: Callable[[Optional[Document]], None],
    ) -> Unsubscribe:
        """Push one record (or ``None`` once removed) to ``callback`` on every change."""
        listener = _Listener(collection=collection, callback=callback, doc_id=doc_id)
        return self._register(listener)

    def _register(self, listener: _Listener) -> Unsubscribe:
        with self._lock:
            self._listeners.append(listener)
        self._deliver(listener)

        def unsubscribe() -> None:
            with self._lock:
                listener.active = False
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def _notify(self, collection: str, doc_id: str) -> None:
        with self._lock:
            targets = [
                listener
                for listener in self._listeners
                if listener.collection == collection
                and (listener.doc_id is None or listener.doc_id == doc_id)
            ]
        for listener in targets:
            self._deliver(listener)

    def _deliver(self, listener: _Listener) -> None:
        if not listener.active:
            return
        try:
            if listener.doc_id is not None:
                snapshot: Any = self.get(listener.collection, listener.doc_id)
            else:
                snapshot = self.list(listener.collection, listener.conditions)
            listener.callback(snapshot)
        except Exception as exc:
            # One failing listener must not break the write path or its siblings.
            logger.exception(
                "Subscription callback failed",
                extra={"collection": listener.collection, "error": str(exc)},
            )


__all__ = [
    "Condition",
    "Document",
    "DocumentStore",
    "DocumentStoreError",
    "DocumentNotFoundError",
    "Unsubscribe",
]
