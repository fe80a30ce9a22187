from __future__ import annotations
import copy
import logging
import threading
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from pymongo import MongoClient, ReturnDocument
from pymongo.errors import DuplicateKeyError

from config import settings

logger = logging.getLogger(__name__)

Record = Dict[str, Any]
SortSpec = Union[str, Sequence[str], None]

TABLES = (
    "menu_categories", "menu_items",
    "orders", "order_items",
    "table_bookings",
    "event_categories", "events", "event_ticket_sales",
    "blog_categories", "blog_posts",
    "messages", "admin_activity_log",
    "admin_users", "admin_sessions",
)

_client: Optional[MongoClient] = None
_db = None
_store = None


def get_db():
    global _client, _db
    if _db is None:
        _client = MongoClient(settings.database_url)
        _db = _client[settings.database_name]
    return _db


def _sort_fields(sort: SortSpec) -> List[str]:
    if not sort:
        return []
    if isinstance(sort, str):
        return [sort]
    return list(sort)


def _split_field(field: str):
    # "-purchase_date" sorts descending, like a Django order_by
    if field.startswith("-"):
        return field[1:], True
    return field, False


class MongoStore:
    """Record tables kept in MongoDB collections.

    Every record gets an integer ``id`` from the ``counters`` collection so that
    ids stay short and stable for confirmation numbers; the Mongo ``_id`` is
    never returned.
    """

    def __init__(self, db):
        self.db = db

    def _next_id(self, table: str) -> int:
        counter = self.db["counters"].find_one_and_update(
            {"_id": table},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return int(counter["seq"])

    def insert(self, table: str, data: Record) -> Record:
        now = datetime.utcnow()
        doc = {
            **data,
            "id": self._next_id(table),
            "created_at": data.get("created_at") or now,
            "updated_at": now,
        }
        self.db[table].insert_one(doc)
        doc.pop("_id", None)
        return doc

    def insert_unique(self, table: str, data: Record, key: str) -> Tuple[Record, bool]:
        """Insert unless a record with the same ``key`` value exists.

        Relies on the unique index from ``ensure_indexes``; returns the stored
        record and whether it was created by this call.
        """
        try:
            return self.insert(table, data), True
        except DuplicateKeyError:
            existing = self.db[table].find_one({key: data[key]}, {"_id": 0})
            return existing, False

    def get(self, table: str, record_id: int) -> Optional[Record]:
        return self.db[table].find_one({"id": record_id}, {"_id": 0})

    def find(self, table: str, filters: Optional[Record] = None, sort: SortSpec = None,
             limit: Optional[int] = None, skip: int = 0) -> List[Record]:
        cursor = self.db[table].find(filters or {}, {"_id": 0})
        order = []
        for field in _sort_fields(sort):
            name, descending = _split_field(field)
            order.append((name, -1 if descending else 1))
        if order:
            cursor = cursor.sort(order)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return list(cursor)

    def count(self, table: str, filters: Optional[Record] = None) -> int:
        return self.db[table].count_documents(filters or {})

    def update(self, table: str, record_id: int, changes: Record) -> Optional[Record]:
        return self.db[table].find_one_and_update(
            {"id": record_id},
            {"$set": {**changes, "updated_at": datetime.utcnow()}},
            projection={"_id": 0},
            return_document=ReturnDocument.AFTER,
        )

    def update_many(self, table: str, record_ids: Iterable[int], changes: Record) -> int:
        res = self.db[table].update_many(
            {"id": {"$in": list(record_ids)}},
            {"$set": {**changes, "updated_at": datetime.utcnow()}},
        )
        return res.matched_count

    def delete(self, table: str, record_id: int) -> bool:
        res = self.db[table].delete_one({"id": record_id})
        return res.deleted_count > 0

    def increment(self, table: str, record_id: int, field: str, amount: int) -> Optional[Record]:
        return self.db[table].find_one_and_update(
            {"id": record_id},
            {"$inc": {field: amount}, "$set": {"updated_at": datetime.utcnow()}},
            projection={"_id": 0},
            return_document=ReturnDocument.AFTER,
        )

    def ensure_indexes(self) -> None:
        for table in TABLES:
            self.db[table].create_index("id", unique=True)
        # one sale or order per payment intent; unpaid orders carry no intent id
        for table in ("event_ticket_sales", "orders"):
            self.db[table].create_index(
                "stripe_payment_intent_id",
                unique=True,
                partialFilterExpression={"stripe_payment_intent_id": {"$type": "string"}},
            )
        self.db["orders"].create_index([("created_at", -1)])
        self.db["table_bookings"].create_index([("booking_date", 1), ("booking_time", 1)])
        self.db["admin_sessions"].create_index("token", unique=True)


class MemoryStore:
    """The same record tables held in process memory (demo mode and tests)."""

    def __init__(self, tables: Optional[Dict[str, List[Record]]] = None):
        self._lock = threading.Lock()
        self._tables: Dict[str, List[Record]] = {}
        self._counters: Dict[str, int] = {}
        for table, records in (tables or {}).items():
            self._tables[table] = [copy.deepcopy(r) for r in records]
            self._counters[table] = max([int(r.get("id", 0)) for r in records] or [0])

    def _rows(self, table: str) -> List[Record]:
        return self._tables.setdefault(table, [])

    def _locate(self, table: str, record_id: int) -> Optional[Record]:
        for row in self._rows(table):
            if row.get("id") == record_id:
                return row
        return None

    def _append(self, table: str, data: Record) -> Record:
        now = datetime.utcnow()
        self._counters[table] = self._counters.get(table, 0) + 1
        doc = {
            **copy.deepcopy(data),
            "id": self._counters[table],
            "created_at": data.get("created_at") or now,
            "updated_at": now,
        }
        self._rows(table).append(doc)
        return copy.deepcopy(doc)

    def insert(self, table: str, data: Record) -> Record:
        with self._lock:
            return self._append(table, data)

    def insert_unique(self, table: str, data: Record, key: str) -> Tuple[Record, bool]:
        with self._lock:
            for row in self._rows(table):
                if row.get(key) == data[key]:
                    return copy.deepcopy(row), False
            return self._append(table, data), True

    def get(self, table: str, record_id: int) -> Optional[Record]:
        with self._lock:
            row = self._locate(table, record_id)
            return copy.deepcopy(row) if row is not None else None

    def find(self, table: str, filters: Optional[Record] = None, sort: SortSpec = None,
             limit: Optional[int] = None, skip: int = 0) -> List[Record]:
        filters = filters or {}
        with self._lock:
            rows = [
                copy.deepcopy(r) for r in self._rows(table)
                if all(r.get(k) == v for k, v in filters.items())
            ]
        # stable sorts applied from the last key to the first
        for field in reversed(_sort_fields(sort)):
            name, descending = _split_field(field)
            rows.sort(key=lambda r: (r.get(name) is not None, r.get(name)), reverse=descending)
        rows = rows[skip:]
        if limit:
            rows = rows[:limit]
        return rows

    def count(self, table: str, filters: Optional[Record] = None) -> int:
        return len(self.find(table, filters))

    def update(self, table: str, record_id: int, changes: Record) -> Optional[Record]:
        with self._lock:
            row = self._locate(table, record_id)
            if row is None:
                return None
            row.update(copy.deepcopy(changes))
            row["updated_at"] = datetime.utcnow()
            return copy.deepcopy(row)

    def update_many(self, table: str, record_ids: Iterable[int], changes: Record) -> int:
        wanted = set(record_ids)
        matched = 0
        with self._lock:
            for row in self._rows(table):
                if row.get("id") in wanted:
                    row.update(copy.deepcopy(changes))
                    row["updated_at"] = datetime.utcnow()
                    matched += 1
        return matched

    def delete(self, table: str, record_id: int) -> bool:
        with self._lock:
            rows = self._rows(table)
            for idx, row in enumerate(rows):
                if row.get("id") == record_id:
                    del rows[idx]
                    return True
        return False

    def increment(self, table: str, record_id: int, field: str, amount: int) -> Optional[Record]:
        with self._lock:
            row = self._locate(table, record_id)
            if row is None:
                return None
            row[field] = (row.get(field) or 0) + amount
            row["updated_at"] = datetime.utcnow()
            return copy.deepcopy(row)

    def ensure_indexes(self) -> None:
        return None


Store = Union[MongoStore, MemoryStore]


def create_store() -> Store:
    if settings.backend_available:
        logger.info("Using MongoDB database %s", settings.database_name)
        return MongoStore(get_db())
    from demo_data import demo_tables

    logger.warning("DATABASE_URL not configured; serving the in-memory demo dataset")
    return MemoryStore(demo_tables())


def get_store() -> Store:
    global _store
    if _store is None:
        _store = create_store()
    return _store
