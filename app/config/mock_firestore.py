"""
In-process stand-in for the Firestore client.

Selected by USE_MOCK_DB=true. Implements only the part of the client API
that Vita services call:

    db.collection(name).document(id?).get() / .set() / .update() / .delete()
    db.collection(name).where(field, op, value).order_by(field, direction).limit(n).stream()
    db.collections()

Documents are deep-copied on the way in and out so callers never share
state with the store. When a path is given the whole store is loaded from
and written back to a JSON file after each write.
"""

import copy
import json
import logging
import os
import threading
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, Iterator, List, Optional

from google.api_core.exceptions import NotFound

logger = logging.getLogger(__name__)

DESCENDING = "DESCENDING"
ASCENDING = "ASCENDING"

_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "==": lambda a, b: a == b,
    "!=": lambda a, b: a != b,
    "<": lambda a, b: a is not None and a < b,
    "<=": lambda a, b: a is not None and a <= b,
    ">": lambda a, b: a is not None and a > b,
    ">=": lambda a, b: a is not None and a >= b,
    "in": lambda a, b: a in b,
    "not-in": lambda a, b: a not in b,
    "array_contains": lambda a, b: isinstance(a, list) and b in a,
}


def _encode(value: Any) -> Any:
    if isinstance(value, datetime):
        return {"__datetime__": value.isoformat()}
    if isinstance(value, dict):
        return {k: _encode(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_encode(v) for v in value]
    return value


def _decode(value: Any) -> Any:
    if isinstance(value, dict):
        if set(value.keys()) == {"__datetime__"}:
            return datetime.fromisoformat(value["__datetime__"])
        return {k: _decode(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_decode(v) for v in value]
    return value


class MockDocumentSnapshot:
    def __init__(self, reference: "MockDocumentReference", data: Optional[Dict]):
        self.reference = reference
        self._data = data

    @property
    def id(self) -> str:
        return self.reference.id

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> Optional[Dict]:
        return copy.deepcopy(self._data)


class MockDocumentReference:
    def __init__(self, store: "MockFirestore", collection: str, doc_id: str):
        self._store = store
        self._collection = collection
        self.id = doc_id

    @property
    def path(self) -> str:
        return f"{self._collection}/{self.id}"

    def get(self) -> MockDocumentSnapshot:
        with self._store.lock:
            data = self._store.data.get(self._collection, {}).get(self.id)
            return MockDocumentSnapshot(self, copy.deepcopy(data))

    def set(self, data: Dict, merge: bool = False) -> None:
        with self._store.lock:
            docs = self._store.data.setdefault(self._collection, {})
            if merge and self.id in docs:
                docs[self.id].update(copy.deepcopy(data))
            else:
                docs[self.id] = copy.deepcopy(data)
        self._store.flush()

    def update(self, data: Dict) -> None:
        with self._store.lock:
            docs = self._store.data.get(self._collection, {})
            if self.id not in docs:
                raise NotFound(f"No document to update: {self.path}")
            docs[self.id].update(copy.deepcopy(data))
        self._store.flush()

    def delete(self) -> None:
        with self._store.lock:
            self._store.data.get(self._collection, {}).pop(self.id, None)
        self._store.flush()


class MockQuery:
    def __init__(self, store: "MockFirestore", collection: str):
        self._store = store
        self._collection = collection
        self._filters: List[tuple] = []
        self._orders: List[tuple] = []
        self._limit: Optional[int] = None

    def _clone(self) -> "MockQuery":
        query = MockQuery(self._store, self._collection)
        query._filters = list(self._filters)
        query._orders = list(self._orders)
        query._limit = self._limit
        return query

    def where(self, field_path: str, op_string: str, value: Any) -> "MockQuery":
        if op_string not in _OPERATORS:
            raise ValueError(f"Unsupported operator for mock Firestore: {op_string}")
        query = self._clone()
        query._filters.append((field_path, op_string, value))
        return query

    def order_by(self, field_path: str, direction: str = ASCENDING) -> "MockQuery":
        query = self._clone()
        query._orders.append((field_path, direction))
        return query

    def limit(self, count: int) -> "MockQuery":
        query = self._clone()
        query._limit = count
        return query

    def stream(self) -> Iterator[MockDocumentSnapshot]:
        with self._store.lock:
            items = list(self._store.data.get(self._collection, {}).items())

        matched = [
            (doc_id, data) for doc_id, data in items
            if all(field in data and _OPERATORS[op](data.get(field), value) for field, op, value in self._filters)
        ]

        # Firestore drops documents missing an order_by field
        for field, direction in reversed(self._orders):
            matched = [item for item in matched if field in item[1]]
            matched.sort(key=lambda item: item[1][field], reverse=str(direction).upper() == DESCENDING)

        if self._limit is not None:
            matched = matched[: self._limit]

        for doc_id, data in matched:
            ref = MockDocumentReference(self._store, self._collection, doc_id)
            yield MockDocumentSnapshot(ref, copy.deepcopy(data))

    def get(self) -> List[MockDocumentSnapshot]:
        return list(self.stream())


class MockCollectionReference(MockQuery):
    @property
    def id(self) -> str:
        return self._collection

    def document(self, document_id: Optional[str] = None) -> MockDocumentReference:
        return MockDocumentReference(self._store, self._collection, document_id or uuid.uuid4().hex[:20])


class MockFirestore:
    def __init__(self, path: Optional[str] = None):
        self.path = path
        self.lock = threading.RLock()
        self.data: Dict[str, Dict[str, Dict]] = {}
        if path and os.path.exists(path):
            with open(path, "r", encoding="utf-8") as f:
                self.data = _decode(json.load(f))
            logger.info(f"[MOCK DB] Loaded {sum(len(d) for d in self.data.values())} documents from {path}")

    def collection(self, name: str) -> MockCollectionReference:
        return MockCollectionReference(self, name)

    def collections(self) -> List[MockCollectionReference]:
        with self.lock:
            return [MockCollectionReference(self, name) for name in self.data]

    def flush(self) -> None:
        if not self.path:
            return
        with self.lock:
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(_encode(self.data), f, indent=2)

    def clear(self) -> None:
        with self.lock:
            self.data = {}
        self.flush()


_mock_db: Optional[MockFirestore] = None


def get_mock_db(path: Optional[str] = None) -> MockFirestore:
    global _mock_db
    if _mock_db is None:
        _mock_db = MockFirestore(path)
    return _mock_db
