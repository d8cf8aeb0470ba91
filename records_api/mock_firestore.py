"""
============================================================================
FILE: mock_firestore.py
LOCATION: records_api/mock_firestore.py
============================================================================

PURPOSE:
    In-memory implementation of the subset of the Firestore client API the
    records store uses, so the service runs and is tested without Firebase.

ROLE IN PROJECT:
    - config.get_db() returns a MockFirestoreClient unless USE_REAL_FIREBASE
    - Tests build a fresh client per test for hermetic state
    - Optionally persists to a JSON file (MOCK_DB_FILE) for local runs

KEY COMPONENTS:
    - MockFirestoreClient: client with collection() and reset()
    - MockCollectionReference: document(), add(), query builders, stream()
    - MockDocumentReference: get(), set(), update(), delete()
    - MockDocumentSnapshot: id, exists, to_dict(), get()
    - MockQuery: where(), order_by(), offset(), limit(), stream()

BEHAVIOUR NOTES:
    - Reads and writes deep-copy document data, like a network round trip.
    - update() on a missing document raises google.api_core NotFound,
      matching the real client.

USAGE:
    from records_api.mock_firestore import MockFirestoreClient

    client = MockFirestoreClient()
    client.collection("courses").document("c1").set({"title": "Physics"})
============================================================================
"""
import copy
import json
import os
import uuid
from typing import Any, Dict, List, Optional, Tuple

from google.api_core import exceptions as gexc


ASCENDING = "ASCENDING"
DESCENDING = "DESCENDING"


def _matches(data: Dict[str, Any], field: str, op: str, value: Any) -> bool:
    current = data.get(field)
    if op == "==":
        return current == value
    if op == "!=":
        return current != value
    if op == "array_contains":
        return isinstance(current, list) and value in current
    if op == "in":
        return bool(value) and current in value
    if current is None:
        return False
    if op == ">":
        return current > value
    if op == ">=":
        return current >= value
    if op == "<":
        return current < value
    if op == "<=":
        return current <= value
    raise ValueError(f"Unsupported operator: {op}")


class MockDocumentSnapshot:
    def __init__(self, ref: "MockDocumentReference", data: Optional[dict]):
        self._ref = ref
        self.id = ref.id
        self.exists = data is not None
        self._data = data

    def to_dict(self) -> Optional[dict]:
        if self._data is None:
            return None
        return copy.deepcopy(self._data)

    def get(self, field_path: str) -> Any:
        current: Any = self._data or {}
        for part in field_path.split("."):
            if not isinstance(current, dict) or part not in current:
                return None
            current = current[part]
        return copy.deepcopy(current)

    @property
    def reference(self) -> "MockDocumentReference":
        return self._ref


class MockDocumentReference:
    def __init__(self, collection: "MockCollectionReference", document_id: str):
        self.parent = collection
        self.id = document_id

    @property
    def path(self) -> str:
        return f"{self.parent.id}/{self.id}"

    def get(self, transaction=None) -> MockDocumentSnapshot:
        return MockDocumentSnapshot(self, self.parent._docs.get(self.id))

    def set(self, data: Dict[str, Any], merge: bool = False) -> None:
        docs = self.parent._docs
        if merge and self.id in docs:
            docs[self.id].update(copy.deepcopy(data))
        else:
            docs[self.id] = copy.deepcopy(data)
        self.parent.client._save_db()

    def update(self, data: Dict[str, Any]) -> None:
        docs = self.parent._docs
        if self.id not in docs:
            raise gexc.NotFound(f"No document to update: {self.path}")
        docs[self.id].update(copy.deepcopy(data))
        self.parent.client._save_db()

    def delete(self) -> None:
        self.parent._docs.pop(self.id, None)
        self.parent.client._save_db()


class MockQuery:
    def __init__(self, collection: "MockCollectionReference"):
        self._collection = collection
        self._filters: List[Tuple[str, str, Any]] = []
        self._order: List[Tuple[str, str]] = []
        self._offset = 0
        self._limit: Optional[int] = None

    def _copy(self) -> "MockQuery":
        query = MockQuery(self._collection)
        query._filters = list(self._filters)
        query._order = list(self._order)
        query._offset = self._offset
        query._limit = self._limit
        return query

    def where(self, field: str, op: str, value: Any) -> "MockQuery":
        query = self._copy()
        query._filters.append((field, op, value))
        return query

    def order_by(self, field: str, direction: str = ASCENDING) -> "MockQuery":
        query = self._copy()
        query._order.append((field, direction))
        return query

    def offset(self, count: int) -> "MockQuery":
        query = self._copy()
        query._offset = count
        return query

    def limit(self, count: int) -> "MockQuery":
        query = self._copy()
        query._limit = count
        return query

    def stream(self, transaction=None):
        rows = [
            (doc_id, data)
            for doc_id, data in self._collection._docs.items()
            if all(_matches(data, f, op, v) for f, op, v in self._filters)
        ]

        # Firestore drops documents missing an order_by field
        for field, direction in reversed(self._order):
            rows = [row for row in rows if row[1].get(field) is not None]
            rows.sort(key=lambda row: row[1][field], reverse=direction == DESCENDING)

        rows = rows[self._offset:]
        if self._limit is not None:
            rows = rows[: self._limit]

        for doc_id, data in rows:
            ref = MockDocumentReference(self._collection, doc_id)
            yield MockDocumentSnapshot(ref, data)

    def get(self, transaction=None) -> List[MockDocumentSnapshot]:
        return list(self.stream())


class MockCollectionReference(MockQuery):
    def __init__(self, client: "MockFirestoreClient", path: str):
        super().__init__(self)
        self.client = client
        self.id = path

    @property
    def _docs(self) -> Dict[str, Dict[str, Any]]:
        return self.client._db_data.setdefault(self.id, {})

    def document(self, document_id: Optional[str] = None) -> MockDocumentReference:
        return MockDocumentReference(self, document_id or uuid.uuid4().hex[:20])

    def add(self, data: Dict[str, Any]):
        ref = self.document()
        ref.set(data)
        return None, ref

    def list_documents(self) -> List[MockDocumentReference]:
        return [MockDocumentReference(self, doc_id) for doc_id in list(self._docs)]


class MockFirestoreClient:
    """In-memory Firestore stand-in, optionally backed by a JSON file."""

    def __init__(self, db_file: Optional[str] = None):
        self.db_file = db_file
        self._db_data: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.reload()

    def reload(self) -> None:
        if self.db_file and os.path.exists(self.db_file):
            with open(self.db_file, "r", encoding="utf-8") as f:
                self._db_data = json.load(f)
        else:
            self._db_data = {}

    def reset(self) -> None:
        self._db_data.clear()
        self._save_db()

    def _save_db(self) -> None:
        if not self.db_file:
            return
        with open(self.db_file, "w", encoding="utf-8") as f:
            json.dump(self._db_data, f, indent=2, default=str)

    def collection(self, name: str) -> MockCollectionReference:
        return MockCollectionReference(self, name)
