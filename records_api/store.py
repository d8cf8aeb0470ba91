"""
============================================================================
FILE: store.py
LOCATION: records_api/store.py
============================================================================

PURPOSE:
    Document store over Firestore collections with the small query surface
    the services need: lookups, ordered paging, counting, inserts with
    unique-field enforcement, updates, deletes and a bulk array pull.

ROLE IN PROJECT:
    RecordStore is built once in the application lifespan from the
    configured Firestore client (real or MockFirestoreClient) and stored on
    app.state. Services and the relationship synchronizer receive it
    explicitly.

KEY COMPONENTS:
    - StoreError: any Firestore failure, wrapped
    - DuplicateKeyError: a write would duplicate a unique field
    - DocumentCollection: one collection plus its unique fields
    - RecordStore: the users/professors/students/courses collections
    - new_id / is_valid_id: 24-character hex document ids

BEHAVIOUR NOTES:
    - Every write is a single-document operation; nothing spans documents.
    - Firestore has no unique indexes, so uniqueness is a query before the
      write. Two concurrent writers can both pass it.
============================================================================
"""

import re
import secrets
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

from google.api_core.exceptions import GoogleAPICallError

from records_api.logging_config import get_logger

logger = get_logger("store")

ID_PATTERN = re.compile(r"^[0-9a-f]{24}$")


def new_id() -> str:
    """Generate a 24-character lowercase hex document id."""
    return secrets.token_hex(12)


def is_valid_id(value: Any) -> bool:
    return isinstance(value, str) and bool(ID_PATTERN.match(value))


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class StoreError(Exception):
    """A document store operation failed."""

    def __init__(self, message: str, collection: Optional[str] = None):
        super().__init__(message)
        self.collection = collection


class DuplicateKeyError(StoreError):
    """A write would store a second document with the same unique value."""

    def __init__(self, collection: str, field: str, value: Any):
        super().__init__(
            f"Duplicate value for {collection}.{field}: {value!r}", collection,
        )
        self.field = field
        self.value = value


@contextmanager
def _wrap_errors(collection: str, action: str):
    try:
        yield
    except GoogleAPICallError as e:
        logger.error("Firestore %s on %s failed: %s", action, collection, e)
        raise StoreError(f"{action} on {collection} failed: {e}", collection) from e


class DocumentCollection:
    """A Firestore collection of records keyed by their `id` field."""

    def __init__(self, db, name: str, unique_fields: Sequence[str] = ()):
        self.db = db
        self.name = name
        self.unique_fields = tuple(unique_fields)

    @property
    def _ref(self):
        return self.db.collection(self.name)

    def _query(self, filters: Optional[Dict[str, Any]] = None):
        query = self._ref
        for field, value in (filters or {}).items():
            query = query.where(field, "==", value)
        return query

    def _check_unique(self, data: Dict[str, Any], exclude_id: Optional[str] = None) -> None:
        for field in self.unique_fields:
            value = data.get(field)
            if value is None:
                continue
            for doc in self._ref.where(field, "==", value).limit(2).stream():
                if doc.id != exclude_id:
                    raise DuplicateKeyError(self.name, field, value)

    # ------------------------------------------------------------------ reads

    def find_by_id(self, doc_id: str) -> Optional[Dict[str, Any]]:
        with _wrap_errors(self.name, "get"):
            snapshot = self._ref.document(doc_id).get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict()

    def find_one(self, filters: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        with _wrap_errors(self.name, "query"):
            for doc in self._query(filters).limit(1).stream():
                return doc.to_dict()
        return None

    def find(
        self,
        filters: Optional[Dict[str, Any]] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Documents matching equality filters, oldest first.

        Args:
            filters: field -> value equality constraints
            skip: number of documents to skip
            limit: maximum number of documents to return

        Returns:
            List of document dicts ordered by createdAt
        """
        query = self._query(filters).order_by("createdAt")
        if skip:
            query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)
        with _wrap_errors(self.name, "query"):
            return [doc.to_dict() for doc in query.stream()]

    def find_by_ids(self, ids: Iterable[str]) -> List[Dict[str, Any]]:
        """Existing documents for the given ids, in the given order."""
        found = []
        for doc_id in ids:
            data = self.find_by_id(doc_id)
            if data is not None:
                found.append(data)
        return found

    def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        # Firestore has no cheap count on the mock, so stream and count
        with _wrap_errors(self.name, "count"):
            return sum(1 for _ in self._query(filters).stream())

    # ----------------------------------------------------------------- writes

    def insert_one(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a new document, generating its id and timestamps.

        Raises:
            DuplicateKeyError: If a unique field value is already taken
            StoreError: If Firestore rejects the write
        """
        document = dict(data)
        document.setdefault("id", new_id())
        now = utc_now()
        document.setdefault("createdAt", now)
        document["updatedAt"] = now

        with _wrap_errors(self.name, "insert"):
            self._check_unique(document)
            self._ref.document(document["id"]).set(document)
        logger.debug("Inserted %s/%s", self.name, document["id"])
        return document

    def insert_many(self, documents: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [self.insert_one(document) for document in documents]

    def find_by_id_and_update(
        self, doc_id: str, changes: Dict[str, Any],
    ) -> Optional[Dict[str, Any]]:
        """
        Apply field changes to one document.

        Returns:
            The updated document, or None if it does not exist

        Raises:
            DuplicateKeyError: If a changed unique field collides with another document
        """
        changes = {k: v for k, v in changes.items() if k not in ("id", "createdAt")}
        changes["updatedAt"] = utc_now()

        with _wrap_errors(self.name, "update"):
            ref = self._ref.document(doc_id)
            snapshot = ref.get()
            if not snapshot.exists:
                return None
            self._check_unique(changes, exclude_id=doc_id)
            ref.update(changes)
            return ref.get().to_dict()

    def find_by_id_and_delete(self, doc_id: str) -> Optional[Dict[str, Any]]:
        """Delete one document and return what it held, or None if absent."""
        with _wrap_errors(self.name, "delete"):
            ref = self._ref.document(doc_id)
            snapshot = ref.get()
            if not snapshot.exists:
                return None
            data = snapshot.to_dict()
            ref.delete()
        logger.debug("Deleted %s/%s", self.name, doc_id)
        return data

    def update_many_pull(self, field: str, value: Any) -> int:
        """
        Remove `value` from the array `field` of every document holding it.

        Each document is updated independently.

        Returns:
            Number of documents modified
        """
        modified = 0
        now = utc_now()
        with _wrap_errors(self.name, "update_many"):
            for doc in self._ref.where(field, "array_contains", value).stream():
                current = doc.to_dict().get(field) or []
                remaining = [item for item in current if item != value]
                doc.reference.update({field: remaining, "updatedAt": now})
                modified += 1
        return modified

    def delete_many(self, filters: Optional[Dict[str, Any]] = None) -> int:
        deleted = 0
        with _wrap_errors(self.name, "delete_many"):
            for doc in self._query(filters).stream():
                doc.reference.delete()
                deleted += 1
        return deleted


class RecordStore:
    """The four record collections with their unique fields."""

    USERS = "users"
    PROFESSORS = "professors"
    STUDENTS = "students"
    COURSES = "courses"

    def __init__(self, db):
        self.db = db
        self.users = DocumentCollection(db, self.USERS, ("username", "email"))
        self.professors = DocumentCollection(db, self.PROFESSORS, ("userId",))
        self.students = DocumentCollection(
            db, self.STUDENTS, ("userId", "enrollmentNumber"),
        )
        self.courses = DocumentCollection(db, self.COURSES, ("title",))

    def collections(self) -> List[DocumentCollection]:
        return [self.users, self.professors, self.students, self.courses]
