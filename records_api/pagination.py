# pagination.py
# Paging and reference population for the list and detail endpoints

# Page size is restricted to VALID_LIMITS; both query parameters are
# required and parsed here rather than by FastAPI so that bad values map
# to INVALID_PAGE_LIMIT / INVALID_PAGE_PARAMETER instead of a generic
# validation error.

# @see: store.py - DocumentCollection.count / find used for the page window
# @see: courses/router.py, professors/router.py, students/router.py, users/router.py

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from records_api.errors import EmptyCollectionError, NotFoundError, ValidationError
from records_api.store import DocumentCollection, RecordStore

VALID_LIMITS = (5, 10, 30)


@dataclass(frozen=True)
class PageRequest:
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class Page:
    items: List[Dict[str, Any]]
    total: int
    total_pages: int
    page: int


def _parse_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_page_request(page: Optional[str], limit: Optional[str]) -> PageRequest:
    """
    Validate raw `page` / `limit` query values.

    Raises:
        ValidationError: INVALID_PAGE_LIMIT when limit is not one of 5, 10, 30;
            INVALID_PAGE_PARAMETER when page is missing, non-numeric or < 1
    """
    parsed_limit = _parse_int(limit)
    if parsed_limit not in VALID_LIMITS:
        raise ValidationError("INVALID_PAGE_LIMIT")
    parsed_page = _parse_int(page)
    if parsed_page is None or parsed_page < 1:
        raise ValidationError("INVALID_PAGE_PARAMETER")
    return PageRequest(page=parsed_page, limit=parsed_limit)


def paginate(
    collection: DocumentCollection,
    request: PageRequest,
    entity: str,
    filters: Optional[Dict[str, Any]] = None,
) -> Page:
    """
    Fetch one page of a collection ordered by createdAt.

    Args:
        collection: Collection to page through
        request: Validated page request
        entity: Upper-case entity name used in the empty-collection code
            (e.g. "COURSE" -> COURSE_NOT_REGISTERED)
        filters: Optional equality filters

    Raises:
        EmptyCollectionError: Nothing matches and page 1 was requested
        NotFoundError: PAGE_NOT_FOUND when page exceeds the page count
    """
    total = collection.count(filters)
    if total == 0 and request.page == 1:
        raise EmptyCollectionError(f"{entity}_NOT_REGISTERED")

    total_pages = math.ceil(total / request.limit)
    if request.page > total_pages:
        raise NotFoundError("PAGE_NOT_FOUND")

    items = collection.find(filters, skip=request.skip, limit=request.limit)
    return Page(items=items, total=total, total_pages=total_pages, page=request.page)


def person_name(doc: Dict[str, Any]) -> str:
    return f"{doc.get('firstName', '')} {doc.get('lastName', '')}".strip()


class Populator:
    """
    Resolve reference ids to display projections for one request.

    Lookups are sequential and memoized on the instance, so a professor
    shared by several courses on a page is fetched once. Build a new
    Populator per request; nothing is cached across requests.
    """

    def __init__(self, store: RecordStore):
        self.store = store
        self._cache: Dict[tuple, Optional[Dict[str, Any]]] = {}

    def _lookup(self, collection: DocumentCollection, doc_id: str) -> Optional[Dict[str, Any]]:
        key = (collection.name, doc_id)
        if key not in self._cache:
            self._cache[key] = collection.find_by_id(doc_id)
        return self._cache[key]

    def _people(self, collection: DocumentCollection, ids: Iterable[str]) -> List[Dict[str, str]]:
        people = []
        for doc_id in ids or []:
            doc = self._lookup(collection, doc_id)
            if doc is not None:
                people.append({"id": doc["id"], "name": person_name(doc)})
        return people

    def professors(self, ids: Iterable[str]) -> List[Dict[str, str]]:
        return self._people(self.store.professors, ids)

    def students(self, ids: Iterable[str]) -> List[Dict[str, str]]:
        return self._people(self.store.students, ids)

    def courses(self, ids: Iterable[str]) -> List[Dict[str, str]]:
        courses = []
        for doc_id in ids or []:
            doc = self._lookup(self.store.courses, doc_id)
            if doc is not None:
                courses.append({"id": doc["id"], "title": doc.get("title")})
        return courses
