"""
============================================================================
FILE: test_pagination.py
LOCATION: tests/test_pagination.py
============================================================================

PURPOSE:
    Page request parsing, page windows over a collection and reference
    population.
============================================================================
"""

import pytest

from records_api.errors import EmptyCollectionError, NotFoundError, ValidationError
from records_api.pagination import (
    PageRequest,
    Populator,
    paginate,
    parse_page_request,
    person_name,
)
from records_api.store import new_id


@pytest.mark.parametrize("limit", ["5", "10", "30"])
def test_valid_limits(limit):
    assert parse_page_request("2", limit) == PageRequest(page=2, limit=int(limit))


@pytest.mark.parametrize("limit", [None, "", "7", "abc", "-5"])
def test_invalid_limit(limit):
    with pytest.raises(ValidationError) as exc:
        parse_page_request("1", limit)
    assert exc.value.code == "INVALID_PAGE_LIMIT"


@pytest.mark.parametrize("page", [None, "0", "-1", "x"])
def test_invalid_page(page):
    with pytest.raises(ValidationError) as exc:
        parse_page_request(page, "5")
    assert exc.value.code == "INVALID_PAGE_PARAMETER"


def test_limit_is_checked_before_page():
    with pytest.raises(ValidationError) as exc:
        parse_page_request("0", "7")
    assert exc.value.code == "INVALID_PAGE_LIMIT"


def test_skip():
    assert PageRequest(page=3, limit=10).skip == 20


def test_paginate_windows(store):
    store.courses.insert_many({"title": f"Course {i:02d}"} for i in range(12))

    page = paginate(store.courses, PageRequest(page=3, limit=5), "COURSE")

    assert page.total == 12
    assert page.total_pages == 3
    assert [c["title"] for c in page.items] == ["Course 10", "Course 11"]


def test_paginate_empty_collection(store):
    with pytest.raises(EmptyCollectionError) as exc:
        paginate(store.courses, PageRequest(page=1, limit=5), "COURSE")
    assert exc.value.code == "COURSE_NOT_REGISTERED"
    assert exc.value.status_code == 409


def test_paginate_beyond_last_page(store):
    store.courses.insert_one({"title": "Physics"})
    with pytest.raises(NotFoundError) as exc:
        paginate(store.courses, PageRequest(page=2, limit=5), "COURSE")
    assert exc.value.code == "PAGE_NOT_FOUND"


def test_paginate_empty_collection_on_later_page_is_not_found(store):
    with pytest.raises(NotFoundError):
        paginate(store.courses, PageRequest(page=2, limit=5), "COURSE")


def test_person_name():
    assert person_name({"firstName": "Ada", "lastName": "Lovelace"}) == "Ada Lovelace"
    assert person_name({"firstName": "Ada"}) == "Ada"


def test_populator_drops_dangling_references(store):
    prof = store.professors.insert_one({"userId": new_id(), "firstName": "Ada", "lastName": "Lovelace"})
    course = store.courses.insert_one({"title": "Physics"})
    populator = Populator(store)

    assert populator.professors([prof["id"], new_id()]) == [{"id": prof["id"], "name": "Ada Lovelace"}]
    assert populator.courses([course["id"]]) == [{"id": course["id"], "title": "Physics"}]
    assert populator.students(None) == []


def test_populator_memoizes_lookups(store):
    prof = store.professors.insert_one({"userId": new_id(), "firstName": "Ada", "lastName": "Lovelace"})
    populator = Populator(store)
    populator.professors([prof["id"]])

    store.professors.find_by_id_and_update(prof["id"], {"firstName": "Grace"})

    assert populator.professors([prof["id"]])[0]["name"] == "Ada Lovelace"
    assert Populator(store).professors([prof["id"]])[0]["name"] == "Grace Lovelace"
