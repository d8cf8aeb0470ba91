"""
============================================================================
FILE: test_relationships.py
LOCATION: tests/test_relationships.py
============================================================================

PURPOSE:
    Mirroring of course <-> student / professor reference lists, cascade
    policies on delete and failure reporting for secondary writes.
============================================================================
"""

from unittest.mock import patch

import pytest

from records_api.relationships import (
    PROFESSORS,
    STUDENTS,
    CascadePolicy,
    RelationshipSynchronizer,
    SyncReport,
)
from records_api.store import StoreError, new_id


@pytest.fixture
def course_ids(store):
    return [store.courses.insert_one({"title": t, "students": [], "professors": []})["id"]
            for t in ("Physics", "Biology", "Poetry")]


@pytest.fixture
def student(store):
    return store.students.insert_one({
        "userId": new_id(), "enrollmentNumber": "ENR20240101000001",
        "firstName": "Ann", "lastName": "Lee", "courses": [],
    })


@pytest.fixture
def professor(store):
    return store.professors.insert_one({
        "userId": new_id(), "firstName": "Ada", "lastName": "Lovelace", "courses": [],
    })


def students_of(store, course_id):
    return store.courses.find_by_id(course_id)["students"]


def test_sync_report():
    report = SyncReport()
    assert report.ok
    report.record("courses", "c1")
    merged = SyncReport().merge(report)
    assert not merged.ok
    assert merged.to_list() == [{"collection": "courses", "id": "c1"}]


def test_attach_member_adds_to_each_course_once(store, synchronizer, student, course_ids):
    report = synchronizer.attach_member(STUDENTS, student["id"], [course_ids[0], course_ids[0], course_ids[1]])

    assert report.ok
    assert students_of(store, course_ids[0]) == [student["id"]]
    assert students_of(store, course_ids[1]) == [student["id"]]
    assert students_of(store, course_ids[2]) == []


def test_attach_member_skips_missing_course(store, synchronizer, student, course_ids):
    report = synchronizer.attach_member(STUDENTS, student["id"], [new_id(), course_ids[0]])
    assert report.ok
    assert students_of(store, course_ids[0]) == [student["id"]]


def test_reconcile_member(store, synchronizer, student, course_ids):
    a, b, c = course_ids
    synchronizer.attach_member(STUDENTS, student["id"], [a, b])

    synchronizer.reconcile_member(STUDENTS, student["id"], [a, b], [b, c])

    assert students_of(store, a) == []
    assert students_of(store, b) == [student["id"]]
    assert students_of(store, c) == [student["id"]]


def test_reconcile_course(store, synchronizer, professor, course_ids):
    course_id = course_ids[0]
    synchronizer.attach_course(PROFESSORS, course_id, [professor["id"]])
    assert store.professors.find_by_id(professor["id"])["courses"] == [course_id]

    synchronizer.reconcile_course(PROFESSORS, course_id, [professor["id"]], [])

    assert store.professors.find_by_id(professor["id"])["courses"] == []


def test_course_delete_pulls_students_but_not_professors(store, synchronizer, student, professor, course_ids):
    course_id = course_ids[0]
    synchronizer.attach_course(STUDENTS, course_id, [student["id"]])
    synchronizer.attach_course(PROFESSORS, course_id, [professor["id"]])

    report = synchronizer.on_course_deleted(course_id)

    assert report.ok
    assert store.students.find_by_id(student["id"])["courses"] == []
    assert store.professors.find_by_id(professor["id"])["courses"] == [course_id]


def test_professor_cascade_can_be_enabled(store, professor, course_ids):
    synchronizer = RelationshipSynchronizer(store, professor_course_cascade=CascadePolicy.PULL)
    synchronizer.attach_course(PROFESSORS, course_ids[0], [professor["id"]])

    synchronizer.on_course_deleted(course_ids[0])

    assert store.professors.find_by_id(professor["id"])["courses"] == []


def test_member_delete_leaves_course_lists_by_default(store, synchronizer, student, course_ids):
    synchronizer.attach_member(STUDENTS, student["id"], [course_ids[0]])
    synchronizer.on_member_deleted(STUDENTS, student["id"])
    assert students_of(store, course_ids[0]) == [student["id"]]


def test_member_delete_cascade_pull(store, student, course_ids):
    synchronizer = RelationshipSynchronizer(store, member_delete_cascade=CascadePolicy.PULL)
    synchronizer.attach_member(STUDENTS, student["id"], [course_ids[0]])
    synchronizer.on_member_deleted(STUDENTS, student["id"])
    assert students_of(store, course_ids[0]) == []


def test_enroll_and_withdraw_are_idempotent(store, synchronizer, student, course_ids):
    course_id = course_ids[0]

    synchronizer.enroll(STUDENTS, course_id, student["id"])
    course, report = synchronizer.enroll(STUDENTS, course_id, student["id"])

    assert report.ok
    assert course["students"] == [student["id"]]
    assert store.students.find_by_id(student["id"])["courses"] == [course_id]

    course, _ = synchronizer.withdraw(STUDENTS, course_id, student["id"])
    assert course["students"] == []
    assert store.students.find_by_id(student["id"])["courses"] == []


def test_failed_secondary_write_is_reported(store, synchronizer, student, course_ids):
    with patch.object(
        store.courses, "find_by_id_and_update", side_effect=StoreError("down", "courses"),
    ):
        report = synchronizer.attach_member(STUDENTS, student["id"], course_ids[:2])

    assert not report.ok
    assert report.to_list() == [
        {"collection": "courses", "id": course_ids[0]},
        {"collection": "courses", "id": course_ids[1]},
    ]


def test_enroll_reports_member_write_failure(store, synchronizer, student, course_ids):
    with patch.object(
        store.students, "find_by_id_and_update", side_effect=StoreError("down", "students"),
    ):
        course, report = synchronizer.enroll(STUDENTS, course_ids[0], student["id"])

    assert course["students"] == [student["id"]]
    assert report.to_list() == [{"collection": "students", "id": student["id"]}]
