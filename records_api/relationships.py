# relationships.py
# Keeps Course <-> Student and Course <-> Professor reference lists consistent

# Both sides of each relationship hold a denormalized list of ids: a course
# has `students` and `professors`, a student or professor has `courses`.
# RelationshipSynchronizer performs the secondary writes that keep the two
# lists mirrored whenever either side changes. Each secondary write is a
# separate idempotent single-document update; a failing one is logged,
# recorded in the SyncReport and never rolled back or retried.

# @see: store.py - DocumentCollection used for every read and write
# @see: courses/service.py, students/service.py, professors/service.py - callers
# @note: The primary entity is always written by the caller, after the sync

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from records_api.logging_config import get_logger
from records_api.store import DocumentCollection, RecordStore, StoreError

logger = get_logger("relationships")


class CascadePolicy(str, Enum):
    """What happens to the other side when one side of a link is deleted."""
    PULL = "pull"
    NONE = "none"


@dataclass(frozen=True)
class Relationship:
    """A course list paired with the member collection it references."""
    name: str
    member_field: str = "courses"

    @property
    def course_field(self) -> str:
        return self.name


STUDENTS = Relationship("students")
PROFESSORS = Relationship("professors")


@dataclass
class SyncReport:
    """Secondary writes that failed during one operation."""
    failed: List[Dict[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def record(self, collection: str, doc_id: str) -> None:
        self.failed.append({"collection": collection, "id": doc_id})

    def merge(self, other: "SyncReport") -> "SyncReport":
        self.failed.extend(other.failed)
        return self

    def to_list(self) -> List[Dict[str, str]]:
        return list(self.failed)


def _dedupe(ids: Iterable[str]) -> List[str]:
    seen: List[str] = []
    for value in ids:
        if value not in seen:
            seen.append(value)
    return seen


class RelationshipSynchronizer:
    """Mirror reference-list changes onto the other side of each relationship."""

    def __init__(
        self,
        store: RecordStore,
        student_course_cascade: CascadePolicy = CascadePolicy.PULL,
        professor_course_cascade: CascadePolicy = CascadePolicy.NONE,
        member_delete_cascade: CascadePolicy = CascadePolicy.NONE,
    ):
        self.store = store
        self.course_delete_policies = {
            STUDENTS.name: student_course_cascade,
            PROFESSORS.name: professor_course_cascade,
        }
        self.member_delete_cascade = member_delete_cascade

    def members(self, rel: Relationship) -> DocumentCollection:
        return getattr(self.store, rel.name)

    # ------------------------------------------------------- primitive steps

    def _add(
        self,
        collection: DocumentCollection,
        doc_id: str,
        list_field: str,
        value: str,
        report: SyncReport,
    ) -> Optional[Dict[str, Any]]:
        """Append value to doc[list_field] if absent. Missing docs are skipped."""
        try:
            doc = collection.find_by_id(doc_id)
            if doc is None:
                logger.debug("Skipping link to missing %s/%s", collection.name, doc_id)
                return None
            current = doc.get(list_field) or []
            if value in current:
                return doc
            return collection.find_by_id_and_update(
                doc_id, {list_field: current + [value]},
            )
        except StoreError as e:
            logger.warning(
                "Could not add %s to %s/%s.%s: %s",
                value, collection.name, doc_id, list_field, e,
                extra={"context": {"collection": collection.name, "id": doc_id}},
            )
            report.record(collection.name, doc_id)
            return None

    def _remove(
        self,
        collection: DocumentCollection,
        doc_id: str,
        list_field: str,
        value: str,
        report: SyncReport,
    ) -> Optional[Dict[str, Any]]:
        """Drop value from doc[list_field] if present. Missing docs are skipped."""
        try:
            doc = collection.find_by_id(doc_id)
            if doc is None:
                return None
            current = doc.get(list_field) or []
            if value not in current:
                return doc
            return collection.find_by_id_and_update(
                doc_id, {list_field: [item for item in current if item != value]},
            )
        except StoreError as e:
            logger.warning(
                "Could not remove %s from %s/%s.%s: %s",
                value, collection.name, doc_id, list_field, e,
                extra={"context": {"collection": collection.name, "id": doc_id}},
            )
            report.record(collection.name, doc_id)
            return None

    def _pull_everywhere(
        self, collection: DocumentCollection, list_field: str, value: str, report: SyncReport,
    ) -> None:
        try:
            modified = collection.update_many_pull(list_field, value)
            logger.info("Pulled %s from %d %s", value, modified, collection.name)
        except StoreError as e:
            logger.warning(
                "Bulk pull of %s from %s.%s failed: %s", value, collection.name, list_field, e,
                extra={"context": {"collection": collection.name, "id": value}},
            )
            report.record(collection.name, value)

    # ------------------------------------------------------ member-side lists

    def attach_member(self, rel: Relationship, member_id: str, course_ids: Iterable[str]) -> SyncReport:
        """Add a newly created member to each listed course."""
        report = SyncReport()
        for course_id in _dedupe(course_ids):
            self._add(self.store.courses, course_id, rel.course_field, member_id, report)
        return report

    def reconcile_member(
        self,
        rel: Relationship,
        member_id: str,
        old_course_ids: Iterable[str],
        new_course_ids: Iterable[str],
    ) -> SyncReport:
        """
        Re-point a member's courses: remove it from every old course, then
        add it to every new one. Not a diff; a course on both lists is
        removed and added back.
        """
        report = SyncReport()
        for course_id in _dedupe(old_course_ids):
            self._remove(self.store.courses, course_id, rel.course_field, member_id, report)
        for course_id in _dedupe(new_course_ids):
            self._add(self.store.courses, course_id, rel.course_field, member_id, report)
        return report

    def on_member_deleted(self, rel: Relationship, member_id: str) -> SyncReport:
        report = SyncReport()
        if self.member_delete_cascade is CascadePolicy.PULL:
            self._pull_everywhere(self.store.courses, rel.course_field, member_id, report)
        return report

    # ------------------------------------------------------ course-side lists

    def attach_course(self, rel: Relationship, course_id: str, member_ids: Iterable[str]) -> SyncReport:
        """Add a newly created course to each listed member's courses."""
        report = SyncReport()
        members = self.members(rel)
        for member_id in _dedupe(member_ids):
            self._add(members, member_id, rel.member_field, course_id, report)
        return report

    def reconcile_course(
        self,
        rel: Relationship,
        course_id: str,
        old_member_ids: Iterable[str],
        new_member_ids: Iterable[str],
    ) -> SyncReport:
        report = SyncReport()
        members = self.members(rel)
        for member_id in _dedupe(old_member_ids):
            self._remove(members, member_id, rel.member_field, course_id, report)
        for member_id in _dedupe(new_member_ids):
            self._add(members, member_id, rel.member_field, course_id, report)
        return report

    def on_course_deleted(self, course_id: str) -> SyncReport:
        """Apply the per-relationship cascade policy after a course is deleted."""
        report = SyncReport()
        for rel in (STUDENTS, PROFESSORS):
            if self.course_delete_policies[rel.name] is CascadePolicy.PULL:
                self._pull_everywhere(self.members(rel), rel.member_field, course_id, report)
        return report

    # --------------------------------------------------------- direct links

    def enroll(self, rel: Relationship, course_id: str, member_id: str):
        """
        Link a course and a member on both sides.

        The course write is primary and propagates StoreError; the member
        write is secondary and lands in the report.

        Returns:
            (updated course, SyncReport)
        """
        report = SyncReport()
        course = self.store.courses.find_by_id(course_id)
        current = course.get(rel.course_field) or []
        if member_id not in current:
            course = self.store.courses.find_by_id_and_update(
                course_id, {rel.course_field: current + [member_id]},
            )
        self._add(self.members(rel), member_id, rel.member_field, course_id, report)
        return course, report

    def withdraw(self, rel: Relationship, course_id: str, member_id: str):
        """Unlink a course and a member on both sides. Returns (course, report)."""
        report = SyncReport()
        course = self.store.courses.find_by_id(course_id)
        current = course.get(rel.course_field) or []
        if member_id in current:
            course = self.store.courses.find_by_id_and_update(
                course_id, {rel.course_field: [i for i in current if i != member_id]},
            )
        self._remove(self.members(rel), member_id, rel.member_field, course_id, report)
        return course, report
