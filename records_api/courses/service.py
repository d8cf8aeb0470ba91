# service.py
# Business logic for courses with Firestore

# Courses are stored in the 'courses' collection. Course-side list changes
# (professors/students on create or update, enroll, withdraw) are mirrored
# onto each member's `courses` list, and deleting a course applies the
# configured cascade policy to students and professors.

# @see: models.py - Pydantic schemas used by this service
# @see: router.py - FastAPI endpoints that call this service
# @see: ../relationships.py - RelationshipSynchronizer

from typing import Any, Dict, List, Optional

from records_api.errors import DuplicateError, NotFoundError
from records_api.logging_config import get_logger
from records_api.pagination import Page, PageRequest, Populator, paginate
from records_api.relationships import (
    PROFESSORS,
    STUDENTS,
    Relationship,
    RelationshipSynchronizer,
    SyncReport,
)
from records_api.store import RecordStore

from .models import CourseCreate, CourseUpdate

logger = get_logger("courses")

MEMBER_NOT_FOUND = {
    STUDENTS.name: "STUDENT_NOT_FOUND",
    PROFESSORS.name: "PROFESSOR_NOT_FOUND",
}


class CourseService:
    """Service for course CRUD, enrollment and reporting."""

    def __init__(self, store: RecordStore, synchronizer: RelationshipSynchronizer):
        self.store = store
        self.courses = store.courses
        self.sync = synchronizer

    def _check_title_free(self, title: str) -> None:
        if self.courses.find_one({"title": title}) is not None:
            raise DuplicateError("COURSE_ALREADY_EXISTS")

    def view(self, course: Dict[str, Any], populator: Optional[Populator] = None) -> Dict[str, Any]:
        """Client projection; members become {id, name} when a populator is given."""
        professors = course.get("professors", [])
        students = course.get("students", [])
        return {
            "id": course["id"],
            "title": course["title"],
            "department": course.get("department"),
            "capacity": course.get("capacity"),
            "professors": populator.professors(professors) if populator else list(professors),
            "students": populator.students(students) if populator else list(students),
        }

    def create(self, data: CourseCreate):
        """
        Create a course and add it to the `courses` of each listed member.

        Returns:
            (course document, SyncReport)

        Raises:
            DuplicateError: COURSE_ALREADY_EXISTS for a taken title
        """
        self._check_title_free(data.title)
        course = self.courses.insert_one({
            "title": data.title,
            "department": data.department,
            "capacity": data.capacity,
            "professors": list(dict.fromkeys(data.professors)),
            "students": list(dict.fromkeys(data.students)),
        })
        report = self.sync.attach_course(PROFESSORS, course["id"], course["professors"])
        report.merge(self.sync.attach_course(STUDENTS, course["id"], course["students"]))
        logger.info("Created course %s (%s)", course["id"], course["title"])
        return course, report

    def get(self, course_id: str) -> Dict[str, Any]:
        course = self.courses.find_by_id(course_id)
        if course is None:
            raise NotFoundError("COURSE_NOT_FOUND")
        return course

    def list(self, page_request: PageRequest, populator: Populator) -> Page:
        page = paginate(self.courses, page_request, "COURSE")
        page.items = [self.view(course, populator) for course in page.items]
        return page

    def update(self, course: Dict[str, Any], data: CourseUpdate):
        """
        Update a loaded course. Each member list present in the payload is
        reconciled on the member side before the course is saved.

        Returns:
            (updated course document, SyncReport)
        """
        changes = data.model_dump(exclude_unset=True)
        changes = {k: v for k, v in changes.items() if v is not None or k == "capacity"}

        new_title = changes.get("title")
        if new_title is not None and new_title != course["title"]:
            self._check_title_free(new_title)

        report = SyncReport()
        for rel in (PROFESSORS, STUDENTS):
            if rel.course_field in changes:
                changes[rel.course_field] = list(dict.fromkeys(changes[rel.course_field]))
                report.merge(self.sync.reconcile_course(
                    rel, course["id"], course.get(rel.course_field, []), changes[rel.course_field],
                ))

        updated = self.courses.find_by_id_and_update(course["id"], changes)
        if updated is None:
            raise NotFoundError("COURSE_NOT_FOUND")
        logger.info("Updated course %s", course["id"])
        return updated, report

    def delete(self, course_id: str):
        """Delete a course, then apply the per-relationship cascade policies."""
        course = self.courses.find_by_id_and_delete(course_id)
        if course is None:
            raise NotFoundError("COURSE_NOT_FOUND")
        report = self.sync.on_course_deleted(course_id)
        logger.info("Deleted course %s", course_id)
        return course, report

    def _require_member(self, rel: Relationship, member_id: str) -> None:
        if self.sync.members(rel).find_by_id(member_id) is None:
            raise NotFoundError(MEMBER_NOT_FOUND[rel.name])

    def enroll(self, course_id: str, rel: Relationship, member_id: str):
        """Link a student or professor to a course on both sides."""
        self.get(course_id)
        self._require_member(rel, member_id)
        course, report = self.sync.enroll(rel, course_id, member_id)
        logger.info("Linked %s %s to course %s", rel.name, member_id, course_id)
        return course, report

    def withdraw(self, course_id: str, rel: Relationship, member_id: str):
        """Unlink a student or professor from a course on both sides."""
        self.get(course_id)
        self._require_member(rel, member_id)
        course, report = self.sync.withdraw(rel, course_id, member_id)
        logger.info("Unlinked %s %s from course %s", rel.name, member_id, course_id)
        return course, report

    def summary(self, populator: Populator) -> Dict[str, Any]:
        """
        Aggregate course statistics.

        Returns:
            Dict with per-course member totals and professor names,
            per-department totals, and the average capacity over courses
            that declare one (0 when none do)
        """
        per_course: List[Dict[str, Any]] = []
        per_department: Dict[str, Dict[str, Any]] = {}
        capacities: List[int] = []

        for course in self.courses.find():
            professors = populator.professors(course.get("professors", []))
            students = populator.students(course.get("students", []))
            per_course.append({
                "id": course["id"],
                "title": course["title"],
                "capacity": course.get("capacity"),
                "department": course.get("department"),
                "totalStudents": len(students),
                "totalProfessors": len(professors),
                "professorsNames": [{"name": p["name"]} for p in professors],
            })

            department = per_department.setdefault(course.get("department"), {
                "department": course.get("department"),
                "totalStudents": 0,
                "totalProfessors": 0,
            })
            department["totalStudents"] += len(students)
            department["totalProfessors"] += len(professors)

            if course.get("capacity") is not None:
                capacities.append(course["capacity"])

        average = sum(capacities) / len(capacities) if capacities else 0
        return {
            "studentsAndProfessorsPerCourse": per_course,
            "studentsAndProfessorsPerDepartment": list(per_department.values()),
            "averageCapacity": average,
        }
