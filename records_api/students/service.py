# service.py
# Business logic for student profiles with Firestore

# Students are stored in the 'students' collection and addressed by their
# generated enrollment number (ENR + YYYYMMDD + 6 digits). The `courses`
# list is mirrored onto Course.students by the RelationshipSynchronizer.

# @see: models.py - Pydantic schemas used by this service
# @see: router.py - FastAPI endpoints that call this service
# @note: An enrollment number collision surfaces as DuplicateKeyError (409)

from typing import Any, Dict, Optional

from records_api.errors import DuplicateError, NotFoundError
from records_api.logging_config import get_logger
from records_api.pagination import Page, PageRequest, Populator, paginate
from records_api.relationships import STUDENTS, RelationshipSynchronizer, SyncReport
from records_api.security import generate_enrollment_number
from records_api.store import RecordStore

from .models import StudentCreate, StudentUpdate

logger = get_logger("students")


class StudentService:
    """Service for student CRUD with course synchronization."""

    def __init__(self, store: RecordStore, synchronizer: RelationshipSynchronizer):
        self.store = store
        self.students = store.students
        self.sync = synchronizer

    def _check_user_free(self, user_id: str) -> None:
        if self.store.users.find_by_id(user_id) is None:
            raise NotFoundError("USER_NOT_FOUND")
        if self.students.find_one({"userId": user_id}) is not None:
            raise DuplicateError("STUDENT_ALREADY_EXISTS")

    def view(self, student: Dict[str, Any], populator: Optional[Populator] = None) -> Dict[str, Any]:
        courses = student.get("courses", [])
        return {
            "id": student["id"],
            "userId": student["userId"],
            "firstName": student["firstName"],
            "lastName": student["lastName"],
            "enrollmentNumber": student["enrollmentNumber"],
            "courses": populator.courses(courses) if populator else list(courses),
            "dateOfBirth": student.get("dateOfBirth"),
        }

    def create(self, data: StudentCreate):
        """
        Create a student with a fresh enrollment number and add it to each
        listed course.

        Returns:
            (student document, SyncReport)

        Raises:
            NotFoundError: USER_NOT_FOUND if userId references no user
            DuplicateError: STUDENT_ALREADY_EXISTS if the user already has a profile
            DuplicateKeyError: If the generated enrollment number is taken
        """
        self._check_user_free(data.userId)
        student = self.students.insert_one({
            "userId": data.userId,
            "firstName": data.firstName,
            "lastName": data.lastName,
            "enrollmentNumber": generate_enrollment_number(),
            "courses": list(dict.fromkeys(data.courses)),
            "dateOfBirth": data.dateOfBirth,
        })
        report = self.sync.attach_member(STUDENTS, student["id"], student["courses"])
        logger.info("Created student %s (%s)", student["id"], student["enrollmentNumber"])
        return student, report

    def get_by_enrollment(self, enrollment_number: str) -> Dict[str, Any]:
        student = self.students.find_one({"enrollmentNumber": enrollment_number})
        if student is None:
            raise NotFoundError("STUDENT_NOT_FOUND")
        return student

    def list(self, page_request: PageRequest, populator: Populator) -> Page:
        page = paginate(self.students, page_request, "STUDENT")
        page.items = [self.view(student, populator) for student in page.items]
        return page

    def update(self, student: Dict[str, Any], data: StudentUpdate):
        """
        Update a loaded student; a present `courses` list is re-synchronized
        (remove from all old courses, add to all new) before the save.

        Returns:
            (updated student document, SyncReport)
        """
        changes = data.model_dump(exclude_unset=True)
        changes = {k: v for k, v in changes.items() if v is not None or k == "dateOfBirth"}

        new_user_id = changes.get("userId")
        if new_user_id is not None and new_user_id != student["userId"]:
            self._check_user_free(new_user_id)

        report = SyncReport()
        if "courses" in changes:
            changes["courses"] = list(dict.fromkeys(changes["courses"]))
            report = self.sync.reconcile_member(
                STUDENTS, student["id"], student.get("courses", []), changes["courses"],
            )

        updated = self.students.find_by_id_and_update(student["id"], changes)
        if updated is None:
            raise NotFoundError("STUDENT_NOT_FOUND")
        logger.info("Updated student %s", student["enrollmentNumber"])
        return updated, report

    def delete(self, enrollment_number: str):
        student = self.get_by_enrollment(enrollment_number)
        deleted = self.students.find_by_id_and_delete(student["id"])
        if deleted is None:
            raise NotFoundError("STUDENT_NOT_FOUND")
        report = self.sync.on_member_deleted(STUDENTS, student["id"])
        logger.info("Deleted student %s", enrollment_number)
        return deleted, report
