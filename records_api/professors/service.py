# service.py
# Business logic for professor profiles with Firestore

# Professors are stored in the 'professors' collection. Creating, updating
# the `courses` list of, or deleting a professor also updates
# Course.professors through the RelationshipSynchronizer; the professor
# document itself is written after the course-side steps on update.

# @see: models.py - Pydantic schemas used by this service
# @see: router.py - FastAPI endpoints that call this service
# @see: ../relationships.py - course-side synchronization

from typing import Any, Dict, Optional

from records_api.errors import DuplicateError, NotFoundError
from records_api.logging_config import get_logger
from records_api.pagination import Page, PageRequest, Populator, paginate
from records_api.relationships import PROFESSORS, RelationshipSynchronizer, SyncReport
from records_api.store import RecordStore

from .models import ProfessorCreate, ProfessorUpdate

logger = get_logger("professors")


class ProfessorService:
    """Service for professor CRUD with course synchronization."""

    def __init__(self, store: RecordStore, synchronizer: RelationshipSynchronizer):
        self.store = store
        self.professors = store.professors
        self.sync = synchronizer

    def _check_user_free(self, user_id: str) -> None:
        if self.store.users.find_by_id(user_id) is None:
            raise NotFoundError("USER_NOT_FOUND")
        if self.professors.find_one({"userId": user_id}) is not None:
            raise DuplicateError("PROFESSOR_ALREADY_EXISTS")

    def view(self, professor: Dict[str, Any], populator: Optional[Populator] = None) -> Dict[str, Any]:
        """Projection returned to clients; courses become {id, title} when a populator is given."""
        courses = professor.get("courses", [])
        return {
            "id": professor["id"],
            "userId": professor["userId"],
            "firstName": professor["firstName"],
            "lastName": professor["lastName"],
            "courses": populator.courses(courses) if populator else list(courses),
            "officeLocation": professor.get("officeLocation"),
        }

    def create(self, data: ProfessorCreate):
        """
        Create a professor and add it to each listed course.

        Returns:
            (professor document, SyncReport)

        Raises:
            NotFoundError: USER_NOT_FOUND if userId references no user
            DuplicateError: PROFESSOR_ALREADY_EXISTS if the user already has a profile
        """
        self._check_user_free(data.userId)
        professor = self.professors.insert_one({
            "userId": data.userId,
            "firstName": data.firstName,
            "lastName": data.lastName,
            "courses": list(dict.fromkeys(data.courses)),
            "officeLocation": data.officeLocation,
        })
        report = self.sync.attach_member(PROFESSORS, professor["id"], professor["courses"])
        logger.info("Created professor %s for user %s", professor["id"], data.userId)
        return professor, report

    def get(self, professor_id: str) -> Dict[str, Any]:
        professor = self.professors.find_by_id(professor_id)
        if professor is None:
            raise NotFoundError("PROFESSOR_NOT_FOUND")
        return professor

    def list(self, page_request: PageRequest, populator: Populator) -> Page:
        page = paginate(self.professors, page_request, "PROFESSOR")
        page.items = [self.view(professor, populator) for professor in page.items]
        return page

    def update(self, professor: Dict[str, Any], data: ProfessorUpdate):
        """
        Update a loaded professor.

        When `courses` is present the professor is removed from every old
        course and added to every new one before the profile is saved.

        Returns:
            (updated professor document, SyncReport)
        """
        changes = data.model_dump(exclude_unset=True)
        changes = {k: v for k, v in changes.items() if v is not None or k == "officeLocation"}

        new_user_id = changes.get("userId")
        if new_user_id is not None and new_user_id != professor["userId"]:
            self._check_user_free(new_user_id)

        report = SyncReport()
        if "courses" in changes:
            changes["courses"] = list(dict.fromkeys(changes["courses"]))
            report = self.sync.reconcile_member(
                PROFESSORS, professor["id"], professor.get("courses", []), changes["courses"],
            )

        updated = self.professors.find_by_id_and_update(professor["id"], changes)
        if updated is None:
            raise NotFoundError("PROFESSOR_NOT_FOUND")
        logger.info("Updated professor %s", professor["id"])
        return updated, report

    def delete(self, professor_id: str):
        """Delete a professor, then apply the member-delete cascade policy."""
        professor = self.professors.find_by_id_and_delete(professor_id)
        if professor is None:
            raise NotFoundError("PROFESSOR_NOT_FOUND")
        report = self.sync.on_member_deleted(PROFESSORS, professor_id)
        logger.info("Deleted professor %s", professor_id)
        return professor, report
