# router.py
# FastAPI router for student profiles

# Mounted at /api/student. Students are addressed by enrollment number in
# the path. Listing is public, reading needs a token, updates are allowed
# to admins and to the student's own user, create/delete are admin only.

# @see: service.py - Business logic layer
# @see: models.py - Request Pydantic schemas

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, status

from records_api.auth import get_current_actor, require_operation
from records_api.dependencies import get_store, get_synchronizer
from records_api.pagination import Populator, parse_page_request
from records_api.permissions import Actor, authorize
from records_api.relationships import RelationshipSynchronizer
from records_api.store import RecordStore

from .models import StudentCreate, StudentUpdate
from .service import StudentService

router = APIRouter(prefix="/api/student", tags=["Students"])


def get_student_service(
    store: RecordStore = Depends(get_store),
    synchronizer: RelationshipSynchronizer = Depends(get_synchronizer),
) -> StudentService:
    """Dependency for getting StudentService instance."""
    return StudentService(store, synchronizer)


async def load_student_for_update(
    enrollment_number: str,
    actor: Actor = Depends(get_current_actor),
    service: StudentService = Depends(get_student_service),
) -> Dict[str, Any]:
    """Load the target, then allow admins and the owning user."""
    student = service.get_by_enrollment(enrollment_number)
    authorize("student.update", actor, owner_id=student["userId"])
    return student


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_operation("student.create"))],
)
async def create_student(
    payload: StudentCreate,
    service: StudentService = Depends(get_student_service),
):
    student, report = service.create(payload)
    return {
        "message": "Student created successfully",
        "student": service.view(student),
        "syncErrors": report.to_list(),
    }


@router.get("/list")
async def list_students(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    store: RecordStore = Depends(get_store),
    service: StudentService = Depends(get_student_service),
):
    """List students with their courses as {id, title}."""
    result = service.list(parse_page_request(page, limit), Populator(store))
    return {
        "message": "Students retrieved successfully",
        "totalStudents": result.total,
        "totalPages": result.total_pages,
        "currentPage": result.page,
        "students": result.items,
    }


@router.get("/{enrollment_number}", dependencies=[Depends(require_operation("student.get"))])
async def get_student(
    enrollment_number: str,
    store: RecordStore = Depends(get_store),
    service: StudentService = Depends(get_student_service),
):
    student = service.get_by_enrollment(enrollment_number)
    return {"student": service.view(student, Populator(store))}


@router.put("/{enrollment_number}")
async def update_student(
    payload: StudentUpdate,
    student: Dict[str, Any] = Depends(load_student_for_update),
    service: StudentService = Depends(get_student_service),
):
    updated, report = service.update(student, payload)
    return {
        "message": "Student updated successfully",
        "student": service.view(updated),
        "syncErrors": report.to_list(),
    }


@router.delete("/{enrollment_number}", dependencies=[Depends(require_operation("student.delete"))])
async def delete_student(
    enrollment_number: str,
    service: StudentService = Depends(get_student_service),
):
    student, report = service.delete(enrollment_number)
    return {
        "message": "Student deleted successfully",
        "student": service.view(student),
        "syncErrors": report.to_list(),
    }
