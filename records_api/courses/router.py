# router.py
# FastAPI router for courses, course enrollment and the course summary

# Mounted at /api/course. Reads are public; every mutation is admin only.
# The admin check is a path-operation dependency and the target course is
# loaded by a parameter dependency, so a request is rejected with 401/403,
# then 404, before its body is validated.

# @see: service.py - Business logic layer
# @see: models.py - Request Pydantic schemas

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, status

from records_api.auth import require_operation
from records_api.dependencies import check_id, get_store, get_synchronizer
from records_api.pagination import Populator, parse_page_request
from records_api.relationships import PROFESSORS, STUDENTS, RelationshipSynchronizer
from records_api.store import RecordStore

from .models import CourseCreate, CourseUpdate
from .service import CourseService

router = APIRouter(prefix="/api/course", tags=["Courses"])


def get_course_service(
    store: RecordStore = Depends(get_store),
    synchronizer: RelationshipSynchronizer = Depends(get_synchronizer),
) -> CourseService:
    """Dependency for getting CourseService instance."""
    return CourseService(store, synchronizer)


def load_course(
    course_id: str,
    service: CourseService = Depends(get_course_service),
) -> Dict[str, Any]:
    check_id(course_id)
    return service.get(course_id)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_operation("course.create"))],
)
async def create_course(
    payload: CourseCreate,
    service: CourseService = Depends(get_course_service),
):
    course, report = service.create(payload)
    return {
        "message": "Course created successfully",
        "course": service.view(course),
        "syncErrors": report.to_list(),
    }


@router.get("/list")
async def list_courses(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    store: RecordStore = Depends(get_store),
    service: CourseService = Depends(get_course_service),
):
    """List courses with professors and students as {id, name}."""
    result = service.list(parse_page_request(page, limit), Populator(store))
    return {
        "message": "Courses retrieved successfully",
        "totalCourses": result.total,
        "totalPages": result.total_pages,
        "currentPage": result.page,
        "courses": result.items,
    }


@router.get("/summary/info-course")
async def course_summary(
    store: RecordStore = Depends(get_store),
    service: CourseService = Depends(get_course_service),
):
    """Member totals per course and per department, and the average capacity."""
    return {
        "message": "Course summary retrieved successfully",
        "data": service.summary(Populator(store)),
    }


@router.get("/{course_id}")
async def get_course(
    course: Dict[str, Any] = Depends(load_course),
    store: RecordStore = Depends(get_store),
    service: CourseService = Depends(get_course_service),
):
    return {"course": service.view(course, Populator(store))}


@router.put("/{course_id}", dependencies=[Depends(require_operation("course.update"))])
async def update_course(
    payload: CourseUpdate,
    course: Dict[str, Any] = Depends(load_course),
    service: CourseService = Depends(get_course_service),
):
    updated, report = service.update(course, payload)
    return {
        "message": "Course updated successfully",
        "course": service.view(updated),
        "syncErrors": report.to_list(),
    }


@router.delete("/{course_id}", dependencies=[Depends(require_operation("course.delete"))])
async def delete_course(
    course_id: str,
    service: CourseService = Depends(get_course_service),
):
    check_id(course_id)
    course, report = service.delete(course_id)
    return {
        "message": "Course deleted successfully",
        "course": {"id": course["id"], "title": course["title"], "department": course.get("department")},
        "syncErrors": report.to_list(),
    }


# ========== ENROLLMENT ==========


@router.post(
    "/{course_id}/students/{student_id}",
    dependencies=[Depends(require_operation("course.enroll"))],
)
async def enroll_student(
    course_id: str,
    student_id: str,
    service: CourseService = Depends(get_course_service),
):
    check_id(course_id)
    check_id(student_id)
    course, report = service.enroll(course_id, STUDENTS, student_id)
    return {
        "message": "Student enrolled successfully",
        "course": service.view(course),
        "syncErrors": report.to_list(),
    }


@router.delete(
    "/{course_id}/students/{student_id}",
    dependencies=[Depends(require_operation("course.withdraw"))],
)
async def withdraw_student(
    course_id: str,
    student_id: str,
    service: CourseService = Depends(get_course_service),
):
    check_id(course_id)
    check_id(student_id)
    course, report = service.withdraw(course_id, STUDENTS, student_id)
    return {
        "message": "Student withdrawn successfully",
        "course": service.view(course),
        "syncErrors": report.to_list(),
    }


@router.post(
    "/{course_id}/professors/{professor_id}",
    dependencies=[Depends(require_operation("course.enroll"))],
)
async def assign_professor(
    course_id: str,
    professor_id: str,
    service: CourseService = Depends(get_course_service),
):
    check_id(course_id)
    check_id(professor_id)
    course, report = service.enroll(course_id, PROFESSORS, professor_id)
    return {
        "message": "Professor assigned successfully",
        "course": service.view(course),
        "syncErrors": report.to_list(),
    }


@router.delete(
    "/{course_id}/professors/{professor_id}",
    dependencies=[Depends(require_operation("course.withdraw"))],
)
async def unassign_professor(
    course_id: str,
    professor_id: str,
    service: CourseService = Depends(get_course_service),
):
    check_id(course_id)
    check_id(professor_id)
    course, report = service.withdraw(course_id, PROFESSORS, professor_id)
    return {
        "message": "Professor removed successfully",
        "course": service.view(course),
        "syncErrors": report.to_list(),
    }
