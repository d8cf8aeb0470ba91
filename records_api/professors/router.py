# router.py
# FastAPI router for professor profiles

# Mounted at /api/professor. Listing is public, reading a single profile
# needs a token, updates are allowed to admins and to the professor's own
# user, and create/delete are admin only.

# @see: service.py - Business logic layer
# @see: models.py - Request Pydantic schemas

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, status

from records_api.auth import get_current_actor, require_operation
from records_api.dependencies import check_id, get_store, get_synchronizer
from records_api.pagination import Populator, parse_page_request
from records_api.permissions import Actor, authorize
from records_api.relationships import RelationshipSynchronizer
from records_api.store import RecordStore

from .models import ProfessorCreate, ProfessorUpdate
from .service import ProfessorService

router = APIRouter(prefix="/api/professor", tags=["Professors"])


def get_professor_service(
    store: RecordStore = Depends(get_store),
    synchronizer: RelationshipSynchronizer = Depends(get_synchronizer),
) -> ProfessorService:
    """Dependency for getting ProfessorService instance."""
    return ProfessorService(store, synchronizer)


async def load_professor_for_update(
    professor_id: str,
    actor: Actor = Depends(get_current_actor),
    service: ProfessorService = Depends(get_professor_service),
) -> Dict[str, Any]:
    """Load the target, then allow admins and the owning user."""
    check_id(professor_id)
    professor = service.get(professor_id)
    authorize("professor.update", actor, owner_id=professor["userId"])
    return professor


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_operation("professor.create"))],
)
async def create_professor(
    payload: ProfessorCreate,
    service: ProfessorService = Depends(get_professor_service),
):
    professor, report = service.create(payload)
    return {
        "message": "Professor created successfully",
        "professor": service.view(professor),
        "syncErrors": report.to_list(),
    }


@router.get("/list")
async def list_professors(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    store: RecordStore = Depends(get_store),
    service: ProfessorService = Depends(get_professor_service),
):
    """List professors with their courses as {id, title}."""
    result = service.list(parse_page_request(page, limit), Populator(store))
    return {
        "message": "Professors retrieved successfully",
        "totalProfessors": result.total,
        "totalPages": result.total_pages,
        "currentPage": result.page,
        "professors": result.items,
    }


@router.get("/{professor_id}", dependencies=[Depends(require_operation("professor.get"))])
async def get_professor(
    professor_id: str,
    store: RecordStore = Depends(get_store),
    service: ProfessorService = Depends(get_professor_service),
):
    check_id(professor_id)
    professor = service.get(professor_id)
    return {"professor": service.view(professor, Populator(store))}


@router.put("/{professor_id}")
async def update_professor(
    payload: ProfessorUpdate,
    professor: Dict[str, Any] = Depends(load_professor_for_update),
    service: ProfessorService = Depends(get_professor_service),
):
    updated, report = service.update(professor, payload)
    return {
        "message": "Professor updated successfully",
        "professor": service.view(updated),
        "syncErrors": report.to_list(),
    }


@router.delete("/{professor_id}", dependencies=[Depends(require_operation("professor.delete"))])
async def delete_professor(
    professor_id: str,
    service: ProfessorService = Depends(get_professor_service),
):
    check_id(professor_id)
    professor, report = service.delete(professor_id)
    return {
        "message": "Professor deleted successfully",
        "professor": service.view(professor),
        "syncErrors": report.to_list(),
    }
