# __init__.py
# Package exports for the professors API

from .models import ProfessorCreate, ProfessorUpdate
from .service import ProfessorService
from .router import router as professors_router

__all__ = [
    "ProfessorCreate",
    "ProfessorUpdate",
    "ProfessorService",
    "professors_router",
]
