# __init__.py
# Package exports for the students API

from .models import StudentCreate, StudentUpdate
from .service import StudentService
from .router import router as students_router

__all__ = [
    "StudentCreate",
    "StudentUpdate",
    "StudentService",
    "students_router",
]
