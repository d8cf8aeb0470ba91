# __init__.py
# Package exports for the courses API

from .models import CourseCreate, CourseUpdate
from .service import CourseService
from .router import router as courses_router

__all__ = [
    "CourseCreate",
    "CourseUpdate",
    "CourseService",
    "courses_router",
]
