# models.py
# Pydantic models for courses

# A course holds the ids of its professors and students. Lists sent on
# create or update are mirrored onto each member's `courses` list.

# @see: service.py - Uses these models for Firestore operations
# @see: router.py - Uses these models for FastAPI validation

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from records_api.validators import ObjectIdStr


class CourseCreate(BaseModel):
    """Request model for creating a course."""
    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=3, max_length=100)
    department: str = Field(..., min_length=3, max_length=50)
    capacity: Optional[int] = Field(None, gt=0, description="Seats; optional")
    professors: List[ObjectIdStr] = Field(default_factory=list)
    students: List[ObjectIdStr] = Field(default_factory=list)


class CourseUpdate(BaseModel):
    """Request model for updating a course; every field optional."""
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, min_length=3, max_length=100)
    department: Optional[str] = Field(None, min_length=3, max_length=50)
    capacity: Optional[int] = Field(None, gt=0)
    professors: Optional[List[ObjectIdStr]] = None
    students: Optional[List[ObjectIdStr]] = None
