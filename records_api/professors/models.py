# models.py
# Pydantic models for professor profiles

# A professor is a profile attached to exactly one user account. The
# `courses` list mirrors Course.professors and is kept in step by the
# relationship synchronizer.

# @see: service.py - Uses these models for Firestore operations
# @see: router.py - Uses these models for FastAPI validation

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from records_api.validators import ObjectIdStr


class ProfessorCreate(BaseModel):
    """Request model for creating a professor profile."""
    model_config = ConfigDict(extra="forbid")

    userId: ObjectIdStr
    firstName: str = Field(..., min_length=2, max_length=50)
    lastName: str = Field(..., min_length=2, max_length=50)
    courses: List[ObjectIdStr] = Field(default_factory=list)
    officeLocation: Optional[str] = None


class ProfessorUpdate(BaseModel):
    """Request model for updating a professor; every field optional."""
    model_config = ConfigDict(extra="forbid")

    userId: Optional[ObjectIdStr] = None
    firstName: Optional[str] = Field(None, min_length=2, max_length=50)
    lastName: Optional[str] = Field(None, min_length=2, max_length=50)
    courses: Optional[List[ObjectIdStr]] = None
    officeLocation: Optional[str] = None
