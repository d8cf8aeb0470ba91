# models.py
# Pydantic models for student profiles

# The enrollment number is generated by the service and cannot be sent by
# clients; `courses` mirrors Course.students.

# @see: service.py - Uses these models for Firestore operations
# @see: router.py - Uses these models for FastAPI validation

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from records_api.validators import DateStr, ObjectIdStr


class StudentCreate(BaseModel):
    """Request model for creating a student profile."""
    model_config = ConfigDict(extra="forbid")

    userId: ObjectIdStr
    firstName: str = Field(..., min_length=2, max_length=50)
    lastName: str = Field(..., min_length=2, max_length=50)
    courses: List[ObjectIdStr] = Field(default_factory=list)
    dateOfBirth: Optional[DateStr] = None


class StudentUpdate(BaseModel):
    """Request model for updating a student; every field optional."""
    model_config = ConfigDict(extra="forbid")

    userId: Optional[ObjectIdStr] = None
    firstName: Optional[str] = Field(None, min_length=2, max_length=50)
    lastName: Optional[str] = Field(None, min_length=2, max_length=50)
    courses: Optional[List[ObjectIdStr]] = None
    dateOfBirth: Optional[DateStr] = None
