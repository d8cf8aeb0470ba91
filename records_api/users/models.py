# models.py
# Pydantic models for user registration, login and account updates

# Request models reject unknown fields, so a client cannot set isAdmin or
# passwordHash through registration or update.

# @see: service.py - Uses these models for Firestore operations
# @see: router.py - Uses these models for FastAPI validation

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from records_api.validators import Username


class UserRegister(BaseModel):
    """Request model for self-registration and admin creation."""
    model_config = ConfigDict(extra="forbid")

    username: Username
    email: EmailStr
    password: str = Field(..., min_length=6)


class LoginRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    username: Username
    password: str = Field(..., min_length=6)


class UserUpdate(BaseModel):
    """Request model for updating an account; every field optional."""
    model_config = ConfigDict(extra="forbid")

    username: Optional[Username] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)


class UserResponse(BaseModel):
    """Public projection of a user; never carries the password hash."""
    id: str
    username: str
    email: str
    isAdmin: bool = False
