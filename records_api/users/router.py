# router.py
# FastAPI router for user registration, login and account management

# Mounted at /api/users. Registration and login are public; login is rate
# limited per client. Everything else requires a bearer token, and the
# authorization dependencies run before the request body is validated.

# @see: service.py - Business logic layer
# @see: models.py - Request/response Pydantic schemas
# @see: ../auth.py - get_current_actor / require_operation

from typing import Optional

from fastapi import APIRouter, Depends, Request, status

from records_api.auth import get_current_actor, require_operation
from records_api.dependencies import check_id, get_store, get_token_service
from records_api.limiter import limiter, login_limit
from records_api.pagination import parse_page_request
from records_api.permissions import Actor, authorize
from records_api.security import TokenService
from records_api.store import RecordStore

from .models import LoginRequest, UserRegister, UserUpdate
from .service import UserService, public_user

router = APIRouter(prefix="/api/users", tags=["Users"])


def get_user_service(
    store: RecordStore = Depends(get_store),
    tokens: TokenService = Depends(get_token_service),
) -> UserService:
    """Dependency for getting UserService instance."""
    return UserService(store, tokens)


async def self_or_admin_get(
    user_id: str,
    actor: Actor = Depends(get_current_actor),
) -> str:
    authorize("user.get", actor, owner_id=user_id)
    check_id(user_id)
    return user_id


async def self_or_admin_update(
    user_id: str,
    actor: Actor = Depends(get_current_actor),
) -> str:
    authorize("user.update", actor, owner_id=user_id)
    check_id(user_id)
    return user_id


@router.post("", status_code=status.HTTP_201_CREATED)
async def register_user(
    payload: UserRegister,
    service: UserService = Depends(get_user_service),
):
    """Register a plain (non-admin) user."""
    user = service.register(payload)
    return {"message": "User registered successfully", "user": user}


@router.post("/login")
@limiter.limit(login_limit)
async def login_user(
    request: Request,
    payload: LoginRequest,
    service: UserService = Depends(get_user_service),
):
    """
    Exchange username and password for a bearer token.

    The response also says whether the user is a professor and carries the
    professor profile when so.
    """
    result = service.login(payload)
    return {"message": "Login successful", **result}


@router.post(
    "/admin",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_operation("user.create_admin"))],
)
async def create_admin(
    payload: UserRegister,
    service: UserService = Depends(get_user_service),
):
    user = service.register(payload, is_admin=True)
    return {"message": "Admin created successfully", "user": user}


@router.get("/list", dependencies=[Depends(require_operation("user.list"))])
async def list_users(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    service: UserService = Depends(get_user_service),
):
    result = service.list(parse_page_request(page, limit))
    return {
        "message": "Users retrieved successfully",
        "totalUsers": result.total,
        "totalPages": result.total_pages,
        "currentPage": result.page,
        "users": result.items,
    }


@router.get("/me")
async def get_me(
    actor: Actor = Depends(get_current_actor),
    service: UserService = Depends(get_user_service),
):
    """Return the account of the token holder."""
    return {"user": public_user(service.get(actor.id))}


@router.get("/{user_id}")
async def get_user(
    target_id: str = Depends(self_or_admin_get),
    service: UserService = Depends(get_user_service),
):
    return {"user": public_user(service.get(target_id))}


@router.put("/{user_id}")
async def update_user(
    payload: UserUpdate,
    target_id: str = Depends(self_or_admin_update),
    service: UserService = Depends(get_user_service),
):
    """Update username, email or password of the caller (or any user, for admins)."""
    user = service.update(target_id, payload)
    return {"message": "User updated successfully", "user": user}


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    actor: Actor = Depends(get_current_actor),
    service: UserService = Depends(get_user_service),
):
    """Delete a user. Admin only, and never another admin account."""
    authorize("user.delete", actor)
    check_id(user_id)
    target = service.get(user_id)
    authorize("user.delete", actor, target_is_admin=bool(target.get("isAdmin")))
    service.delete(user_id)
    return {"message": "User deleted successfully"}
