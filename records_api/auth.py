"""
============================================================================
FILE: auth.py
LOCATION: records_api/auth.py
============================================================================

PURPOSE:
    Bearer token authentication and operation-level authorization as
    FastAPI dependencies.

ROLE IN PROJECT:
    Every protected endpoint depends on get_current_actor() or on a
    require_operation() checker. FastAPI resolves these before the request
    body is validated, so an unauthorized caller gets 401/403 whatever the
    payload. Self-or-admin checks that need the target document live in the
    entity routers, which load the target first.

KEY COMPONENTS:
    - get_optional_actor(): Actor from the Authorization header, or None
    - get_current_actor(): Actor, or 401 NOT_AUTHENTICATED
    - require_operation(): Factory for checkers driven by OPERATION_POLICIES

DEPENDENCIES:
    - External: fastapi
    - Internal: security.TokenService, permissions, store

USAGE:
    from records_api.auth import get_current_actor, require_operation

    @router.post("", dependencies=[Depends(require_operation("course.create"))])
    async def create_course(...):
        ...
============================================================================
"""

import typing

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from records_api.dependencies import get_store, get_token_service
from records_api.errors import AuthenticationError
from records_api.permissions import Actor, authorize
from records_api.security import TokenService
from records_api.store import RecordStore


# auto_error=False: a missing header must surface as our 401, not FastAPI's 403
security = HTTPBearer(auto_error=False)


async def get_optional_actor(
    credentials: typing.Optional[HTTPAuthorizationCredentials] = Depends(security),
    tokens: TokenService = Depends(get_token_service),
    store: RecordStore = Depends(get_store),
) -> typing.Optional[Actor]:
    """
    Resolve the caller from the Authorization header.

    This dependency:
    1. Returns None when no bearer token is sent
    2. Verifies the token signature and expiry
    3. Checks the user still exists, so deleted users lose access at once
    4. Returns an Actor whose admin flag comes from the token
    """
    if credentials is None:
        return None

    claims = tokens.verify(credentials.credentials)
    if store.users.find_by_id(claims["userId"]) is None:
        raise AuthenticationError("INVALID_TOKEN")

    return Actor(id=claims["userId"], is_admin=claims["isAdmin"])


async def get_current_actor(
    actor: typing.Optional[Actor] = Depends(get_optional_actor),
) -> Actor:
    """Dependency that requires an authenticated caller."""
    if actor is None:
        raise AuthenticationError("NOT_AUTHENTICATED")
    return actor


def require_operation(operation: str):
    """Build a dependency enforcing the policy registered for operation."""
    async def operation_checker(
        actor: typing.Optional[Actor] = Depends(get_optional_actor),
    ) -> typing.Optional[Actor]:
        authorize(operation, actor)
        return actor
    return operation_checker
