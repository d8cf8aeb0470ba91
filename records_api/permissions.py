# permissions.py
# Authorization decisions for every API operation

# decide() is a pure function of (policy, actor, owner, target) and never
# touches the store; callers load whatever the policy needs first.
# OPERATION_POLICIES names the policy of each endpoint so the table can be
# audited in one place, and authorize() turns a denial into the matching
# AuthenticationError / AuthorizationError.

# @see: auth.py - FastAPI dependencies that build the Actor and call authorize()
# @see: errors.py - NOT_AUTHENTICATED, ACCESS_DENIED, USER_CANNOT_UPDATE, CANNOT_DELETE_ADMIN

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from records_api.errors import AuthenticationError, AuthorizationError


class Policy(str, Enum):
    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    ADMIN_ONLY = "admin_only"
    SELF_OR_ADMIN = "self_or_admin"
    ADMIN_DELETE_USER = "admin_delete_user"


@dataclass(frozen=True)
class Actor:
    """The authenticated caller, as carried by its token."""
    id: str
    is_admin: bool = False


@dataclass(frozen=True)
class Decision:
    allowed: bool
    code: Optional[str] = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(True)

    @classmethod
    def deny(cls, code: str) -> "Decision":
        return cls(False, code)


def decide(
    policy: Policy,
    actor: Optional[Actor],
    owner_id: Optional[str] = None,
    target_is_admin: bool = False,
    denial_code: str = "ACCESS_DENIED",
) -> Decision:
    """
    Decide whether actor may perform an operation guarded by policy.

    Args:
        policy: Policy of the operation
        actor: Authenticated caller, or None for anonymous requests
        owner_id: User id owning the target (SELF_OR_ADMIN)
        target_is_admin: Whether the target user is an admin (ADMIN_DELETE_USER)
        denial_code: Error code reported when SELF_OR_ADMIN denies

    Returns:
        Decision with the error code of the denial, if any
    """
    if policy is Policy.PUBLIC:
        return Decision.allow()
    if actor is None:
        return Decision.deny("NOT_AUTHENTICATED")

    if policy is Policy.AUTHENTICATED:
        return Decision.allow()
    if policy is Policy.ADMIN_ONLY:
        return Decision.allow() if actor.is_admin else Decision.deny("ACCESS_DENIED")
    if policy is Policy.SELF_OR_ADMIN:
        if actor.is_admin or (owner_id is not None and actor.id == owner_id):
            return Decision.allow()
        return Decision.deny(denial_code)
    if policy is Policy.ADMIN_DELETE_USER:
        if not actor.is_admin:
            return Decision.deny("ACCESS_DENIED")
        if target_is_admin:
            return Decision.deny("CANNOT_DELETE_ADMIN")
        return Decision.allow()

    raise ValueError(f"Unknown policy: {policy}")


OPERATION_POLICIES: Dict[str, Policy] = {
    "user.register": Policy.PUBLIC,
    "user.login": Policy.PUBLIC,
    "user.create_admin": Policy.ADMIN_ONLY,
    "user.list": Policy.ADMIN_ONLY,
    "user.me": Policy.AUTHENTICATED,
    "user.get": Policy.SELF_OR_ADMIN,
    "user.update": Policy.SELF_OR_ADMIN,
    "user.delete": Policy.ADMIN_DELETE_USER,
    "professor.create": Policy.ADMIN_ONLY,
    "professor.list": Policy.PUBLIC,
    "professor.get": Policy.AUTHENTICATED,
    "professor.update": Policy.SELF_OR_ADMIN,
    "professor.delete": Policy.ADMIN_ONLY,
    "student.create": Policy.ADMIN_ONLY,
    "student.list": Policy.PUBLIC,
    "student.get": Policy.AUTHENTICATED,
    "student.update": Policy.SELF_OR_ADMIN,
    "student.delete": Policy.ADMIN_ONLY,
    "course.create": Policy.ADMIN_ONLY,
    "course.list": Policy.PUBLIC,
    "course.summary": Policy.PUBLIC,
    "course.get": Policy.PUBLIC,
    "course.update": Policy.ADMIN_ONLY,
    "course.delete": Policy.ADMIN_ONLY,
    "course.enroll": Policy.ADMIN_ONLY,
    "course.withdraw": Policy.ADMIN_ONLY,
    "install": Policy.ADMIN_ONLY,
}

# Denial code per self-or-admin operation
SELF_DENIAL_CODES: Dict[str, str] = {
    "user.update": "USER_CANNOT_UPDATE",
}


def authorize(
    operation: str,
    actor: Optional[Actor],
    owner_id: Optional[str] = None,
    target_is_admin: bool = False,
) -> None:
    """Raise the matching error unless actor may perform operation."""
    decision = decide(
        OPERATION_POLICIES[operation],
        actor,
        owner_id=owner_id,
        target_is_admin=target_is_admin,
        denial_code=SELF_DENIAL_CODES.get(operation, "ACCESS_DENIED"),
    )
    if decision.allowed:
        return
    if decision.code == "NOT_AUTHENTICATED":
        raise AuthenticationError(decision.code)
    raise AuthorizationError(decision.code)
