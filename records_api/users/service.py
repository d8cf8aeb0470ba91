# service.py
# Business logic for user accounts: registration, login and account CRUD

# Users live in the Firestore 'users' collection keyed by a 24-hex id.
# Passwords are stored only as werkzeug hashes in `passwordHash`.

# @see: models.py - Pydantic schemas used by this service
# @see: router.py - FastAPI endpoints that call this service
# @note: username and email are also unique at the store level

from typing import Any, Dict, Optional

from records_api.config import Settings
from records_api.errors import AuthenticationError, DuplicateError, NotFoundError
from records_api.logging_config import get_logger
from records_api.pagination import Page, PageRequest, paginate
from records_api.security import TokenService, hash_password, verify_password
from records_api.store import RecordStore

from .models import LoginRequest, UserRegister, UserResponse, UserUpdate

logger = get_logger("users")


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    return UserResponse(
        id=user["id"],
        username=user["username"],
        email=user["email"],
        isAdmin=bool(user.get("isAdmin", False)),
    ).model_dump()


def professor_profile(professor: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": professor["id"],
        "firstName": professor.get("firstName"),
        "lastName": professor.get("lastName"),
        "officeLocation": professor.get("officeLocation"),
        "courses": professor.get("courses", []),
    }


class UserService:
    """Service for user account operations."""

    def __init__(self, store: RecordStore, tokens: Optional[TokenService] = None):
        self.store = store
        self.users = store.users
        self.tokens = tokens

    def _ensure_available(self, email: Optional[str], username: Optional[str], exclude_id: Optional[str] = None) -> None:
        for field, value in (("email", email), ("username", username)):
            if value is None:
                continue
            existing = self.users.find_one({field: value})
            if existing and existing["id"] != exclude_id:
                raise DuplicateError("USER_ALREADY_EXISTS")

    def register(self, data: UserRegister, is_admin: bool = False) -> Dict[str, Any]:
        """
        Create a user account.

        Args:
            data: Validated registration payload
            is_admin: True only for the admin-creation endpoint and bootstrap

        Returns:
            Public projection of the created user

        Raises:
            DuplicateError: If the email or username is taken
        """
        self._ensure_available(data.email, data.username)
        user = self.users.insert_one({
            "username": data.username,
            "email": data.email,
            "passwordHash": hash_password(data.password),
            "isAdmin": is_admin,
        })
        logger.info("Registered %s user %s", "admin" if is_admin else "plain", user["id"])
        return public_user(user)

    def login(self, data: LoginRequest) -> Dict[str, Any]:
        """
        Check credentials and issue a token.

        Returns:
            Dict with token and the user view including the professor profile

        Raises:
            AuthenticationError: INVALID_USERNAME_OR_PASSWORD for an unknown
                user or a wrong password alike
        """
        user = self.users.find_one({"username": data.username})
        if user is None or not verify_password(data.password, user.get("passwordHash")):
            logger.info("Failed login for username %s", data.username)
            raise AuthenticationError("INVALID_USERNAME_OR_PASSWORD")

        token = self.tokens.issue({"userId": user["id"], "isAdmin": bool(user.get("isAdmin"))})
        professor = self.store.professors.find_one({"userId": user["id"]})

        view = public_user(user)
        view["isProfessor"] = professor is not None
        view["professor"] = professor_profile(professor) if professor else None
        return {"token": token, "user": view}

    def get(self, user_id: str) -> Dict[str, Any]:
        user = self.users.find_by_id(user_id)
        if user is None:
            raise NotFoundError("USER_NOT_FOUND")
        return user

    def list(self, page_request: PageRequest) -> Page:
        page = paginate(self.users, page_request, "USER")
        page.items = [public_user(user) for user in page.items]
        return page

    def update(self, user_id: str, data: UserUpdate) -> Dict[str, Any]:
        """Apply declared fields; a new password is re-hashed."""
        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        self._ensure_available(changes.get("email"), changes.get("username"), exclude_id=user_id)

        if "password" in changes:
            changes["passwordHash"] = hash_password(changes.pop("password"))

        updated = self.users.find_by_id_and_update(user_id, changes)
        if updated is None:
            raise NotFoundError("USER_NOT_FOUND")
        logger.info("Updated user %s (%s)", user_id, ", ".join(sorted(changes)) or "no fields")
        return public_user(updated)

    def delete(self, user_id: str) -> None:
        if self.users.find_by_id_and_delete(user_id) is None:
            raise NotFoundError("USER_NOT_FOUND")
        logger.info("Deleted user %s", user_id)

    def ensure_admin(self, settings: Settings) -> Optional[Dict[str, Any]]:
        """
        Create the default admin account when no admin exists.

        Returns:
            The created admin, or None if one already existed
        """
        if self.users.find_one({"isAdmin": True}) is not None:
            logger.info("Admin user already exists")
            return None

        admin = self.register(
            UserRegister(
                username=settings.admin_username,
                email=settings.admin_email,
                password=settings.admin_password,
            ),
            is_admin=True,
        )
        logger.info("Bootstrapped admin user %s", admin["username"])
        return admin
