# errors.py
# Error taxonomy and message catalog for the records API

# Every failure the API reports is a RecordsError subclass carrying a stable
# code, a human message from MESSAGES and an HTTP status. register_handlers()
# renders them, FastAPI request validation errors and store failures as
# {"detail": {"code": ..., "message": ...}}.

# @see: store.py - StoreError / DuplicateKeyError raised by the document store
# @see: validators.py - Field-level message templates for validation errors

from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from records_api.logging_config import get_logger
from records_api.store import DuplicateKeyError, StoreError
from records_api.validators import first_violation

logger = get_logger("errors")


MESSAGES: Dict[str, str] = {
    "ACCESS_DENIED": "Access denied. Admins only.",
    "NOT_AUTHENTICATED": "Access denied. No token provided.",
    "INVALID_TOKEN": "Invalid token.",
    "INVALID_USERNAME_OR_PASSWORD": "Invalid username or password.",
    "USER_CANNOT_UPDATE": "Users can only update their own data.",
    "CANNOT_DELETE_ADMIN": "Admin users cannot be deleted by other admins.",
    "VALIDATION_ERROR": "Validation error occurred.",
    "INVALID_ID": "The id must be a valid ID (24 hexadecimal characters).",
    "INVALID_PAGE_LIMIT": "The limit parameter must be one of 5, 10 or 30.",
    "INVALID_PAGE_PARAMETER": "The page parameter must be a positive integer.",
    "PAGE_NOT_FOUND": "Page not found.",
    "USER_NOT_FOUND": "User not found.",
    "USER_ALREADY_EXISTS": "User with this email or username already exists.",
    "USER_NOT_REGISTERED": "No users registered.",
    "PROFESSOR_NOT_FOUND": "Professor not found.",
    "PROFESSOR_ALREADY_EXISTS": "User is already a professor.",
    "PROFESSOR_NOT_REGISTERED": "No professors registered.",
    "STUDENT_NOT_FOUND": "Student not found.",
    "STUDENT_ALREADY_EXISTS": "User is already a student.",
    "STUDENT_NOT_REGISTERED": "No students registered.",
    "COURSE_NOT_FOUND": "Course not found.",
    "COURSE_ALREADY_EXISTS": "Course already exists.",
    "COURSE_NOT_REGISTERED": "No courses registered.",
    "INSTALL_DISABLED": "Sample data installation is disabled.",
    "DUPLICATE_KEY": "A record with the same unique value already exists.",
    "INTERNAL_ERROR": "An internal error occurred.",
}


def message_for(code: str) -> str:
    """Return the catalog message for an error code."""
    return MESSAGES.get(code, "Unknown error.")


class RecordsError(Exception):
    """Base class for errors rendered to API clients."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "INTERNAL_ERROR"

    def __init__(self, code: Optional[str] = None, message: Optional[str] = None):
        self.code = code or self.default_code
        self.message = message or message_for(self.code)
        super().__init__(self.message)

    def to_detail(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}


class ValidationError(RecordsError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "VALIDATION_ERROR"

    def __init__(
        self,
        code: Optional[str] = None,
        message: Optional[str] = None,
        errors: Optional[List[Dict[str, str]]] = None,
    ):
        super().__init__(code, message)
        self.errors = errors or []

    def to_detail(self) -> Dict[str, Any]:
        detail = super().to_detail()
        if self.errors:
            detail["errors"] = self.errors
        return detail


class AuthenticationError(RecordsError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = "NOT_AUTHENTICATED"


class AuthorizationError(RecordsError):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = "ACCESS_DENIED"


class NotFoundError(RecordsError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "PAGE_NOT_FOUND"


class ConflictError(RecordsError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "DUPLICATE_KEY"


class DuplicateError(ConflictError):
    """A business-level uniqueness check failed before writing."""

    status_code = status.HTTP_400_BAD_REQUEST


class EmptyCollectionError(ConflictError):
    """A paginated listing found nothing registered at all."""


class InternalError(RecordsError):
    pass


async def _records_error_handler(request: Request, exc: RecordsError) -> JSONResponse:
    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.to_detail()},
        headers=headers,
    )


async def _request_validation_handler(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    violation = first_violation(exc.errors())
    error = ValidationError(message=violation["message"], errors=[violation])
    return await _records_error_handler(request, error)


async def _duplicate_key_handler(request: Request, exc: DuplicateKeyError) -> JSONResponse:
    logger.warning(
        "Unique constraint rejected write to %s.%s", exc.collection, exc.field,
    )
    return await _records_error_handler(request, ConflictError("DUPLICATE_KEY"))


async def _store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.error("Document store failure on %s %s", request.method, request.url.path, exc_info=exc)
    return await _records_error_handler(request, InternalError())


def register_handlers(app: FastAPI) -> None:
    """Install exception handlers for the error taxonomy."""
    app.add_exception_handler(RecordsError, _records_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(DuplicateKeyError, _duplicate_key_handler)
    app.add_exception_handler(StoreError, _store_error_handler)
