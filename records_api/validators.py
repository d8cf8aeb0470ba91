"""
============================================================================
FILE: validators.py
LOCATION: records_api/validators.py
============================================================================

PURPOSE:
    Reusable field types for the request models and the translation of
    pydantic validation errors into client-facing messages.

ROLE IN PROJECT:
    Entity models annotate their fields with ObjectIdStr, Username and
    DateStr. errors.py renders a RequestValidationError through
    first_violation(), which reports only the first failing field in model
    field order.

KEY COMPONENTS:
    - ObjectIdStr: 24-character hex reference id
    - Username: 3-30 letters and digits
    - DateStr: YYYY-MM-DD string that survives a parse/format round trip
    - first_violation: pydantic error list -> {"field", "message"}

DEPENDENCIES:
    - External: pydantic
    - Internal: store (id syntax)

USAGE:
    from records_api.validators import ObjectIdStr, first_violation
============================================================================
"""

import datetime
import typing

import pydantic
from pydantic_core import PydanticCustomError

from records_api.store import is_valid_id


def _check_object_id(value: str) -> str:
    if not is_valid_id(value):
        raise PydanticCustomError(
            "object_id", "must be a valid ID (24 hexadecimal characters)",
        )
    return value


def _check_alphanum(value: str) -> str:
    if not value.isascii() or not value.isalnum():
        raise PydanticCustomError(
            "alphanum", "must only contain alpha-numeric characters",
        )
    return value


def _check_date(value: str) -> str:
    # Round trip rejects 2024-02-30 and unpadded forms like 2024-2-3
    try:
        parsed = datetime.datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        parsed = None
    if parsed is None or parsed.strftime("%Y-%m-%d") != value:
        raise PydanticCustomError(
            "date_format", "must be a valid date in YYYY-MM-DD format",
        )
    return value


ObjectIdStr = typing.Annotated[str, pydantic.AfterValidator(_check_object_id)]
Username = typing.Annotated[
    str,
    pydantic.StringConstraints(min_length=3, max_length=30),
    pydantic.AfterValidator(_check_alphanum),
]
DateStr = typing.Annotated[str, pydantic.AfterValidator(_check_date)]


TEMPLATES = {
    "missing": "The {field} field is required.",
    "string_type": "The {field} field must be a string.",
    "string_too_short": "The {field} field must be at least {min_length} characters long.",
    "string_too_long": "The {field} field must be at most {max_length} characters long.",
    "alphanum": "The {field} field must only contain alphanumeric characters.",
    "object_id": "The {field} field must be a valid ID (24 hexadecimal characters).",
    "date_format": "The {field} field must be a valid date in the format YYYY-MM-DD.",
    "list_type": "The {field} field must be a list.",
    "int_type": "The {field} field must be a number.",
    "int_parsing": "The {field} field must be a number.",
    "int_from_float": "The {field} field must be an integer.",
    "greater_than": "The {field} field must be greater than {gt}.",
    "bool_type": "The {field} field must be a boolean.",
    "bool_parsing": "The {field} field must be a boolean.",
    "extra_forbidden": "The {field} field is not allowed.",
    "model_attributes_type": "The request body must be a JSON object.",
    "dict_type": "The request body must be a JSON object.",
    "json_invalid": "The request body must be valid JSON.",
}

EMAIL_TEMPLATE = "The {field} field must be a valid email address."
LIST_ITEM_ID_TEMPLATE = "Each item in {field} must be a valid ID (24 hexadecimal characters)."
FALLBACK_TEMPLATE = "The {field} field is invalid."


def _field_name(loc: typing.Sequence[typing.Union[str, int]]) -> str:
    parts = [part for part in loc if not isinstance(part, int)]
    if parts and parts[0] in ("body", "query", "path"):
        parts = parts[1:]
    if not parts:
        return "body"
    return ".".join(str(part) for part in parts)


def _template(error: dict) -> str:
    error_type = error.get("type", "")
    loc = error.get("loc", ())
    if error_type == "object_id" and loc and isinstance(loc[-1], int):
        return LIST_ITEM_ID_TEMPLATE
    if error_type == "value_error" and "email" in error.get("msg", ""):
        return EMAIL_TEMPLATE
    return TEMPLATES.get(error_type, FALLBACK_TEMPLATE)


def first_violation(errors: typing.Sequence[dict]) -> typing.Dict[str, str]:
    """Describe the first validation error.

    Args:
        errors: Error dicts as returned by pydantic's ValidationError.errors().

    Returns:
        dict: {"field": ..., "message": ...}, e.g.
        {"field": "title", "message": "The title field is required."}.
    """
    if not errors:
        return {"field": "body", "message": "Validation error occurred."}

    error = errors[0]
    field = _field_name(error.get("loc", ()))
    values = dict(error.get("ctx") or {})
    values["field"] = field
    try:
        message = _template(error).format(**values)
    except (KeyError, IndexError):
        message = FALLBACK_TEMPLATE.format(field=field)
    return {"field": field, "message": message}
