# dependencies.py
# FastAPI dependencies that hand out the objects built at startup

# The application lifespan stores Settings, the RecordStore, the
# TokenService and the RelationshipSynchronizer on app.state; routers reach
# them only through these functions so tests can override them.

# @see: main.py - lifespan that populates app.state

from fastapi import Request

from records_api.config import Settings
from records_api.errors import ValidationError
from records_api.relationships import RelationshipSynchronizer
from records_api.security import TokenService
from records_api.store import RecordStore, is_valid_id


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> RecordStore:
    return request.app.state.store


def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens


def get_synchronizer(request: Request) -> RelationshipSynchronizer:
    return request.app.state.synchronizer


def check_id(value: str) -> str:
    """Reject a path id that is not 24 hex characters before any lookup."""
    if not is_valid_id(value):
        raise ValidationError("INVALID_ID")
    return value
