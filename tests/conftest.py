# conftest.py
# Shared fixtures for the records API tests
#
# Every test gets a fresh MockFirestoreClient and an application built on
# it, so no state leaks between tests. The default admin is bootstrapped
# by the lifespan when the TestClient context is entered.
#
# @see: records_api/main.py - create_app(settings, db)

import typing

import pytest
from fastapi.testclient import TestClient

from records_api.config import Settings
from records_api.main import create_app
from records_api.mock_firestore import MockFirestoreClient
from records_api.relationships import RelationshipSynchronizer
from records_api.store import RecordStore

from helpers import ADMIN_PASSWORD, ADMIN_USERNAME, auth_header, login


@pytest.fixture
def db() -> MockFirestoreClient:
    return MockFirestoreClient()


@pytest.fixture
def store(db) -> RecordStore:
    return RecordStore(db)


@pytest.fixture
def synchronizer(store) -> RelationshipSynchronizer:
    return RelationshipSynchronizer(store)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        jwt_secret="test-secret",
        rate_limit_enabled=False,
        admin_username=ADMIN_USERNAME,
        admin_password=ADMIN_PASSWORD,
        log_level="WARNING",
    )


@pytest.fixture
def app(settings, db):
    return create_app(settings=settings, db=db)


@pytest.fixture
def client(app) -> typing.Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_token(client) -> str:
    return login(client, ADMIN_USERNAME, ADMIN_PASSWORD)


@pytest.fixture
def admin_headers(admin_token) -> dict:
    return auth_header(admin_token)
