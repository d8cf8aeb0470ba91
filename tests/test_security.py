"""
============================================================================
FILE: test_security.py
LOCATION: tests/test_security.py
============================================================================

PURPOSE:
    Password hashing, token issue/verification and enrollment numbers.
============================================================================
"""

import datetime
import re

import pytest
from jose import jwt

from records_api.config import Settings
from records_api.errors import AuthenticationError
from records_api.security import (
    TokenService,
    generate_enrollment_number,
    hash_password,
    verify_password,
)


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(Settings(jwt_secret="unit-secret"))


def test_password_hash_is_salted_and_verifiable():
    first = hash_password("secret123")
    second = hash_password("secret123")
    assert first != second
    assert "secret123" not in first
    assert verify_password("secret123", first)
    assert not verify_password("wrong", first)


def test_verify_password_without_digest():
    assert not verify_password("secret123", None)
    assert not verify_password("secret123", "")


def test_token_round_trip(tokens):
    token = tokens.issue({"userId": "u1", "isAdmin": True})
    claims = tokens.verify(token)
    assert claims["userId"] == "u1"
    assert claims["isAdmin"] is True
    assert claims["exp"] - claims["iat"] == 3600


def test_expired_token_rejected(tokens):
    token = tokens.issue({"userId": "u1", "isAdmin": False}, ttl=-10)
    with pytest.raises(AuthenticationError) as exc:
        tokens.verify(token)
    assert exc.value.code == "INVALID_TOKEN"


def test_token_signed_with_other_secret_rejected(tokens):
    other = TokenService(Settings(jwt_secret="another-secret"))
    with pytest.raises(AuthenticationError):
        tokens.verify(other.issue({"userId": "u1"}))


def test_garbage_token_rejected(tokens):
    with pytest.raises(AuthenticationError):
        tokens.verify("not.a.token")


def test_token_without_user_id_rejected(tokens):
    token = jwt.encode({"isAdmin": True}, "unit-secret", algorithm="HS256")
    with pytest.raises(AuthenticationError):
        tokens.verify(token)


def test_missing_is_admin_defaults_false(tokens):
    token = jwt.encode({"userId": "u1"}, "unit-secret", algorithm="HS256")
    assert tokens.verify(token)["isAdmin"] is False


def test_enrollment_number_format():
    number = generate_enrollment_number(datetime.date(2024, 1, 15))
    assert re.fullmatch(r"ENR20240115\d{6}", number)


def test_enrollment_number_defaults_to_today_utc():
    today = datetime.datetime.now(datetime.timezone.utc).strftime("%Y%m%d")
    assert generate_enrollment_number().startswith(f"ENR{today}")
