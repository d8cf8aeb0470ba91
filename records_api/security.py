"""
============================================================================
FILE: security.py
LOCATION: records_api/security.py
============================================================================

PURPOSE:
    Password hashing, bearer token issue/verification and enrollment number
    generation.

ROLE IN PROJECT:
    users/service.py hashes passwords at registration and verifies them at
    login, then issues a token through TokenService. auth.py verifies the
    bearer token of every authenticated request.

KEY COMPONENTS:
    - hash_password / verify_password: werkzeug salted hashes
    - TokenService: HS256 tokens with {userId, isAdmin, iat, exp}
    - generate_enrollment_number: ENR + YYYYMMDD + 6 random digits

DEPENDENCIES:
    - External: werkzeug, python-jose
    - Internal: config (Settings), errors

USAGE:
    tokens = TokenService(settings)
    token = tokens.issue({"userId": user["id"], "isAdmin": False})
    claims = tokens.verify(token)
============================================================================
"""

import datetime
import random
import typing

from jose import jwt
from jose.exceptions import JOSEError
from werkzeug.security import check_password_hash, generate_password_hash

from records_api.config import Settings
from records_api.errors import AuthenticationError


def hash_password(plain: str) -> str:
    return generate_password_hash(plain)


def verify_password(plain: str, digest: typing.Optional[str]) -> bool:
    if not digest:
        return False
    return check_password_hash(digest, plain)


class TokenService:
    """Issue and verify signed bearer tokens."""

    def __init__(self, settings: Settings):
        self.secret = settings.jwt_secret
        self.algorithm = settings.jwt_algorithm
        self.default_ttl = settings.token_ttl_seconds

    def issue(
        self,
        claims: typing.Dict[str, typing.Any],
        ttl: typing.Optional[int] = None,
    ) -> str:
        """Sign claims into a token that expires after ttl seconds.

        Args:
            claims: Identity claims, normally userId and isAdmin.
            ttl: Lifetime in seconds; the configured default when omitted.

        Returns:
            str: Encoded token.
        """
        now = datetime.datetime.now(datetime.timezone.utc)
        lifetime = self.default_ttl if ttl is None else ttl
        payload = dict(claims)
        payload["iat"] = int(now.timestamp())
        payload["exp"] = int((now + datetime.timedelta(seconds=lifetime)).timestamp())
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> typing.Dict[str, typing.Any]:
        """Decode a token and check its signature and expiry.

        Raises:
            AuthenticationError: INVALID_TOKEN for a bad signature, a
                malformed or expired token, or missing identity claims.
        """
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JOSEError as e:
            raise AuthenticationError("INVALID_TOKEN") from e

        if not isinstance(claims.get("userId"), str):
            raise AuthenticationError("INVALID_TOKEN")
        claims["isAdmin"] = bool(claims.get("isAdmin", False))
        return claims


def generate_enrollment_number(today: typing.Optional[datetime.date] = None) -> str:
    """Build an enrollment number such as ENR20240115123456.

    Uniqueness is left to the students collection's unique-field check.
    """
    today = today or datetime.datetime.now(datetime.timezone.utc).date()
    return f"ENR{today:%Y%m%d}{random.randint(100000, 999999)}"
