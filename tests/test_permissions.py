"""
============================================================================
FILE: test_permissions.py
LOCATION: tests/test_permissions.py
============================================================================

PURPOSE:
    The authorization decision table, independent of HTTP and storage.
============================================================================
"""

import pytest

from records_api.errors import AuthenticationError, AuthorizationError
from records_api.permissions import (
    OPERATION_POLICIES,
    Actor,
    Policy,
    authorize,
    decide,
)

ADMIN = Actor(id="a" * 24, is_admin=True)
USER = Actor(id="b" * 24)
OTHER_ID = "c" * 24


@pytest.mark.parametrize("policy", list(Policy))
def test_anonymous_denied_everywhere_but_public(policy):
    decision = decide(policy, None)
    if policy is Policy.PUBLIC:
        assert decision.allowed
    else:
        assert decision.code == "NOT_AUTHENTICATED"


def test_admin_only():
    assert decide(Policy.ADMIN_ONLY, ADMIN).allowed
    assert decide(Policy.ADMIN_ONLY, USER).code == "ACCESS_DENIED"


def test_self_or_admin():
    assert decide(Policy.SELF_OR_ADMIN, USER, owner_id=USER.id).allowed
    assert decide(Policy.SELF_OR_ADMIN, ADMIN, owner_id=OTHER_ID).allowed
    assert not decide(Policy.SELF_OR_ADMIN, USER, owner_id=OTHER_ID).allowed
    assert not decide(Policy.SELF_OR_ADMIN, USER, owner_id=None).allowed


def test_admin_cannot_delete_admin():
    assert decide(Policy.ADMIN_DELETE_USER, ADMIN, target_is_admin=False).allowed
    assert decide(Policy.ADMIN_DELETE_USER, ADMIN, target_is_admin=True).code == "CANNOT_DELETE_ADMIN"
    assert decide(Policy.ADMIN_DELETE_USER, USER).code == "ACCESS_DENIED"


def test_every_operation_has_a_policy():
    expected = {
        "user.register", "user.login", "user.create_admin", "user.list", "user.me",
        "user.get", "user.update", "user.delete",
        "professor.create", "professor.list", "professor.get", "professor.update",
        "professor.delete",
        "student.create", "student.list", "student.get", "student.update", "student.delete",
        "course.create", "course.list", "course.summary", "course.get", "course.update",
        "course.delete", "course.enroll", "course.withdraw", "install",
    }
    assert set(OPERATION_POLICIES) == expected


def test_authorize_raises_authentication_error_for_anonymous():
    with pytest.raises(AuthenticationError):
        authorize("course.create", None)


def test_authorize_uses_user_update_denial_code():
    with pytest.raises(AuthorizationError) as exc:
        authorize("user.update", USER, owner_id=OTHER_ID)
    assert exc.value.code == "USER_CANNOT_UPDATE"
    assert exc.value.message == "Users can only update their own data."


def test_authorize_professor_update_by_owner():
    authorize("professor.update", USER, owner_id=USER.id)
    with pytest.raises(AuthorizationError) as exc:
        authorize("professor.update", USER, owner_id=OTHER_ID)
    assert exc.value.code == "ACCESS_DENIED"
