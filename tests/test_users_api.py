"""
============================================================================
FILE: test_users_api.py
LOCATION: tests/test_users_api.py
============================================================================

PURPOSE:
    End-to-end tests for /api/users: registration, login, admin creation,
    self-or-admin access and admin deletion rules.

USAGE:
    pytest tests/test_users_api.py -v
============================================================================
"""

from fastapi.testclient import TestClient

from records_api.main import create_app
from records_api.store import new_id

from helpers import ADMIN_PASSWORD, ADMIN_USERNAME, auth_header, create_professor, login, register


def test_root(client):
    assert client.get("/").json() == {"message": "Academic Records API"}


def test_default_admin_is_bootstrapped_once(client, settings, db, store):
    assert store.users.count({"isAdmin": True}) == 1
    with TestClient(create_app(settings=settings, db=db)):
        pass
    assert store.users.count({"isAdmin": True}) == 1


class TestRegistration:
    def test_register_creates_plain_user(self, client, store):
        response = client.post(
            "/api/users",
            json={"username": "alice", "email": "alice@example.com", "password": "secret123"},
        )

        assert response.status_code == 201
        user = response.json()["user"]
        assert user["username"] == "alice"
        assert user["isAdmin"] is False
        assert "passwordHash" not in user

        stored = store.users.find_by_id(user["id"])
        assert stored["passwordHash"] != "secret123"

    def test_register_cannot_set_admin_flag(self, client):
        response = client.post(
            "/api/users",
            json={"username": "alice", "email": "alice@example.com", "password": "secret123", "isAdmin": True},
        )
        assert response.status_code == 400
        assert response.json()["detail"]["errors"] == [
            {"field": "isAdmin", "message": "The isAdmin field is not allowed."},
        ]

    def test_duplicate_username_or_email(self, client):
        register(client, "alice")
        same_email = client.post(
            "/api/users",
            json={"username": "alice2", "email": "alice@example.com", "password": "secret123"},
        )
        assert same_email.status_code == 400
        assert same_email.json()["detail"] == {
            "code": "USER_ALREADY_EXISTS",
            "message": "User with this email or username already exists.",
        }

    def test_validation_reports_first_field(self, client):
        response = client.post("/api/users", json={"username": "al", "email": "bad"})
        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["code"] == "VALIDATION_ERROR"
        assert detail["message"] == "The username field must be at least 3 characters long."


class TestLogin:
    def test_login_returns_token_and_user(self, client):
        register(client, "alice")
        response = client.post("/api/users/login", json={"username": "alice", "password": "secret123"})

        assert response.status_code == 200
        body = response.json()
        assert body["token"]
        assert body["user"]["username"] == "alice"
        assert body["user"]["isProfessor"] is False
        assert body["user"]["professor"] is None

    def test_login_reports_professor_profile(self, client, admin_headers):
        professor, _ = create_professor(client, admin_headers, "grace")
        response = client.post("/api/users/login", json={"username": "grace", "password": "secret123"})

        user = response.json()["user"]
        assert user["isProfessor"] is True
        assert user["professor"]["id"] == professor["id"]

    def test_wrong_password_and_unknown_user_look_the_same(self, client):
        register(client, "alice")
        wrong = client.post("/api/users/login", json={"username": "alice", "password": "nope123"})
        unknown = client.post("/api/users/login", json={"username": "nobody", "password": "nope123"})

        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json() == unknown.json()
        assert wrong.json()["detail"]["message"] == "Invalid username or password."


class TestAuthentication:
    def test_missing_token(self, client):
        response = client.get("/api/users/me")
        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "NOT_AUTHENTICATED"

    def test_bad_token(self, client):
        response = client.get("/api/users/me", headers=auth_header("garbage"))
        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "INVALID_TOKEN"

    def test_token_of_deleted_user_is_rejected(self, client, admin_headers):
        user_id, token = register(client, "alice")
        assert client.delete(f"/api/users/{user_id}", headers=admin_headers).status_code == 200

        response = client.get("/api/users/me", headers=auth_header(token))
        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "INVALID_TOKEN"

    def test_me(self, client):
        user_id, token = register(client, "alice")
        response = client.get("/api/users/me", headers=auth_header(token))
        assert response.json()["user"]["id"] == user_id


class TestAdminCreation:
    def test_admin_can_create_admin(self, client, admin_headers):
        response = client.post(
            "/api/users/admin",
            json={"username": "root2", "email": "root2@example.com", "password": "secret123"},
            headers=admin_headers,
        )
        assert response.status_code == 201
        assert response.json()["user"]["isAdmin"] is True

    def test_non_admin_denied_before_body_validation(self, client):
        _, token = register(client, "alice")
        response = client.post("/api/users/admin", json={}, headers=auth_header(token))
        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "ACCESS_DENIED"


class TestSelfOrAdmin:
    def test_user_reads_self_but_not_others(self, client):
        alice_id, alice_token = register(client, "alice")
        bob_id, _ = register(client, "bob")

        assert client.get(f"/api/users/{alice_id}", headers=auth_header(alice_token)).status_code == 200
        assert client.get(f"/api/users/{bob_id}", headers=auth_header(alice_token)).status_code == 403

    def test_user_cannot_update_another_user(self, client):
        _, alice_token = register(client, "alice")
        bob_id, _ = register(client, "bob")

        response = client.put(
            f"/api/users/{bob_id}", json={"email": "x@example.com"}, headers=auth_header(alice_token),
        )
        assert response.status_code == 403
        assert response.json()["detail"] == {
            "code": "USER_CANNOT_UPDATE",
            "message": "Users can only update their own data.",
        }

    def test_user_updates_own_password(self, client):
        alice_id, alice_token = register(client, "alice")
        response = client.put(
            f"/api/users/{alice_id}", json={"password": "newsecret"}, headers=auth_header(alice_token),
        )
        assert response.status_code == 200
        assert login(client, "alice", "newsecret")

    def test_update_cannot_take_existing_username(self, client, admin_headers):
        alice_id, _ = register(client, "alice")
        register(client, "bob")
        response = client.put(f"/api/users/{alice_id}", json={"username": "bob"}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "USER_ALREADY_EXISTS"

    def test_invalid_id(self, client, admin_headers):
        response = client.get("/api/users/not-an-id", headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_ID"

    def test_malformed_id_of_another_user_is_denied(self, client):
        _, alice_token = register(client, "alice")
        headers = auth_header(alice_token)

        assert client.get("/api/users/not-an-id", headers=headers).status_code == 403
        response = client.put("/api/users/not-an-id", json={"email": "x@example.com"}, headers=headers)
        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "USER_CANNOT_UPDATE"

    def test_missing_user(self, client, admin_headers):
        response = client.get("/api/users/" + "f" * 24, headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "USER_NOT_FOUND"


class TestListAndDelete:
    def test_list_requires_admin(self, client):
        _, token = register(client, "alice")
        response = client.get("/api/users/list?page=1&limit=5", headers=auth_header(token))
        assert response.status_code == 403

    def test_list_pages(self, client, admin_headers):
        for name in ("alice", "bob", "carol", "dave", "erin", "frank"):
            register(client, name)

        response = client.get("/api/users/list?page=2&limit=5", headers=admin_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["totalUsers"] == 7
        assert body["totalPages"] == 2
        assert body["currentPage"] == 2
        assert [u["username"] for u in body["users"]] == ["erin", "frank"]

    def test_list_rejects_bad_limit(self, client, admin_headers):
        response = client.get("/api/users/list?page=1&limit=7", headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_PAGE_LIMIT"

    def test_admin_cannot_delete_admin(self, client, admin_headers, store):
        admin_id = store.users.find_one({"username": ADMIN_USERNAME})["id"]
        response = client.delete(f"/api/users/{admin_id}", headers=admin_headers)
        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "CANNOT_DELETE_ADMIN"

    def test_plain_user_cannot_delete(self, client):
        alice_id, alice_token = register(client, "alice")
        response = client.delete(f"/api/users/{alice_id}", headers=auth_header(alice_token))
        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "ACCESS_DENIED"

    def test_plain_user_denied_before_target_lookup(self, client):
        _, alice_token = register(client, "alice")
        for user_id in (new_id(), "not-an-id"):
            response = client.delete(f"/api/users/{user_id}", headers=auth_header(alice_token))
            assert response.status_code == 403
            assert response.json()["detail"]["code"] == "ACCESS_DENIED"

    def test_admin_still_logs_in_with_configured_password(self, client):
        assert login(client, ADMIN_USERNAME, ADMIN_PASSWORD)
