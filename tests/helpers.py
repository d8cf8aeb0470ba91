# helpers.py
# Request helpers shared by the API tests

import typing

from fastapi.testclient import TestClient

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "adminpassword"


def auth_header(token: str) -> dict:
    """Build a bearer Authorization header.

    Args:
        token: Token returned by the login endpoint.

    Returns:
        dict: Header mapping for TestClient requests.
    """
    return {"Authorization": f"Bearer {token}"}


def login(client: TestClient, username: str, password: str) -> str:
    response = client.post(
        "/api/users/login", json={"username": username, "password": password},
    )
    assert response.status_code == 200, response.text
    return response.json()["token"]


def register(
    client: TestClient,
    username: str,
    password: str = "secret123",
) -> typing.Tuple[str, str]:
    """Register a plain user and log in.

    Returns:
        tuple: (user id, bearer token)
    """
    response = client.post(
        "/api/users",
        json={"username": username, "email": f"{username}@example.com", "password": password},
    )
    assert response.status_code == 201, response.text
    return response.json()["user"]["id"], login(client, username, password)


def create_course(client: TestClient, headers: dict, title: str, **fields) -> dict:
    payload = {"title": title, "department": "Science"}
    payload.update(fields)
    response = client.post("/api/course", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["course"]


def create_professor(
    client: TestClient, headers: dict, username: str, courses: typing.Optional[list] = None,
) -> typing.Tuple[dict, str]:
    """Register a user, make it a professor and return (professor, user token)."""
    user_id, token = register(client, username)
    response = client.post(
        "/api/professor",
        json={"userId": user_id, "firstName": "Grace", "lastName": "Hopper", "courses": courses or []},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["professor"], token


def create_student(
    client: TestClient, headers: dict, username: str, courses: typing.Optional[list] = None,
) -> typing.Tuple[dict, str]:
    """Register a user, make it a student and return (student, user token)."""
    user_id, token = register(client, username)
    response = client.post(
        "/api/student",
        json={"userId": user_id, "firstName": "Ada", "lastName": "Lovelace", "courses": courses or []},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["student"], token
