"""
============================================================================
FILE: seed.py
LOCATION: records_api/seed.py
============================================================================

PURPOSE:
    Wipe the four record collections and install a small sample dataset:
    one admin, five professors, five students, one plain user and five
    courses, with both sides of every course relationship filled in.

ROLE IN PROJECT:
    - POST /api/install (admin only, requires INSTALL_ENABLED=true)
    - python -m records_api.seed for local development databases

USAGE:
    MOCK_DB_FILE=dev_db.json python -m records_api.seed
============================================================================
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from records_api.auth import require_operation
from records_api.config import Settings, get_db, load_settings
from records_api.dependencies import get_settings, get_store
from records_api.errors import AuthorizationError
from records_api.logging_config import get_logger, setup_logging
from records_api.security import generate_enrollment_number, hash_password
from records_api.store import RecordStore

logger = get_logger("seed")

router = APIRouter(prefix="/api/install", tags=["Install"])


def get_sample_users() -> List[Dict[str, Any]]:
    """Return the sample accounts; index 0 is the admin, 1-5 professors, 6-10 students."""
    users = [{"username": "admin", "email": "admin@example.com", "password": "adminpass", "isAdmin": True}]
    users += [
        {"username": f"professor{i}", "email": f"professor{i}@example.com", "password": "password1", "isAdmin": False}
        for i in range(1, 6)
    ]
    users += [
        {"username": f"student{i}", "email": f"student{i}@example.com", "password": "password1", "isAdmin": False}
        for i in range(1, 6)
    ]
    users.append({"username": "user", "email": "user@example.com", "password": "userpass", "isAdmin": False})
    return users


SAMPLE_COURSES = [
    {"title": "Mathematics", "department": "Science", "capacity": 30},
    {"title": "Physics", "department": "Science", "capacity": 25},
    {"title": "Chemistry", "department": "Science", "capacity": 20},
    {"title": "Biology", "department": "Science", "capacity": 35},
    {"title": "Computer Science", "department": "Engineering", "capacity": 40},
]

# (firstName, lastName, officeLocation, course indexes)
SAMPLE_PROFESSORS = [
    ("John", "Doe", "Room 101", [0, 1]),
    ("Jane", "Smith", "Room 102", [2, 3]),
    ("Alice", "Johnson", "Room 103", [4]),
    ("Bob", "Brown", "Room 104", [0]),
    ("Carol", "Williams", "Room 105", [1, 2]),
]

# (firstName, lastName, course indexes)
SAMPLE_STUDENTS = [
    ("Mike", "Taylor", [0, 1]),
    ("Emma", "Wilson", [2, 3]),
    ("Oliver", "Anderson", [4]),
    ("Sophia", "Moore", [0]),
    ("Liam", "Jackson", [1]),
]


def install_sample_data(store: RecordStore) -> Dict[str, int]:
    """
    Replace every record with the sample dataset.

    Returns:
        Number of documents created per collection
    """
    for collection in store.collections():
        removed = collection.delete_many()
        logger.info("Cleared %d documents from %s", removed, collection.name)

    users = store.users.insert_many(
        {
            "username": user["username"],
            "email": user["email"],
            "passwordHash": hash_password(user["password"]),
            "isAdmin": user["isAdmin"],
        }
        for user in get_sample_users()
    )

    courses = store.courses.insert_many(
        dict(course, professors=[], students=[]) for course in SAMPLE_COURSES
    )
    course_ids = [course["id"] for course in courses]

    professors = store.professors.insert_many(
        {
            "userId": users[1 + i]["id"],
            "firstName": first,
            "lastName": last,
            "officeLocation": office,
            "courses": [course_ids[c] for c in indexes],
        }
        for i, (first, last, office, indexes) in enumerate(SAMPLE_PROFESSORS)
    )

    students = store.students.insert_many(
        {
            "userId": users[6 + i]["id"],
            "firstName": first,
            "lastName": last,
            "enrollmentNumber": generate_enrollment_number(),
            "courses": [course_ids[c] for c in indexes],
            "dateOfBirth": None,
        }
        for i, (first, last, indexes) in enumerate(SAMPLE_STUDENTS)
    )

    for course_id in course_ids:
        store.courses.find_by_id_and_update(course_id, {
            "professors": [p["id"] for p in professors if course_id in p["courses"]],
            "students": [s["id"] for s in students if course_id in s["courses"]],
        })

    counts = {
        "users": len(users),
        "courses": len(courses),
        "professors": len(professors),
        "students": len(students),
    }
    logger.info("Installed sample data: %s", counts)
    return counts


@router.post("", dependencies=[Depends(require_operation("install"))])
async def install_database(
    settings: Settings = Depends(get_settings),
    store: RecordStore = Depends(get_store),
):
    """Wipe the database and install the sample dataset."""
    if not settings.install_enabled:
        raise AuthorizationError("INSTALL_DISABLED")
    counts = install_sample_data(store)
    return {"message": "Database installed successfully", "counts": counts}


def main():
    """Main entry point."""
    settings = load_settings()
    setup_logging(settings.log_level, json_output=settings.log_json)
    store = RecordStore(get_db(settings))
    counts = install_sample_data(store)
    print(f"Installed sample data: {counts}")


if __name__ == "__main__":
    main()
