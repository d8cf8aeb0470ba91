"""
============================================================================
FILE: config.py
LOCATION: records_api/config.py
============================================================================

PURPOSE:
    Process-wide configuration for the records API and the Firestore
    client factory.

ROLE IN PROJECT:
    load_settings() reads the environment (after loading .env) exactly once
    at startup. The resulting Settings object is stored on app.state and
    handed explicitly to the token service, the document store and the
    services. The one exception is the shared slowapi limiter: its route
    decorators bind at import time, so create_app() pushes the enabled flag
    and the login rate into limiter.py (see configure_limiter).

KEY COMPONENTS:
    - Settings: frozen configuration snapshot
    - load_settings: build Settings from environment variables
    - get_db: mock or real Firestore client for a Settings object
    - init_firebase: initialize the Firebase Admin SDK

DEPENDENCIES:
    - External: python-dotenv, firebase_admin (optional "firebase" extra)
    - Internal: mock_firestore, relationships (CascadePolicy)

USAGE:
    from records_api.config import load_settings, get_db

    settings = load_settings()
    db = get_db(settings)
============================================================================
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import dotenv

from records_api.mock_firestore import MockFirestoreClient
from records_api.relationships import CascadePolicy


PROJECT_ROOT = Path(__file__).resolve().parent.parent
DOTENV_PATH = PROJECT_ROOT / ".env"

DEFAULT_JWT_SECRET = "change-me-in-production"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_cascade(name: str, default: CascadePolicy) -> CascadePolicy:
    value = os.getenv(name)
    if not value:
        return default
    return CascadePolicy(value.strip().lower())


@dataclass(frozen=True)
class Settings:
    """Configuration snapshot shared by the whole process."""

    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    token_ttl_seconds: int = 3600

    use_real_firebase: bool = False
    firebase_credentials: Optional[str] = None
    mock_db_file: Optional[str] = None

    bootstrap_admin: bool = True
    admin_username: str = "admin"
    admin_email: str = "admin@example.com"
    admin_password: str = "adminpassword"

    install_enabled: bool = False
    rate_limit_enabled: bool = True
    login_rate_limit: str = "10/minute"

    student_course_cascade: CascadePolicy = CascadePolicy.PULL
    professor_course_cascade: CascadePolicy = CascadePolicy.NONE
    member_delete_cascade: CascadePolicy = CascadePolicy.NONE

    log_level: str = "INFO"
    log_json: bool = False


def load_settings() -> Settings:
    """Load Settings from the environment.

    A .env file at the project root is loaded first when present. Values
    already set in the process environment win over the file.

    Returns:
        Settings: The configuration snapshot.
    """
    if DOTENV_PATH.exists():
        dotenv.load_dotenv(DOTENV_PATH, override=False)

    return Settings(
        jwt_secret=os.getenv("JWT_SECRET", DEFAULT_JWT_SECRET),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        token_ttl_seconds=int(os.getenv("TOKEN_TTL_SECONDS", "3600")),
        use_real_firebase=_env_bool("USE_REAL_FIREBASE", False),
        firebase_credentials=os.getenv("FIREBASE_CREDENTIALS"),
        mock_db_file=os.getenv("MOCK_DB_FILE") or None,
        bootstrap_admin=_env_bool("BOOTSTRAP_ADMIN", True),
        admin_username=os.getenv("ADMIN_USERNAME", "admin"),
        admin_email=os.getenv("ADMIN_EMAIL", "admin@example.com"),
        admin_password=os.getenv("ADMIN_PASSWORD", "adminpassword"),
        install_enabled=_env_bool("INSTALL_ENABLED", False),
        rate_limit_enabled=_env_bool("RATE_LIMIT_ENABLED", True),
        login_rate_limit=os.getenv("LOGIN_RATE_LIMIT", "10/minute"),
        student_course_cascade=_env_cascade(
            "STUDENT_COURSE_CASCADE", CascadePolicy.PULL,
        ),
        professor_course_cascade=_env_cascade(
            "PROFESSOR_COURSE_CASCADE", CascadePolicy.NONE,
        ),
        member_delete_cascade=_env_cascade(
            "MEMBER_DELETE_CASCADE", CascadePolicy.NONE,
        ),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_json=_env_bool("LOG_JSON", False),
    )


def _resolve_credentials_path(settings: Settings) -> Path:
    """Resolve the Firebase service account file path.

    Args:
        settings: Active configuration.

    Returns:
        Path: Absolute path to the service account JSON file.
    """
    if settings.firebase_credentials:
        path = Path(settings.firebase_credentials)
        if not path.is_absolute():
            path = PROJECT_ROOT / path
        return path
    return PROJECT_ROOT / "serviceAccountKey.json"


def init_firebase(settings: Settings) -> None:
    """Initialize the Firebase Admin SDK once per process.

    Args:
        settings: Active configuration.

    Raises:
        FileNotFoundError: If the service account file is missing.
    """
    # Installed with the "firebase" extra; only needed for a real project
    import firebase_admin
    from firebase_admin import credentials

    if firebase_admin._apps:
        return

    key_path = _resolve_credentials_path(settings)
    if not key_path.exists():
        raise FileNotFoundError(f"Firebase credentials not found: {key_path}")
    cred = credentials.Certificate(str(key_path))
    firebase_admin.initialize_app(cred)


def get_db(settings: Settings):
    """Build the Firestore client for the given configuration.

    Args:
        settings: Active configuration.

    Returns:
        object: google.cloud.firestore.Client or MockFirestoreClient.

    Raises:
        FileNotFoundError: If real Firebase credentials are missing.
    """
    if settings.use_real_firebase:
        init_firebase(settings)
        from firebase_admin import firestore

        return firestore.client()

    return MockFirestoreClient(db_file=settings.mock_db_file)
