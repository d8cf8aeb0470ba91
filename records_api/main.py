"""
============================================================================
FILE: main.py
LOCATION: records_api/main.py
============================================================================

PURPOSE:
    FastAPI application factory for the academic records API.

ROLE IN PROJECT:
    create_app() loads Settings once, builds the Firestore client, the
    RecordStore, the TokenService and the RelationshipSynchronizer, and
    stores them on app.state. The lifespan configures logging and creates
    the default admin account when no admin exists.

KEY COMPONENTS:
    - create_app(settings, db): build a configured application
    - app: module-level application for uvicorn

USAGE:
    uvicorn records_api.main:app --reload
============================================================================
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from records_api.config import Settings, get_db, load_settings
from records_api.courses import courses_router
from records_api.errors import register_handlers
from records_api.limiter import configure_limiter, limiter
from records_api.logging_config import get_logger, setup_logging
from records_api.professors import professors_router
from records_api.relationships import RelationshipSynchronizer
from records_api.security import TokenService
from records_api.seed import router as install_router
from records_api.store import RecordStore
from records_api.students import students_router
from records_api.users import UserService, users_router

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, json_output=settings.log_json)
    logger.info(
        "Starting records API (firestore=%s)",
        "real" if settings.use_real_firebase else "mock",
    )
    if settings.bootstrap_admin:
        UserService(app.state.store, app.state.tokens).ensure_admin(settings)
    yield
    logger.info("Records API shut down")


def create_app(settings: Optional[Settings] = None, db=None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration; loaded from the environment when omitted
        db: Firestore client; built from settings when omitted

    Returns:
        Configured FastAPI application
    """
    settings = settings or load_settings()
    db = db if db is not None else get_db(settings)

    app = FastAPI(title="Academic Records API", version="1.0.0", lifespan=lifespan)

    store = RecordStore(db)
    app.state.settings = settings
    app.state.store = store
    app.state.tokens = TokenService(settings)
    app.state.synchronizer = RelationshipSynchronizer(
        store,
        student_course_cascade=settings.student_course_cascade,
        professor_course_cascade=settings.professor_course_cascade,
        member_delete_cascade=settings.member_delete_cascade,
    )

    configure_limiter(settings.rate_limit_enabled, settings.login_rate_limit)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    register_handlers(app)

    app.include_router(users_router)
    app.include_router(professors_router)
    app.include_router(students_router)
    app.include_router(courses_router)
    app.include_router(install_router)

    @app.get("/")
    def root():
        return {"message": "Academic Records API"}

    return app


app = create_app()
