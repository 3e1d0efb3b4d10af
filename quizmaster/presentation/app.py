import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from quizmaster.application.ports import CourseCompletionChecker
from quizmaster.config import Settings
from quizmaster.infrastructure.db.session import build_engine, build_session_factory, create_tables
from quizmaster.infrastructure.services.course_service import CourseCompletionClient
from quizmaster.presentation.api.routers.attempt_router import router as attempt_router
from quizmaster.presentation.api.routers.leaderboard_router import router as leaderboard_router

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def create_app(
    settings: Optional[Settings] = None,
    *,
    course_checker: Optional[CourseCompletionChecker] = None,
) -> FastAPI:
    """
    Build the API with its collaborators wired from settings. Tests pass their
    own settings (in-memory database) and a fake course checker.
    """
    settings = settings or Settings.from_env()

    engine = build_engine(settings.database_url)
    create_tables(engine)

    app = FastAPI(title="QuizMaster API", version="1.0.0")
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.course_checker = course_checker or CourseCompletionClient(
        settings.external_course_api,
        timeout=settings.course_api_timeout,
        max_attempts=settings.course_api_max_attempts,
        backoff=settings.course_api_backoff,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "Content-Type", "Accept", "Authorization"],
    )

    # Global Exception Handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Global unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "An internal server error occurred."}
        )

    # Include routers
    app.include_router(attempt_router, prefix=API_PREFIX)
    app.include_router(leaderboard_router, prefix=API_PREFIX)

    @app.get(f"{API_PREFIX}/health")
    def health():
        return {"status": "ok", "message": "QuizMaster API is running"}

    logger.info(f"QuizMaster API configured (database={engine.url.render_as_string(hide_password=True)})")
    return app
