from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import logging
from sqlalchemy.orm import Session

from quizmaster.application.attempt_service import AttemptService
from quizmaster.application.ports import CourseCompletionChecker
from quizmaster.application.ranking import RankingService
from quizmaster.config import Settings
from quizmaster.infrastructure.db.models.user_model import UserModel
from quizmaster.infrastructure.repositories.attempt_repository import AttemptRepository
from quizmaster.infrastructure.repositories.quiz_repository import QuizRepository
from quizmaster.infrastructure.repositories.user_repository import UserRepository
from quizmaster.infrastructure.security.jwt_service import decode_access_token

logger = logging.getLogger(__name__)

# Tokens are issued by the identity service; only verified here
bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_course_checker(request: Request) -> CourseCompletionChecker:
    return request.app.state.course_checker


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> dict:
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_access_token(
            credentials.credentials, secret=settings.jwt_secret, algorithm=settings.jwt_algorithm
        )
    except Exception as e:
        logger.warning(f"Token validation failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # Verify user still exists in DB
    user = UserRepository(db).get_by_id(payload["user_id"])
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    return {
        "user_id": user.id,
        "role": user.role,
    }


def student_required(current_user: dict = Depends(get_current_user)) -> dict:
    if current_user.get("role") != UserModel.ROLE_STUDENT:
        logger.warning(
            f"Access denied for non-student user_id: {current_user.get('user_id')}"
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only students can attempt quizzes",
        )
    return current_user


def get_attempt_service(
    db: Session = Depends(get_db),
    courses: CourseCompletionChecker = Depends(get_course_checker),
) -> AttemptService:
    return AttemptService(
        quizzes=QuizRepository(db),
        attempts=AttemptRepository(db),
        courses=courses,
    )


def get_ranking_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> RankingService:
    return RankingService(
        attempts=AttemptRepository(db),
        students=UserRepository(db),
        global_limit=settings.global_leaderboard_limit,
    )
