from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from quizmaster.application.attempt_service import AttemptService
from quizmaster.config import Settings
from quizmaster.infrastructure.db.models.user_model import UserModel
from quizmaster.infrastructure.db.session import build_engine, build_session_factory, create_tables
from quizmaster.infrastructure.repositories.attempt_repository import AttemptRepository
from quizmaster.infrastructure.repositories.quiz_repository import QuizRepository
from quizmaster.presentation.app import create_app
from factories import TEST_SECRET, FakeClock, FakeCourseChecker, add_quiz, add_user


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = build_session_factory(engine)()
    yield session
    session.close()


@pytest.fixture
def professor(db):
    return add_user(db, "Ada", "Lovelace", role=UserModel.ROLE_PROFESSOR)


@pytest.fixture
def student(db):
    return add_user(db, "Alan", "Turing")


@pytest.fixture
def other_student(db):
    return add_user(db, "Grace", "Hopper")


@pytest.fixture
def quiz(db, professor):
    return add_quiz(db, professor)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 5, 1, 9, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def course_checker():
    return FakeCourseChecker()


@pytest.fixture
def attempt_repo(db):
    return AttemptRepository(db)


@pytest.fixture
def service(db, attempt_repo, course_checker, clock):
    return AttemptService(
        quizzes=QuizRepository(db),
        attempts=attempt_repo,
        courses=course_checker,
        clock=clock,
    )


# --------------------------------------------------
# HTTP fixtures
# --------------------------------------------------

@pytest.fixture
def app(course_checker):
    settings = Settings(database_url="sqlite://", jwt_secret=TEST_SECRET)
    return create_app(settings, course_checker=course_checker)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def app_db(app):
    session = app.state.session_factory()
    yield session
    session.close()
