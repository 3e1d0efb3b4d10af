import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from quizmaster.application.attempt_service import AttemptService
from quizmaster.application.errors import DuplicateAnswerError, DuplicateAttemptError
from quizmaster.infrastructure.db.models.attempt_model import AnswerModel, AttemptModel
from quizmaster.infrastructure.db.session import build_engine, build_session_factory, create_tables
from quizmaster.infrastructure.repositories.attempt_repository import AttemptRepository
from quizmaster.infrastructure.repositories.quiz_repository import QuizRepository
from factories import FakeCourseChecker, add_quiz, add_user

WORKERS = 8


@pytest.fixture
def session_factory(tmp_path):
    # A file database so each thread gets its own connection
    engine = build_engine(f"sqlite:///{tmp_path / 'race.db'}")
    create_tables(engine)
    yield build_session_factory(engine)
    engine.dispose()


@pytest.fixture
def seeded(session_factory):
    db = session_factory()
    try:
        professor = add_user(db, "Ada", "Lovelace", role="professor")
        student = add_user(db, "Alan", "Turing")
        quiz = add_quiz(db, professor)
        question_id = min(quiz.questions, key=lambda q: q.order).id
        return {"student_id": student.id, "quiz_id": quiz.id, "question_id": question_id}
    finally:
        db.close()


def run_concurrently(session_factory, call):
    """
    Runs call(service) from WORKERS threads released together, each with its
    own session. Returns (results, errors).
    """
    barrier = threading.Barrier(WORKERS)

    def worker():
        db = session_factory()
        try:
            service = AttemptService(
                quizzes=QuizRepository(db),
                attempts=AttemptRepository(db),
                courses=FakeCourseChecker(),
            )
            barrier.wait()
            try:
                return call(service), None
            except Exception as e:
                return None, e
        finally:
            db.close()

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        outcomes = [f.result() for f in [pool.submit(worker) for _ in range(WORKERS)]]

    results = [r for r, e in outcomes if e is None]
    errors = [e for r, e in outcomes if e is not None]
    return results, errors


class TestConcurrentRequests:
    def test_simultaneous_starts_create_one_attempt(self, session_factory, seeded):
        results, errors = run_concurrently(
            session_factory,
            lambda service: service.start_attempt(seeded["student_id"], seeded["quiz_id"]),
        )

        assert len(results) == 1
        assert len(errors) == WORKERS - 1
        assert all(isinstance(e, DuplicateAttemptError) for e in errors)

        db = session_factory()
        try:
            assert db.query(AttemptModel).count() == 1
        finally:
            db.close()

    def test_simultaneous_answers_count_once(self, session_factory, seeded):
        db = session_factory()
        try:
            service = AttemptService(
                quizzes=QuizRepository(db),
                attempts=AttemptRepository(db),
                courses=FakeCourseChecker(),
            )
            attempt, _ = service.start_attempt(seeded["student_id"], seeded["quiz_id"])
        finally:
            db.close()

        results, errors = run_concurrently(
            session_factory,
            lambda service: service.submit_answer(
                student_id=seeded["student_id"],
                attempt_id=attempt.id,
                question_id=seeded["question_id"],
                answer=True,
                time_to_answer=3,
            ),
        )

        assert len(results) == 1
        assert len(errors) == WORKERS - 1
        assert all(isinstance(e, DuplicateAnswerError) for e in errors)

        db = session_factory()
        try:
            assert db.query(AnswerModel).count() == 1
            stored = AttemptRepository(db).get_for_student(attempt.id, seeded["student_id"])
            assert stored.total_score == 10.0
        finally:
            db.close()
