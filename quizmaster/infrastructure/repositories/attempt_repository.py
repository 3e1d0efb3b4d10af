from datetime import datetime, timezone
from typing import List, Optional
import logging

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from quizmaster.application.errors import (
    AttemptCompletedError,
    DuplicateAnswerError,
    DuplicateAttemptError,
    NotFoundError,
)
from quizmaster.application.models import Answer, Attempt
from quizmaster.application.scoring import round_points
from quizmaster.infrastructure.db.models.attempt_model import AnswerModel, AttemptModel

logger = logging.getLogger(__name__)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands datetimes back without tzinfo; everything stored is UTC
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _answer_to_domain(row: AnswerModel) -> Answer:
    submitted = row.submitted_boolean if row.submitted_boolean is not None else row.submitted_option_index
    return Answer(
        question_id=row.question_id,
        submitted_answer=submitted,
        is_correct=row.is_correct,
        time_to_answer=row.time_to_answer,
        points_earned=row.points_earned,
        answered_at=_as_utc(row.answered_at),
    )


def _attempt_to_domain(row: AttemptModel) -> Attempt:
    return Attempt(
        id=row.id,
        quiz_id=row.quiz_id,
        student_id=row.student_id,
        answers=[_answer_to_domain(a) for a in row.answers],
        total_score=round_points(row.total_score),
        max_score=row.max_score,
        started_at=_as_utc(row.started_at),
        completed_at=_as_utc(row.completed_at),
        time_taken=row.time_taken,
    )


class AttemptRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, attempt: Attempt) -> Attempt:
        row = AttemptModel(
            quiz_id=attempt.quiz_id,
            student_id=attempt.student_id,
            total_score=0.0,
            max_score=attempt.max_score,
            started_at=attempt.started_at,
        )
        try:
            self.db.add(row)
            self.db.commit()
        except IntegrityError:
            # Lost the race against another start for the same student/quiz
            self.db.rollback()
            logger.warning(
                f"In-progress attempt already exists for student_id={attempt.student_id}, "
                f"quiz_id={attempt.quiz_id}"
            )
            raise DuplicateAttemptError("You already have an ongoing attempt for this quiz")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating attempt: {e}", exc_info=True)
            raise

        self.db.refresh(row)
        logger.info(f"Stored attempt_id={row.id}")
        return _attempt_to_domain(row)

    def get_for_student(self, attempt_id: int, student_id: int) -> Optional[Attempt]:
        row = (
            self._query()
            .filter(AttemptModel.id == attempt_id, AttemptModel.student_id == student_id)
            .first()
        )
        return _attempt_to_domain(row) if row else None

    def get_in_progress(self, student_id: int, quiz_id: int) -> Optional[Attempt]:
        row = (
            self._query()
            .filter(
                AttemptModel.student_id == student_id,
                AttemptModel.quiz_id == quiz_id,
                AttemptModel.completed_at.is_(None),
            )
            .first()
        )
        return _attempt_to_domain(row) if row else None

    def append_answer(self, attempt_id: int, answer: Answer) -> Attempt:
        """
        Insert the answer and bump the running score in one transaction.
        The unique (attempt, question) constraint and the in-progress guard on
        the update make a concurrent duplicate or late answer fail cleanly.
        """
        is_boolean = isinstance(answer.submitted_answer, bool)
        row = AnswerModel(
            attempt_id=attempt_id,
            question_id=answer.question_id,
            submitted_boolean=answer.submitted_answer if is_boolean else None,
            submitted_option_index=None if is_boolean else answer.submitted_answer,
            is_correct=answer.is_correct,
            time_to_answer=answer.time_to_answer,
            points_earned=answer.points_earned,
            answered_at=answer.answered_at,
        )
        try:
            self.db.add(row)
            self.db.flush()

            result = self.db.execute(
                update(AttemptModel)
                .where(AttemptModel.id == attempt_id, AttemptModel.completed_at.is_(None))
                .values(total_score=AttemptModel.total_score + answer.points_earned)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                self.db.rollback()
                logger.warning(f"Attempt {attempt_id} completed before answer could be stored")
                raise AttemptCompletedError("This attempt is already completed")

            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"Duplicate answer for question_id={answer.question_id}, attempt_id={attempt_id}")
            raise DuplicateAnswerError("Answer already submitted for this question")
        except AttemptCompletedError:
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error storing answer for attempt {attempt_id}: {e}", exc_info=True)
            raise

        return self._reload(attempt_id)

    def mark_completed(self, attempt_id: int, completed_at: datetime, time_taken: int) -> Attempt:
        try:
            result = self.db.execute(
                update(AttemptModel)
                .where(AttemptModel.id == attempt_id, AttemptModel.completed_at.is_(None))
                .values(completed_at=completed_at, time_taken=time_taken)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                self.db.rollback()
                raise AttemptCompletedError("Attempt already completed")
            self.db.commit()
        except AttemptCompletedError:
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error completing attempt {attempt_id}: {e}", exc_info=True)
            raise

        return self._reload(attempt_id)

    def list_for_student(self, student_id: int) -> List[Attempt]:
        rows = (
            self._query()
            .filter(AttemptModel.student_id == student_id)
            .order_by(AttemptModel.started_at.desc(), AttemptModel.id.desc())
            .all()
        )
        return [_attempt_to_domain(r) for r in rows]

    def list_completed_for_quiz(self, quiz_id: int) -> List[Attempt]:
        rows = (
            self._query()
            .filter(AttemptModel.quiz_id == quiz_id, AttemptModel.completed_at.isnot(None))
            .all()
        )
        return [_attempt_to_domain(r) for r in rows]

    def list_completed(self) -> List[Attempt]:
        rows = self._query().filter(AttemptModel.completed_at.isnot(None)).all()
        return [_attempt_to_domain(r) for r in rows]

    def _query(self):
        return self.db.query(AttemptModel).options(selectinload(AttemptModel.answers))

    def _reload(self, attempt_id: int) -> Attempt:
        self.db.expire_all()
        row = self._query().filter(AttemptModel.id == attempt_id).first()
        if not row:
            raise NotFoundError("Attempt not found")
        return _attempt_to_domain(row)
