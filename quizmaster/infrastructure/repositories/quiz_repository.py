from typing import Optional
import logging

from sqlalchemy.orm import Session, selectinload

from quizmaster.application.models import (
    OptionKey,
    Question,
    QuestionType,
    Quiz,
    QuizStatus,
    TrueFalseKey,
)
from quizmaster.infrastructure.db.models.quiz_model import QuestionModel, QuizModel

logger = logging.getLogger(__name__)


def _question_to_domain(row: QuestionModel) -> Question:
    question_type = QuestionType(row.question_type)
    if question_type is QuestionType.TRUE_FALSE:
        key_value = row.correct_boolean
        key = TrueFalseKey(key_value) if key_value is not None else None
    else:
        key_value = row.correct_option_index
        key = OptionKey(key_value) if key_value is not None else None

    if key is None:
        logger.error(f"Question {row.id} ({question_type.value}) has no answer key stored")
        raise ValueError(f"Question {row.id} has no answer key")

    return Question(
        id=row.id,
        question_text=row.question_text,
        question_type=question_type,
        options=list(row.options or []),
        correct_answer=key,
        time_limit=row.time_limit,
        points=row.points,
        order=row.order,
    )


class QuizRepository:
    """Read-only view of quizzes for the attempt core."""

    def __init__(self, db: Session):
        self.db = db

    def get_quiz(self, quiz_id: int) -> Optional[Quiz]:
        logger.debug(f"Fetching quiz by quiz_id={quiz_id}")
        row = (
            self.db.query(QuizModel)
            .options(selectinload(QuizModel.questions))
            .filter(QuizModel.id == quiz_id)
            .first()
        )
        if not row:
            logger.warning(f"Quiz not found: quiz_id={quiz_id}")
            return None

        return Quiz(
            id=row.id,
            title=row.title,
            description=row.description or "",
            category=row.category,
            difficulty_level=row.difficulty_level,
            course_id=row.course_id,
            status=QuizStatus(row.status),
            questions=[_question_to_domain(q) for q in sorted(row.questions, key=lambda q: q.order)],
        )
