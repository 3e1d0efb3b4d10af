from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, List, Tuple

from .errors import (
    AttemptCompletedError,
    CourseNotCompletedError,
    DuplicateAnswerError,
    DuplicateAttemptError,
    NotFoundError,
    QuizNotApprovedError,
    ValidationError,
)
from .models import Answer, Attempt, Quiz, SubmittedValue
from .ports import AttemptStore, CourseCompletionChecker, QuizLookup
from .scoring import calculate_score

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AttemptService:
    """
    Drives one student's pass through one quiz:

        start_attempt   -> InProgress
        submit_answer   (InProgress only, once per question)
        complete_attempt -> Completed

    A completed attempt never reopens. Unanswered questions simply add 0.
    """

    def __init__(
        self,
        *,
        quizzes: QuizLookup,
        attempts: AttemptStore,
        courses: CourseCompletionChecker,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._quizzes = quizzes
        self._attempts = attempts
        self._courses = courses
        self._clock = clock

    # ---------------------------
    # Public API
    # ---------------------------

    def start_attempt(self, student_id: int, quiz_id: int) -> Tuple[Attempt, Quiz]:
        """
        Open a new attempt and return it with the quiz, answer keys stripped.
        """
        logger.info(f"Student {student_id} starting attempt on quiz {quiz_id}")

        quiz = self._get_quiz(quiz_id)
        if not quiz.is_approved:
            logger.warning(f"Quiz {quiz_id} is {quiz.status.value}, refusing attempt by student {student_id}")
            raise QuizNotApprovedError("Quiz is not available for attempts")

        if not self._courses.is_course_completed(student_id, quiz.course_id):
            logger.warning(f"Student {student_id} has not completed course {quiz.course_id}")
            raise CourseNotCompletedError(
                "You must complete the required course before attempting this quiz"
            )

        if self._attempts.get_in_progress(student_id, quiz_id) is not None:
            logger.warning(f"Student {student_id} already has an ongoing attempt on quiz {quiz_id}")
            raise DuplicateAttemptError("You already have an ongoing attempt for this quiz")

        # The store's uniqueness rule still rejects a racing duplicate here
        attempt = self._attempts.create(
            Attempt(
                quiz_id=quiz_id,
                student_id=student_id,
                max_score=quiz.max_score,
                started_at=self._clock(),
            )
        )
        logger.info(
            f"Created attempt {attempt.id} for student {student_id} on quiz {quiz_id} "
            f"(max_score={attempt.max_score})"
        )
        return attempt, quiz.redacted()

    def submit_answer(
        self,
        *,
        student_id: int,
        attempt_id: int,
        question_id: int,
        answer: SubmittedValue,
        time_to_answer: int,
    ) -> Answer:
        attempt = self.get_attempt(student_id, attempt_id)
        if attempt.is_completed:
            logger.warning(f"Answer rejected: attempt {attempt_id} is already completed")
            raise AttemptCompletedError("This attempt is already completed")

        quiz = self._get_quiz(attempt.quiz_id)
        question = quiz.find_question(question_id)
        if question is None:
            logger.warning(f"Question {question_id} not found in quiz {quiz.id}")
            raise NotFoundError("Question not found in quiz")

        if attempt.has_answered(question_id):
            logger.warning(f"Duplicate answer for question {question_id} in attempt {attempt_id}")
            raise DuplicateAnswerError("Answer already submitted for this question")

        if time_to_answer < 0:
            raise ValidationError("Response time cannot be negative")
        if time_to_answer > question.time_limit:
            logger.warning(
                f"Time limit exceeded on question {question_id}: "
                f"{time_to_answer}s > {question.time_limit}s"
            )
            raise ValidationError("Time limit exceeded")

        is_correct = question.evaluate(answer)
        points = calculate_score(question.points, time_to_answer, is_correct)

        recorded = Answer(
            question_id=question_id,
            submitted_answer=answer,
            is_correct=is_correct,
            time_to_answer=time_to_answer,
            points_earned=points,
            answered_at=self._clock(),
        )
        self._attempts.append_answer(attempt_id, recorded)
        logger.info(
            f"Attempt {attempt_id}: question {question_id} answered, "
            f"correct={is_correct}, points={points}"
        )
        return recorded

    def complete_attempt(self, student_id: int, attempt_id: int) -> Attempt:
        attempt = self.get_attempt(student_id, attempt_id)
        if attempt.is_completed:
            logger.warning(f"Attempt {attempt_id} already completed")
            raise AttemptCompletedError("Attempt already completed")

        completed_at = self._clock()
        time_taken = max(0, int((completed_at - attempt.started_at).total_seconds()))

        completed = self._attempts.mark_completed(attempt_id, completed_at, time_taken)
        logger.info(
            f"Attempt {attempt_id} completed: score={completed.total_score}/"
            f"{completed.max_score}, time_taken={time_taken}s"
        )
        return completed

    def get_attempt(self, student_id: int, attempt_id: int) -> Attempt:
        attempt = self._attempts.get_for_student(attempt_id, student_id)
        if attempt is None:
            logger.warning(f"Attempt {attempt_id} not found for student {student_id}")
            raise NotFoundError("Attempt not found")
        return attempt

    def list_attempts(self, student_id: int) -> List[Attempt]:
        return self._attempts.list_for_student(student_id)

    # ---------------------------
    # Internal Logic
    # ---------------------------

    def _get_quiz(self, quiz_id: int) -> Quiz:
        quiz = self._quizzes.get_quiz(quiz_id)
        if quiz is None:
            logger.warning(f"Quiz {quiz_id} not found")
            raise NotFoundError("Quiz not found")
        return quiz
