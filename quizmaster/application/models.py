from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import List, Optional, Union

from .errors import ValidationError

DEFAULT_TIME_LIMIT = 15

SubmittedValue = Union[bool, int]


class QuizStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class QuestionType(str, Enum):
    TRUE_FALSE = "true_false"
    MULTIPLE_CHOICE = "multiple_choice"


# ---------------------------
# Correct-answer keys
# ---------------------------

@dataclass(frozen=True)
class TrueFalseKey:
    value: bool


@dataclass(frozen=True)
class OptionKey:
    index: int


AnswerKey = Union[TrueFalseKey, OptionKey]


# ---------------------------
# Quiz definitions (read-only)
# ---------------------------

@dataclass(frozen=True)
class Question:
    id: int
    question_text: str
    question_type: QuestionType
    points: int
    order: int
    options: List[str] = field(default_factory=list)
    time_limit: int = DEFAULT_TIME_LIMIT
    correct_answer: Optional[AnswerKey] = None

    def __post_init__(self):
        if self.question_type is QuestionType.MULTIPLE_CHOICE:
            if len(self.options) < 2:
                raise ValueError(f"Question {self.id}: multiple choice needs at least 2 options")
            if self.correct_answer is not None and not isinstance(self.correct_answer, OptionKey):
                raise ValueError(f"Question {self.id}: multiple choice key must be an option index")
        elif self.correct_answer is not None and not isinstance(self.correct_answer, TrueFalseKey):
            raise ValueError(f"Question {self.id}: true/false key must be a boolean")

    def evaluate(self, submitted: object) -> bool:
        """
        Compare a submitted value against the key with the equality its
        question type calls for. Booleans never count as option indexes.
        """
        if self.correct_answer is None:
            raise ValueError(f"Question {self.id} has no answer key")

        if self.question_type is QuestionType.TRUE_FALSE:
            if not isinstance(submitted, bool):
                raise ValidationError("True/false questions take a boolean answer")
            return submitted is self.correct_answer.value

        if isinstance(submitted, bool) or not isinstance(submitted, int):
            raise ValidationError("Multiple choice questions take an option index")
        if not 0 <= submitted < len(self.options):
            raise ValidationError(f"Option index {submitted} is out of range")
        return submitted == self.correct_answer.index

    def redacted(self) -> "Question":
        return replace(self, correct_answer=None)


@dataclass(frozen=True)
class Quiz:
    id: int
    title: str
    course_id: str
    status: QuizStatus
    questions: List[Question] = field(default_factory=list)
    description: str = ""
    category: str = ""
    difficulty_level: str = ""

    @property
    def is_approved(self) -> bool:
        return self.status is QuizStatus.APPROVED

    @property
    def max_score(self) -> float:
        return float(sum(q.points for q in self.questions))

    def find_question(self, question_id: int) -> Optional[Question]:
        return next((q for q in self.questions if q.id == question_id), None)

    def redacted(self) -> "Quiz":
        """Copy safe to hand to a learner: no answer keys."""
        return replace(self, questions=[q.redacted() for q in self.questions])


# ---------------------------
# Attempts
# ---------------------------

@dataclass(frozen=True)
class Answer:
    question_id: int
    submitted_answer: SubmittedValue
    is_correct: bool
    time_to_answer: int
    points_earned: float
    answered_at: datetime


@dataclass
class Attempt:
    quiz_id: int
    student_id: int
    max_score: float
    started_at: datetime
    id: Optional[int] = None
    answers: List[Answer] = field(default_factory=list)
    total_score: float = 0.0
    completed_at: Optional[datetime] = None
    time_taken: int = 0

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def has_answered(self, question_id: int) -> bool:
        return any(a.question_id == question_id for a in self.answers)


# ---------------------------
# Derived leaderboard views
# ---------------------------

@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    student_id: int
    student_name: str
    score: float
    max_score: float
    percentage: float
    time_taken: int
    completed_at: datetime


@dataclass(frozen=True)
class StudentRank:
    quiz_id: int
    rank: int
    total_participants: int
    score: float
    max_score: float
    percentage: float
    time_taken: int


@dataclass(frozen=True)
class GlobalLeaderboardEntry:
    rank: int
    student_id: int
    student_name: str
    avg_score: float
    total_attempts: int
    total_score: float
