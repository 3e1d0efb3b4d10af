from datetime import datetime
from typing import List, Optional, Protocol

from .models import Answer, Attempt, Quiz


class QuizLookup(Protocol):
    def get_quiz(self, quiz_id: int) -> Optional[Quiz]:
        """
        Returns the quiz with its full question list, answer keys included.
        """
        ...


class CourseCompletionChecker(Protocol):
    def is_course_completed(self, student_id: int, course_id: str) -> bool:
        """
        True when the student finished the course. Raises InfrastructureError
        when the answer cannot be obtained, which is not the same as False.
        """
        ...


class StudentDirectory(Protocol):
    def get_display_name(self, student_id: int) -> Optional[str]:
        ...


class AttemptStore(Protocol):
    """
    Attempt persistence. Each method is atomic on its own; create and
    append_answer enforce the uniqueness rules themselves.
    """

    def create(self, attempt: Attempt) -> Attempt:
        ...

    def get_for_student(self, attempt_id: int, student_id: int) -> Optional[Attempt]:
        ...

    def get_in_progress(self, student_id: int, quiz_id: int) -> Optional[Attempt]:
        ...

    def append_answer(self, attempt_id: int, answer: Answer) -> Attempt:
        ...

    def mark_completed(self, attempt_id: int, completed_at: datetime, time_taken: int) -> Attempt:
        ...

    def list_for_student(self, student_id: int) -> List[Attempt]:
        ...

    def list_completed_for_quiz(self, quiz_id: int) -> List[Attempt]:
        ...

    def list_completed(self) -> List[Attempt]:
        ...
