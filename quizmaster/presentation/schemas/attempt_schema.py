from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, StrictBool, StrictInt

from quizmaster.application.models import QuestionType


class StartAttemptRequest(BaseModel):
    quiz_id: int


class SubmitAnswerRequest(BaseModel):
    attempt_id: int
    question_id: int
    # JSON true/false for true/false questions, an option index otherwise
    answer: Union[StrictBool, StrictInt]
    time_to_answer: StrictInt  # seconds


class SubmitAnswerResponse(BaseModel):
    is_correct: bool
    points_earned: float
    message: str = "Answer submitted successfully"


class AnswerOut(BaseModel):
    question_id: int
    submitted_answer: Union[StrictBool, StrictInt]
    is_correct: bool
    time_to_answer: int
    points_earned: float
    answered_at: datetime

    class Config:
        from_attributes = True


class AttemptOut(BaseModel):
    id: int
    quiz_id: int
    student_id: int
    answers: List[AnswerOut]
    total_score: float
    max_score: float
    started_at: datetime
    completed_at: Optional[datetime] = None
    time_taken: int

    class Config:
        from_attributes = True


class QuestionForAttemptOut(BaseModel):
    # No correct answer here: learners never receive it
    id: int
    question_text: str
    question_type: QuestionType
    options: List[str]
    time_limit: int
    points: int
    order: int

    class Config:
        from_attributes = True


class QuizForAttemptOut(BaseModel):
    id: int
    title: str
    description: str
    category: str
    difficulty_level: str
    course_id: str
    questions: List[QuestionForAttemptOut]

    class Config:
        from_attributes = True


class StartAttemptResponse(BaseModel):
    attempt: AttemptOut
    quiz: QuizForAttemptOut
