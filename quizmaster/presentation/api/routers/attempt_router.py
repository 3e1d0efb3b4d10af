import logging
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

from quizmaster.application.attempt_service import AttemptService
from quizmaster.application.errors import InfrastructureError, QuizServiceError
from quizmaster.presentation.api.errors import to_http_exception
from quizmaster.presentation.dependencies import get_attempt_service, student_required
from quizmaster.presentation.schemas.attempt_schema import (
    AttemptOut,
    StartAttemptRequest,
    StartAttemptResponse,
    SubmitAnswerRequest,
    SubmitAnswerResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/attempts", tags=["Attempts"])


# --------------------------------------------------
# 1. Start an attempt
# --------------------------------------------------
@router.post(
    "/start",
    response_model=StartAttemptResponse,
    status_code=status.HTTP_201_CREATED,
)
def start_attempt(
    payload: StartAttemptRequest,
    current_user: dict = Depends(student_required),
    service: AttemptService = Depends(get_attempt_service),
):
    """
    Starts a new attempt for the current student. Requires an approved quiz,
    a completed course and no other ongoing attempt on the same quiz.
    """
    user_id = current_user["user_id"]
    try:
        logger.info(f"User {user_id} starting attempt for quiz {payload.quiz_id}")
        attempt, quiz = service.start_attempt(user_id, payload.quiz_id)
        return {"attempt": attempt, "quiz": quiz}
    except InfrastructureError as e:
        logger.error(f"Infrastructure error starting attempt for user {user_id}: {e}")
        raise to_http_exception(e)
    except QuizServiceError as e:
        logger.warning(f"Start attempt rejected for user {user_id}: {e}")
        raise to_http_exception(e)
    except Exception as e:
        logger.error(
            f"Unexpected error starting attempt for user {user_id}: {e}",
            exc_info=True,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to start quiz attempt",
        )


# --------------------------------------------------
# 2. Submit one answer
# --------------------------------------------------
@router.post("/answer", response_model=SubmitAnswerResponse)
def submit_answer(
    payload: SubmitAnswerRequest,
    current_user: dict = Depends(student_required),
    service: AttemptService = Depends(get_attempt_service),
):
    """
    Records the answer to one question of an ongoing attempt and returns the
    points it earned.
    """
    user_id = current_user["user_id"]
    try:
        answer = service.submit_answer(
            student_id=user_id,
            attempt_id=payload.attempt_id,
            question_id=payload.question_id,
            answer=payload.answer,
            time_to_answer=payload.time_to_answer,
        )
        return SubmitAnswerResponse(is_correct=answer.is_correct, points_earned=answer.points_earned)
    except QuizServiceError as e:
        logger.warning(f"Answer rejected for attempt {payload.attempt_id}: {e}")
        raise to_http_exception(e)
    except Exception as e:
        logger.error(
            f"Unexpected error saving answer for attempt {payload.attempt_id}: {e}",
            exc_info=True,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save answer",
        )


# --------------------------------------------------
# 3. Complete the attempt
# --------------------------------------------------
@router.put("/{attempt_id}/complete", response_model=AttemptOut)
def complete_attempt(
    attempt_id: int,
    current_user: dict = Depends(student_required),
    service: AttemptService = Depends(get_attempt_service),
):
    """
    Marks the attempt completed and stamps the time taken.
    """
    user_id = current_user["user_id"]
    try:
        logger.info(f"User {user_id} completing attempt {attempt_id}")
        return service.complete_attempt(user_id, attempt_id)
    except QuizServiceError as e:
        logger.warning(f"Complete rejected for attempt {attempt_id}: {e}")
        raise to_http_exception(e)
    except Exception as e:
        logger.error(
            f"Unexpected error completing attempt {attempt_id}: {e}", exc_info=True
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to complete attempt",
        )


# --------------------------------------------------
# 4. Read back
# --------------------------------------------------
@router.get("/{attempt_id}", response_model=AttemptOut)
def get_attempt(
    attempt_id: int,
    current_user: dict = Depends(student_required),
    service: AttemptService = Depends(get_attempt_service),
):
    try:
        return service.get_attempt(current_user["user_id"], attempt_id)
    except QuizServiceError as e:
        raise to_http_exception(e)


@router.get("", response_model=List[AttemptOut])
def list_my_attempts(
    current_user: dict = Depends(student_required),
    service: AttemptService = Depends(get_attempt_service),
):
    """
    All attempts of the current student, newest first.
    """
    try:
        return service.list_attempts(current_user["user_id"])
    except Exception as e:
        logger.error(f"Error fetching attempts for user {current_user['user_id']}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch attempts")
