import logging
from fastapi import APIRouter, Depends, HTTPException, status

from quizmaster.application.errors import QuizServiceError
from quizmaster.application.ranking import RankingService
from quizmaster.presentation.api.errors import to_http_exception
from quizmaster.presentation.dependencies import get_current_user, get_ranking_service
from quizmaster.presentation.schemas.leaderboard_schema import (
    GlobalLeaderboardResponse,
    MyRankResponse,
    QuizLeaderboardResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/leaderboards", tags=["Leaderboards"])


@router.get("/quiz/{quiz_id}", response_model=QuizLeaderboardResponse)
def get_quiz_leaderboard(
    quiz_id: int,
    current_user: dict = Depends(get_current_user),
    service: RankingService = Depends(get_ranking_service),
):
    """
    Every completed attempt on the quiz, best first. Ties on score go to the
    faster attempt, then to the earlier completion; ranks are never shared.
    """
    try:
        leaderboard = service.quiz_leaderboard(quiz_id)
        return {
            "quiz_id": quiz_id,
            "total_count": len(leaderboard),
            "leaderboard": leaderboard,
        }
    except Exception as e:
        logger.error(f"Error building leaderboard for quiz {quiz_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch leaderboard",
        )


@router.get("/quiz/{quiz_id}/my-rank", response_model=MyRankResponse)
def get_my_rank(
    quiz_id: int,
    current_user: dict = Depends(get_current_user),
    service: RankingService = Depends(get_ranking_service),
):
    """
    Rank of the current user's best completed attempt on the quiz.
    """
    try:
        return service.student_rank(quiz_id, current_user["user_id"])
    except QuizServiceError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error calculating rank for quiz {quiz_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to calculate rank",
        )


@router.get("/global", response_model=GlobalLeaderboardResponse)
def get_global_leaderboard(
    current_user: dict = Depends(get_current_user),
    service: RankingService = Depends(get_ranking_service),
):
    """
    Top students across all quizzes by average percentage per attempt.
    """
    try:
        return {"leaderboard": service.global_leaderboard()}
    except Exception as e:
        logger.error(f"Error generating global leaderboard: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate leaderboard",
        )
