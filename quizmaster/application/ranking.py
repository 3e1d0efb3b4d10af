from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from .errors import NotFoundError
from .models import Attempt, GlobalLeaderboardEntry, LeaderboardEntry, StudentRank
from .ports import AttemptStore, StudentDirectory

logger = logging.getLogger(__name__)

UNKNOWN_STUDENT_NAME = "Unknown student"
DEFAULT_GLOBAL_LIMIT = 50


# ---------------------------
# Ordering
# ---------------------------

def leaderboard_key(attempt: Attempt) -> Tuple:
    """
    Higher score first, then faster, then earlier completion. The attempt id
    settles anything left so the order is total and reproducible.
    """
    return (-attempt.total_score, attempt.time_taken, attempt.completed_at, attempt.id)


def rank_attempts(attempts: Iterable[Attempt]) -> List[Attempt]:
    return sorted(attempts, key=leaderboard_key)


def best_attempt(attempts: Iterable[Attempt]) -> Optional[Attempt]:
    return min(attempts, key=leaderboard_key, default=None)


def count_outranking(target: Attempt, attempts: Iterable[Attempt]) -> int:
    """Number of other attempts that sort strictly ahead of target."""
    target_key = leaderboard_key(target)
    return sum(1 for a in attempts if a.id != target.id and leaderboard_key(a) < target_key)


def percentage(score: float, max_score: float) -> float:
    if max_score <= 0:
        return 0.0
    return (score / max_score) * 100


# ---------------------------
# Global aggregation
# ---------------------------

@dataclass
class StudentAggregate:
    student_id: int
    percentages: List[float] = field(default_factory=list)
    total_score: float = 0.0

    @property
    def total_attempts(self) -> int:
        return len(self.percentages)

    @property
    def avg_score(self) -> float:
        return sum(self.percentages) / len(self.percentages)


def aggregate_by_student(attempts: Iterable[Attempt]) -> List[StudentAggregate]:
    """
    Averages per-attempt percentages, so quizzes worth different totals weigh
    the same. Sorted best average first.
    """
    by_student: Dict[int, StudentAggregate] = {}
    for attempt in attempts:
        agg = by_student.setdefault(attempt.student_id, StudentAggregate(attempt.student_id))
        agg.percentages.append(percentage(attempt.total_score, attempt.max_score))
        agg.total_score += attempt.total_score

    return sorted(
        by_student.values(),
        key=lambda a: (-a.avg_score, -a.total_score, a.student_id),
    )


# ---------------------------
# Service
# ---------------------------

class RankingService:
    """Read-only leaderboard queries over completed attempts."""

    def __init__(
        self,
        *,
        attempts: AttemptStore,
        students: StudentDirectory,
        global_limit: int = DEFAULT_GLOBAL_LIMIT,
    ):
        self._attempts = attempts
        self._students = students
        self._global_limit = global_limit

    def quiz_leaderboard(self, quiz_id: int) -> List[LeaderboardEntry]:
        ordered = rank_attempts(self._attempts.list_completed_for_quiz(quiz_id))
        names = self._display_names(a.student_id for a in ordered)
        logger.info(f"Built leaderboard for quiz {quiz_id} with {len(ordered)} entries")

        return [
            LeaderboardEntry(
                rank=position,
                student_id=attempt.student_id,
                student_name=names[attempt.student_id],
                score=attempt.total_score,
                max_score=attempt.max_score,
                percentage=percentage(attempt.total_score, attempt.max_score),
                time_taken=attempt.time_taken,
                completed_at=attempt.completed_at,
            )
            for position, attempt in enumerate(ordered, start=1)
        ]

    def student_rank(self, quiz_id: int, student_id: int) -> StudentRank:
        completed = self._attempts.list_completed_for_quiz(quiz_id)
        best = best_attempt(a for a in completed if a.student_id == student_id)
        if best is None:
            logger.warning(f"No completed attempts on quiz {quiz_id} for student {student_id}")
            raise NotFoundError("No completed attempts found")

        rank = count_outranking(best, completed) + 1
        logger.info(f"Student {student_id} ranks {rank}/{len(completed)} on quiz {quiz_id}")
        return StudentRank(
            quiz_id=quiz_id,
            rank=rank,
            total_participants=len(completed),
            score=best.total_score,
            max_score=best.max_score,
            percentage=percentage(best.total_score, best.max_score),
            time_taken=best.time_taken,
        )

    def global_leaderboard(self) -> List[GlobalLeaderboardEntry]:
        top = aggregate_by_student(self._attempts.list_completed())[: self._global_limit]
        names = self._display_names(a.student_id for a in top)
        logger.info(f"Built global leaderboard with {len(top)} students")

        return [
            GlobalLeaderboardEntry(
                rank=position,
                student_id=agg.student_id,
                student_name=names[agg.student_id],
                avg_score=agg.avg_score,
                total_attempts=agg.total_attempts,
                total_score=agg.total_score,
            )
            for position, agg in enumerate(top, start=1)
        ]

    def _display_names(self, student_ids: Iterable[int]) -> Dict[int, str]:
        names: Dict[int, str] = defaultdict(lambda: UNKNOWN_STUDENT_NAME)
        for student_id in set(student_ids):
            name = self._students.get_display_name(student_id)
            if name is None:
                logger.warning(f"No identity found for student {student_id}, using placeholder name")
                continue
            names[student_id] = name
        return names
