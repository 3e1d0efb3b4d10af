from datetime import datetime
from typing import List

from pydantic import BaseModel


class LeaderboardEntryOut(BaseModel):
    rank: int
    student_id: int
    student_name: str
    score: float
    max_score: float
    percentage: float
    time_taken: int
    completed_at: datetime

    class Config:
        from_attributes = True


class QuizLeaderboardResponse(BaseModel):
    quiz_id: int
    total_count: int
    leaderboard: List[LeaderboardEntryOut]


class MyRankResponse(BaseModel):
    quiz_id: int
    rank: int
    total_participants: int
    score: float
    max_score: float
    percentage: float
    time_taken: int

    class Config:
        from_attributes = True


class GlobalLeaderboardEntryOut(BaseModel):
    rank: int
    student_id: int
    student_name: str
    avg_score: float
    total_attempts: int
    total_score: float

    class Config:
        from_attributes = True


class GlobalLeaderboardResponse(BaseModel):
    leaderboard: List[GlobalLeaderboardEntryOut]
