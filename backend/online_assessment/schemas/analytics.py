from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class AnalyticsTestInfo(BaseModel):
    id: UUID
    title: str
    total_marks: float
    passing_marks: float | None


class AnalyticsStats(BaseModel):
    total_attempts: int
    completed_attempts: int
    average_score: float
    highest_score: float
    lowest_score: float
    pass_count: int
    fail_count: int


class LeaderboardLearner(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    roll_no: str | None


class LeaderboardEntry(BaseModel):
    rank: int
    attempt_id: UUID
    learner: LeaderboardLearner
    score: float
    percentage: float | None
    submitted_at: datetime | None


class TestAnalyticsOut(BaseModel):
    test: AnalyticsTestInfo
    stats: AnalyticsStats
    leaderboard: list[LeaderboardEntry]
