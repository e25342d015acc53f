from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime


class UserStatsResponse(BaseModel):
    user_id: str
    total_points: int
    current_level: int
    current_streak: int
    longest_streak: int
    total_workouts: int
    total_checkins: int
    total_goals_achieved: int
    achievements_unlocked: int
    challenges_completed: int
    streak_frozen: bool
    streak_frozen_at: Optional[datetime] = None
    streak_freeze_used_this_week: bool
    streak_freeze_week_start: Optional[date] = None
    last_checkin_date: Optional[date] = None
    last_workout_date: Optional[date] = None

    class Config:
        from_attributes = True


class AchievementResponse(BaseModel):
    id: str
    name: str
    description: str
    icon: str
    points: int
    category: str
    requirement_type: str
    requirement_value: int
    requirement_description: str
    unlocked: bool = False
    unlocked_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ChallengeResponse(BaseModel):
    id: str
    name: str
    description: str
    type: str
    target: int
    current: int = 0
    reward: int
    end_date: date
    active: bool = True
    challenge_category: str


class ChallengeProgressUpdate(BaseModel):
    progress: int = Field(..., ge=0, description="Current progress towards the challenge target")


class LeaderboardEntry(BaseModel):
    id: str
    username: str
    full_name: str
    points: int
    level: int
    rank: int


class LeaderboardResponse(BaseModel):
    entries: List[LeaderboardEntry]
    total_count: int


class WorkoutCreate(BaseModel):
    workout_type: Optional[str] = Field(None, max_length=100)
    duration_minutes: Optional[int] = Field(None, ge=0)
    calories_burned: Optional[int] = Field(None, ge=0)


class ActivityRecordedResponse(BaseModel):
    success: bool
    message: str
    new_achievements: List[AchievementResponse] = []
