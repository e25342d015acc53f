from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime


class StreakResponse(BaseModel):
    user_id: str
    current_streak: int
    longest_streak: int
    last_checkin_date: Optional[date]
    streak_frozen: bool
    streak_frozen_at: Optional[datetime]
    streak_freeze_used_this_week: bool
    urgency_level: str
    hours_remaining: int
    today_local_date: date


class FreezeStreakResponse(BaseModel):
    success: bool
    message: str
    can_freeze: bool


class StreakSweepResponse(BaseModel):
    checked: int
    unfrozen: int
    expired: int
