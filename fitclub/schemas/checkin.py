from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class CheckinResponse(BaseModel):
    id: str
    user_id: str
    user_type: str
    check_in_time: datetime
    check_out_time: Optional[datetime] = None
    is_checked_in: bool
    check_in_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    duration_minutes: Optional[int] = None

    class Config:
        from_attributes = True


class CheckinActionResponse(BaseModel):
    success: bool
    message: str
    data: Optional[CheckinResponse] = None
    new_achievements: List[str] = []


class CheckinStatusResponse(BaseModel):
    is_checked_in: bool
    session: Optional[CheckinResponse] = None
    duration_minutes: Optional[int] = None


class WorkoutDaysResponse(BaseModel):
    workout_days: int
    total_checkins: int
    month: str


class CheckinHistoryEntry(CheckinResponse):
    full_name: Optional[str] = None
    username: Optional[str] = None


class CheckinHistoryResponse(BaseModel):
    checkins: List[CheckinHistoryEntry]
    total_count: int
