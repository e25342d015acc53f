from sqlalchemy import Column, String, Date, DateTime, Integer, ForeignKey
from sqlalchemy.sql import func
from fitclub.database import Base
import uuid


class UserWorkoutSession(Base):
    """A workout logged by the member, separate from gym attendance."""
    __tablename__ = "user_workout_sessions"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("user_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    workout_date = Column(Date, nullable=False, index=True)
    workout_type = Column(String(100), nullable=True)
    duration_minutes = Column(Integer, nullable=True)
    calories_burned = Column(Integer, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
