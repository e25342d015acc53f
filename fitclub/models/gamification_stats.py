from sqlalchemy import Column, String, Date, DateTime, Integer, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from fitclub.database import Base
import uuid


class UserGamificationStats(Base):
    __tablename__ = "user_gamification_stats"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("user_profiles.id", ondelete="CASCADE"), nullable=False, index=True)

    # Points and progress
    total_points = Column(Integer, nullable=False, default=0, index=True)
    current_level = Column(Integer, nullable=False, default=1)
    current_streak = Column(Integer, nullable=False, default=0)
    longest_streak = Column(Integer, nullable=False, default=0)
    total_workouts = Column(Integer, nullable=False, default=0)  # unique check-in days
    total_checkins = Column(Integer, nullable=False, default=0)
    total_goals_achieved = Column(Integer, nullable=False, default=0)
    achievements_unlocked = Column(Integer, nullable=False, default=0)
    challenges_completed = Column(Integer, nullable=False, default=0)

    # Streak freeze
    streak_frozen = Column(Boolean, nullable=False, default=False)
    streak_frozen_at = Column(DateTime, nullable=True)
    streak_freeze_used_this_week = Column(Boolean, nullable=False, default=False)
    streak_freeze_week_start = Column(Date, nullable=True)

    # Local calendar dates
    last_checkin_date = Column(Date, nullable=True)
    last_workout_date = Column(Date, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("UserProfile", back_populates="gamification_stats")

    __table_args__ = (
        UniqueConstraint("user_id", name="uq_user_gamification_stats_user_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<UserGamificationStats user_id={self.user_id} points={self.total_points} "
            f"streak={self.current_streak}/{self.longest_streak} last={self.last_checkin_date} "
            f"frozen={self.streak_frozen}>"
        )
