from sqlalchemy import Column, String, Text, DateTime, Integer, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from fitclub.database import Base
import uuid


class AvailableAchievement(Base):
    """Catalog entry describing a milestone and how it is unlocked."""
    __tablename__ = "available_achievements"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    icon = Column(String(50), nullable=False, default="")
    points = Column(Integer, nullable=False, default=0)
    category = Column(String(50), nullable=False, index=True)  # workout, streak, goal, special, checkin
    requirement_type = Column(String(50), nullable=False)  # count, streak, goal, special
    requirement_value = Column(Integer, nullable=False, default=1)
    requirement_description = Column(Text, nullable=False, default="")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self):
        return f"<AvailableAchievement name={self.name} {self.requirement_type}>={self.requirement_value}>"


class UserAchievement(Base):
    """Unlock record; created once per (user, achievement) and never changed."""
    __tablename__ = "user_achievements"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("user_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    achievement_id = Column(String, ForeignKey("available_achievements.id", ondelete="CASCADE"), nullable=False)
    unlocked_at = Column(DateTime, nullable=False, default=func.now())
    points_earned = Column(Integer, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    achievement = relationship("AvailableAchievement")

    __table_args__ = (
        UniqueConstraint("user_id", "achievement_id", name="uq_user_achievement"),
    )

    def __repr__(self):
        return f"<UserAchievement user_id={self.user_id} achievement_id={self.achievement_id}>"
