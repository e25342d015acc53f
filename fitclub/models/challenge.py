from sqlalchemy import Column, String, Text, Date, DateTime, Integer, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from fitclub.database import Base
import uuid


class AvailableChallenge(Base):
    __tablename__ = "available_challenges"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    type = Column(String(50), nullable=False)  # weekly, monthly, special
    target_value = Column(Integer, nullable=False)
    reward_points = Column(Integer, nullable=False, default=0)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    challenge_category = Column(String(50), nullable=False)  # workout, checkin, streak, goal
    created_at = Column(DateTime, server_default=func.now())


class UserChallenge(Base):
    __tablename__ = "user_challenges"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("user_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    challenge_id = Column(String, ForeignKey("available_challenges.id", ondelete="CASCADE"), nullable=False)
    current_progress = Column(Integer, nullable=False, default=0)
    completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime, nullable=True)
    points_earned = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    challenge = relationship("AvailableChallenge")

    __table_args__ = (
        UniqueConstraint("user_id", "challenge_id", name="uq_user_challenge"),
    )

    def __repr__(self):
        return f"<UserChallenge user_id={self.user_id} challenge_id={self.challenge_id} progress={self.current_progress}>"
