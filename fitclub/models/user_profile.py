from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from fitclub.database import Base


class UserProfile(Base):
    """Member, trainer or admin profile. The id is the Firebase UID."""
    __tablename__ = "user_profiles"

    id = Column(String, primary_key=True)
    email = Column(String, unique=True, index=True, nullable=True)
    username = Column(String, unique=True, index=True, nullable=True)
    full_name = Column(String, nullable=True)
    user_type = Column(String, default="member", nullable=False)  # member, trainer, admin
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    checkins = relationship("GymCheckin", back_populates="user", cascade="all, delete-orphan")
    gamification_stats = relationship("UserGamificationStats", back_populates="user", uselist=False, cascade="all, delete-orphan")

    @property
    def display_name(self) -> str:
        return self.full_name or self.username or "Unknown User"

    def __repr__(self):
        return f"<UserProfile id={self.id} username={self.username} type={self.user_type}>"
