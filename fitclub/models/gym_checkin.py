from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey, Index, text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from fitclub.database import Base
import uuid


class GymCheckin(Base):
    """One attendance interval at the gym. Rows are closed on check-out, never deleted."""
    __tablename__ = "gym_checkins"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    user_id = Column(String, ForeignKey("user_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    user_type = Column(String, nullable=False, default="member")  # member, trainer
    check_in_time = Column(DateTime, nullable=False, index=True)
    check_out_time = Column(DateTime, nullable=True)
    is_checked_in = Column(Boolean, nullable=False, default=True, index=True)
    check_in_reason = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=False, default=func.now(), onupdate=func.now())

    user = relationship("UserProfile", back_populates="checkins")

    # At most one open session per user
    __table_args__ = (
        Index(
            "uq_gym_checkins_open_per_user",
            "user_id",
            unique=True,
            postgresql_where=text("is_checked_in"),
            sqlite_where=text("is_checked_in = 1"),
        ),
    )

    @property
    def duration_minutes(self):
        """Whole minutes between check-in and check-out, None while the session is open."""
        if self.check_in_time is None or self.check_out_time is None:
            return None
        return int((self.check_out_time - self.check_in_time).total_seconds() // 60)

    def __repr__(self):
        return (
            f"<GymCheckin id={self.id} user_id={self.user_id} in={self.check_in_time} "
            f"out={self.check_out_time} open={self.is_checked_in}>"
        )
