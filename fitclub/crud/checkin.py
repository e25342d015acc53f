from __future__ import annotations
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from fitclub.config import settings
from fitclub.crud.result import ErrorCode, Result
from fitclub.models import GymCheckin, UserProfile
from fitclub.schemas.user import CallerIdentity
from fitclub.utils.clock import floor_minutes, local_date, month_bounds, utcnow
from fitclub.utils.logger import get_logger

logger = get_logger(__name__)

TRAINER_REASON = "Staff check-in for training session"
MEMBER_REASON = "Member workout session"


def _forbidden(caller: CallerIdentity, user_id: str) -> Result:
    logger.warning(f"Caller {caller.id} attempted to access check-ins of {user_id}")
    return Result.fail(ErrorCode.FORBIDDEN, "Not allowed to access this user's check-ins")


def _active_checkin_query(db: Session, user_id: str, now: datetime):
    """Open session for the user that started within the active window."""
    window_start = now - timedelta(hours=settings.ACTIVE_CHECKIN_WINDOW_HOURS)
    return db.query(GymCheckin).filter(
        GymCheckin.user_id == user_id,
        GymCheckin.is_checked_in.is_(True),
        GymCheckin.check_out_time.is_(None),
        GymCheckin.check_in_time >= window_start,
    )


def classify_user(profile: Optional[UserProfile]) -> Tuple[str, str]:
    """Return (user_type, check_in_reason) for a profile; unknown users count as members."""
    if profile is not None and profile.user_type == "trainer":
        return "trainer", TRAINER_REASON
    return "member", MEMBER_REASON


def check_in(
    db: Session,
    caller: CallerIdentity,
    user_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Result[GymCheckin]:
    """
    Open a gym session for a user.

    Stale open rows are closed and the new row inserted in one transaction.
    The partial unique index on open sessions turns a concurrent duplicate
    into an IntegrityError, reported as ALREADY_CHECKED_IN.
    """
    user_id = user_id or caller.id
    if not caller.can_access(user_id):
        return _forbidden(caller, user_id)
    now = now or utcnow()

    try:
        existing = _active_checkin_query(db, user_id, now).first()
        if existing:
            return Result.fail(ErrorCode.ALREADY_CHECKED_IN, "User is already checked in")

        profile = db.query(UserProfile).filter(UserProfile.id == user_id).first()
        if profile is None:
            logger.warning(f"No profile found for {user_id}, checking in as member")
        user_type, reason = classify_user(profile)

        # Repair rows left open by crashed clients or older sessions
        closed = db.query(GymCheckin).filter(
            GymCheckin.user_id == user_id,
            GymCheckin.is_checked_in.is_(True),
        ).update(
            {
                GymCheckin.is_checked_in: False,
                GymCheckin.check_out_time: func.coalesce(GymCheckin.check_out_time, now),
                GymCheckin.updated_at: now,
            },
            synchronize_session="fetch",
        )
        if closed:
            logger.warning(f"Closed {closed} stale check-in(s) for user {user_id}")

        checkin = GymCheckin(
            user_id=user_id,
            user_type=user_type,
            check_in_time=now,
            is_checked_in=True,
            check_in_reason=reason,
            created_at=now,
            updated_at=now,
        )
        db.add(checkin)
        db.commit()
        db.refresh(checkin)
        logger.info(f"User {user_id} checked in ({user_type})")
        return Result.ok(checkin, "Check-in successful")

    except IntegrityError:
        db.rollback()
        logger.warning(f"Concurrent check-in rejected for user {user_id}")
        return Result.fail(ErrorCode.ALREADY_CHECKED_IN, "User is already checked in")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error checking in user {user_id}: {e}")
        return Result.fail(ErrorCode.DATASTORE_ERROR, f"Check-in failed: {e}")


def check_out(
    db: Session,
    caller: CallerIdentity,
    user_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Result[GymCheckin]:
    """Close the user's most recent open session, updating that row by id."""
    user_id = user_id or caller.id
    if not caller.can_access(user_id):
        return _forbidden(caller, user_id)
    now = now or utcnow()

    try:
        current = db.query(GymCheckin).filter(
            GymCheckin.user_id == user_id,
            GymCheckin.is_checked_in.is_(True),
        ).order_by(GymCheckin.created_at.desc()).first()

        if not current:
            return Result.fail(ErrorCode.NO_ACTIVE_CHECKIN, "No active check-in found")

        updated = db.query(GymCheckin).filter(
            GymCheckin.id == current.id,
            GymCheckin.is_checked_in.is_(True),
        ).update(
            {
                GymCheckin.check_out_time: now,
                GymCheckin.is_checked_in: False,
                GymCheckin.updated_at: now,
            },
            synchronize_session=False,
        )
        if not updated:
            # Closed by a concurrent request between the read and the update
            db.rollback()
            return Result.fail(ErrorCode.NO_ACTIVE_CHECKIN, "No active check-in found")

        db.commit()
        db.refresh(current)
        logger.info(f"User {user_id} checked out after {current.duration_minutes} minutes")
        return Result.ok(current, "Check-out successful")

    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error checking out user {user_id}: {e}")
        return Result.fail(ErrorCode.DATASTORE_ERROR, f"Check-out failed: {e}")


def get_status(
    db: Session,
    caller: CallerIdentity,
    user_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Result[Tuple[Optional[GymCheckin], bool, Optional[int]]]:
    """
    Current check-in status.

    Returns:
        Result whose data is (session, is_checked_in, duration_minutes). The
        session is the active one, else the latest historical one (reported
        as not checked in), else None.
    """
    user_id = user_id or caller.id
    if not caller.can_access(user_id):
        return _forbidden(caller, user_id)
    now = now or utcnow()

    try:
        active = _active_checkin_query(db, user_id, now).first()
        if active:
            return Result.ok((active, True, floor_minutes(active.check_in_time, now)), "Status retrieved successfully")

        last_session = db.query(GymCheckin).filter(
            GymCheckin.user_id == user_id
        ).order_by(GymCheckin.created_at.desc()).first()

        if not last_session:
            return Result.ok((None, False, None), "No check-in records found")

        return Result.ok((last_session, False, last_session.duration_minutes), "Status retrieved successfully")

    except SQLAlchemyError as e:
        logger.error(f"Error getting check-in status for {user_id}: {e}")
        return Result.fail(ErrorCode.DATASTORE_ERROR, f"Failed to get check-in status: {e}")


def get_workout_days_this_month(
    db: Session,
    caller: CallerIdentity,
    user_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Result[dict]:
    """Count distinct local calendar days with a check-in in the current month."""
    user_id = user_id or caller.id
    if not caller.can_access(user_id):
        return _forbidden(caller, user_id)
    now = now or utcnow()
    start, end = month_bounds(now)

    try:
        rows = db.query(GymCheckin.check_in_time).filter(
            GymCheckin.user_id == user_id,
            GymCheckin.check_in_time >= start,
            GymCheckin.check_in_time < end,
        ).all()
    except SQLAlchemyError as e:
        logger.error(f"Error counting workout days for {user_id}: {e}")
        return Result.fail(ErrorCode.DATASTORE_ERROR, f"Failed to get workout days count: {e}")

    unique_days = {local_date(row.check_in_time) for row in rows}
    return Result.ok(
        {
            "workout_days": len(unique_days),
            "total_checkins": len(rows),
            "month": local_date(now).strftime("%B %Y"),
        },
        "Workout days count retrieved successfully",
    )


def get_checkin_history(
    db: Session,
    caller: CallerIdentity,
    limit: int = 50,
    user_type: Optional[str] = None,
) -> Result[List[Tuple[GymCheckin, UserProfile]]]:
    """Latest check-ins across all users with their profiles. Admin only."""
    if not caller.is_admin:
        logger.warning(f"Non-admin {caller.id} requested check-in history")
        return Result.fail(ErrorCode.FORBIDDEN, "Only admins can view check-in history")

    try:
        query = db.query(GymCheckin, UserProfile).join(
            UserProfile, UserProfile.id == GymCheckin.user_id
        )
        if user_type:
            query = query.filter(GymCheckin.user_type == user_type)
        rows = query.order_by(GymCheckin.created_at.desc()).limit(limit).all()
        return Result.ok([(checkin, profile) for checkin, profile in rows], "Check-in history retrieved successfully")
    except SQLAlchemyError as e:
        logger.error(f"Error getting check-in history: {e}")
        return Result.fail(ErrorCode.DATASTORE_ERROR, f"Failed to get check-in history: {e}")
