from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import List, Optional
from fitclub.models import UserProfile
from fitclub.utils.logger import get_logger

logger = get_logger(__name__)

VALID_USER_TYPES = ("member", "trainer", "admin")


def get_profile(db: Session, user_id: str) -> Optional[UserProfile]:
    """Get a profile by ID."""
    return db.query(UserProfile).filter(UserProfile.id == user_id).first()


def get_profiles_by_ids(db: Session, user_ids: List[str]) -> List[UserProfile]:
    """Get all profiles whose id is in `user_ids`."""
    if not user_ids:
        return []
    return db.query(UserProfile).filter(UserProfile.id.in_(user_ids)).all()


def create_profile(
    db: Session,
    user_id: str,
    email: Optional[str] = None,
    full_name: Optional[str] = None,
    username: Optional[str] = None,
    user_type: str = "member",
) -> UserProfile:
    """
    Create a profile for a newly seen user.

    Args:
        db: Database session
        user_id: Firebase UID
        email: User email
        full_name: Display name
        username: Optional unique username
        user_type: member, trainer or admin

    Returns:
        The created profile, or the existing one if a concurrent request created it first
    """
    if user_type not in VALID_USER_TYPES:
        raise ValueError(f"Invalid user_type: {user_type}")

    profile = UserProfile(
        id=user_id,
        email=email,
        full_name=full_name,
        username=username,
        user_type=user_type,
    )
    db.add(profile)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(f"Profile {user_id} already exists, returning existing row")
        return get_profile(db, user_id)
    db.refresh(profile)
    return profile


def update_profile_name(db: Session, user_id: str, full_name: str) -> Optional[UserProfile]:
    """Update the display name of a profile."""
    profile = get_profile(db, user_id)
    if not profile:
        return None
    if profile.full_name != full_name:
        profile.full_name = full_name
        db.commit()
        db.refresh(profile)
    return profile
