from __future__ import annotations
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from fitclub import cache
from fitclub.config import settings
from fitclub.crud.result import ErrorCode, Result
from fitclub.crud.streak import (
    advance_streak,
    calculate_user_level,
    evaluate_streak_expiration,
    reset_freeze_week,
)
from fitclub.crud.user import get_profiles_by_ids
from fitclub.models import (
    AvailableAchievement,
    AvailableChallenge,
    UserAchievement,
    UserChallenge,
    UserGamificationStats,
    UserWorkoutSession,
)
from fitclub.schemas.user import CallerIdentity
from fitclub.utils.clock import local_date, utcnow
from fitclub.utils.logger import get_logger

logger = get_logger(__name__)

FREEZE_USED_MESSAGE = "You can only freeze your streak once per week. Save it for when you really need it!"


class GamificationCRUD:
    """Points, streaks, achievements, challenges and the leaderboard."""

    # Freeze failures that are the user's situation rather than a fault
    FREEZE_REFUSALS = (ErrorCode.STATS_NOT_FOUND, ErrorCode.FREEZE_ALREADY_USED, ErrorCode.NO_ACTIVE_STREAK)

    @staticmethod
    def _forbidden(caller: CallerIdentity, user_id: str) -> Result:
        logger.warning(f"Caller {caller.id} attempted to access gamification data of {user_id}")
        return Result.fail(ErrorCode.FORBIDDEN, "Not allowed to access this user's progress")

    @staticmethod
    def _get_stats(db: Session, user_id: str, for_update: bool = False) -> Optional[UserGamificationStats]:
        query = db.query(UserGamificationStats).filter(UserGamificationStats.user_id == user_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    @staticmethod
    def get_or_create_stats(db: Session, user_id: str, for_update: bool = False) -> UserGamificationStats:
        """Fetch the user's stats row, creating it with zeroed defaults on first access."""
        stats = GamificationCRUD._get_stats(db, user_id, for_update)
        if stats:
            return stats

        stats = UserGamificationStats(
            user_id=user_id,
            total_points=0,
            current_level=1,
            current_streak=0,
            longest_streak=0,
            total_workouts=0,
            total_checkins=0,
            total_goals_achieved=0,
            achievements_unlocked=0,
            challenges_completed=0,
            streak_frozen=False,
            streak_freeze_used_this_week=False,
        )
        db.add(stats)
        try:
            db.commit()
            logger.info(f"Created default gamification stats for user {user_id}")
        except IntegrityError:
            # Another request created the row first
            db.rollback()
        return GamificationCRUD._get_stats(db, user_id, for_update)

    @staticmethod
    def _award_points(stats: UserGamificationStats, points: int, now: datetime) -> None:
        stats.total_points = (stats.total_points or 0) + points
        stats.current_level = calculate_user_level(stats.total_points)
        stats.updated_at = now

    @staticmethod
    def get_user_stats(db: Session, caller: CallerIdentity, user_id: Optional[str] = None) -> Result[UserGamificationStats]:
        user_id = user_id or caller.id
        if not caller.can_access(user_id):
            return GamificationCRUD._forbidden(caller, user_id)
        try:
            return Result.ok(GamificationCRUD.get_or_create_stats(db, user_id), "Stats retrieved successfully")
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error fetching stats for user {user_id}: {e}")
            return Result.fail(ErrorCode.DATASTORE_ERROR, "Failed to load stats")

    # Achievements

    @staticmethod
    def get_available_achievements(db: Session) -> Result[List[AvailableAchievement]]:
        try:
            achievements = db.query(AvailableAchievement).filter(
                AvailableAchievement.is_active.is_(True)
            ).order_by(AvailableAchievement.points.asc()).all()
            return Result.ok(achievements)
        except SQLAlchemyError as e:
            logger.error(f"Error fetching available achievements: {e}")
            return Result.fail(ErrorCode.DATASTORE_ERROR, "Failed to load achievements")

    @staticmethod
    def get_user_achievements(db: Session, caller: CallerIdentity, user_id: Optional[str] = None) -> Result[List[UserAchievement]]:
        """Unlock records of the user, each with its catalog entry loaded."""
        user_id = user_id or caller.id
        if not caller.can_access(user_id):
            return GamificationCRUD._forbidden(caller, user_id)
        try:
            records = db.query(UserAchievement).join(
                AvailableAchievement, AvailableAchievement.id == UserAchievement.achievement_id
            ).filter(UserAchievement.user_id == user_id).order_by(UserAchievement.unlocked_at.asc()).all()
            return Result.ok(records)
        except SQLAlchemyError as e:
            logger.error(f"Error fetching achievements for user {user_id}: {e}")
            return Result.fail(ErrorCode.DATASTORE_ERROR, "Failed to load user achievements")

    @staticmethod
    def achievement_matches(achievement: AvailableAchievement, action: str, value: int) -> bool:
        """Whether an `action` event with `value` satisfies the achievement's requirement."""
        requirement_type = achievement.requirement_type
        if requirement_type in ("count", "special"):
            matched = action == achievement.category
        elif requirement_type == "streak":
            matched = action == "streak"
        elif requirement_type == "goal":
            matched = action == "goal"
        else:
            matched = False
        return matched and value >= achievement.requirement_value

    @staticmethod
    def check_and_unlock_achievements(
        db: Session,
        caller: CallerIdentity,
        action: str,
        value: int = 1,
        user_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Result[List[UserAchievement]]:
        """
        Unlock every catalog achievement the event satisfies and the user does not have yet.

        Each unlock is committed together with its points, so a duplicate
        rejected by the (user, achievement) unique constraint awards nothing.

        Returns:
            Result with the newly created unlock records
        """
        user_id = user_id or caller.id
        if not caller.can_access(user_id):
            return GamificationCRUD._forbidden(caller, user_id)
        now = now or utcnow()

        catalog = GamificationCRUD.get_available_achievements(db)
        if not catalog.success:
            return catalog

        try:
            unlocked_ids = {
                row.achievement_id for row in
                db.query(UserAchievement.achievement_id).filter(UserAchievement.user_id == user_id).all()
            }
        except SQLAlchemyError as e:
            logger.error(f"Error fetching unlocked achievements for user {user_id}: {e}")
            return Result.fail(ErrorCode.DATASTORE_ERROR, "Failed to load user achievements")

        newly_unlocked = []
        for achievement in catalog.data:
            if achievement.id in unlocked_ids:
                continue
            if not GamificationCRUD.achievement_matches(achievement, action, value):
                continue

            try:
                stats = GamificationCRUD.get_or_create_stats(db, user_id, for_update=True)
                record = UserAchievement(
                    user_id=user_id,
                    achievement=achievement,
                    unlocked_at=now,
                    points_earned=achievement.points,
                )
                db.add(record)
                GamificationCRUD._award_points(stats, achievement.points, now)
                stats.achievements_unlocked = (stats.achievements_unlocked or 0) + 1
                db.commit()
                newly_unlocked.append(record)
                logger.info(f"User {user_id} unlocked achievement '{achievement.name}' (+{achievement.points})")
            except IntegrityError:
                db.rollback()
                logger.info(f"Achievement {achievement.id} already unlocked by user {user_id}")
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Error unlocking achievement {achievement.id} for user {user_id}: {e}")

        if newly_unlocked:
            cache.invalidate_leaderboard()
        return Result.ok(newly_unlocked, f"{len(newly_unlocked)} achievement(s) unlocked")

    # Activity events

    @staticmethod
    def _unlock_quietly(db: Session, caller: CallerIdentity, user_id: str, action: str, value: int, now: datetime) -> List[UserAchievement]:
        result = GamificationCRUD.check_and_unlock_achievements(db, caller, action, value, user_id=user_id, now=now)
        if not result.success:
            logger.warning(f"Achievement check for '{action}' failed for user {user_id}: {result.message}")
        return result.unwrap_or([])

    @staticmethod
    def record_checkin(
        db: Session,
        caller: CallerIdentity,
        user_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Result[Tuple[UserGamificationStats, List[UserAchievement]]]:
        """Count a gym check-in, advance the streak, and evaluate check-in and streak achievements."""
        user_id = user_id or caller.id
        if not caller.can_access(user_id):
            return GamificationCRUD._forbidden(caller, user_id)
        now = now or utcnow()

        try:
            stats = GamificationCRUD.get_or_create_stats(db, user_id, for_update=True)
            stats.total_checkins = (stats.total_checkins or 0) + 1
            if advance_streak(stats, local_date(now)):
                logger.info(f"User {user_id} streak now {stats.current_streak} (longest {stats.longest_streak})")
            stats.updated_at = now
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error recording check-in for user {user_id}: {e}")
            return Result.fail(ErrorCode.DATASTORE_ERROR, "Failed to record check-in")

        unlocked = GamificationCRUD._unlock_quietly(db, caller, user_id, "checkin", stats.total_checkins, now)
        unlocked += GamificationCRUD._unlock_quietly(db, caller, user_id, "streak", stats.current_streak, now)
        return Result.ok((stats, unlocked), "Check-in recorded")

    @staticmethod
    def record_workout(
        db: Session,
        caller: CallerIdentity,
        workout_type: Optional[str] = None,
        duration_minutes: Optional[int] = None,
        calories_burned: Optional[int] = None,
        user_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Result[List[UserAchievement]]:
        """
        Log a workout session and evaluate workout achievements against the
        number of sessions logged. total_workouts is left to the check-in path,
        which counts distinct days.
        """
        user_id = user_id or caller.id
        if not caller.can_access(user_id):
            return GamificationCRUD._forbidden(caller, user_id)
        now = now or utcnow()
        today = local_date(now)

        try:
            stats = GamificationCRUD.get_or_create_stats(db, user_id, for_update=True)
            db.add(UserWorkoutSession(
                user_id=user_id,
                workout_date=today,
                workout_type=workout_type,
                duration_minutes=duration_minutes,
                calories_burned=calories_burned,
            ))
            stats.last_workout_date = today
            stats.updated_at = now
            db.commit()
            session_count = db.query(func.count(UserWorkoutSession.id)).filter(
                UserWorkoutSession.user_id == user_id
            ).scalar()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error recording workout for user {user_id}: {e}")
            return Result.fail(ErrorCode.DATASTORE_ERROR, "Failed to record workout")

        unlocked = GamificationCRUD._unlock_quietly(db, caller, user_id, "workout", session_count, now)
        return Result.ok(unlocked, "Workout recorded")

    @staticmethod
    def record_goal_achieved(
        db: Session,
        caller: CallerIdentity,
        user_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Result[List[UserAchievement]]:
        user_id = user_id or caller.id
        if not caller.can_access(user_id):
            return GamificationCRUD._forbidden(caller, user_id)
        now = now or utcnow()

        try:
            stats = GamificationCRUD.get_or_create_stats(db, user_id, for_update=True)
            stats.total_goals_achieved = (stats.total_goals_achieved or 0) + 1
            stats.updated_at = now
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error recording goal for user {user_id}: {e}")
            return Result.fail(ErrorCode.DATASTORE_ERROR, "Failed to record goal")

        unlocked = GamificationCRUD._unlock_quietly(db, caller, user_id, "goal", stats.total_goals_achieved, now)
        return Result.ok(unlocked, "Goal recorded")

    # Streak freeze and expiration

    @staticmethod
    def freeze_streak(
        db: Session,
        caller: CallerIdentity,
        user_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Result[UserGamificationStats]:
        """Freeze the streak for STREAK_FREEZE_HOURS; allowed once per week and only with a streak to protect."""
        user_id = user_id or caller.id
        if not caller.can_access(user_id):
            return GamificationCRUD._forbidden(caller, user_id)
        now = now or utcnow()

        try:
            stats = GamificationCRUD._get_stats(db, user_id, for_update=True)
            if not stats:
                return Result.fail(ErrorCode.STATS_NOT_FOUND, "User stats not found")

            reset_freeze_week(stats, local_date(now))

            if stats.streak_freeze_used_this_week:
                db.rollback()
                return Result.fail(ErrorCode.FREEZE_ALREADY_USED, FREEZE_USED_MESSAGE)

            if not stats.current_streak:
                db.rollback()
                return Result.fail(ErrorCode.NO_ACTIVE_STREAK, "No active streak to freeze")

            stats.streak_frozen = True
            stats.streak_frozen_at = now
            stats.streak_freeze_used_this_week = True
            stats.updated_at = now
            db.commit()
            logger.info(f"User {user_id} froze a {stats.current_streak}-day streak")
            return Result.ok(stats, f"Streak frozen for {settings.STREAK_FREEZE_HOURS} hours! Your progress is safe.")

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error freezing streak for user {user_id}: {e}")
            return Result.fail(ErrorCode.DATASTORE_ERROR, "Failed to freeze streak")

    @staticmethod
    def check_streak_expiration(db: Session, caller: CallerIdentity, now: Optional[datetime] = None) -> Result[dict]:
        """
        Sweep every user with a running streak: lift lapsed freezes and zero
        streaks whose last check-in day is too far behind. Meant to be run
        periodically by an external scheduler.
        """
        if not caller.is_admin:
            return Result.fail(ErrorCode.FORBIDDEN, "Only admins can run the streak sweep")
        now = now or utcnow()

        try:
            rows = db.query(UserGamificationStats).filter(
                UserGamificationStats.current_streak > 0,
                UserGamificationStats.last_checkin_date.isnot(None),
            ).with_for_update().all()

            unfrozen = expired = 0
            for stats in rows:
                unfroze, did_expire = evaluate_streak_expiration(stats, now)
                if unfroze:
                    unfrozen += 1
                if did_expire:
                    expired += 1
                    logger.info(f"Streak expired for user {stats.user_id}")
                if unfroze or did_expire:
                    stats.updated_at = now
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error checking streak expiration: {e}")
            return Result.fail(ErrorCode.DATASTORE_ERROR, "Streak sweep failed")

        summary = {"checked": len(rows), "unfrozen": unfrozen, "expired": expired}
        logger.info(f"Streak sweep finished: {summary}")
        return Result.ok(summary, "Streak sweep finished")

    # Challenges

    @staticmethod
    def get_available_challenges(db: Session, today: date) -> Result[List[AvailableChallenge]]:
        try:
            challenges = db.query(AvailableChallenge).filter(
                AvailableChallenge.is_active.is_(True),
                AvailableChallenge.end_date >= today,
            ).order_by(AvailableChallenge.end_date.asc()).all()
            return Result.ok(challenges)
        except SQLAlchemyError as e:
            logger.error(f"Error fetching available challenges: {e}")
            return Result.fail(ErrorCode.DATASTORE_ERROR, "Failed to load challenges")

    @staticmethod
    def get_user_challenges(
        db: Session,
        caller: CallerIdentity,
        user_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Result[List[Tuple[AvailableChallenge, int, bool]]]:
        """Open challenges merged with the user's progress as (challenge, progress, completed)."""
        user_id = user_id or caller.id
        if not caller.can_access(user_id):
            return GamificationCRUD._forbidden(caller, user_id)
        now = now or utcnow()

        available = GamificationCRUD.get_available_challenges(db, local_date(now))
        if not available.success:
            return available

        try:
            progress = {
                uc.challenge_id: uc for uc in
                db.query(UserChallenge).filter(UserChallenge.user_id == user_id).all()
            }
        except SQLAlchemyError as e:
            logger.error(f"Error fetching challenge progress for user {user_id}: {e}")
            # Challenges are still worth showing without progress
            return Result.ok([(challenge, 0, False) for challenge in available.data])

        merged = []
        for challenge in available.data:
            user_challenge = progress.get(challenge.id)
            if user_challenge:
                merged.append((challenge, user_challenge.current_progress, user_challenge.completed))
            else:
                merged.append((challenge, 0, False))
        return Result.ok(merged)

    @staticmethod
    def update_challenge_progress(
        db: Session,
        caller: CallerIdentity,
        challenge_id: str,
        progress: int,
        user_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Result[UserChallenge]:
        """Store progress; reaching the target completes the challenge once and awards its points."""
        user_id = user_id or caller.id
        if not caller.can_access(user_id):
            return GamificationCRUD._forbidden(caller, user_id)
        now = now or utcnow()

        try:
            challenge = db.query(AvailableChallenge).filter(AvailableChallenge.id == challenge_id).first()
            if not challenge:
                return Result.fail(ErrorCode.NOT_FOUND, "Challenge not found")

            stats = GamificationCRUD.get_or_create_stats(db, user_id, for_update=True)
            user_challenge = db.query(UserChallenge).filter(
                UserChallenge.user_id == user_id,
                UserChallenge.challenge_id == challenge_id,
            ).with_for_update().first()
            if not user_challenge:
                user_challenge = UserChallenge(user_id=user_id, challenge_id=challenge_id, completed=False, points_earned=0)
                db.add(user_challenge)

            user_challenge.current_progress = progress
            user_challenge.updated_at = now

            completed_now = not user_challenge.completed and progress >= challenge.target_value
            if completed_now:
                user_challenge.completed = True
                user_challenge.completed_at = now
                user_challenge.points_earned = challenge.reward_points
                GamificationCRUD._award_points(stats, challenge.reward_points, now)
                stats.challenges_completed = (stats.challenges_completed or 0) + 1

            db.commit()
            db.refresh(user_challenge)
        except IntegrityError:
            db.rollback()
            logger.warning(f"Concurrent progress update for challenge {challenge_id} by user {user_id}")
            return Result.fail(ErrorCode.DATASTORE_ERROR, "Challenge progress changed concurrently, please retry")
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error updating challenge progress for user {user_id}: {e}")
            return Result.fail(ErrorCode.DATASTORE_ERROR, "Failed to update challenge progress")

        if completed_now:
            logger.info(f"User {user_id} completed challenge '{challenge.name}' (+{challenge.reward_points})")
            cache.invalidate_leaderboard()
        return Result.ok(user_challenge, "Challenge progress updated")

    # Leaderboard

    @staticmethod
    def get_leaderboard(db: Session, limit: Optional[int] = None) -> Result[List[dict]]:
        """
        Top users by total points. Rank is the 1-based position in the query
        result; equal points keep whatever order the database returns.
        """
        limit = limit or settings.LEADERBOARD_LIMIT

        cached = cache.get_cached_leaderboard(limit)
        if cached is not None:
            return Result.ok(cached, "Leaderboard retrieved from cache")

        try:
            rows = db.query(UserGamificationStats).order_by(
                UserGamificationStats.total_points.desc()
            ).limit(limit).all()
        except SQLAlchemyError as e:
            logger.error(f"Error fetching gamification stats for leaderboard: {e}")
            return Result.fail(ErrorCode.DATASTORE_ERROR, "Failed to load leaderboard")

        if not rows:
            return Result.ok([], "No gamification stats found")

        try:
            profiles = {p.id: p for p in get_profiles_by_ids(db, [row.user_id for row in rows])}
        except SQLAlchemyError as e:
            # Names are cosmetic, rank without them
            logger.error(f"Error fetching profiles for leaderboard: {e}")
            profiles = {}

        entries = []
        for index, row in enumerate(rows):
            profile = profiles.get(row.user_id)
            entries.append({
                "id": row.user_id,
                "username": (profile.username if profile else None) or f"user_{row.user_id[:8]}",
                "full_name": (profile.full_name if profile else None) or "Unknown User",
                "points": row.total_points or 0,
                "level": row.current_level or 1,
                "rank": index + 1,
            })

        cache.set_cached_leaderboard(limit, entries)
        return Result.ok(entries, "Leaderboard retrieved successfully")

    # Catalog

    @staticmethod
    def seed_catalog(db: Session, achievements: List[dict], challenges: List[dict], today: date) -> Tuple[int, int]:
        """Insert catalog entries whose names are not present yet. Returns (achievements, challenges) added."""
        existing_achievements = {name for (name,) in db.query(AvailableAchievement.name).all()}
        added_achievements = 0
        for data in achievements:
            if data["name"] in existing_achievements:
                continue
            db.add(AvailableAchievement(**data))
            added_achievements += 1

        existing_challenges = {name for (name,) in db.query(AvailableChallenge.name).all()}
        added_challenges = 0
        for data in challenges:
            if data["name"] in existing_challenges:
                continue
            fields = {k: v for k, v in data.items() if k != "duration_days"}
            db.add(AvailableChallenge(
                start_date=today,
                end_date=today + timedelta(days=data.get("duration_days", 7)),
                **fields,
            ))
            added_challenges += 1

        db.commit()
        return added_achievements, added_challenges
