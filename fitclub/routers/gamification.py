from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from typing import List, Optional

from fitclub.auth import get_current_user
from fitclub.crud import GamificationCRUD
from fitclub.database import get_db
from fitclub.middleware.rate_limit import rate_limit_activity_write, rate_limit_api_read
from fitclub.routers.checkins import raise_for_result
from fitclub.schemas import (
    CallerIdentity, UserStatsResponse, AchievementResponse, ChallengeResponse, ChallengeProgressUpdate,
    LeaderboardEntry, LeaderboardResponse, WorkoutCreate, ActivityRecordedResponse
)
from fitclub.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/gamification", tags=["gamification"])


def _achievement_response(record) -> AchievementResponse:
    return AchievementResponse.model_validate(record.achievement).model_copy(
        update={"unlocked": True, "unlocked_at": record.unlocked_at}
    )


@router.get("/stats", response_model=UserStatsResponse)
@rate_limit_api_read
async def get_my_stats(
    request: Request,
    current_user: CallerIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Points, level, streak and counters of the current user."""
    result = GamificationCRUD.get_user_stats(db, current_user)
    if not result.success:
        raise_for_result(result)
    return UserStatsResponse.model_validate(result.data)


@router.get("/achievements", response_model=List[AchievementResponse])
@rate_limit_api_read
async def list_achievements(
    request: Request,
    current_user: CallerIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Whole achievement catalog, flagged with what the current user has unlocked."""
    catalog = GamificationCRUD.get_available_achievements(db)
    if not catalog.success:
        raise_for_result(catalog)

    unlocked = {
        record.achievement_id: record
        for record in GamificationCRUD.get_user_achievements(db, current_user).unwrap_or([])
    }

    response = []
    for achievement in catalog.data:
        item = AchievementResponse.model_validate(achievement)
        record = unlocked.get(achievement.id)
        if record:
            item = item.model_copy(update={"unlocked": True, "unlocked_at": record.unlocked_at})
        response.append(item)
    return response


@router.get("/achievements/me", response_model=List[AchievementResponse])
@rate_limit_api_read
async def list_my_achievements(
    request: Request,
    current_user: CallerIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Achievements the current user has unlocked."""
    result = GamificationCRUD.get_user_achievements(db, current_user)
    if not result.success:
        raise_for_result(result)
    return [_achievement_response(record) for record in result.data]


@router.get("/challenges", response_model=List[ChallengeResponse])
@rate_limit_api_read
async def list_challenges(
    request: Request,
    current_user: CallerIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Open challenges with the current user's progress."""
    result = GamificationCRUD.get_user_challenges(db, current_user)
    if not result.success:
        raise_for_result(result)

    return [
        ChallengeResponse(
            id=challenge.id,
            name=challenge.name,
            description=challenge.description,
            type=challenge.type,
            target=challenge.target_value,
            current=progress,
            reward=challenge.reward_points,
            end_date=challenge.end_date,
            active=not completed,
            challenge_category=challenge.challenge_category,
        )
        for challenge, progress, completed in result.data
    ]


@router.put("/challenges/{challenge_id}/progress", response_model=ActivityRecordedResponse)
@rate_limit_activity_write
async def update_challenge_progress(
    request: Request,
    challenge_id: str,
    update: ChallengeProgressUpdate,
    current_user: CallerIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Report progress on a challenge."""
    result = GamificationCRUD.update_challenge_progress(db, current_user, challenge_id, update.progress)
    if not result.success:
        raise_for_result(result)

    message = "Challenge completed!" if result.data.completed else result.message
    return ActivityRecordedResponse(success=True, message=message)


@router.post("/workouts", response_model=ActivityRecordedResponse)
@rate_limit_activity_write
async def record_workout(
    request: Request,
    workout: WorkoutCreate,
    current_user: CallerIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Log a workout and unlock any workout achievements it earns."""
    result = GamificationCRUD.record_workout(
        db,
        current_user,
        workout_type=workout.workout_type,
        duration_minutes=workout.duration_minutes,
        calories_burned=workout.calories_burned,
    )
    if not result.success:
        raise_for_result(result)
    return ActivityRecordedResponse(
        success=True,
        message=result.message,
        new_achievements=[_achievement_response(record) for record in result.data],
    )


@router.post("/goals", response_model=ActivityRecordedResponse)
@rate_limit_activity_write
async def record_goal(
    request: Request,
    current_user: CallerIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Count an achieved goal and unlock any goal achievements it earns."""
    result = GamificationCRUD.record_goal_achieved(db, current_user)
    if not result.success:
        raise_for_result(result)
    return ActivityRecordedResponse(
        success=True,
        message=result.message,
        new_achievements=[_achievement_response(record) for record in result.data],
    )


@router.get("/leaderboard", response_model=LeaderboardResponse)
@rate_limit_api_read
async def get_leaderboard(
    request: Request,
    limit: Optional[int] = Query(None, ge=1, le=100),
    current_user: CallerIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Top users by points."""
    result = GamificationCRUD.get_leaderboard(db, limit)
    if not result.success:
        # Degrade to an empty board
        logger.warning(f"Serving empty leaderboard: {result.message}")
    entries = [LeaderboardEntry(**entry) for entry in result.unwrap_or([])]
    return LeaderboardResponse(entries=entries, total_count=len(entries))
