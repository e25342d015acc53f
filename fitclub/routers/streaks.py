from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from fitclub.auth import get_current_user, get_admin_user
from fitclub.crud import GamificationCRUD, compute_streak_urgency
from fitclub.database import get_db
from fitclub.middleware.rate_limit import rate_limit_activity_write, rate_limit_api_read, rate_limit_admin
from fitclub.routers.checkins import raise_for_result
from fitclub.schemas import CallerIdentity, StreakResponse, FreezeStreakResponse, StreakSweepResponse
from fitclub.utils.clock import local_date, utcnow, week_start
from fitclub.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/streaks", tags=["streaks"])


@router.get("/me", response_model=StreakResponse)
@rate_limit_api_read
async def get_my_streak(
    request: Request,
    current_user: CallerIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Current streak with how urgently the user needs to check in to keep it.

    The gym's local date is returned as well so clients do not have to guess
    which day the server considers "today".
    """
    result = GamificationCRUD.get_user_stats(db, current_user)
    if not result.success:
        raise_for_result(result)

    stats = result.data
    now = utcnow()
    today = local_date(now)
    urgency_level, hours_remaining = compute_streak_urgency(
        stats.current_streak, stats.last_checkin_date, stats.streak_frozen, now
    )
    freeze_used = bool(stats.streak_freeze_used_this_week) and stats.streak_freeze_week_start == week_start(today)

    return StreakResponse(
        user_id=stats.user_id,
        current_streak=stats.current_streak or 0,
        longest_streak=stats.longest_streak or 0,
        last_checkin_date=stats.last_checkin_date,
        streak_frozen=bool(stats.streak_frozen),
        streak_frozen_at=stats.streak_frozen_at,
        streak_freeze_used_this_week=freeze_used,
        urgency_level=urgency_level,
        hours_remaining=hours_remaining,
        today_local_date=today,
    )


@router.post("/freeze", response_model=FreezeStreakResponse)
@rate_limit_activity_write
async def freeze_my_streak(
    request: Request,
    current_user: CallerIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Use this week's streak freeze. A refusal is reported in the body, not as an error status."""
    try:
        result = GamificationCRUD.freeze_streak(db, current_user)
        if result.error is not None and result.error not in GamificationCRUD.FREEZE_REFUSALS:
            raise_for_result(result)
        return FreezeStreakResponse(success=result.success, message=result.message, can_freeze=result.success)

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error in freeze_my_streak for {current_user.id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/expire", response_model=StreakSweepResponse)
@rate_limit_admin
async def expire_streaks(
    request: Request,
    current_user: CallerIdentity = Depends(get_admin_user),
    db: Session = Depends(get_db),
):
    """Run the streak expiration sweep now."""
    result = GamificationCRUD.check_streak_expiration(db, current_user)
    if not result.success:
        raise_for_result(result)
    return StreakSweepResponse(**result.data)
