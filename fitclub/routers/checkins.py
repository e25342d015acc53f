from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session
from typing import Optional

from fitclub import crud
from fitclub.auth import get_current_user, get_admin_user
from fitclub.crud import ErrorCode, GamificationCRUD
from fitclub.database import get_db
from fitclub.middleware.rate_limit import rate_limit_checkin, rate_limit_api_read, rate_limit_admin
from fitclub.schemas import (
    CallerIdentity, CheckinResponse, CheckinActionResponse, CheckinStatusResponse,
    WorkoutDaysResponse, CheckinHistoryEntry, CheckinHistoryResponse
)
from fitclub.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/checkins", tags=["checkins"])

ERROR_STATUS = {
    ErrorCode.ALREADY_CHECKED_IN: 409,
    ErrorCode.NO_ACTIVE_CHECKIN: 404,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.STATS_NOT_FOUND: 404,
    ErrorCode.FREEZE_ALREADY_USED: 400,
    ErrorCode.NO_ACTIVE_STREAK: 400,
}


def raise_for_result(result):
    """Translate a failed crud Result into an HTTPException."""
    status_code = ERROR_STATUS.get(result.error, 500)
    raise HTTPException(
        status_code=status_code,
        detail={"error": result.error.value if result.error else None, "message": result.message},
    )


@router.post("/check-in", response_model=CheckinActionResponse)
@rate_limit_checkin
async def check_in(
    request: Request,
    current_user: CallerIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Open a gym session for the current user and credit the visit to their streak."""
    try:
        result = crud.check_in(db, current_user)
        if not result.success:
            raise_for_result(result)

        checkin = result.data
        new_achievements = []
        recorded = GamificationCRUD.record_checkin(db, current_user, now=checkin.check_in_time)
        if recorded.success:
            _, unlocked = recorded.data
            new_achievements = [record.achievement.name for record in unlocked]
        else:
            # The check-in itself stands even if the streak update did not
            logger.error(f"Gamification update failed after check-in for {current_user.id}: {recorded.message}")

        return CheckinActionResponse(
            success=True,
            message=result.message,
            data=CheckinResponse.model_validate(checkin),
            new_achievements=new_achievements,
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error in check_in for {current_user.id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/check-out", response_model=CheckinActionResponse)
@rate_limit_checkin
async def check_out(
    request: Request,
    current_user: CallerIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Close the current user's open gym session and log it as a workout if it lasted a minute or more."""
    try:
        result = crud.check_out(db, current_user)
        if not result.success:
            raise_for_result(result)

        checkout = result.data
        new_achievements = []
        if checkout.duration_minutes:
            recorded = GamificationCRUD.record_workout(
                db,
                current_user,
                duration_minutes=checkout.duration_minutes,
                now=checkout.check_out_time,
            )
            if recorded.success:
                new_achievements = [record.achievement.name for record in recorded.data]
            else:
                logger.error(f"Workout logging failed after check-out for {current_user.id}: {recorded.message}")

        return CheckinActionResponse(
            success=True,
            message=result.message,
            data=CheckinResponse.model_validate(checkout),
            new_achievements=new_achievements,
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error in check_out for {current_user.id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/status", response_model=CheckinStatusResponse)
@rate_limit_api_read
async def get_status(
    request: Request,
    current_user: CallerIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Active session with its running duration, or the most recent past session."""
    result = crud.get_status(db, current_user)
    if not result.success:
        raise_for_result(result)

    session, is_checked_in, duration_minutes = result.data
    if session is None:
        return CheckinStatusResponse(is_checked_in=False)

    session_data = CheckinResponse.model_validate(session).model_copy(
        update={"is_checked_in": is_checked_in, "duration_minutes": duration_minutes}
    )
    return CheckinStatusResponse(
        is_checked_in=is_checked_in,
        session=session_data,
        duration_minutes=duration_minutes,
    )


@router.get("/workout-days", response_model=WorkoutDaysResponse)
@rate_limit_api_read
async def get_workout_days(
    request: Request,
    current_user: CallerIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Distinct days the current user checked in this month."""
    result = crud.get_workout_days_this_month(db, current_user)
    if not result.success:
        raise_for_result(result)
    return WorkoutDaysResponse(**result.data)


@router.get("/history", response_model=CheckinHistoryResponse)
@rate_limit_admin
async def get_history(
    request: Request,
    limit: int = Query(50, ge=1, le=500),
    user_type: Optional[str] = Query(None, pattern="^(member|trainer)$"),
    current_user: CallerIdentity = Depends(get_admin_user),
    db: Session = Depends(get_db),
):
    """Latest check-ins across the gym, optionally only members or only trainers."""
    result = crud.get_checkin_history(db, current_user, limit=limit, user_type=user_type)
    if not result.success:
        raise_for_result(result)

    entries = [
        CheckinHistoryEntry(
            **CheckinResponse.model_validate(checkin).model_dump(),
            full_name=profile.full_name,
            username=profile.username,
        )
        for checkin, profile in result.data
    ]
    return CheckinHistoryResponse(checkins=entries, total_count=len(entries))
