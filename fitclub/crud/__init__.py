from fitclub.crud.result import ErrorCode, Result
from fitclub.crud.user import (
    get_profile,
    get_profiles_by_ids,
    create_profile,
    update_profile_name,
)
from fitclub.crud.checkin import (
    check_in,
    check_out,
    get_status,
    get_workout_days_this_month,
    get_checkin_history,
)
from fitclub.crud.streak import (
    calculate_user_level,
    advance_streak,
    evaluate_streak_expiration,
    compute_streak_urgency,
)
from fitclub.crud.gamification import GamificationCRUD

__all__ = [
    "ErrorCode",
    "Result",

    # Profile operations
    "get_profile",
    "get_profiles_by_ids",
    "create_profile",
    "update_profile_name",

    # Check-in operations
    "check_in",
    "check_out",
    "get_status",
    "get_workout_days_this_month",
    "get_checkin_history",

    # Streak helpers
    "calculate_user_level",
    "advance_streak",
    "evaluate_streak_expiration",
    "compute_streak_urgency",

    # Gamification operations
    "GamificationCRUD",
]
