from __future__ import annotations
from datetime import date, datetime, timedelta
from typing import Optional, Tuple
import math

from fitclub.config import settings, POINTS_PER_LEVEL, STREAK_WARNING_HOURS, STREAK_CRITICAL_HOURS
from fitclub.models import UserGamificationStats
from fitclub.utils.clock import hours_between, hours_since_day_ended, local_midnight_utc, week_start


def calculate_user_level(points: int) -> int:
    return max(1, (points or 0) // POINTS_PER_LEVEL + 1)


def freeze_covers_missed_day(stats: UserGamificationStats, missed_day: date) -> bool:
    """Whether the freeze was still running when `missed_day` ended."""
    if not stats.streak_frozen or stats.streak_frozen_at is None:
        return False
    missed_day_end = local_midnight_utc(missed_day + timedelta(days=1))
    return 0 <= hours_between(stats.streak_frozen_at, missed_day_end) <= settings.STREAK_FREEZE_HOURS


def advance_streak(stats: UserGamificationStats, today: date) -> bool:
    """
    Apply a check-in on local calendar day `today` to the streak counters.

    Same day: nothing changes, so several check-ins on one day count once.
    Next day: the streak grows by one. Exactly one missed day: the streak
    continues if a freeze was running when that day ended, and the freeze is
    used up. Any other gap restarts the streak at 1 and drops the freeze.

    Returns:
        True if the stats changed (a new workout day was recorded)
    """
    last = stats.last_checkin_date
    current = stats.current_streak or 0

    if last is None:
        new_streak = 1
    else:
        gap = (today - last).days
        if gap <= 0:
            return False
        if gap == 1:
            new_streak = current + 1
        else:
            if gap == 2 and freeze_covers_missed_day(stats, last + timedelta(days=1)):
                new_streak = current + 1
            else:
                new_streak = 1
            stats.streak_frozen = False
            stats.streak_frozen_at = None

    stats.current_streak = new_streak
    stats.longest_streak = max(stats.longest_streak or 0, new_streak)
    stats.last_checkin_date = today
    stats.total_workouts = (stats.total_workouts or 0) + 1
    return True


def evaluate_streak_expiration(stats: UserGamificationStats, now: datetime) -> Tuple[bool, bool]:
    """
    Expire or unfreeze one user's streak.

    A freeze holds off expiry for STREAK_FREEZE_HOURS; once it lapses the
    streak is unfrozen and then expired in the same pass if the last check-in
    day ended more than STREAK_EXPIRY_HOURS ago.

    Expiry counts from the end of the last check-in day, not its start, so a
    member who trained yesterday is not expired at the first sweep of today.

    Returns:
        (unfroze, expired)
    """
    if not stats.current_streak or stats.last_checkin_date is None:
        return False, False

    unfroze = False
    if stats.streak_frozen:
        if hours_between(stats.streak_frozen_at, now) < settings.STREAK_FREEZE_HOURS:
            return False, False
        stats.streak_frozen = False
        stats.streak_frozen_at = None
        unfroze = True

    if hours_since_day_ended(stats.last_checkin_date, now) >= settings.STREAK_EXPIRY_HOURS:
        stats.current_streak = 0
        return unfroze, True
    return unfroze, False


def reset_freeze_week(stats: UserGamificationStats, today: date) -> None:
    """Start a new freeze week when the stored week start is not this week's Monday."""
    monday = week_start(today)
    if stats.streak_freeze_week_start != monday:
        stats.streak_freeze_used_this_week = False
        stats.streak_freeze_week_start = monday


def compute_streak_urgency(
    current_streak: int,
    last_checkin_date: Optional[date],
    streak_frozen: bool,
    now: datetime,
) -> Tuple[str, int]:
    """
    How close a streak is to expiring.

    Returns:
        (urgency_level, hours_remaining) where urgency_level is normal,
        warning or critical
    """
    if not last_checkin_date or not current_streak or streak_frozen:
        return "normal", 0

    elapsed = hours_since_day_ended(last_checkin_date, now)
    remaining = max(0, math.ceil(settings.STREAK_EXPIRY_HOURS - elapsed))

    if remaining <= STREAK_CRITICAL_HOURS:
        return "critical", remaining
    if remaining <= STREAK_WARNING_HOURS:
        return "warning", remaining
    return "normal", remaining
