"""
Tests for streak progression, freezing and the expiration sweep
"""
from datetime import date, datetime, timedelta

from fitclub.crud import ErrorCode, GamificationCRUD, advance_streak, compute_streak_urgency
from fitclub.models import UserGamificationStats

D = date(2025, 3, 10)


def at(day: date, hour: int = 0, minute: int = 0) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute)


def stats_of(db, caller):
    return GamificationCRUD.get_user_stats(db, caller).data


def test_advance_streak_rules():
    stats = UserGamificationStats(current_streak=0, longest_streak=0, total_workouts=0, streak_frozen=False)

    assert advance_streak(stats, D)
    assert (stats.current_streak, stats.total_workouts) == (1, 1)

    assert not advance_streak(stats, D)
    assert (stats.current_streak, stats.total_workouts) == (1, 1)

    assert advance_streak(stats, D + timedelta(days=1))
    assert stats.current_streak == 2

    assert advance_streak(stats, D + timedelta(days=4))
    assert (stats.current_streak, stats.longest_streak) == (1, 2)


def test_frozen_streak_survives_a_missed_day():
    stats = UserGamificationStats(
        current_streak=4, longest_streak=4, total_workouts=4,
        last_checkin_date=D, streak_frozen=True, streak_frozen_at=at(D + timedelta(days=1), 10),
    )

    advance_streak(stats, D + timedelta(days=2))

    assert stats.current_streak == 5
    assert stats.longest_streak == 5
    assert not stats.streak_frozen
    assert stats.streak_frozen_at is None


def test_frozen_streak_restarts_after_a_long_gap():
    stats = UserGamificationStats(
        current_streak=4, longest_streak=4, total_workouts=4,
        last_checkin_date=D, streak_frozen=True, streak_frozen_at=at(D + timedelta(days=1), 10),
    )

    advance_streak(stats, D + timedelta(days=10))

    assert stats.current_streak == 1
    assert stats.longest_streak == 4
    assert not stats.streak_frozen
    assert stats.streak_frozen_at is None


def test_lapsed_freeze_does_not_cover_the_missed_day():
    # Frozen on the check-in day itself: the freeze ran out before the missed day ended
    stats = UserGamificationStats(
        current_streak=4, longest_streak=4, total_workouts=4,
        last_checkin_date=D, streak_frozen=True, streak_frozen_at=at(D, 20),
    )

    advance_streak(stats, D + timedelta(days=2))

    assert stats.current_streak == 1
    assert not stats.streak_frozen


def test_freeze_does_not_carry_streak_across_weeks_without_sweep(db, member):
    GamificationCRUD.record_checkin(db, member, now=at(D, 9))
    GamificationCRUD.freeze_streak(db, member, now=at(D + timedelta(days=1), 10))

    GamificationCRUD.record_checkin(db, member, now=at(D + timedelta(days=15), 9))

    stats = stats_of(db, member)
    assert stats.current_streak == 1
    assert not stats.streak_frozen


def test_freeze_bridges_one_missed_day(db, member):
    GamificationCRUD.record_checkin(db, member, now=at(D, 9))
    GamificationCRUD.freeze_streak(db, member, now=at(D + timedelta(days=1), 10))

    GamificationCRUD.record_checkin(db, member, now=at(D + timedelta(days=2), 9))

    stats = stats_of(db, member)
    assert stats.current_streak == 2
    assert not stats.streak_frozen


def test_freeze_once_per_week(db, member):
    GamificationCRUD.record_checkin(db, member, now=at(D, 9))

    first = GamificationCRUD.freeze_streak(db, member, now=at(D + timedelta(days=1), 10))
    frozen_at = stats_of(db, member).streak_frozen_at
    second = GamificationCRUD.freeze_streak(db, member, now=at(D + timedelta(days=3), 10))

    assert first.success
    assert not second.success
    assert second.error == ErrorCode.FREEZE_ALREADY_USED
    assert "once per week" in second.message
    stats = stats_of(db, member)
    assert stats.streak_frozen
    assert stats.streak_frozen_at == frozen_at


def test_freeze_allowed_again_next_week(db, member):
    GamificationCRUD.record_checkin(db, member, now=at(D, 9))
    GamificationCRUD.freeze_streak(db, member, now=at(D + timedelta(days=1), 10))

    next_week = GamificationCRUD.freeze_streak(db, member, now=at(D + timedelta(days=7), 10))

    assert next_week.success
    assert stats_of(db, member).streak_freeze_week_start == D + timedelta(days=7)


def test_freeze_needs_stats_and_a_streak(db, member):
    missing = GamificationCRUD.freeze_streak(db, member, now=at(D, 9))
    assert missing.error == ErrorCode.STATS_NOT_FOUND

    stats_of(db, member)
    no_streak = GamificationCRUD.freeze_streak(db, member, now=at(D, 9))
    assert no_streak.error == ErrorCode.NO_ACTIVE_STREAK
    assert not stats_of(db, member).streak_freeze_used_this_week


def test_expiration_respects_freeze_window(db, member, admin):
    GamificationCRUD.record_checkin(db, member, now=at(D, 18))
    frozen_at = at(D + timedelta(days=1))
    GamificationCRUD.freeze_streak(db, member, now=frozen_at)

    during = GamificationCRUD.check_streak_expiration(db, admin, now=frozen_at + timedelta(hours=23))
    assert during.data == {"checked": 1, "unfrozen": 0, "expired": 0}
    assert stats_of(db, member).current_streak == 1

    after = GamificationCRUD.check_streak_expiration(db, admin, now=frozen_at + timedelta(hours=25))
    assert after.data == {"checked": 1, "unfrozen": 1, "expired": 1}
    stats = stats_of(db, member)
    assert stats.current_streak == 0
    assert stats.longest_streak == 1
    assert not stats.streak_frozen


def test_expiration_counts_from_end_of_check_in_day(db, member, admin):
    GamificationCRUD.record_checkin(db, member, now=at(D, 7))

    GamificationCRUD.check_streak_expiration(db, admin, now=at(D + timedelta(days=1), 23))
    assert stats_of(db, member).current_streak == 1

    GamificationCRUD.check_streak_expiration(db, admin, now=at(D + timedelta(days=2), 0, 30))
    assert stats_of(db, member).current_streak == 0


def test_sweep_requires_admin(db, member):
    result = GamificationCRUD.check_streak_expiration(db, member, now=at(D))

    assert result.error == ErrorCode.FORBIDDEN


def test_urgency_levels():
    next_day = D + timedelta(days=1)

    assert compute_streak_urgency(3, D, False, at(next_day, 12)) == ("normal", 12)
    assert compute_streak_urgency(3, D, False, at(next_day, 19)) == ("warning", 5)
    assert compute_streak_urgency(3, D, False, at(next_day, 22, 30)) == ("critical", 2)
    assert compute_streak_urgency(3, D, False, at(next_day + timedelta(days=1), 1)) == ("critical", 0)


def test_urgency_is_normal_without_risk():
    assert compute_streak_urgency(0, D, False, at(D, 12)) == ("normal", 0)
    assert compute_streak_urgency(3, None, False, at(D, 12)) == ("normal", 0)
    assert compute_streak_urgency(3, D, True, at(D + timedelta(days=1), 23)) == ("normal", 0)
