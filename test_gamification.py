"""
Tests for points, achievements, challenges and activity recording
"""
from datetime import datetime, timedelta

from fitclub import crud
from fitclub.crud import ErrorCode, GamificationCRUD, calculate_user_level
from fitclub.models import AvailableChallenge, UserAchievement, UserWorkoutSession

T0 = datetime(2025, 3, 10, 9, 0)


def visit(db, caller, now, minutes=60):
    """Check in, record the visit for gamification, then check out."""
    crud.check_in(db, caller, now=now)
    result = GamificationCRUD.record_checkin(db, caller, now=now)
    crud.check_out(db, caller, now=now + timedelta(minutes=minutes))
    return result


def stats_of(db, caller):
    return GamificationCRUD.get_user_stats(db, caller).data


def test_level_from_points():
    assert calculate_user_level(0) == 1
    assert calculate_user_level(99) == 1
    assert calculate_user_level(100) == 2
    assert calculate_user_level(250) == 3
    assert calculate_user_level(None) == 1


def test_stats_are_created_on_first_access(db, member):
    stats = stats_of(db, member)

    assert stats.user_id == member.id
    assert stats.total_points == 0
    assert stats.current_level == 1
    assert stats.current_streak == 0
    assert not stats.streak_frozen


def test_same_day_check_ins_count_once(db, member):
    visit(db, member, T0)
    visit(db, member, T0 + timedelta(hours=8))

    stats = stats_of(db, member)
    assert stats.current_streak == 1
    assert stats.total_workouts == 1
    assert stats.total_checkins == 2


def test_consecutive_days_grow_streak_and_gap_resets(db, member):
    for day in range(3):
        visit(db, member, T0 + timedelta(days=day))
    stats = stats_of(db, member)
    assert (stats.current_streak, stats.longest_streak) == (3, 3)

    visit(db, member, T0 + timedelta(days=5))
    stats = stats_of(db, member)
    assert (stats.current_streak, stats.longest_streak) == (1, 3)
    assert stats.total_workouts == 4


def test_longest_streak_never_below_current(db, member, admin):
    days = [0, 1, 2, 4, 5, 5, 6, 7, 8, 12, 13, 14, 15]
    for day in days:
        now = T0 + timedelta(days=day)
        visit(db, member, now)
        if day == 5:
            GamificationCRUD.freeze_streak(db, member, now=now + timedelta(hours=2))
        GamificationCRUD.check_streak_expiration(db, admin, now=now + timedelta(hours=20))
        stats = stats_of(db, member)
        assert stats.longest_streak >= stats.current_streak


def test_achievement_unlocks_only_once(db, member, catalog):
    first = GamificationCRUD.check_and_unlock_achievements(db, member, "workout", 1, now=T0)
    second = GamificationCRUD.check_and_unlock_achievements(db, member, "workout", 1, now=T0)

    assert [record.achievement.name for record in first.data] == ["First Workout"]
    assert second.success
    assert second.data == []
    assert db.query(UserAchievement).filter(UserAchievement.user_id == member.id).count() == 1

    stats = stats_of(db, member)
    assert stats.total_points == 50
    assert stats.achievements_unlocked == 1


def test_achievement_requires_matching_action_and_value(db, member, catalog):
    result = GamificationCRUD.check_and_unlock_achievements(db, member, "streak", 6, now=T0)
    assert result.data == []

    result = GamificationCRUD.check_and_unlock_achievements(db, member, "streak", 7, now=T0)
    assert [record.achievement.name for record in result.data] == ["Week Warrior"]


def test_week_of_check_ins_unlocks_streak_achievement(db, member, catalog):
    unlocked = []
    for day in range(7):
        result = visit(db, member, T0 + timedelta(days=day))
        _, new = result.data
        unlocked += [record.achievement.name for record in new]

    assert unlocked == ["Week Warrior"]
    stats = stats_of(db, member)
    assert stats.total_points == 100
    assert stats.current_level == 2


def test_record_workout_logs_session_without_touching_workout_days(db, member, catalog):
    result = GamificationCRUD.record_workout(db, member, workout_type="cardio", duration_minutes=30, now=T0)

    assert result.success
    assert [record.achievement.name for record in result.data] == ["First Workout"]
    sessions = db.query(UserWorkoutSession).filter(UserWorkoutSession.user_id == member.id).all()
    assert len(sessions) == 1
    assert sessions[0].workout_type == "cardio"

    stats = stats_of(db, member)
    assert stats.total_workouts == 0
    assert stats.last_workout_date == T0.date()


def test_goals_unlock_goal_achievement(db, member, catalog):
    results = [GamificationCRUD.record_goal_achieved(db, member, now=T0) for _ in range(3)]

    assert results[0].data == []
    assert results[1].data == []
    assert [record.achievement.name for record in results[2].data] == ["Goal Crusher"]
    stats = stats_of(db, member)
    assert stats.total_goals_achieved == 3
    assert stats.total_points == 200


def test_user_challenges_list_open_challenges(db, member, catalog):
    challenges = GamificationCRUD.get_user_challenges(db, member, now=datetime(2025, 3, 5, 12, 0)).data
    assert {challenge.name for challenge, _, _ in challenges} == {
        "Monthly Fitness Challenge", "Consistency Challenge", "Check-in Streak"
    }
    assert all(progress == 0 and not completed for _, progress, completed in challenges)

    later = GamificationCRUD.get_user_challenges(db, member, now=datetime(2025, 3, 20, 12, 0)).data
    assert [challenge.name for challenge, _, _ in later] == ["Monthly Fitness Challenge"]


def test_challenge_completion_awards_points_once(db, member, catalog):
    challenge = db.query(AvailableChallenge).filter(AvailableChallenge.name == "Consistency Challenge").first()

    partial = GamificationCRUD.update_challenge_progress(db, member, challenge.id, 3, now=T0)
    assert partial.success
    assert not partial.data.completed

    done = GamificationCRUD.update_challenge_progress(db, member, challenge.id, 5, now=T0)
    assert done.data.completed
    assert done.data.points_earned == 250

    again = GamificationCRUD.update_challenge_progress(db, member, challenge.id, 6, now=T0)
    assert again.data.current_progress == 6

    stats = stats_of(db, member)
    assert stats.total_points == 250
    assert stats.current_level == 3
    assert stats.challenges_completed == 1


def test_unknown_challenge(db, member):
    result = GamificationCRUD.update_challenge_progress(db, member, "missing", 1, now=T0)

    assert result.error == ErrorCode.NOT_FOUND


def test_member_cannot_read_other_stats(db, member, trainer):
    result = GamificationCRUD.get_user_stats(db, member, user_id=trainer.id)

    assert result.error == ErrorCode.FORBIDDEN


def test_seed_catalog_is_idempotent(db, catalog):
    added = GamificationCRUD.seed_catalog(db, [{"name": "First Workout", "category": "workout",
                                               "requirement_type": "count"}], [], T0.date())

    assert added == (0, 0)
