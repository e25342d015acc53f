"""
Tests for gym check-in / check-out sessions
"""
from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from fitclub import crud
from fitclub.crud import ErrorCode
from fitclub.models import GymCheckin

T0 = datetime(2025, 3, 10, 9, 0)


def open_sessions(db, user_id):
    return db.query(GymCheckin).filter(
        GymCheckin.user_id == user_id,
        GymCheckin.is_checked_in.is_(True),
        GymCheckin.check_out_time.is_(None),
    ).count()


def test_check_in_opens_session(db, member):
    result = crud.check_in(db, member, now=T0)

    assert result.success
    assert result.data.is_checked_in
    assert result.data.check_in_time == T0
    assert result.data.user_type == "member"
    assert result.data.check_in_reason == "Member workout session"
    assert open_sessions(db, member.id) == 1


def test_trainer_check_in_is_classified_as_staff(db, trainer):
    result = crud.check_in(db, trainer, now=T0)

    assert result.data.user_type == "trainer"
    assert result.data.check_in_reason == "Staff check-in for training session"


def test_second_check_in_is_rejected(db, member):
    crud.check_in(db, member, now=T0)
    result = crud.check_in(db, member, now=T0 + timedelta(minutes=5))

    assert not result.success
    assert result.error == ErrorCode.ALREADY_CHECKED_IN
    assert open_sessions(db, member.id) == 1


def test_at_most_one_open_session_over_any_sequence(db, member):
    steps = ["in", "in", "out", "out", "in", "out", "in", "in", "out"]
    now = T0
    for step in steps:
        if step == "in":
            crud.check_in(db, member, now=now)
        else:
            crud.check_out(db, member, now=now)
        assert open_sessions(db, member.id) <= 1
        now += timedelta(minutes=30)


def test_session_outside_active_window_is_closed_on_next_check_in(db, member):
    crud.check_in(db, member, now=T0)
    later = T0 + timedelta(hours=25)

    result = crud.check_in(db, member, now=later)

    assert result.success
    rows = db.query(GymCheckin).filter(GymCheckin.user_id == member.id).order_by(GymCheckin.created_at).all()
    assert len(rows) == 2
    stale, fresh = rows
    assert not stale.is_checked_in
    assert stale.check_out_time == later
    assert fresh.is_checked_in
    assert open_sessions(db, member.id) == 1


def test_open_session_index_rejects_duplicates(db, member):
    db.add(GymCheckin(user_id=member.id, check_in_time=T0, is_checked_in=True, created_at=T0, updated_at=T0))
    db.add(GymCheckin(user_id=member.id, check_in_time=T0, is_checked_in=True, created_at=T0, updated_at=T0))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_check_out_duration_is_floored_minutes(db, member):
    crud.check_in(db, member, now=T0)
    result = crud.check_out(db, member, now=T0 + timedelta(minutes=47, seconds=59))

    assert result.success
    assert result.data.duration_minutes == 47
    assert not result.data.is_checked_in
    assert open_sessions(db, member.id) == 0


def test_check_out_without_session(db, member):
    result = crud.check_out(db, member, now=T0)

    assert not result.success
    assert result.error == ErrorCode.NO_ACTIVE_CHECKIN


def test_status_reports_running_duration(db, member):
    crud.check_in(db, member, now=T0)

    result = crud.get_status(db, member, now=T0 + timedelta(minutes=12))

    session, is_checked_in, duration = result.data
    assert is_checked_in
    assert session.check_in_time == T0
    assert duration == 12


def test_status_falls_back_to_last_session(db, member):
    crud.check_in(db, member, now=T0)
    crud.check_out(db, member, now=T0 + timedelta(minutes=30))

    session, is_checked_in, duration = crud.get_status(db, member, now=T0 + timedelta(hours=2)).data

    assert not is_checked_in
    assert session.check_out_time == T0 + timedelta(minutes=30)
    assert duration == 30


def test_status_without_any_session(db, member):
    result = crud.get_status(db, member, now=T0)

    assert result.success
    assert result.data == (None, False, None)


def test_workout_days_counts_distinct_days(db, member):
    visits = [
        (datetime(2025, 3, 3, 9, 0), datetime(2025, 3, 3, 10, 0)),
        (datetime(2025, 3, 3, 18, 0), datetime(2025, 3, 3, 19, 0)),
        (datetime(2025, 3, 5, 7, 0), datetime(2025, 3, 5, 8, 0)),
        (datetime(2025, 3, 9, 12, 0), datetime(2025, 3, 9, 13, 0)),
        (datetime(2025, 2, 27, 12, 0), datetime(2025, 2, 27, 13, 0)),
    ]
    for check_in_at, check_out_at in visits:
        crud.check_in(db, member, now=check_in_at)
        crud.check_out(db, member, now=check_out_at)

    result = crud.get_workout_days_this_month(db, member, now=T0)

    assert result.data == {"workout_days": 3, "total_checkins": 4, "month": "March 2025"}


def test_member_cannot_check_in_someone_else(db, member, trainer):
    result = crud.check_in(db, member, user_id=trainer.id, now=T0)

    assert result.error == ErrorCode.FORBIDDEN
    assert open_sessions(db, trainer.id) == 0


def test_admin_can_check_out_a_member(db, member, admin):
    crud.check_in(db, member, now=T0)

    result = crud.check_out(db, admin, user_id=member.id, now=T0 + timedelta(minutes=5))

    assert result.success
    assert open_sessions(db, member.id) == 0


def test_history_requires_admin(db, member):
    result = crud.get_checkin_history(db, member)

    assert result.error == ErrorCode.FORBIDDEN


def test_history_filters_by_user_type(db, member, trainer, admin):
    crud.check_in(db, member, now=T0)
    crud.check_in(db, trainer, now=T0 + timedelta(minutes=1))

    everyone = crud.get_checkin_history(db, admin).data
    trainers = crud.get_checkin_history(db, admin, user_type="trainer").data

    assert [checkin.user_id for checkin, _ in everyone] == [trainer.id, member.id]
    assert len(trainers) == 1
    checkin, profile = trainers[0]
    assert checkin.user_type == "trainer"
    assert profile.full_name == "Tom Trainer"
