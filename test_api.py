"""
HTTP tests for the FitClub API using X-User-ID authentication
"""
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from fitclub.config import DEFAULT_CHALLENGES
from fitclub.crud import GamificationCRUD
from fitclub.main import app
from fitclub.models import GymCheckin, UserWorkoutSession
from fitclub.utils.clock import local_date, utcnow

MEMBER = {"X-User-ID": "member-1"}
ADMIN = {"X-User-ID": "admin-1"}


@pytest.fixture
def client(db, member, admin):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def current_challenges(db):
    GamificationCRUD.seed_catalog(db, [], DEFAULT_CHALLENGES, local_date(utcnow()))


def test_root_and_health(client):
    assert client.get("/").json() == {"message": "FitClub API", "version": "1.0.0"}

    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["status"] == "healthy"


def test_requests_need_identity(client):
    assert client.get("/checkins/status").status_code == 401
    assert client.get("/checkins/status", headers={"X-User-ID": "nobody"}).status_code == 401


def test_request_id_is_echoed(client):
    response = client.get("/", headers={"X-Request-ID": "trace-123"})

    assert response.headers["X-Request-ID"] == "trace-123"


def test_correlation_id_wins_and_missing_id_is_generated(client):
    correlated = client.get("/", headers={"X-Correlation-ID": "corr-9", "X-Request-ID": "trace-123"})
    assert correlated.headers["X-Request-ID"] == "corr-9"

    generated = client.get("/checkins/status", headers=MEMBER)
    assert len(generated.headers["X-Request-ID"]) == 36


def test_check_in_and_out(client, db, catalog):
    checked_in = client.post("/checkins/check-in", headers=MEMBER)
    assert checked_in.status_code == 200
    body = checked_in.json()
    assert body["success"]
    assert body["data"]["is_checked_in"]
    assert body["data"]["user_type"] == "member"

    duplicate = client.post("/checkins/check-in", headers=MEMBER)
    assert duplicate.status_code == 409
    assert duplicate.json()["detail"]["error"] == "ALREADY_CHECKED_IN"

    status = client.get("/checkins/status", headers=MEMBER).json()
    assert status["is_checked_in"]
    assert status["duration_minutes"] == 0

    db.query(GymCheckin).filter(
        GymCheckin.user_id == "member-1", GymCheckin.is_checked_in.is_(True)
    ).update({GymCheckin.check_in_time: utcnow() - timedelta(minutes=45)}, synchronize_session=False)
    db.commit()

    checked_out = client.post("/checkins/check-out", headers=MEMBER)
    assert checked_out.status_code == 200
    out_body = checked_out.json()
    assert not out_body["data"]["is_checked_in"]
    assert out_body["data"]["duration_minutes"] >= 45
    assert out_body["new_achievements"] == ["First Workout"]
    assert db.query(UserWorkoutSession).filter(UserWorkoutSession.user_id == "member-1").count() == 1

    again = client.post("/checkins/check-out", headers=MEMBER)
    assert again.status_code == 404
    assert again.json()["detail"]["error"] == "NO_ACTIVE_CHECKIN"


def test_check_in_updates_stats_and_streak(client):
    client.post("/checkins/check-in", headers=MEMBER)

    stats = client.get("/gamification/stats", headers=MEMBER).json()
    assert stats["total_checkins"] == 1
    assert stats["current_streak"] == 1
    assert stats["total_workouts"] == 1

    streak = client.get("/streaks/me", headers=MEMBER).json()
    assert streak["current_streak"] == 1
    assert streak["urgency_level"] == "normal"
    assert streak["today_local_date"] == streak["last_checkin_date"]

    days = client.get("/checkins/workout-days", headers=MEMBER).json()
    assert days["workout_days"] == 1


def test_freeze_refusal_is_reported_in_body(client):
    no_streak = client.post("/streaks/freeze", headers=MEMBER)
    assert no_streak.status_code == 200
    assert no_streak.json()["can_freeze"] is False

    client.post("/checkins/check-in", headers=MEMBER)
    frozen = client.post("/streaks/freeze", headers=MEMBER).json()
    assert frozen["success"]
    assert frozen["can_freeze"]

    second = client.post("/streaks/freeze", headers=MEMBER).json()
    assert not second["success"]
    assert "once per week" in second["message"]


def test_admin_only_endpoints(client):
    client.post("/checkins/check-in", headers=MEMBER)

    assert client.get("/checkins/history", headers=MEMBER).status_code == 403
    assert client.post("/streaks/expire", headers=MEMBER).status_code == 403

    history = client.get("/checkins/history", headers=ADMIN).json()
    assert history["total_count"] == 1
    assert history["checkins"][0]["full_name"] == "Ana Member"

    sweep = client.post("/streaks/expire", headers=ADMIN).json()
    assert sweep == {"checked": 1, "unfrozen": 0, "expired": 0}


def test_achievements_catalog_marks_unlocked(client, catalog):
    before = client.get("/gamification/achievements", headers=MEMBER).json()
    assert len(before) == 8
    assert not any(item["unlocked"] for item in before)

    recorded = client.post("/gamification/workouts", headers=MEMBER, json={"workout_type": "strength"}).json()
    assert [item["name"] for item in recorded["new_achievements"]] == ["First Workout"]

    after = client.get("/gamification/achievements", headers=MEMBER).json()
    assert [item["name"] for item in after if item["unlocked"]] == ["First Workout"]

    mine = client.get("/gamification/achievements/me", headers=MEMBER).json()
    assert [item["name"] for item in mine] == ["First Workout"]


def test_challenge_progress(client, current_challenges):
    challenges = client.get("/gamification/challenges", headers=MEMBER).json()
    monthly = next(item for item in challenges if item["name"] == "Monthly Fitness Challenge")

    response = client.put(
        f"/gamification/challenges/{monthly['id']}/progress", headers=MEMBER, json={"progress": 20}
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Challenge completed!"

    missing = client.put("/gamification/challenges/nope/progress", headers=MEMBER, json={"progress": 1})
    assert missing.status_code == 404


def test_leaderboard_endpoint(client):
    client.post("/gamification/goals", headers=MEMBER)

    board = client.get("/gamification/leaderboard", headers=MEMBER).json()

    assert board["total_count"] == 1
    assert board["entries"][0]["id"] == "member-1"
    assert board["entries"][0]["rank"] == 1
