import os

# Must be set before fitclub.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CACHE_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["GYM_TIMEZONE"] = "UTC"
os.environ["FIREBASE_SERVICE_ACCOUNT_JSON"] = "./missing-firebase-service-account.json"

from datetime import date

import pytest

from fitclub.config import DEFAULT_ACHIEVEMENTS, DEFAULT_CHALLENGES
from fitclub.crud import GamificationCRUD, create_profile
from fitclub.database import Base, get_engine, get_session_local
from fitclub.schemas import CallerIdentity
import fitclub.models  # noqa: F401


@pytest.fixture
def db():
    engine = get_engine()
    Base.metadata.create_all(bind=engine)
    session = get_session_local()()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def member(db):
    create_profile(db, "member-1", email="ana@example.com", full_name="Ana Member", username="ana")
    return CallerIdentity(id="member-1", user_type="member")


@pytest.fixture
def trainer(db):
    create_profile(db, "trainer-1", email="tom@example.com", full_name="Tom Trainer", username="tom", user_type="trainer")
    return CallerIdentity(id="trainer-1", user_type="trainer")


@pytest.fixture
def admin(db):
    create_profile(db, "admin-1", email="root@example.com", full_name="Gym Admin", username="admin", user_type="admin")
    return CallerIdentity(id="admin-1", user_type="admin")


@pytest.fixture
def catalog(db):
    GamificationCRUD.seed_catalog(db, DEFAULT_ACHIEVEMENTS, DEFAULT_CHALLENGES, date(2025, 3, 1))
