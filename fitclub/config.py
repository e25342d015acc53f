import os
from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    """Application settings."""
    # Base settings
    DEBUG: bool = False

    # CORS settings
    CORS_ORIGINS: List[str] = [
        "http://localhost:8081",  # Expo dev server
        "http://localhost:8000",  # Backend server
    ]

    # Firebase settings
    FIREBASE_PROJECT_ID: str = ""
    # Explicit Firebase Admin SDK credentials JSON path
    FIREBASE_SERVICE_ACCOUNT_JSON: str = os.getenv("FIREBASE_SERVICE_ACCOUNT_JSON", "./firebase-service-account.json")

    # Database settings
    DB_HOST: str = os.getenv("DB_HOST", "localhost")
    DB_PORT: str = os.getenv("DB_PORT", "5432")
    DB_USER: str = os.getenv("DB_USER", "postgres")
    DB_PASSWORD: str = os.getenv("DB_PASSWORD", "postgres")
    DB_NAME: str = os.getenv("DB_NAME", "fitclub")
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        f"postgresql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
    )

    # Redis settings
    REDIS_HOST: str = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT: int = int(os.getenv("REDIS_PORT", "6379"))
    CACHE_ENABLED: bool = os.getenv("CACHE_ENABLED", "true").lower() == "true"
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"

    # Calendar days (streaks, workout days, freeze weeks) are counted in this zone
    GYM_TIMEZONE: str = os.getenv("GYM_TIMEZONE", "UTC")

    # Check-in / streak windows
    ACTIVE_CHECKIN_WINDOW_HOURS: int = int(os.getenv("ACTIVE_CHECKIN_WINDOW_HOURS", "24"))
    STREAK_EXPIRY_HOURS: int = int(os.getenv("STREAK_EXPIRY_HOURS", "24"))
    STREAK_FREEZE_HOURS: int = int(os.getenv("STREAK_FREEZE_HOURS", "24"))

    # Leaderboard
    LEADERBOARD_LIMIT: int = int(os.getenv("LEADERBOARD_LIMIT", "50"))
    LEADERBOARD_CACHE_SECONDS: int = int(os.getenv("LEADERBOARD_CACHE_SECONDS", "300"))

    class Config:
        env_file = ".env"
        case_sensitive = True

# Create settings instance
settings = Settings()

# Points needed per level (level = points // POINTS_PER_LEVEL + 1)
POINTS_PER_LEVEL = 100

# Streak urgency thresholds in hours remaining
STREAK_WARNING_HOURS = 6
STREAK_CRITICAL_HOURS = 2

# Default achievement catalog seeded by init_db
DEFAULT_ACHIEVEMENTS = [
    {"name": "First Workout", "description": "Complete your first workout", "icon": "🎯", "points": 50,
     "category": "workout", "requirement_type": "count", "requirement_value": 1,
     "requirement_description": "Complete 1 workout"},
    {"name": "Week Warrior", "description": "Work out 7 days in a row", "icon": "🔥", "points": 100,
     "category": "streak", "requirement_type": "streak", "requirement_value": 7,
     "requirement_description": "Maintain a 7-day workout streak"},
    {"name": "Goal Crusher", "description": "Achieve 3 monthly goals", "icon": "🏆", "points": 200,
     "category": "goal", "requirement_type": "count", "requirement_value": 3,
     "requirement_description": "Achieve 3 monthly goals"},
    {"name": "Month Master", "description": "Complete 20 workouts in a month", "icon": "⭐", "points": 300,
     "category": "workout", "requirement_type": "count", "requirement_value": 20,
     "requirement_description": "Complete 20 workouts in a month"},
    {"name": "Streak Legend", "description": "Maintain a 30-day workout streak", "icon": "👑", "points": 500,
     "category": "streak", "requirement_type": "streak", "requirement_value": 30,
     "requirement_description": "Maintain a 30-day workout streak"},
    {"name": "Check-in Champion", "description": "Check in to the gym 50 times", "icon": "📍", "points": 150,
     "category": "checkin", "requirement_type": "count", "requirement_value": 50,
     "requirement_description": "Check in 50 times"},
    {"name": "Fitness Enthusiast", "description": "Complete 100 workouts", "icon": "💪", "points": 400,
     "category": "workout", "requirement_type": "count", "requirement_value": 100,
     "requirement_description": "Complete 100 workouts"},
    {"name": "Consistency King", "description": "Work out 5 days a week for 4 weeks", "icon": "👑", "points": 600,
     "category": "streak", "requirement_type": "streak", "requirement_value": 20,
     "requirement_description": "Work out 5 days a week for 4 weeks"},
]

# Default challenges seeded by init_db (dates are filled in relative to the seeding day)
DEFAULT_CHALLENGES = [
    {"name": "Monthly Fitness Challenge", "description": "Complete 20 workouts this month", "type": "monthly",
     "target_value": 20, "reward_points": 500, "challenge_category": "workout", "duration_days": 30},
    {"name": "Consistency Challenge", "description": "Work out 5 days in a row", "type": "weekly",
     "target_value": 5, "reward_points": 250, "challenge_category": "streak", "duration_days": 7},
    {"name": "Check-in Streak", "description": "Check in to the gym 7 days in a row", "type": "weekly",
     "target_value": 7, "reward_points": 100, "challenge_category": "checkin", "duration_days": 7},
]
