# API Routers
from fitclub.routers import checkins, gamification, streaks

__all__ = ["checkins", "gamification", "streaks"]
