from fitclub.database import Base
from fitclub.models.user_profile import UserProfile
from fitclub.models.gym_checkin import GymCheckin
from fitclub.models.gamification_stats import UserGamificationStats
from fitclub.models.achievement import AvailableAchievement, UserAchievement
from fitclub.models.challenge import AvailableChallenge, UserChallenge
from fitclub.models.workout_session import UserWorkoutSession

__all__ = [
    "Base", "UserProfile", "GymCheckin", "UserGamificationStats",
    "AvailableAchievement", "UserAchievement",
    "AvailableChallenge", "UserChallenge", "UserWorkoutSession"
]
