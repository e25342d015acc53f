from fitclub.schemas.user import CallerIdentity
from fitclub.schemas.checkin import (
    CheckinResponse, CheckinActionResponse, CheckinStatusResponse, WorkoutDaysResponse,
    CheckinHistoryEntry, CheckinHistoryResponse
)
from fitclub.schemas.gamification import (
    UserStatsResponse, AchievementResponse, ChallengeResponse, ChallengeProgressUpdate,
    LeaderboardEntry, LeaderboardResponse, WorkoutCreate, ActivityRecordedResponse
)
from fitclub.schemas.streak import StreakResponse, FreezeStreakResponse, StreakSweepResponse

__all__ = [
    "CallerIdentity",
    "CheckinResponse", "CheckinActionResponse", "CheckinStatusResponse", "WorkoutDaysResponse",
    "CheckinHistoryEntry", "CheckinHistoryResponse",
    "UserStatsResponse", "AchievementResponse", "ChallengeResponse", "ChallengeProgressUpdate",
    "LeaderboardEntry", "LeaderboardResponse", "WorkoutCreate", "ActivityRecordedResponse",
    "StreakResponse", "FreezeStreakResponse", "StreakSweepResponse",
]
