"""
Streak expiration sweep for an external scheduler (cron, Cloud Scheduler).

    python -m fitclub.sweep
"""
import sys

from fitclub.crud import GamificationCRUD
from fitclub.database import get_session_local
from fitclub.logging_config import configure_logging
from fitclub.schemas import CallerIdentity
from fitclub.utils.logger import get_logger

logger = get_logger(__name__)

SYSTEM_CALLER = CallerIdentity(id="system", user_type="admin")

def run_sweep() -> dict:
    db = get_session_local()()
    try:
        result = GamificationCRUD.check_streak_expiration(db, SYSTEM_CALLER)
    finally:
        db.close()

    if not result.success:
        raise RuntimeError(result.message)
    return result.data

if __name__ == "__main__":
    configure_logging()
    try:
        summary = run_sweep()
    except Exception as e:
        logger.error(f"Streak sweep failed: {e}")
        sys.exit(1)
    print(f"Checked {summary['checked']} streaks: {summary['unfrozen']} unfrozen, {summary['expired']} expired")
