from fitclub.config import DEFAULT_ACHIEVEMENTS, DEFAULT_CHALLENGES
from fitclub.crud import GamificationCRUD
from fitclub.database import Base, get_engine, get_session_local
from fitclub.utils.clock import local_date, utcnow
from fitclub.utils.logger import get_logger
import fitclub.models  # noqa: F401  registers tables on Base.metadata

logger = get_logger(__name__)

def init_db():
    """Create missing tables and seed the default achievement and challenge catalog."""
    db = None
    try:
        Base.metadata.create_all(bind=get_engine())
        db = get_session_local()()
        added_achievements, added_challenges = GamificationCRUD.seed_catalog(
            db, DEFAULT_ACHIEVEMENTS, DEFAULT_CHALLENGES, local_date(utcnow())
        )
        logger.info(f"Database initialized: {added_achievements} achievements and {added_challenges} challenges seeded")
        print(f"Database initialized: {added_achievements} achievements and {added_challenges} challenges seeded")
    except Exception as e:
        logger.error(f"Error during database initialization: {e}")
        print(f"Error during database initialization: {e}")
        raise
    finally:
        if db is not None:
            db.close()

if __name__ == "__main__":
    init_db()
