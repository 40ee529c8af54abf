"""Database readiness check run before the service starts in containers."""
import time
from sqlalchemy import text
from restaurant_ordering.core_settings import get_settings
from restaurant_ordering.infrastructure.db import make_engine
from shared.core import get_logger, setup_logging

logger = get_logger(__name__)

def wait(max_attempts: int = 30, delay: float = 1.0) -> bool:
    engine = make_engine(get_settings().database_url)
    try:
        for attempt in range(1, max_attempts + 1):
            try:
                with engine.connect() as conn:
                    conn.execute(text("SELECT 1"))
                logger.info(f"Database ready after {attempt} attempt(s).")
                return True
            except Exception as e:
                logger.warning(f"DB not ready (attempt {attempt}): {e}")
                time.sleep(delay)
    finally:
        engine.dispose()
    raise SystemExit("Database not ready after max attempts")

if __name__ == "__main__":
    setup_logging("restaurant-ordering-wait-for-db")
    wait()
