import logging
import time
from typing import Callable

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class DatabaseUnavailableError(RuntimeError):
    """Raised when the database is still unreachable after all startup retries."""


def ping(engine: Engine) -> None:
    """Run a trivial query; raises SQLAlchemyError if the database is unreachable."""
    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))


def connect_with_retry(
    engine: Engine,
    max_retries: int,
    delay_seconds: float,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """
    Wait for the database to accept connections.

    Tries ``max_retries`` times with a fixed ``delay_seconds`` pause between
    attempts. Returns the number of the attempt that succeeded.

    Raises:
        DatabaseUnavailableError: If every attempt failed.
    """
    for attempt in range(1, max_retries + 1):
        try:
            ping(engine)
        except SQLAlchemyError as e:
            logger.warning("DB not ready (%d/%d): %s", attempt, max_retries, e)
            if attempt < max_retries:
                sleep(delay_seconds)
            continue
        logger.info("DB connected (attempt %d/%d)", attempt, max_retries)
        return attempt

    raise DatabaseUnavailableError(f"DB connection failed after {max_retries} retries")
