from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker
from tenacity import retry, stop_after_attempt, wait_exponential

from sociate.config import DATABASE_URL, DB_ECHO, DB_RETRY_ATTEMPTS, DB_RETRY_MAX_WAIT, DB_RETRY_MIN_WAIT
from sociate.logging_config import get_logger
from sociate.models import Base

logger = get_logger(__name__)

engine = create_engine(DATABASE_URL, pool_pre_ping=True, echo=DB_ECHO)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


@contextmanager
def get_session() -> Session:
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@retry(
    stop=stop_after_attempt(DB_RETRY_ATTEMPTS),
    wait=wait_exponential(multiplier=1, min=DB_RETRY_MIN_WAIT, max=DB_RETRY_MAX_WAIT),
    reraise=True,
)
def init_db(bind=None) -> None:
    """Create all tables that do not exist yet, waiting for the store to come up."""
    target = bind if bind is not None else engine
    Base.metadata.create_all(target)
    logger.info("Schema ready on %s", target.url.render_as_string(hide_password=True))


def insert_once(db: Session, row) -> bool:
    """
    Insert ``row`` inside a savepoint, treating a unique-key violation as a no-op.

    Callers check for an existing row first; this covers the window where a
    concurrent request inserts the same key between that check and our flush.

    Returns:
        True if the row was inserted, False if the key already existed
    """
    try:
        with db.begin_nested():
            db.add(row)
    except IntegrityError:
        logger.debug("Concurrent insert of %s ignored", type(row).__name__)
        return False
    return True
