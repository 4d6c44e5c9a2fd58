"""PostgreSQL engine construction and per-request session management."""

import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from strongroom.core.config import Settings
from strongroom.core.errors import ConflictError, StorageError

logger = logging.getLogger(__name__)


def create_db_engine(settings: Settings) -> Engine:
    """Build the process-wide engine (connection pool). Dispose it at shutdown."""
    return create_engine(
        settings.DATABASE_URL,
        pool_pre_ping=True,
        echo=settings.DEBUG,
    )


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def get_db(request: Request) -> Generator[Session, None, None]:
    """Dependency that yields a DB session from the app's factory and closes it when done."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        return False


@contextmanager
def db_errors(session: Session, action: str) -> Iterator[None]:
    """
    Translate persistence failures raised inside the block.

    IntegrityError (unique key) becomes ConflictError; any other SQLAlchemyError is
    logged and re-raised as StorageError. The session is rolled back in both cases.
    """
    try:
        yield
    except IntegrityError as e:
        session.rollback()
        logger.info("Integrity violation while trying to %s: %s", action, e.orig)
        raise ConflictError(f"Failed to {action}: a unique value is already in use") from e
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("Failed to %s", action)
        raise StorageError(f"Failed to {action}") from e
