"""Database session utilities"""
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session, sessionmaker


@contextmanager
def session_scope(session_factory: sessionmaker) -> Iterator[Session]:
    """
    Context manager for database sessions.
    
    Commits on success, rolls back on error and always closes the session.
    
    Usage:
        with session_scope(factory) as db:
            # Use db session
            pass
    """
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
