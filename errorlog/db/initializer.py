"""
First-use creation of error log database files.

A database file only ever appears at its final path fully migrated: the
schema is built in a staging file next to it and then published with an
atomic hard link, which fails if the target already exists. Within a process
a single lock serializes creation so concurrent constructors do the work
once; across processes the link decides the winner.
"""
import contextlib
import logging
import os
import tempfile
import threading

from alembic.util import CommandError
from sqlalchemy.exc import SQLAlchemyError

from errorlog.core.exceptions import StorageError
from errorlog.db.database import create_store_engine
from errorlog.db.migration_runner import run_migrations

logger = logging.getLogger(__name__)

_creation_lock = threading.Lock()


def ensure_database(database_path: str) -> bool:
    """
    Make sure a migrated database exists at ``database_path``.

    Args:
        database_path: Absolute path of the database file

    Returns:
        True if this call created the database, False if it already existed

    Raises:
        StorageError: If the database could not be created
    """
    if os.path.exists(database_path):
        return False

    with _creation_lock:
        # Another thread may have created it while we waited
        if os.path.exists(database_path):
            return False
        return _create_database(database_path)


def _create_database(database_path: str) -> bool:
    directory = os.path.dirname(database_path)
    try:
        os.makedirs(directory, exist_ok=True)
        fd, staging_path = tempfile.mkstemp(
            prefix=f".{os.path.basename(database_path)}.",
            suffix=".creating",
            dir=directory,
        )
        os.close(fd)
    except OSError as e:
        logger.error(f"Cannot create error log database directory {directory}: {e}")
        raise StorageError(f"Cannot create error log database at {database_path}: {e}") from e

    try:
        engine = create_store_engine(staging_path)
        try:
            run_migrations(engine)
        finally:
            engine.dispose()

        try:
            os.link(staging_path, database_path)
        except FileExistsError:
            logger.info(f"Error log database {database_path} was created by another process")
            return False

        logger.info(f"Created error log database at {database_path}")
        return True

    except (SQLAlchemyError, CommandError, OSError) as e:
        logger.error(f"Failed to create error log database at {database_path}: {e}", exc_info=True)
        raise StorageError(f"Failed to create error log database at {database_path}: {e}") from e

    finally:
        for path in (staging_path, staging_path + "-journal"):
            with contextlib.suppress(FileNotFoundError):
                os.remove(path)
