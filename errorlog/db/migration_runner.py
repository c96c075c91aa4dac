"""Schema migration runner"""
import logging
import os
from alembic import command
from alembic.config import Config
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = os.path.join(os.path.dirname(__file__), "migrations")


def run_migrations(engine: Engine) -> None:
    """
    Bring a database up to the latest schema revision.
    
    This function runs 'alembic upgrade head' programmatically inside a
    single transaction on the given engine.
    
    Args:
        engine: Engine for the database to migrate
    """
    alembic_cfg = Config()
    alembic_cfg.set_main_option("script_location", MIGRATIONS_DIR.replace("%", "%%"))
    alembic_cfg.set_main_option("sqlalchemy.url", engine.url.render_as_string(hide_password=False).replace("%", "%%"))
    
    try:
        logger.info("Running database migrations...")
        with engine.begin() as connection:
            alembic_cfg.attributes["connection"] = connection
            command.upgrade(alembic_cfg, "head")
        logger.info("Database migrations completed successfully")
    except Exception as e:
        logger.error(f"Failed to run database migrations: {e}")
        raise
