"""Database engine and session factory management"""
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, URL
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import NullPool

Base = declarative_base()

def create_store_engine(database_path: str) -> Engine:
    """
    Create an engine for a SQLite database file.
    
    Connections are not pooled: every checkout opens the file and every
    release closes it.
    
    Args:
        database_path: Path of the database file
    
    Returns:
        SQLAlchemy engine
    """
    url = URL.create("sqlite", database=database_path)
    return create_engine(url, poolclass=NullPool)


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create a session maker bound to an engine"""
    return sessionmaker(
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )
