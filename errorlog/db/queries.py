"""Database query utilities"""
from datetime import datetime
from typing import List, Optional
from sqlalchemy import func, select
from sqlalchemy.engine import Row
from sqlalchemy.orm import Session
from errorlog.db.models.error_log import COLUMN_LIMITS, ErrorLogRecord


def _fit(column: str, value: Optional[str]) -> str:
    """Truncate a value to its column's maximum length"""
    return (value or "")[:COLUMN_LIMITS[column]]


def create_error_record(
    db: Session,
    application: str,
    host: str,
    type: str,
    source: str,
    message: str,
    user: str,
    status_code: int,
    time_utc: datetime,
    all_xml: str,
) -> ErrorLogRecord:
    """Insert an error row and return it with its generated id"""
    record = ErrorLogRecord(
        application=_fit("application", application),
        host=_fit("host", host),
        type=_fit("type", type),
        source=_fit("source", source),
        message=_fit("message", message),
        user=_fit("user", user),
        status_code=status_code,
        time_utc=time_utc,
        all_xml=all_xml,
    )
    db.add(record)
    db.flush()
    return record


def count_error_records(db: Session) -> int:
    """Count all error rows"""
    return db.execute(select(func.count()).select_from(ErrorLogRecord)).scalar_one()


def get_error_page(db: Session, offset: int, limit: int) -> List[Row]:
    """
    Get a window of errors, newest first.

    Only the narrow columns are read; ``all_xml`` is never loaded.
    Ties on time are broken by id so later inserts come first.
    """
    query = (
        select(
            ErrorLogRecord.id,
            ErrorLogRecord.application,
            ErrorLogRecord.host,
            ErrorLogRecord.type,
            ErrorLogRecord.source,
            ErrorLogRecord.message,
            ErrorLogRecord.user,
            ErrorLogRecord.status_code,
            ErrorLogRecord.time_utc,
        )
        .order_by(ErrorLogRecord.time_utc.desc(), ErrorLogRecord.id.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(db.execute(query).all())


def get_error_xml(db: Session, error_id: int) -> Optional[str]:
    """Get the stored XML of one error, or None if there is no such row"""
    query = select(ErrorLogRecord.all_xml).where(ErrorLogRecord.id == error_id)
    return db.execute(query).scalar_one_or_none()
