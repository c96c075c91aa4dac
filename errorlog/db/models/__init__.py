"""Database models"""
from errorlog.db.models.error_log import COLUMN_LIMITS, ErrorLogRecord

__all__ = [
    "COLUMN_LIMITS",
    "ErrorLogRecord",
]
