"""Error log backends"""
from errorlog.stores.memory_error_log import MemoryErrorLog
from errorlog.stores.sqlite_error_log import SqliteErrorLog
from errorlog.stores.factory import create_error_log

__all__ = [
    "MemoryErrorLog",
    "SqliteErrorLog",
    "create_error_log",
]
