"""Domain objects"""
from errorlog.core.domain.error import Error
from errorlog.core.domain.entry import ErrorLogEntry

__all__ = [
    "Error",
    "ErrorLogEntry",
]
