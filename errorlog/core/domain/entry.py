"""Error log entry dataclass"""
from dataclasses import dataclass, field
from typing import Any

from errorlog.core.domain.error import Error


@dataclass
class ErrorLogEntry:
    """
    An error paired with its identifier in the log it was read from.

    The ``log`` attribute is a back reference to the originating log, kept so
    callers can re-fetch the entry. The entry never owns the log.

    Attributes:
        id: Store-assigned identifier
        error: The decoded error
        log: Log the entry was read from
    """
    id: str
    error: Error
    log: Any = field(default=None, repr=False, compare=False)
