"""In-memory error log"""
import itertools
import logging
import threading
from collections import deque
from dataclasses import replace
from typing import List, Mapping, Optional

from errorlog.config.timezone import TimezoneConverter
from errorlog.core.domain.entry import ErrorLogEntry
from errorlog.core.domain.error import Error
from errorlog.core.error_log import check_application_name, check_page_arguments, parse_error_id
from errorlog.core.exceptions import ConfigurationError, InvalidArgumentError

logger = logging.getLogger(__name__)

DEFAULT_SIZE = 15
MAX_SIZE = 500


class MemoryErrorLog:
    """
    Error log kept in process memory.

    Holds at most ``size`` errors; logging beyond that discards the oldest
    entry. Nothing survives a process restart.
    """

    name = "In-Memory Error Log"

    def __init__(
        self,
        size: int = DEFAULT_SIZE,
        application_name: str = "",
        timezone_converter: Optional[TimezoneConverter] = None,
    ):
        if not 1 <= size <= MAX_SIZE:
            raise ConfigurationError(f"Memory error log size must be between 1 and {MAX_SIZE}, got {size}")

        self.size = size
        self.application_name = check_application_name(application_name)
        self._tz = timezone_converter or TimezoneConverter()
        self._entries = deque(maxlen=size)
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    @classmethod
    def from_config(
        cls,
        config: Optional[Mapping[str, str]],
        timezone_converter: Optional[TimezoneConverter] = None,
    ) -> "MemoryErrorLog":
        """Build a log from a mapping with optional ``size`` and ``applicationName`` keys"""
        config = config or {}
        try:
            size = int(config.get("size", DEFAULT_SIZE))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid memory error log size: {config.get('size')!r}") from e

        application_name = config.get("applicationName") or config.get("application_name") or ""
        return cls(size=size, application_name=application_name, timezone_converter=timezone_converter)

    def __repr__(self):
        return f"<MemoryErrorLog(size={self.size}, application={self.application_name!r})>"

    def _entry(self, error_id: int, error: Error) -> ErrorLogEntry:
        return ErrorLogEntry(str(error_id), replace(error, time=self._tz.utc_to_local(error.time)), self)

    def log(self, error: Error) -> str:
        """Keep an error and return its new identifier"""
        if error is None:
            raise InvalidArgumentError("error is required")

        with self._lock:
            error_id = next(self._ids)
            self._entries.append((error_id, error))

        logger.debug(f"Logged error {error_id} ({error.type})", extra={'error_id': error_id})
        return str(error_id)

    def get_errors(
        self,
        page_index: int,
        page_size: int,
        entries: Optional[List[ErrorLogEntry]] = None,
    ) -> int:
        """Read one page of errors, newest first"""
        check_page_arguments(page_index, page_size)

        with self._lock:
            snapshot = list(self._entries)

        if entries is not None and page_size:
            ordered = sorted(snapshot, key=lambda item: (item[1].time, item[0]), reverse=True)
            start = page_index * page_size
            for error_id, error in ordered[start:start + page_size]:
                entries.append(self._entry(error_id, error))

        return len(snapshot)

    def get_error(self, id: str) -> Optional[ErrorLogEntry]:
        """Fetch the error with the given identifier, or None"""
        error_id = parse_error_id(id)

        with self._lock:
            match = next((error for key, error in self._entries if key == error_id), None)

        if match is None:
            return None
        return self._entry(error_id, match)
