"""Error log protocol definition"""
import re
from typing import List, Optional, Protocol, runtime_checkable

from errorlog.core.domain.entry import ErrorLogEntry
from errorlog.core.domain.error import Error
from errorlog.core.exceptions import ConfigurationError, InvalidArgumentError

MAX_APPLICATION_NAME_LENGTH = 60

_MIN_ID = -(2 ** 63)
_MAX_ID = 2 ** 63 - 1

# Plain ASCII decimal; int() alone also takes "1_0", padding and non-ASCII digits
_ID_PATTERN = re.compile(r"[+-]?[0-9]+")


@runtime_checkable
class ErrorLog(Protocol):
    """Protocol for error log backends"""

    name: str
    application_name: str

    def log(self, error: Error) -> str:
        """
        Persist an error.

        Args:
            error: Error to record

        Returns:
            Identifier assigned to the new entry
        """
        ...

    def get_errors(
        self,
        page_index: int,
        page_size: int,
        entries: Optional[List[ErrorLogEntry]] = None,
    ) -> int:
        """
        Read one page of errors, newest first.

        Args:
            page_index: Zero-based page number
            page_size: Maximum entries per page
            entries: List the page's entries are appended to (optional)

        Returns:
            Total number of errors in the log
        """
        ...

    def get_error(self, id: str) -> Optional[ErrorLogEntry]:
        """
        Fetch a single error by identifier.

        Args:
            id: Identifier returned by log()

        Returns:
            The entry, or None if no error has that identifier
        """
        ...


def check_page_arguments(page_index: int, page_size: int) -> None:
    """Reject negative paging arguments"""
    if page_index < 0:
        raise InvalidArgumentError(f"page_index must be non-negative, got {page_index}")
    if page_size < 0:
        raise InvalidArgumentError(f"page_size must be non-negative, got {page_size}")


def parse_error_id(id: Optional[str]) -> int:
    """
    Convert an error identifier to its integer key.

    Raises:
        InvalidArgumentError: If the identifier is missing, empty or not a
            64-bit integer
    """
    if id is None:
        raise InvalidArgumentError("id is required")
    if not id.strip():
        raise InvalidArgumentError("id must not be empty")
    if not _ID_PATTERN.fullmatch(id):
        raise InvalidArgumentError(f"Invalid error id: {id!r}")
    key = int(id)
    if not _MIN_ID <= key <= _MAX_ID:
        raise InvalidArgumentError(f"Error id out of range: {id!r}")
    return key


def check_application_name(application_name: str) -> str:
    """Validate the application name a log records errors under"""
    application_name = application_name or ""
    if len(application_name) > MAX_APPLICATION_NAME_LENGTH:
        raise ConfigurationError(
            f"Application name is too long. Maximum length allowed is "
            f"{MAX_APPLICATION_NAME_LENGTH} characters."
        )
    return application_name
