"""Error dataclass"""
import socket
import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Mapping, Optional


_COLLECTION_FIELDS = ("server_variables", "query_string", "form", "cookies")


def _now() -> datetime:
    return datetime.now(timezone.utc).astimezone()


@dataclass(frozen=True)
class Error:
    """
    A single application failure as recorded in an error log.

    Attributes:
        application_name: Application that raised the error
        host_name: Machine the error occurred on
        type: Fully qualified exception type name
        source: Module or component the error originated from
        message: Short human readable description
        detail: Full detail, usually the formatted traceback
        user: User the failing request ran as
        time: When the error occurred (always timezone-aware)
        status_code: HTTP status code associated with the failure
        web_host_html_message: Alternate HTML rendering from the host
        server_variables: Server/environment variables at failure time
        query_string: Query string parameters of the failing request
        form: Form fields of the failing request
        cookies: Cookies of the failing request
    """
    application_name: str = ""
    host_name: str = ""
    type: str = ""
    source: str = ""
    message: str = ""
    detail: str = ""
    user: str = ""
    time: datetime = field(default_factory=_now)
    status_code: int = 0
    web_host_html_message: str = ""
    server_variables: Mapping[str, str] = field(default_factory=dict)
    query_string: Mapping[str, str] = field(default_factory=dict)
    form: Mapping[str, str] = field(default_factory=dict)
    cookies: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        # Naive times are local wall-clock times
        if self.time.tzinfo is None:
            object.__setattr__(self, "time", self.time.astimezone())
        # Collections are kept as read-only copies
        for name in _COLLECTION_FIELDS:
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))

    def __hash__(self):
        return hash((
            self.application_name, self.host_name, self.type, self.source,
            self.message, self.detail, self.user, self.time, self.status_code,
            self.web_host_html_message,
        ) + tuple(frozenset(getattr(self, name).items()) for name in _COLLECTION_FIELDS))

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        application_name: str = "",
        user: str = "",
        status_code: int = 0,
        time: Optional[datetime] = None,
    ) -> "Error":
        """
        Build an Error describing an exception.

        Args:
            exc: The exception to describe
            application_name: Application the exception belongs to
            user: User the failing operation ran as
            status_code: HTTP status code, if any
            time: When the exception occurred (default: now)

        Returns:
            Error populated from the exception and its traceback
        """
        exc_type = type(exc)
        type_name = exc_type.__qualname__
        if exc_type.__module__ not in ("builtins", "__main__"):
            type_name = f"{exc_type.__module__}.{type_name}"

        source = ""
        tb = exc.__traceback__
        if tb is not None:
            while tb.tb_next is not None:
                tb = tb.tb_next
            source = tb.tb_frame.f_globals.get("__name__", "")

        return cls(
            application_name=application_name,
            host_name=socket.gethostname(),
            type=type_name,
            source=source,
            message=str(exc),
            detail="".join(traceback.format_exception(exc_type, exc, exc.__traceback__)),
            user=user,
            time=time or _now(),
            status_code=status_code,
        )
