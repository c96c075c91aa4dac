"""
Connection string parsing.

Two forms are understood:

- SQLAlchemy URLs, e.g. ``sqlite:///var/log/errors.db``
- keyword strings, e.g. ``Data Source=|DataDirectory|/errors.db;Password=x``
"""
import logging
import os
from typing import Dict, Mapping, Optional

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from errorlog.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DATA_DIRECTORY_MACRO = "|DataDirectory|"

_DATA_SOURCE_KEYS = ("data source", "datasource", "filename")


def parse_keywords(connection_string: str) -> Dict[str, str]:
    """
    Split a ``key=value;key=value`` connection string.

    Keys are lower-cased with surrounding whitespace removed. Values may be
    wrapped in single or double quotes, in which case ``;`` may appear inside
    them and a doubled quote stands for a literal one.
    """
    keywords = {}
    i = 0
    length = len(connection_string)

    while i < length:
        end = connection_string.find("=", i)
        if end == -1:
            if connection_string[i:].strip(" ;"):
                raise ConfigurationError(f"Malformed connection string near {connection_string[i:]!r}")
            break
        key = connection_string[i:end].strip(" ;").lower()
        i = end + 1

        while i < length and connection_string[i] == " ":
            i += 1

        if i < length and connection_string[i] in ("'", '"'):
            quote = connection_string[i]
            i += 1
            chars = []
            while True:
                if i >= length:
                    raise ConfigurationError("Unterminated quoted value in connection string")
                if connection_string[i] == quote:
                    if i + 1 < length and connection_string[i + 1] == quote:
                        chars.append(quote)
                        i += 2
                        continue
                    i += 1
                    break
                chars.append(connection_string[i])
                i += 1
            value = "".join(chars)
            end = connection_string.find(";", i)
            i = length if end == -1 else end + 1
        else:
            end = connection_string.find(";", i)
            if end == -1:
                end = length
            value = connection_string[i:end].strip()
            i = end + 1

        if key:
            keywords[key] = value

    return keywords


def get_data_source_path(connection_string: str, data_directory: Optional[str] = None) -> str:
    """
    Derive the database file path from a connection string.

    Args:
        connection_string: SQLAlchemy URL or keyword connection string
        data_directory: Directory substituted for ``|DataDirectory|``

    Returns:
        Absolute path of the database file

    Raises:
        ConfigurationError: If no file path can be derived
    """
    if not connection_string or not connection_string.strip():
        raise ConfigurationError("Connection string is missing for the error log.")

    if "://" in connection_string:
        try:
            url = make_url(connection_string)
        except ArgumentError as e:
            raise ConfigurationError(f"Invalid database URL: {e}") from e
        if url.get_backend_name() != "sqlite":
            raise ConfigurationError(
                f"Unsupported database backend {url.get_backend_name()!r}; only sqlite files are supported"
            )
        path = url.database or ""
        password = url.password
    else:
        keywords = parse_keywords(connection_string)
        path = next((keywords[key] for key in _DATA_SOURCE_KEYS if keywords.get(key)), "")
        password = keywords.get("password")

    if not path:
        raise ConfigurationError("Connection string does not name a data source file.")
    if path == ":memory:" or path.startswith("file::memory:"):
        raise ConfigurationError(
            "In-memory databases cannot back a persistent error log; use the memory backend instead."
        )
    if password:
        logger.warning("Ignoring password in error log connection string; SQLite files are not encrypted")

    if path.startswith(DATA_DIRECTORY_MACRO):
        remainder = path[len(DATA_DIRECTORY_MACRO):].lstrip("/\\")
        path = os.path.join(data_directory or os.getcwd(), remainder)

    return os.path.abspath(os.path.expanduser(path))


def get_connection_string(
    config: Optional[Mapping[str, str]],
    connection_strings: Optional[Mapping[str, str]] = None,
) -> str:
    """
    Resolve the connection string from a log's configuration mapping.

    ``connectionString`` is used when present; otherwise
    ``connectionStringName`` is looked up in ``connection_strings``.
    Snake-case spellings of both keys are accepted too.

    Returns:
        The connection string, or an empty string if none is configured

    Raises:
        ConfigurationError: If a named connection string is not defined
    """
    if config is None:
        raise ConfigurationError("Error log configuration is missing.")

    connection_string = config.get("connectionString") or config.get("connection_string") or ""
    if connection_string:
        return connection_string

    name = config.get("connectionStringName") or config.get("connection_string_name") or ""
    if not name:
        return ""

    connection_strings = connection_strings or {}
    if name not in connection_strings:
        raise ConfigurationError(f"Connection string named {name!r} is not defined.")
    return connection_strings[name]
