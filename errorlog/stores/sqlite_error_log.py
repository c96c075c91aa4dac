"""SQLite-backed error log"""
import logging
from contextlib import contextmanager
from dataclasses import replace
from typing import List, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError

from errorlog.config.timezone import TimezoneConverter
from errorlog.core.domain.entry import ErrorLogEntry
from errorlog.core.domain.error import Error
from errorlog.core.error_log import check_application_name, check_page_arguments, parse_error_id
from errorlog.core.exceptions import ConfigurationError, ErrorXmlError, InvalidArgumentError, StorageError
from errorlog.core.xml_codec import decode_string, encode_string
from errorlog.db.connection_string import get_connection_string, get_data_source_path
from errorlog.db.database import create_session_factory, create_store_engine
from errorlog.db.initializer import ensure_database
from errorlog.db.queries import count_error_records, create_error_record, get_error_page, get_error_xml
from errorlog.db.session import session_scope

logger = logging.getLogger(__name__)


class SqliteErrorLog:
    """
    Error log stored in a single SQLite database file.

    The database file and its schema are created on first use. Every
    operation opens its own connection and closes it before returning.
    """

    name = "SQLite Error Log"

    def __init__(
        self,
        connection_string: str,
        application_name: str = "",
        timezone_converter: Optional[TimezoneConverter] = None,
        data_directory: Optional[str] = None,
    ):
        """
        Initialize the log, creating the database file if needed.

        Args:
            connection_string: SQLAlchemy sqlite URL or ``Data Source=...`` string
            application_name: Application errors are recorded under (max 60 chars)
            timezone_converter: Converter for times returned to callers
            data_directory: Directory substituted for ``|DataDirectory|``

        Raises:
            ConfigurationError: If the connection string or application name is invalid
            StorageError: If the database file cannot be created
        """
        if not connection_string:
            raise ConfigurationError("Connection string is missing for the SQLite error log.")

        self.connection_string = connection_string
        self.application_name = check_application_name(application_name)
        self.database_path = get_data_source_path(connection_string, data_directory)
        ensure_database(self.database_path)

        self._tz = timezone_converter or TimezoneConverter()
        self._session_factory = create_session_factory(create_store_engine(self.database_path))

    @classmethod
    def from_config(
        cls,
        config: Optional[Mapping[str, str]],
        connection_strings: Optional[Mapping[str, str]] = None,
        timezone_converter: Optional[TimezoneConverter] = None,
        data_directory: Optional[str] = None,
    ) -> "SqliteErrorLog":
        """
        Build a log from a configuration mapping.

        Recognized keys: ``connectionString``, ``connectionStringName`` and
        ``applicationName`` (snake_case spellings are accepted too).

        Args:
            config: Configuration mapping
            connection_strings: Named connection strings for ``connectionStringName``
            timezone_converter: Converter for times returned to callers
            data_directory: Directory substituted for ``|DataDirectory|``
        """
        connection_string = get_connection_string(config, connection_strings)
        if not connection_string:
            raise ConfigurationError("Connection string is missing for the SQLite error log.")

        application_name = config.get("applicationName") or config.get("application_name") or ""
        return cls(
            connection_string,
            application_name=application_name,
            timezone_converter=timezone_converter,
            data_directory=data_directory,
        )

    def __repr__(self):
        return f"<SqliteErrorLog(path={self.database_path}, application={self.application_name!r})>"

    @contextmanager
    def _storage_errors(self, operation: str):
        try:
            yield
        except SQLAlchemyError as e:
            logger.error(
                f"{operation} failed for {self.database_path}: {e}",
                extra={'component': self.name},
                exc_info=True
            )
            raise StorageError(f"{operation} failed: {e}") from e

    def log(self, error: Error) -> str:
        """Persist an error and return its new identifier"""
        if error is None:
            raise InvalidArgumentError("error is required")

        error_xml = encode_string(error)

        with self._storage_errors("Logging error"):
            with session_scope(self._session_factory) as db:
                record = create_error_record(
                    db=db,
                    application=self.application_name or error.application_name,
                    host=error.host_name,
                    type=error.type,
                    source=error.source,
                    message=error.message,
                    user=error.user,
                    status_code=error.status_code,
                    time_utc=self._tz.to_utc(error.time),
                    all_xml=error_xml,
                )
                error_id = record.id

        logger.debug(f"Logged error {error_id} ({error.type})", extra={'error_id': error_id})
        return str(error_id)

    def get_errors(
        self,
        page_index: int,
        page_size: int,
        entries: Optional[List[ErrorLogEntry]] = None,
    ) -> int:
        """
        Read one page of errors, newest first.

        Entries are built from the indexed columns only, so fields that are
        not mirrored there (detail, collections) are empty. Use get_error()
        for the complete error.
        """
        check_page_arguments(page_index, page_size)
        offset = page_index * page_size
        rows = []

        with self._storage_errors("Reading errors"):
            with session_scope(self._session_factory) as db:
                total = count_error_records(db)
                if entries is not None and page_size and offset < total:
                    # Never ask for more rows than remain; SQLite LIMIT is 64-bit
                    rows = get_error_page(db, offset, min(page_size, total - offset))

        if entries is not None:
            for row in rows:
                error = Error(
                    application_name=row.application,
                    host_name=row.host,
                    type=row.type,
                    source=row.source,
                    message=row.message,
                    user=row.user,
                    status_code=row.status_code,
                    time=self._tz.utc_to_local(row.time_utc),
                )
                entries.append(ErrorLogEntry(str(row.id), error, self))

        return total

    def get_error(self, id: str) -> Optional[ErrorLogEntry]:
        """Fetch the complete error with the given identifier, or None"""
        error_id = parse_error_id(id)

        with self._storage_errors("Reading error"):
            with session_scope(self._session_factory) as db:
                error_xml = get_error_xml(db, error_id)

        if error_xml is None:
            return None

        try:
            error = decode_string(error_xml)
        except ErrorXmlError as e:
            logger.error(f"Error {error_id} has an unreadable XML record: {e}")
            raise StorageError(f"Error {error_id} has an unreadable XML record") from e

        error = replace(error, time=self._tz.utc_to_local(error.time))
        return ErrorLogEntry(str(error_id), error, self)
