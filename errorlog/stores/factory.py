"""Error log backend selection"""
import logging

from errorlog.config.settings import AppConfig
from errorlog.config.timezone import TimezoneConverter
from errorlog.core.error_log import ErrorLog
from errorlog.core.exceptions import ConfigurationError
from errorlog.stores.memory_error_log import MemoryErrorLog
from errorlog.stores.sqlite_error_log import SqliteErrorLog

logger = logging.getLogger(__name__)

DEFAULT_CONNECTION_STRING = "Data Source=|DataDirectory|/errors.db"


def create_error_log(config: AppConfig) -> ErrorLog:
    """
    Create the error log backend selected by the configuration.
    
    Args:
        config: Application configuration
    
    Returns:
        Configured error log
    
    Raises:
        ConfigurationError: If the backend is unknown or misconfigured
    """
    settings = config.error_log
    timezone_converter = TimezoneConverter(config.timezone)
    
    if settings.backend == "memory":
        error_log = MemoryErrorLog(
            size=settings.memory_size,
            application_name=settings.application_name,
            timezone_converter=timezone_converter,
        )
    elif settings.backend == "sqlite":
        connection_string = settings.connection_string
        if not connection_string and not settings.connection_string_name:
            connection_string = DEFAULT_CONNECTION_STRING
        error_log = SqliteErrorLog.from_config(
            {
                "connectionString": connection_string,
                "connectionStringName": settings.connection_string_name,
                "applicationName": settings.application_name,
            },
            connection_strings=settings.connection_strings,
            timezone_converter=timezone_converter,
            data_directory=settings.data_directory,
        )
    else:
        raise ConfigurationError(f"Unknown error log backend: {settings.backend!r}")
    
    logger.info(f"Using {error_log.name}", extra={'component': error_log.name})
    return error_log
