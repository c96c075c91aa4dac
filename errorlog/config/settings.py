"""
Configuration management using Pydantic settings.
Loads configuration from environment variables.
"""
from typing import Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from errorlog.core.exceptions import ConfigurationError


class ErrorLogConfig(BaseSettings):
    """Error log backend configuration"""
    backend: str = Field("sqlite", alias="ERRORLOG__BACKEND")
    connection_string: str = Field("", alias="ERRORLOG__CONNECTION_STRING")
    connection_string_name: str = Field("", alias="ERRORLOG__CONNECTION_STRING_NAME")
    application_name: str = Field("", alias="ERRORLOG__APPLICATION_NAME")
    data_directory: str = Field(".", alias="ERRORLOG__DATA_DIRECTORY")
    memory_size: int = Field(15, alias="ERRORLOG__MEMORY_SIZE")
    connection_strings: Dict[str, str] = Field(default_factory=dict)

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @classmethod
    def load_connection_strings_from_env(cls) -> Dict[str, str]:
        """Parse named connection strings from environment variables"""
        import os
        connection_strings = {}
        prefix = "ERRORLOG__CONNECTION_STRINGS__"

        for key, value in os.environ.items():
            if key.startswith(prefix):
                name = key[len(prefix):]
                connection_strings[name] = value

        return connection_strings


class AppConfig(BaseSettings):
    """Main application configuration"""
    timezone: Optional[str] = Field(None, alias="ERRORLOG__TIMEZONE")
    log_level: str = Field("INFO", alias="ERRORLOG__LOG_LEVEL")
    structured_logs: bool = Field(True, alias="ERRORLOG__STRUCTURED_LOGS")
    error_log: ErrorLogConfig = Field(default_factory=ErrorLogConfig)

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Load error log config with named connection strings
        connection_strings = ErrorLogConfig.load_connection_strings_from_env()
        if connection_strings:
            # Get current values, excluding connection_strings to avoid duplicate
            error_log_data = self.error_log.model_dump(by_alias=True, exclude={"connection_strings"})
            self.error_log = ErrorLogConfig(connection_strings=connection_strings, **error_log_data)

    def validate_all(self) -> None:
        """Validate all configuration sections"""
        errors = []

        if self.error_log.backend not in ("sqlite", "memory"):
            errors.append(
                f"ERRORLOG__BACKEND must be 'sqlite' or 'memory', got {self.error_log.backend!r}"
            )
        name = self.error_log.connection_string_name
        if name and not self.error_log.connection_string and name not in self.error_log.connection_strings:
            errors.append(f"ERRORLOG__CONNECTION_STRINGS__{name} is not defined")
        if len(self.error_log.application_name) > 60:
            errors.append("ERRORLOG__APPLICATION_NAME must be at most 60 characters")
        if not 1 <= self.error_log.memory_size <= 500:
            errors.append("ERRORLOG__MEMORY_SIZE must be between 1 and 500")

        if self.timezone:
            try:
                ZoneInfo(self.timezone)
            except (ZoneInfoNotFoundError, ValueError):
                errors.append(f"ERRORLOG__TIMEZONE is not a known timezone: {self.timezone!r}")

        if errors:
            raise ConfigurationError("Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors))


# Global config instance
_config: AppConfig | None = None


def get_config() -> AppConfig:
    """Get or create global configuration instance"""
    global _config
    if _config is None:
        _config = AppConfig()
        _config.validate_all()
    return _config


def reset_config() -> None:
    """Drop the cached configuration (used by tests)"""
    global _config
    _config = None
