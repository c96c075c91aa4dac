"""Configuration module"""
from errorlog.config.settings import (
    AppConfig,
    ErrorLogConfig,
    get_config,
    reset_config,
)
from errorlog.config.timezone import TimezoneConverter

__all__ = [
    "AppConfig",
    "ErrorLogConfig",
    "get_config",
    "reset_config",
    "TimezoneConverter",
]
