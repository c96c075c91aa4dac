"""Error log exception hierarchy"""


class ErrorLogException(Exception):
    """Base class for all error log failures"""


class ConfigurationError(ErrorLogException):
    """
    Fatal configuration problem detected while constructing a log.

    Raised for a missing connection string, an unusable storage location or
    an application name that is too long.
    """


class InvalidArgumentError(ErrorLogException, ValueError):
    """Caller passed an argument the log cannot act on"""


class StorageError(ErrorLogException):
    """The backing store failed (I/O, corruption, lock timeout)"""


class ErrorXmlError(ErrorLogException, ValueError):
    """An error XML document could not be parsed"""
