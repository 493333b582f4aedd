class SqleasyError(Exception):
    """Base exception for errors raised by sqleasy itself.

    Engine failures (sqlite3.Error and friends) are never wrapped in this.
    """

    pass


class UsageError(SqleasyError, TypeError):
    """Raised when a call is malformed, before anything reaches the engine."""

    pass


class InvalidQueryError(UsageError):
    """Raised when SQL arguments are neither a query object nor text plus values."""

    pass


class StreamStateError(UsageError):
    """Raised when a row stream is pulled while a fetch is still in flight."""

    pass


class ConfigError(SqleasyError, ValueError):
    """Raised when the configuration file has an invalid structure."""

    pass
