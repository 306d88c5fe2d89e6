"""Exceptions for SpiceDB transport operations.

These are raised by `SpiceDBClient` and translated into the authorization
error taxonomy (`WriteFailedError`, `CheckFailedError`, ...) by
`AuthorizationClient`.
"""


class SpiceDBError(Exception):
    """Base exception for SpiceDB transport errors."""

    pass


class SpiceDBConnectionError(SpiceDBError):
    """Raised when connection to SpiceDB fails."""

    pass


class SpiceDBOperationError(SpiceDBError):
    """Raised when a SpiceDB call returns an error."""

    pass


class SpiceDBTimeoutError(SpiceDBOperationError):
    """Raised when a SpiceDB call exceeds its deadline."""

    pass
