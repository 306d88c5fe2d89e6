"""Exceptions for authorization operations.

`PermissionDeniedError` is an expected outcome, not a fault. Callers use it
to tell "no access" apart from `CheckFailedError` ("couldn't determine
access"), which must be treated as a denial at enforcement points.
"""


class AuthorizationError(Exception):
    """Base exception for authorization errors."""

    pass


class NotInitializedError(AuthorizationError):
    """Raised when an operation is invoked before the schema was bootstrapped.

    Always a programming error; never retried.
    """

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(
            f"Authorization schema not initialized; cannot {operation}. "
            "Call bootstrap_schema() at startup."
        )


class SchemaWriteFailedError(AuthorizationError):
    """Raised when the authorization schema cannot be written to the backend."""

    pass


class WriteFailedError(AuthorizationError):
    """Raised when writing or deleting relationships fails."""

    pass


class CheckFailedError(AuthorizationError):
    """Raised when a permission check cannot be answered by the backend."""

    pass


class PermissionDeniedError(AuthorizationError):
    """Raised by assert_permission when the subject lacks the permission."""

    def __init__(self, subject: str, action: str, resource: str):
        self.subject = subject
        self.action = action
        self.resource = resource
        super().__init__(
            f"Permission denied: {subject} cannot perform '{action}' on '{resource}'"
        )
