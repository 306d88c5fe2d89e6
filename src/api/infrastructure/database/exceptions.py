"""Database-specific exceptions."""


class DatabaseError(Exception):
    """Base exception for database operations."""

    pass


class DatabaseReadError(DatabaseError):
    """Raised when reading relational state fails."""

    def __init__(self, message: str, table: str | None = None):
        super().__init__(message)
        self.table = table
