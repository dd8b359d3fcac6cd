"""Database layer exceptions."""


class DatabaseError(Exception):
    """Base exception for database setup errors."""
    pass


class DatabaseSchemaError(DatabaseError):
    """Raised when schema loading or migration fails."""
    pass


__all__ = ['DatabaseError', 'DatabaseSchemaError']
