"""
Exceptions raised by the schema compiler.
"""


class TenjinError(Exception):
    """Base class for all compiler errors."""


class SchemaError(TenjinError, ValueError):
    """Raised when a declarative schema definition is malformed."""


class MigrationError(TenjinError):
    """Raised when a migration file cannot be written."""
