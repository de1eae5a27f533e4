"""Custom exception classes."""

from typing import Optional


class DBStructError(Exception):
    """Base exception for schema introspection errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidArgument(DBStructError, ValueError):
    """Exception for an empty or malformed table name or query."""


class ConfigurationError(DBStructError):
    """Exception for a missing required data source."""


class MultiStatementNotAllowed(DBStructError):
    """Exception for a query text holding more than one statement."""

    def __init__(self, detail: str = "Only a single statement is allowed"):
        super().__init__(detail)


class ConnectError(DBStructError):
    """Exception for a failure to open a database connection."""


class IntrospectionError(DBStructError):
    """Exception for a failed column introspection or read query."""


class MaterializationError(DBStructError):
    """Exception for a failed CREATE TABLE ... AS of a query."""


class SynthesisError(DBStructError):
    """Exception for a field set that cannot form a record type."""

    def __init__(self, message: str, field_name: Optional[str] = None):
        self.field_name = field_name
        super().__init__(message)


class FieldNotFound(DBStructError):
    """Exception for a mapped field name absent from a table."""

    def __init__(self, field_name: str, table_name: str = ""):
        self.field_name = field_name
        self.table_name = table_name
        super().__init__(f"Field '{field_name}' not found in table '{table_name}'")


class NotSynthesized(DBStructError):
    """Exception for using a record type before it was built."""

    def __init__(self, table_name: str):
        self.table_name = table_name
        super().__init__(f"Record type of table '{table_name}' has not been synthesized")
