"""Column type classification and target value types."""

import enum
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class ValueKind(enum.Enum):
    """Closed set of value type families a column can map to."""

    INTEGER = "integer"
    BIGINT = "bigint"
    FLOAT = "float"
    DOUBLE = "double"
    STRING = "string"
    BYTES = "bytes"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    DECIMAL = "decimal"


# Normalized (uppercase) database type name -> value kind.
# Anything not listed maps to STRING.
_TYPE_FAMILIES = {
    **dict.fromkeys(
        ("BIT", "TINYINT", "SMALLINT", "MEDIUMINT", "INT", "INTEGER", "SERIAL"),
        ValueKind.INTEGER,
    ),
    **dict.fromkeys(("BIGINT", "BIGSERIAL"), ValueKind.BIGINT),
    **dict.fromkeys(("FLOAT", "REAL"), ValueKind.FLOAT),
    "DOUBLE": ValueKind.DOUBLE,
    **dict.fromkeys(
        (
            "CHAR", "VARCHAR", "NVARCHAR", "TINYTEXT", "TEXT", "NTEXT",
            "MEDIUMTEXT", "LONGTEXT", "ENUM", "SET", "UUID", "CLOB", "SYSNAME",
        ),
        ValueKind.STRING,
    ),
    **dict.fromkeys(
        (
            "BINARY", "VARBINARY", "TINYBLOB", "BLOB", "MEDIUMBLOB",
            "LONGBLOB", "BYTEA", "UNIQUEIDENTIFIER",
        ),
        ValueKind.BYTES,
    ),
    **dict.fromkeys(("BOOL", "BOOLEAN"), ValueKind.BOOLEAN),
    **dict.fromkeys(
        ("DATE", "DATETIME", "TIME", "TIMESTAMP", "TIMESTAMPTZ"),
        ValueKind.TIMESTAMP,
    ),
    # Decimals stay textual so no precision is lost
    **dict.fromkeys(("DECIMAL", "NUMERIC"), ValueKind.DECIMAL),
}

_PYTHON_TYPES = {
    ValueKind.INTEGER: int,
    ValueKind.BIGINT: int,
    ValueKind.FLOAT: float,
    ValueKind.DOUBLE: float,
    ValueKind.STRING: str,
    ValueKind.BYTES: bytes,
    ValueKind.BOOLEAN: bool,
    ValueKind.TIMESTAMP: datetime,
    ValueKind.DECIMAL: str,
}

_ZERO_VALUES = {
    ValueKind.INTEGER: 0,
    ValueKind.BIGINT: 0,
    ValueKind.FLOAT: 0.0,
    ValueKind.DOUBLE: 0.0,
    ValueKind.STRING: "",
    ValueKind.BYTES: b"",
    ValueKind.BOOLEAN: False,
    ValueKind.TIMESTAMP: datetime.min,
    ValueKind.DECIMAL: "",
}


class ValueType(BaseModel):
    """
    Target value type of a column.

    A nullable value type is represented as ``Optional[T]``: ``None`` means
    SQL NULL and never collides with ``""``, ``0``, ``b""`` or ``False``.
    """

    model_config = ConfigDict(frozen=True)

    kind: ValueKind
    nullable: bool = False

    @property
    def python_type(self) -> type:
        """Underlying Python type, ignoring nullability."""
        return _PYTHON_TYPES[self.kind]

    @property
    def annotation(self) -> Any:
        """Type annotation used when synthesizing a record field."""
        if self.nullable:
            return Optional[self.python_type]
        return self.python_type

    def zero_value(self) -> Any:
        """Value of an empty record member of this type."""
        if self.nullable:
            return None
        return _ZERO_VALUES[self.kind]

    def coerce(self, value: Any) -> Any:
        """
        Convert a raw driver value into this type's Python representation.

        Only conversions pydantic would not perform on its own are done here;
        everything else is passed through for validation.
        """
        if value is None:
            return None

        if self.kind in (ValueKind.STRING, ValueKind.DECIMAL):
            if isinstance(value, (bytes, bytearray)):
                return bytes(value).decode("utf-8", errors="replace")
            if isinstance(value, (Decimal, int, float)):
                return str(value)
            return value

        if self.kind == ValueKind.BYTES and isinstance(value, str):
            return value.encode("utf-8")

        if self.kind == ValueKind.TIMESTAMP:
            # MySQL drivers return TIME columns as timedelta
            if isinstance(value, timedelta):
                return datetime.min + value
            if isinstance(value, date) and not isinstance(value, datetime):
                return datetime(value.year, value.month, value.day)

        return value


def normalize_type_name(source_type: str) -> str:
    """
    Reduce a raw column type to its uppercase base name.

    ``"varchar(255)"`` -> ``"VARCHAR"``, ``"int(11) unsigned"`` -> ``"INT"``.
    """
    parts = source_type.split()
    if not parts:
        return ""

    name = parts[0]
    i = name.find("(")
    if i >= 0:
        name = name[:i]

    return name.upper()


def map_type(source_type: str, nullable: bool) -> ValueType:
    """
    Default mapping from a database column type to a value type.

    Pure and total: unrecognized type names map to a string value.
    """
    kind = _TYPE_FAMILIES.get(normalize_type_name(source_type), ValueKind.STRING)
    return ValueType(kind=kind, nullable=nullable)
