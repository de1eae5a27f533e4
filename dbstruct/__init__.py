"""Runtime record types from database schemas."""

from dbstruct.config import Options, Settings, get_settings
from dbstruct.main import DBStruct
from dbstruct.schemas import (
    FieldDescriptor,
    RecordCollection,
    TableDescriptor,
    ValueKind,
    ValueType,
    map_type,
)

__all__ = [
    "DBStruct",
    "Options",
    "Settings",
    "get_settings",
    "FieldDescriptor",
    "RecordCollection",
    "TableDescriptor",
    "ValueKind",
    "ValueType",
    "map_type",
]
