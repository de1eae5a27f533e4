"""Descriptor and value type models."""

from dbstruct.schemas.descriptor import FieldDescriptor, RecordCollection, TableDescriptor
from dbstruct.schemas.value_types import ValueKind, ValueType, map_type

__all__ = [
    "FieldDescriptor",
    "RecordCollection",
    "TableDescriptor",
    "ValueKind",
    "ValueType",
    "map_type",
]
