"""Table and column descriptors with runtime record type synthesis."""

import keyword
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Type

import pandas as pd
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PydanticUserError,
    create_model,
    field_validator,
)

from dbstruct.core.exceptions import FieldNotFound, NotSynthesized, SynthesisError
from dbstruct.schemas.value_types import ValueType, map_type

logger = logging.getLogger(__name__)


class FieldDescriptor(BaseModel):
    """Metadata of one database column and its projection into a record."""

    model_config = ConfigDict(frozen=True)

    source_name: str
    source_type: str
    nullable: bool = False
    key: str = ""
    default: Any = None
    extra: str = ""

    mapped_name: Optional[str] = None
    value_type: Optional[ValueType] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("source_name", "source_type", "key", "extra", mode="before")
    @classmethod
    def decode_bytes(cls, value: Any) -> Any:
        # Some MySQL drivers return DESCRIBE columns as bytes
        if isinstance(value, (bytes, bytearray)):
            return bytes(value).decode("utf-8")
        if value is None:
            return ""
        return value

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "FieldDescriptor":
        """Build a descriptor from a ``DESCRIBE``-shaped result row."""
        null = row.get("Null")
        if isinstance(null, (bytes, bytearray)):
            null = bytes(null).decode("utf-8")

        return cls(
            source_name=row["Field"],
            source_type=row["Type"],
            nullable=str(null).upper() == "YES",
            key=row.get("Key"),
            default=row.get("Default"),
            extra=row.get("Extra"),
        )

    @property
    def name(self) -> str:
        """Member name in the synthesized record."""
        if self.mapped_name is None:
            return self.source_name
        return self.mapped_name

    def resolved_type(self) -> ValueType:
        """Assigned value type, or the default mapping of the column type."""
        if self.value_type is not None:
            return self.value_type
        return map_type(self.source_type, self.nullable)


class RecordCollection(list):
    """Growable ordered collection of records of one synthesized type."""

    def __init__(self, record_type: Type[BaseModel], records: Iterable[BaseModel] = ()):
        super().__init__()
        self.record_type = record_type
        self.extend(records)

    def _check(self, record: Any) -> None:
        if not isinstance(record, self.record_type):
            raise TypeError(
                f"Expected {self.record_type.__name__} record, got {type(record).__name__}"
            )

    def append(self, record: BaseModel) -> None:
        self._check(record)
        super().append(record)

    def insert(self, index: int, record: BaseModel) -> None:
        self._check(record)
        super().insert(index, record)

    def extend(self, records: Iterable[BaseModel]) -> None:
        records = list(records)
        for record in records:
            self._check(record)
        super().extend(records)

    def __iadd__(self, records: Iterable[BaseModel]) -> "RecordCollection":
        self.extend(records)
        return self

    def __setitem__(self, index, value) -> None:
        if isinstance(index, slice):
            value = list(value)
            for record in value:
                self._check(record)
        else:
            self._check(value)
        super().__setitem__(index, value)

    def to_dataframe(self) -> pd.DataFrame:
        """Export the records as a DataFrame with one column per field."""
        columns = list(self.record_type.model_fields)
        return pd.DataFrame([record.model_dump() for record in self], columns=columns)


# Names pydantic models already use for their own attributes and config
_RESERVED_NAMES = frozenset(dir(BaseModel))


def _is_valid_name(name: str) -> bool:
    return (
        name.isidentifier()
        and not keyword.iskeyword(name)
        and not name.startswith(("_", "model_"))
        and name not in _RESERVED_NAMES
    )


def _build_record_type(table_name: str, fields: Sequence[FieldDescriptor]) -> Type[BaseModel]:
    """Create a pydantic model class mirroring ``fields`` in order."""
    definitions = {}

    for field in fields:
        name = field.name
        if not _is_valid_name(name):
            raise SynthesisError(
                f"Invalid field name '{name}' in table '{table_name}'",
                field_name=name,
            )
        if name in definitions:
            raise SynthesisError(
                f"Duplicate field name '{name}' in table '{table_name}'",
                field_name=name,
            )

        value_type = field.resolved_type()
        definitions[name] = (
            value_type.annotation,
            Field(
                default=value_type.zero_value(),
                json_schema_extra=dict(field.metadata) or None,
            ),
        )

    try:
        return create_model(
            f"{table_name}_record",
            __config__=ConfigDict(arbitrary_types_allowed=True),
            **definitions,
        )
    except (PydanticUserError, NameError, TypeError, ValueError) as e:
        message = str(e)
        # Pydantic quotes the offending field name in its message
        field_name = next(
            (name for name in definitions if f"'{name}'" in message or f"\"{name}\"" in message),
            None,
        )
        raise SynthesisError(
            f"Cannot synthesize record type of table '{table_name}': {e}",
            field_name=field_name,
        ) from e


class TableDescriptor:
    """
    Ordered columns of one relation and the record type built from them.

    ``fields`` is exposed read-only; use ``update_field`` to change a field,
    which rebuilds the record type. Not safe for concurrent mutation.
    """

    def __init__(self, name: str, fields: Iterable[FieldDescriptor]):
        self.name = name
        self._fields: List[FieldDescriptor] = list(fields)
        self._record_type: Optional[Type[BaseModel]] = None

    def __repr__(self) -> str:
        return f"TableDescriptor(name={self.name!r}, fields={[f.name for f in self._fields]!r})"

    @property
    def fields(self) -> Tuple[FieldDescriptor, ...]:
        return tuple(self._fields)

    @property
    def record_type(self) -> Type[BaseModel]:
        """Synthesized record type. Always re-read it after an update."""
        if self._record_type is None:
            raise NotSynthesized(self.name)
        return self._record_type

    def synthesize(self) -> Type[BaseModel]:
        """Build the record type from the current fields."""
        self._record_type = _build_record_type(self.name, self._fields)
        logger.debug(f"Synthesized record type for '{self.name}' with {len(self._fields)} fields")
        return self._record_type

    def new_record(self) -> BaseModel:
        """Return one zero-valued record."""
        return self.record_type()

    def new_record_collection(self) -> RecordCollection:
        """Return an empty collection of records."""
        return RecordCollection(self.record_type)

    def find_field(self, mapped_name: str) -> Optional[FieldDescriptor]:
        """Look up a field by mapped name; ``None`` when absent."""
        for field in self._fields:
            if field.name == mapped_name:
                return field
        return None

    def update_field(self, mapped_name: str, definition: FieldDescriptor) -> None:
        """
        Replace the field with ``mapped_name`` and rebuild the record type.

        Raises:
            FieldNotFound: No field has that mapped name; nothing changes.
            SynthesisError: The new field set is invalid; nothing changes.
        """
        index = next(
            (i for i, field in enumerate(self._fields) if field.name == mapped_name),
            None,
        )
        if index is None:
            raise FieldNotFound(mapped_name, self.name)

        fields = list(self._fields)
        fields[index] = definition
        record_type = _build_record_type(self.name, fields)

        self._fields = fields
        self._record_type = record_type
        logger.debug(f"Updated field '{mapped_name}' of '{self.name}'")
