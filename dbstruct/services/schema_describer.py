"""Table introspection service."""

import logging
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError

from dbstruct.config import Options
from dbstruct.core.exceptions import IntrospectionError, InvalidArgument
from dbstruct.core.sql import quote_identifier
from dbstruct.database import Connection, DatabaseClient
from dbstruct.schemas.descriptor import FieldDescriptor, TableDescriptor
from dbstruct.schemas.value_types import map_type

logger = logging.getLogger(__name__)


class SchemaDescriber:
    """Builds table descriptors from the database's column introspection."""

    def __init__(self, options: Options, client: DatabaseClient):
        self.options = options
        self.client = client

    def describe(self, table_name: str) -> TableDescriptor:
        """
        Describe the columns of a table and synthesize its record type.

        Args:
            table_name: Table to describe, optionally schema-qualified

        Returns:
            Synthesized table descriptor

        Raises:
            InvalidArgument: The table name is empty
            ConnectError: The read data source is unreachable
            IntrospectionError: The table cannot be described
            SynthesisError: The mapped column names cannot form a record
        """
        table_name = table_name.strip()
        if not table_name:
            raise InvalidArgument("The describe table name is empty")

        with self.client.connect(self.options.dsn) as conn:
            rows = self._describe_columns(conn, table_name)

        fields = [self._build_field(table_name, row) for row in rows]

        table = TableDescriptor(name=table_name, fields=fields)
        table.synthesize()

        logger.info(f"Described table '{table_name}' ({len(fields)} columns)")
        return table

    def _describe_columns(self, conn: Connection, table_name: str) -> List[Dict[str, Any]]:
        """Run the column introspection and return DESCRIBE-shaped rows."""
        if conn.dialect_name == "sqlite":
            sql = f"PRAGMA table_info({quote_identifier(table_name)})"
        else:
            sql = f"DESCRIBE {quote_identifier(table_name)}"

        logger.debug(f"Introspecting columns: {sql}")
        try:
            rows = conn.select(sql)
        except SQLAlchemyError as e:
            raise IntrospectionError(f"Failed to describe table '{table_name}': {e}") from e

        if conn.dialect_name == "sqlite":
            rows = [self._pragma_to_describe(row) for row in rows]

        if not rows:
            raise IntrospectionError(f"Table '{table_name}' has no columns or does not exist")

        return rows

    @staticmethod
    def _pragma_to_describe(row: Dict[str, Any]) -> Dict[str, Any]:
        # PRAGMA table_info returns: cid, name, type, notnull, dflt_value, pk
        return {
            "Field": row["name"],
            "Type": row["type"],
            "Null": "NO" if row["notnull"] else "YES",
            "Key": "PRI" if row["pk"] else "",
            "Default": row["dflt_value"],
            "Extra": "",
        }

    def _build_field(self, table_name: str, row: Dict[str, Any]) -> FieldDescriptor:
        """Apply the naming, tagging and type-mapping policies to one column."""
        field = FieldDescriptor.from_row(row)
        options = self.options

        mapped_name = field.source_name
        if options.name_mapper is not None:
            mapped_name = options.name_mapper(field.source_name)

        metadata = {}
        if options.tagger is not None:
            metadata = dict(options.tagger(table_name, field.source_name) or {})

        if options.type_mapper is not None:
            value_type = options.type_mapper(table_name, field.source_name, field.source_type)
        else:
            value_type = map_type(field.source_type, field.nullable)

        return field.model_copy(
            update={
                "mapped_name": mapped_name,
                "metadata": metadata,
                "value_type": value_type,
            }
        )
