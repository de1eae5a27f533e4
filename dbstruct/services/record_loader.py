"""Loads query results into synthesized records."""

import logging
from typing import Any, Dict

from sqlalchemy.exc import SQLAlchemyError

from dbstruct.config import Options
from dbstruct.core.exceptions import IntrospectionError, InvalidArgument
from dbstruct.core.sql import normalize_statement
from dbstruct.database import DatabaseClient
from dbstruct.schemas.descriptor import RecordCollection, TableDescriptor

logger = logging.getLogger(__name__)


class RecordLoader:
    """
    Populates record collections from the read data source.

    Result columns are matched to fields by source column name, then by
    mapped name. Columns with no matching field are ignored; fields with no
    matching column keep their zero value.
    """

    def __init__(self, options: Options, client: DatabaseClient):
        self.options = options
        self.client = client

    def select(self, table: TableDescriptor, query: str) -> RecordCollection:
        """
        Run a read query and return its rows as records of ``table``.

        Args:
            table: Synthesized descriptor whose record type receives the rows
            query: Single SQL statement

        Returns:
            Collection with one record per result row

        Raises:
            NotSynthesized: The descriptor has no record type yet
            InvalidArgument: The query is empty
            IntrospectionError: The query failed
            pydantic.ValidationError: A value does not fit its field type
        """
        records = table.new_record_collection()

        if not query.strip():
            raise InvalidArgument("The select query is empty")
        statement = normalize_statement(query)

        with self.client.connect(self.options.dsn) as conn:
            logger.debug(f"Selecting records: {statement}")
            try:
                rows = conn.select(statement)
            except SQLAlchemyError as e:
                raise IntrospectionError(f"Failed to select records of '{table.name}': {e}") from e

        for row in rows:
            records.append(records.record_type.model_validate(self._to_values(table, row)))

        logger.info(f"Loaded {len(records)} record(s) of '{table.name}'")
        return records

    @staticmethod
    def _to_values(table: TableDescriptor, row: Dict[str, Any]) -> Dict[str, Any]:
        values = {}
        for field in table.fields:
            if field.source_name in row:
                raw = row[field.source_name]
            elif field.name in row:
                raw = row[field.name]
            else:
                continue
            values[field.name] = field.resolved_type().coerce(raw)
        return values
