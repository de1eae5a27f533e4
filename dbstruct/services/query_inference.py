"""
Record type inference for arbitrary read queries.

The query's result shape is materialized into a throwaway table with
``CREATE TABLE ... AS`` (limited to zero rows), the table is described, and
then dropped.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from dbstruct.config import Options
from dbstruct.core.exceptions import ConfigurationError, InvalidArgument, MaterializationError
from dbstruct.core.sql import limit_zero, normalize_statement, quote_identifier, temp_table_name
from dbstruct.database import Connection, DatabaseClient
from dbstruct.schemas.descriptor import TableDescriptor
from dbstruct.services.schema_describer import SchemaDescriber

logger = logging.getLogger(__name__)


class QueryInference:
    """Derives table descriptors for queries through a materialization source."""

    def __init__(self, options: Options, client: DatabaseClient, describer: SchemaDescriber):
        self.options = options
        self.client = client
        self.describer = describer

    def describe_query(self, query: str) -> TableDescriptor:
        """
        Describe the result columns of a single read query.

        Args:
            query: One SQL statement; a single trailing ';' is allowed

        Returns:
            Synthesized table descriptor named after the temporary table

        Raises:
            InvalidArgument: The query is empty
            ConfigurationError: No materialization data source is configured
            MultiStatementNotAllowed: The text holds more than one statement
            ConnectError: A data source is unreachable
            MaterializationError: CREATE TABLE ... AS failed
            IntrospectionError, SynthesisError: Describing the table failed
        """
        if not query.strip():
            raise InvalidArgument("The describe query is empty")

        if not self.options.materialize_dsn:
            raise ConfigurationError("The materialize_dsn option must be set")

        statement = limit_zero(normalize_statement(query))
        table_name = temp_table_name(self.options.temp_table_prefix)

        with self.client.connect(self.options.materialize_dsn) as conn:
            self._materialize(conn, table_name, statement)
            try:
                return self.describer.describe(table_name)
            finally:
                self._drop(conn, table_name)

    def _materialize(self, conn: Connection, table_name: str, statement: str) -> None:
        sql = f"CREATE TABLE {quote_identifier(table_name)} AS {statement}"
        logger.debug(f"Materializing query: {sql}")
        try:
            conn.exec(sql)
        except SQLAlchemyError as e:
            raise MaterializationError(f"Failed to materialize query into '{table_name}': {e}") from e

    def _drop(self, conn: Connection, table_name: str) -> None:
        """Drop the temporary table; failures are logged, never raised."""
        try:
            conn.exec(f"DROP TABLE {quote_identifier(table_name)}")
        except Exception as e:
            logger.warning(f"Failed to drop temporary table '{table_name}': {e}")
