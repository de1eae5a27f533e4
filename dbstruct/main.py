"""DBStruct entry point."""

import logging
from typing import Any, Optional

from dbstruct.config import Options, Settings
from dbstruct.database import DatabaseClient
from dbstruct.schemas.descriptor import RecordCollection, TableDescriptor
from dbstruct.services.query_inference import QueryInference
from dbstruct.services.record_loader import RecordLoader
from dbstruct.services.schema_describer import SchemaDescriber

logger = logging.getLogger(__name__)


class DBStruct:
    """
    Runtime record types for database tables and queries.

    Every call opens and closes its own connections; nothing is cached
    between calls.
    """

    def __init__(self, options: Optional[Options] = None, client: Optional[DatabaseClient] = None, **kwargs: Any):
        self.options = options or Options(**kwargs)
        self.client = client or DatabaseClient(self.options.driver)
        self.describer = SchemaDescriber(self.options, self.client)
        self.inference = QueryInference(self.options, self.client, self.describer)
        self.loader = RecordLoader(self.options, self.client)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **policies: Any) -> "DBStruct":
        """Create an instance from environment settings and optional policies."""
        return cls(Options.from_settings(settings, **policies))

    def describe(self, table_name: str) -> TableDescriptor:
        """Describe a table; see SchemaDescriber.describe."""
        return self.describer.describe(table_name)

    def describe_query(self, query: str) -> TableDescriptor:
        """Describe the result of a query; see QueryInference.describe_query."""
        return self.inference.describe_query(query)

    def select(self, table: TableDescriptor, query: str) -> RecordCollection:
        """Load query rows into records of ``table``; see RecordLoader.select."""
        return self.loader.select(table, query)
