"""Introspection services."""

from dbstruct.services.query_inference import QueryInference
from dbstruct.services.record_loader import RecordLoader
from dbstruct.services.schema_describer import SchemaDescriber

__all__ = ["QueryInference", "RecordLoader", "SchemaDescriber"]
