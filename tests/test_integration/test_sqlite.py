"""End-to-end tests against a SQLite database through SQLAlchemy."""

from typing import Optional

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.pool import NullPool

from dbstruct.core.exceptions import ConnectError, IntrospectionError, MaterializationError
from dbstruct.main import DBStruct
from dbstruct.schemas.value_types import ValueKind


def temp_tables(url: str) -> list:
    engine = create_engine(url, poolclass=NullPool)
    with engine.connect() as conn:
        rows = conn.execute(
            text("SELECT name FROM sqlite_master WHERE type = 'table' AND name LIKE 'temp%'")
        ).fetchall()
    engine.dispose()
    return [row[0] for row in rows]


class TestSQLiteDescribe:
    """Test describing real tables."""

    def test_describe_table(self, sqlite_dbstruct):
        """Columns, nullability and keys come from PRAGMA table_info."""
        table = sqlite_dbstruct.describe("people")

        assert [f.name for f in table.fields] == ["id", "name", "score", "avatar"]

        id_field = table.find_field("id")
        assert id_field.nullable is False
        assert id_field.key == "PRI"
        assert id_field.value_type.kind == ValueKind.INTEGER

        assert table.find_field("score").value_type.kind == ValueKind.FLOAT
        assert table.find_field("avatar").value_type.kind == ValueKind.BYTES
        assert table.record_type.model_fields["name"].annotation == Optional[str]

    def test_describe_missing_table(self, sqlite_dbstruct):
        """Unknown tables are reported as introspection failures."""
        with pytest.raises(IntrospectionError):
            sqlite_dbstruct.describe("nobody")

    def test_unreachable_database(self, tmp_path):
        """A database that cannot be opened is a connection error."""
        url = f"sqlite:///{tmp_path / 'missing' / 'dir' / 'x.db'}"
        dbs = DBStruct(driver="sqlite", dsn=url)

        with pytest.raises(ConnectError):
            dbs.describe("people")


class TestSQLiteDescribeQuery:
    """Test describing real queries."""

    def test_describe_query(self, sqlite_dbstruct, sqlite_url):
        """Query columns are described and the temporary table is dropped."""
        table = sqlite_dbstruct.describe_query(
            "SELECT id, name AS full_name FROM people WHERE score > 1 LIMIT 2;"
        )

        assert [f.name for f in table.fields] == ["id", "full_name"]
        assert table.find_field("id").value_type.kind == ValueKind.INTEGER
        assert table.find_field("full_name").value_type.kind == ValueKind.STRING
        assert temp_tables(sqlite_url) == []

    def test_invalid_query(self, sqlite_dbstruct, sqlite_url):
        """A query the database rejects leaves no table behind."""
        with pytest.raises(MaterializationError):
            sqlite_dbstruct.describe_query("SELECT nope FROM nowhere")

        assert temp_tables(sqlite_url) == []


class TestSQLiteSelect:
    """Test loading real rows."""

    def test_select_records(self, sqlite_dbstruct):
        """Rows load into records of the described table."""
        table = sqlite_dbstruct.describe("people")
        records = sqlite_dbstruct.select(table, "SELECT * FROM people ORDER BY id")

        assert [r.id for r in records] == [1, 2, 3]
        assert records[0].name == "Ada"
        assert records[0].score == 9.5
        assert records[2].name is None
        assert records[2].avatar is None

    def test_select_into_query_records(self, sqlite_dbstruct):
        """Records of a query-derived table can be loaded and exported."""
        table = sqlite_dbstruct.describe_query("SELECT id, name FROM people")
        records = sqlite_dbstruct.select(table, "SELECT id, name FROM people ORDER BY id")

        df = records.to_dataframe()
        assert df["name"].tolist() == ["Ada", "Grace", None]
