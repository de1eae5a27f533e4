"""Pytest configuration and fixtures."""

from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from dbstruct.config import Options
from dbstruct.main import DBStruct

READ_DSN = "reader:secret@db/shop"
MATERIALIZE_DSN = "writer:secret@db/shop"

ORDERS_COLUMNS = [
    {"Field": "id", "Type": "bigint", "Null": "NO", "Key": "PRI", "Default": None, "Extra": "auto_increment"},
    {"Field": "customer", "Type": "varchar(255)", "Null": "YES", "Key": "", "Default": None, "Extra": ""},
    {"Field": "total", "Type": "decimal(10,2)", "Null": "NO", "Key": "", "Default": "0.00", "Extra": ""},
    {"Field": "created_at", "Type": "datetime", "Null": "YES", "Key": "", "Default": None, "Extra": ""},
]


class FakeConnection:
    """Scripted connection recording every statement it receives."""

    def __init__(self, client: "FakeClient", dsn: str):
        self.client = client
        self.dsn = dsn
        self.closed = False
        self.dialect_name = "mysql"

    def select(self, sql: str) -> List[Dict[str, Any]]:
        self.client.log.append((self.dsn, sql))
        handler = self.client.select_handler
        if handler is not None:
            return handler(sql)
        return []

    def exec(self, sql: str) -> int:
        self.client.log.append((self.dsn, sql))
        for prefix, error in self.client.exec_failures.items():
            if sql.startswith(prefix):
                raise error
        return 0

    def close(self) -> None:
        self.closed = True


class FakeClient:
    """Database client stand-in; no network, no driver."""

    def __init__(self):
        self.log: List[tuple] = []
        self.connections: List[FakeConnection] = []
        self.select_handler: Optional[Callable[[str], List[Dict[str, Any]]]] = None
        self.exec_failures: Dict[str, Exception] = {}

    @contextmanager
    def connect(self, dsn: str) -> Iterator[FakeConnection]:
        connection = FakeConnection(self, dsn)
        self.connections.append(connection)
        try:
            yield connection
        finally:
            connection.close()

    def statements(self, dsn: Optional[str] = None) -> List[str]:
        return [sql for source, sql in self.log if dsn is None or source == dsn]


def describe_rows(tables: Dict[str, List[Dict[str, Any]]]) -> Callable[[str], List[Dict[str, Any]]]:
    """Select handler answering DESCRIBE statements; unknown tables fail."""

    def handler(sql: str) -> List[Dict[str, Any]]:
        if sql.startswith("DESCRIBE "):
            name = sql[len("DESCRIBE "):].strip("`")
            if name in tables:
                return tables[name]
            if name.startswith("temp_") and "*" in tables:
                return tables["*"]
        raise SQLAlchemyError(f"Table '{sql}' doesn't exist")

    return handler


@pytest.fixture
def fake_client() -> FakeClient:
    """Fake client that knows the orders table."""
    client = FakeClient()
    client.select_handler = describe_rows({"orders": ORDERS_COLUMNS, "*": ORDERS_COLUMNS})
    return client


@pytest.fixture
def options() -> Options:
    """Options with both data sources configured."""
    return Options(driver="mysql+pymysql", dsn=READ_DSN, materialize_dsn=MATERIALIZE_DSN)


@pytest.fixture
def dbstruct(options, fake_client) -> DBStruct:
    """DBStruct wired to the fake client."""
    return DBStruct(options, client=fake_client)


@pytest.fixture
def sqlite_url(tmp_path) -> str:
    """File-backed SQLite database seeded with a people table."""
    url = f"sqlite:///{tmp_path / 'test.db'}"
    engine = create_engine(url, poolclass=NullPool)

    with engine.begin() as conn:
        conn.execute(text("""
            CREATE TABLE people (
                id INTEGER NOT NULL PRIMARY KEY,
                name TEXT,
                score REAL,
                avatar BLOB
            )
        """))
        conn.execute(text("""
            INSERT INTO people (id, name, score, avatar) VALUES
                (1, 'Ada', 9.5, NULL),
                (2, 'Grace', 7.25, NULL),
                (3, NULL, NULL, NULL)
        """))

    engine.dispose()
    return url


@pytest.fixture
def sqlite_dbstruct(sqlite_url) -> DBStruct:
    """DBStruct reading and materializing against the SQLite database."""
    return DBStruct(driver="sqlite", dsn=sqlite_url, materialize_dsn=sqlite_url)
