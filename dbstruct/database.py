"""SQLAlchemy database client used for introspection and materialization."""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection as SAConnection
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from dbstruct.core.exceptions import ConnectError

logger = logging.getLogger(__name__)


def build_url(driver: str, dsn: str) -> str:
    """
    Combine a driver name and a data source name into a SQLAlchemy URL.

    A data source name that is already a URL is used as is.
    """
    if "://" in dsn:
        return dsn
    return f"{driver}://{dsn}"


class Connection:
    """
    One open database connection.

    Statements are sent through ``text()``; ``exec`` commits immediately.
    """

    def __init__(self, connection: SAConnection):
        self._connection = connection

    @property
    def dialect_name(self) -> str:
        return self._connection.dialect.name

    def select(self, sql: str) -> List[Dict[str, Any]]:
        """Run a query and return its rows as column -> value dicts."""
        result = self._connection.execute(text(sql))
        rows = [dict(row._mapping) for row in result.fetchall()]
        # Leave no transaction open between statements
        self._connection.rollback()
        return rows

    def exec(self, sql: str) -> int:
        """Run a statement and return the number of affected rows."""
        result = self._connection.execute(text(sql))
        self._connection.commit()
        return result.rowcount

    def close(self) -> None:
        self._connection.close()


class DatabaseClient:
    """
    Opens short-lived connections for one driver.

    No pooling: every ``connect`` builds an engine with ``NullPool`` and
    disposes it on exit.
    """

    def __init__(self, driver: str):
        self.driver = driver

    @contextmanager
    def connect(self, dsn: str) -> Iterator[Connection]:
        """
        Open a connection that is closed on every exit path.

        Raises:
            ConnectError: The engine cannot be created or the server refuses
                the connection.
        """
        url = build_url(self.driver, dsn)
        try:
            engine = create_engine(url, poolclass=NullPool)
        except (SQLAlchemyError, ImportError) as e:
            raise ConnectError(f"Cannot create engine for driver '{self.driver}': {e}") from e

        try:
            try:
                sa_connection = engine.connect()
            except SQLAlchemyError as e:
                raise ConnectError(f"Failed to connect to database: {e}") from e

            connection = Connection(sa_connection)
            try:
                yield connection
            finally:
                connection.close()
        finally:
            engine.dispose()
