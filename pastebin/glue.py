"""The DB glue: connections, transactions and the schema.

This module provides:
- Glue: a class that owns the SQLite database and hands out query contexts
"""

import logging
import os
import sqlite3
from contextlib import AbstractContextManager
from sqlite3 import Row, connect

from .utils.errors import InternalError

SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id INTEGER NOT NULL PRIMARY KEY AUTOINCREMENT,
    username TEXT NOT NULL UNIQUE,
    password BLOB NOT NULL,
    role TEXT NOT NULL DEFAULT 'user' CHECK (role IN ('admin', 'user')),
    created_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS pastes (
    id INTEGER NOT NULL PRIMARY KEY AUTOINCREMENT,
    share_id TEXT NOT NULL UNIQUE,
    title TEXT,
    content TEXT NOT NULL,
    owner_id INTEGER NOT NULL REFERENCES users (id) ON DELETE CASCADE,
    created_at TEXT NOT NULL,
    expires_at TEXT
);
CREATE INDEX IF NOT EXISTS pastes_owner_idx ON pastes (owner_id, created_at);
CREATE TABLE IF NOT EXISTS share_grants (
    paste_id INTEGER NOT NULL REFERENCES pastes (id) ON DELETE CASCADE,
    grantee_id INTEGER NOT NULL REFERENCES users (id) ON DELETE CASCADE,
    can_edit INTEGER NOT NULL DEFAULT 0,
    PRIMARY KEY (paste_id, grantee_id)
);
CREATE INDEX IF NOT EXISTS share_grants_grantee_idx ON share_grants (grantee_id);
"""


class Glue:
    """A glue class for database connections.

    Stores borrow query contexts from it; every context is one transaction.
    """

    class QueryContext(AbstractContextManager):
        """Manages a thread-secure context for performing queries."""

        def __init__(self, db_path: str, timeout: int = 10, row: bool = True):
            """Sets connection-specific variables"""
            self.row = row
            self.timeout = timeout
            self.db_path = db_path
            self.conn = None
            self.cursor = None

        def __enter__(self):
            self.conn = connect(self.db_path, timeout=self.timeout, uri=True)
            if self.row:
                self.conn.row_factory = Row
            self.conn.execute("PRAGMA foreign_keys = ON")
            self.cursor = self.conn.cursor()
            return self

        def __exit__(self, exc_type, exc_value, traceback):
            try:
                if exc_type is None:
                    self.conn.commit()
                else:
                    self.conn.rollback()
            finally:
                self.conn.close()
            if exc_type is not None and issubclass(exc_type, sqlite3.Error):
                raise InternalError("Database query failed") from exc_value
            return False

        def query(
                self,
                sql: str,
                params: tuple | dict = (),
                fetch: int = 1
        ) -> list[dict] | dict | None:
            """Performs an SQL query.

            Args:
                sql (str): The query to run
                params (tuple | dict): Parameters to pass
                fetch (int): How many results to return.
                    If -1, does not return anything.
                    If 0, returns a list of all.
                    If 1, returns the first row.
                    If >1, returns a list of that many rows or all, whatever is less

            Returns:
                Nothing if ``fetch`` is -1.
                The first row (or ``None``) if ``fetch`` is 1.
                A list of rows if ``fetch`` is 0 or >1.

            Raises:
                TypeError: If any of arguments are of wrong type
                ValueError: If fetch is less than -1
            """
            if not isinstance(sql, str):
                raise TypeError("Query must be a string")
            if not isinstance(params, tuple | dict):
                raise TypeError("Parameters must be a tuple or a dict")
            if not isinstance(fetch, int):
                raise TypeError("Fetch must be an integer")
            if fetch < -1:
                raise ValueError("Fetch cannot be less than -1")
            self.cursor.execute(sql, params)
            match fetch:
                case -1:
                    return None
                case 1:
                    result = self.cursor.fetchone()
                    if result is None or not self.row:
                        return result
                    return dict(result)
                case 0:
                    results = self.cursor.fetchall()
                case _:
                    results = self.cursor.fetchmany(size=fetch)
            return [dict(r) for r in results] if self.row else results

        @property
        def rowcount(self) -> int:
            """Rows touched by the last statement."""
            return self.cursor.rowcount

    def __init__(self, db_path: str, timeout: int = 10):
        """Prepares the database and creates missing tables.

        Args:
            db_path (str): A file path or an SQLite URI
                (``file::memory:?cache=shared`` for a shared in-memory DB)
            timeout (int): Seconds to wait on a locked database
        """
        if not db_path:
            raise TypeError("The path to the DB is empty")
        if db_path == ":memory:":
            db_path = "file::memory:?cache=shared"
        self.db_path = db_path
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)
        self._keeper = None

        if ":memory:" in db_path or "mode=memory" in db_path:
            # a shared in-memory database lives only while a connection is open
            self._keeper = connect(db_path, uri=True, check_same_thread=False)
            self.logger.warning("Using an in-memory database, data will not persist")
        elif not db_path.startswith("file:"):
            directory = os.path.dirname(os.path.abspath(db_path))
            os.makedirs(directory, exist_ok=True)

        self.create_schema()

    def querying(self, timeout: int | None = None, row: bool = True) -> QueryContext:
        return self.QueryContext(
            db_path=self.db_path,
            timeout=self.timeout if timeout is None else timeout,
            row=row,
        )

    def create_schema(self) -> None:
        conn = connect(self.db_path, timeout=self.timeout, uri=True)
        try:
            conn.executescript(SCHEMA)
        finally:
            conn.close()
        self.logger.debug("Schema is ready at %s", self.db_path)

    def close(self) -> None:
        """Releases the in-memory keeper connection, dropping the data with it."""
        if self._keeper is not None:
            self._keeper.close()
            self._keeper = None
