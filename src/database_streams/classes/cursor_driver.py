from __future__ import annotations
import sqlite3 as sqlite
from typing import Any, Mapping

import psycopg2.extensions as _psql_ext

from ..exceptions import ConnectionBusy, DatabaseNotConnected, InvalidCursorHandle
from .cursor_handle import CursorHandle, next_handle_id
from .database_type import DatabaseType
from .db_cursor import DBCursor, Params, Row
from .stream_signal import StreamSignal


# CursorDriver class definition
class CursorDriver(object):
    """Thin adapter between the streaming layer and a DB-API connection (SQLite, MySQL or PostgreSQL).

    Every operation raises on failure; deciding what a failure means for the stream (setup error, truncated
    stream, logged close error) is the StreamController's job.

        - open_cursor(): executes the query on a new cursor and wraps it in a CursorHandle
        - fetch_columns(): returns the ordered column names of the result set
        - fetch_rows(): returns up to [batch_size] rows, or StreamSignal.END_OF_DATA once the rows run out
        - close_cursor(): releases the cursor (idempotent)
    """

    # ---- Functions for checking if the database connection is running and healthy ---- #
    def is_connected(self, connection:Any, database_type:DatabaseType) -> bool:
        """Returns True if the connection is running and is healthy, False otherwise."""

        # Base case: connection is None
        if connection is None: return False

        # Check based on db type
        match database_type:
            case DatabaseType.MYSQL:
                try:
                    return bool(connection.is_connected())
                except Exception:
                    pass
            case DatabaseType.POSTGRESQL:
                if getattr(connection, "closed", 1) == 0 and getattr(connection, "status", _psql_ext.STATUS_BAD) != _psql_ext.STATUS_BAD:
                    return True
            case DatabaseType.SQLITE:
                try:
                    connection.execute('SELECT 1;')
                    return True
                except sqlite.ProgrammingError:
                    pass

        # Not connected if we make it here
        return False


    def _new_cursor(self, connection:Any, database_type:DatabaseType, handle_id:int) -> DBCursor:
        """Creates a cursor suited to streaming for the given DB type. Rows stay on the server until fetched.

            NOTE:
                - MYSQL: unbuffered cursor
                - POSTGRESQL: named (server-side) cursor, declared WITH HOLD when the connection is in autocommit
                  since psycopg2 only allows named cursors inside a transaction otherwise
                - SQLITE: plain cursor, sqlite3 steps the statement on each fetch
        """
        match database_type:

            case DatabaseType.MYSQL:
                return connection.cursor(buffered=False)

            case DatabaseType.POSTGRESQL:
                return connection.cursor(
                    name=f'database_streams_{handle_id}',
                    withhold=bool(getattr(connection, "autocommit", False)),
                )

            case _:
                return connection.cursor()


    @staticmethod
    def _ensure_handle(handle:Any) -> CursorHandle:
        """Raises InvalidCursorHandle if [handle] was not produced by open_cursor()."""
        if not isinstance(handle, CursorHandle):
            raise InvalidCursorHandle(handle)
        return handle


    # ---- Cursor lifecycle ---- #
    def open_cursor(self, connection:Any, sql:str, params:Params=None, options:Mapping[str, Any]|None=None) -> CursorHandle:
        """Executes [sql] with [params] on a new cursor of [connection] and returns its CursorHandle.

            NOTE:
                - [params] are forwarded to cursor.execute() untouched (positional sequence or named mapping)
                - [options] are accepted for interface symmetry; no driver option is recognised yet
                - The new cursor is closed before the exception propagates if execute() fails
        """

        # Validate the connection
        database_type:DatabaseType = DatabaseType.of(connection)

        # NOTE: mysql.connector refuses to ping while another unbuffered result is unread
        if database_type is DatabaseType.MYSQL and getattr(connection, "unread_result", False):
            raise ConnectionBusy()

        if not self.is_connected(connection, database_type):
            raise DatabaseNotConnected()

        handle_id:int = next_handle_id()
        cursor:DBCursor = self._new_cursor(connection, database_type, handle_id)

        # Execute statement
        try:

            # Execute with parameters
            if params is not None and params:
                cursor.execute(sql, params)

            # Execute without parameters
            else:
                cursor.execute(sql)

        # Release the cursor and re-raise
        except Exception:
            try:
                cursor.close()
            except Exception:
                # NOTE: don't mask the original exception
                pass
            raise

        return CursorHandle(cursor, connection, database_type, handle_id=handle_id)


    def fetch_columns(self, handle:CursorHandle) -> list[str]:
        """Returns the ordered column names of the handle's result set ([] when the statement has none).
        The names are read once and remain available after the handle is closed."""

        handle = self._ensure_handle(handle)

        if handle.columns is None:
            description = handle.cursor.description if handle.cursor is not None else None

            # A server-side cursor only describes its result set after the first fetch; keep that row for fetch_rows()
            if description is None and handle.database_type is DatabaseType.POSTGRESQL and handle.cursor is not None:
                handle.pending = list(handle.cursor.fetchmany(1))
                description = handle.cursor.description
                if not handle.pending:
                    handle.done = True

            handle.columns = [d[0] for d in description] if description else []

            # Nothing to fetch from statements without a result set (DDL, comments, empty SQL)
            if not handle.columns:
                handle.done = True

        return list(handle.columns)


    def fetch_rows(self, handle:CursorHandle, batch_size:int) -> list[Row]|StreamSignal:
        """Returns the next (at most) [batch_size] rows in native order, or StreamSignal.END_OF_DATA."""

        handle = self._ensure_handle(handle)

        # Validate batch size
        if isinstance(batch_size, bool) or not isinstance(batch_size, int) or batch_size < 1:
            raise ValueError(f'batch_size must be a positive integer, got {batch_size!r}')

        # Base cases: already exhausted or closed
        if handle.done or handle.closed:
            handle.done = True
            return StreamSignal.END_OF_DATA

        # Rows read ahead by fetch_columns() come first
        rows:list[Row] = handle.pending[:batch_size]
        del handle.pending[:batch_size]

        # Top up from the cursor (nothing to fetch from a statement without a result set)
        if len(rows) < batch_size and handle.cursor.description is not None:
            rows.extend(handle.cursor.fetchmany(batch_size - len(rows)))

        if not rows:
            handle.done = True
            return StreamSignal.END_OF_DATA

        # A short batch means the cursor is exhausted; skip the extra round trip next time
        if len(rows) < batch_size:
            handle.done = True

        return list(rows)


    def close_cursor(self, handle:CursorHandle) -> None:
        """Releases the handle's cursor. Closing an already-closed handle is a no-op.
        The handle counts as closed even if the driver raises while closing."""

        handle = self._ensure_handle(handle)

        # Base case: already closed
        if handle.closed: return

        cursor:DBCursor = handle.cursor
        handle.cursor = None
        handle.closed = True
        handle.done = True
        handle.pending = []

        try:
            # NOTE: mysql.connector refuses new statements while an unbuffered result is pending
            if handle.database_type is DatabaseType.MYSQL and getattr(handle.connection, "unread_result", False):
                handle.connection.consume_results()
        finally:
            cursor.close()
