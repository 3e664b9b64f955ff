from __future__ import annotations
import itertools

from .database_type import DatabaseType
from .db_cursor import DBCursor, Row


# Process-wide counter so every handle can be identified in the logs
_HANDLE_IDS = itertools.count(1)


def next_handle_id() -> int:
    """Reserves the next handle id (the driver needs it to name a server-side cursor before the handle exists)."""
    return next(_HANDLE_IDS)


class CursorHandle(object): 
    """An open query's forward-only result stream. Created by CursorDriver.open_cursor() and owned by exactly one
    CursorAccumulator until CursorDriver.close_cursor() releases it."""

    handle_id:int                   # Unique id used in log records
    cursor:DBCursor|None            # The driver cursor (None once closed)
    connection:object               # The connection the cursor was created on
    database_type:DatabaseType      # The DatabaseType of [connection]
    columns:list[str]|None          # Column names, read once by CursorDriver.fetch_columns() and kept after close
    closed:bool                     # True once the cursor has been released
    done:bool                       # True once no more rows can be fetched
    pending:list[Row]               # Rows read ahead by CursorDriver.fetch_columns(), served first by fetch_rows()


    def __init__(self, cursor:DBCursor, connection:object, database_type:DatabaseType, handle_id:int|None=None): 
        self.handle_id = handle_id if handle_id is not None else next_handle_id()
        self.cursor = cursor
        self.connection = connection
        self.database_type = database_type
        self.columns = None
        self.closed = False
        self.done = False
        self.pending = []


    def __repr__(self) -> str: 
        state = "closed" if self.closed else ("done" if self.done else "open")
        return f'<CursorHandle #{self.handle_id} {self.database_type.name} {state}>'
