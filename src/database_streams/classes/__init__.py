from .cursor_accumulator import CursorAccumulator, DEFAULT_BATCH_SIZE
from .cursor_driver import CursorDriver
from .cursor_handle import CursorHandle
from .database_type import DatabaseType
from .db_cursor import DBCursor
from .row_stream import RowStream
from .stream_controller import StreamController
from .stream_signal import StreamSignal, StreamState

__all__ = [
    "CursorAccumulator",
    "CursorDriver",
    "CursorHandle",
    "DatabaseType",
    "DBCursor",
    "DEFAULT_BATCH_SIZE",
    "RowStream",
    "StreamController",
    "StreamSignal",
    "StreamState",
]
