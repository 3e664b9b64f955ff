from .api import stream, get_default_controller
from .classes import (
    CursorAccumulator,
    CursorDriver,
    CursorHandle,
    DatabaseType,
    DEFAULT_BATCH_SIZE,
    RowStream,
    StreamController,
    StreamSignal,
    StreamState,
)
from .exceptions import (
    StreamError,
    StreamSetupError,
    StreamFetchError,
    StreamCloseError,
    InvalidCursorHandle,
    ConnectionBusy,
    DatabaseNotConnected,
    DatabaseTypeNotSupported,
)
from .utils import *

__all__ = [
    "stream",
    "get_default_controller",
    "CursorAccumulator",
    "CursorDriver",
    "CursorHandle",
    "DatabaseType",
    "DEFAULT_BATCH_SIZE",
    "RowStream",
    "StreamController",
    "StreamSignal",
    "StreamState",
    "StreamError",
    "StreamSetupError",
    "StreamFetchError",
    "StreamCloseError",
    "InvalidCursorHandle",
    "ConnectionBusy",
    "DatabaseNotConnected",
    "DatabaseTypeNotSupported",
]
