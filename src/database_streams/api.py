from __future__ import annotations
from typing import Any, Mapping

from .classes.db_cursor import Params
from .classes.row_stream import RowStream
from .classes.stream_controller import StreamController
from .exceptions import StreamSetupError


# Shared controller for calls that don't bring their own (built on first use)
_default_controller:StreamController|None = None


def get_default_controller() -> StreamController:
    """Returns the module-level StreamController, logging to stderr under the "database_streams" logger."""
    global _default_controller
    if _default_controller is None:
        _default_controller = StreamController()
    return _default_controller


def _validate_call(connection:Any, sql:Any, options:Any) -> None:
    """Raises TypeError/ValueError if the arguments of stream() have the wrong shape."""

    if connection is None:
        raise ValueError("connection must be an open DB-API connection, got None")
    if not isinstance(sql, str):
        raise TypeError(f'sql must be a str, got {type(sql).__name__}')
    if options is None:
        return
    if not isinstance(options, Mapping):
        raise TypeError(f'options must be a mapping, got {type(options).__name__}')

    batch_size = options.get("batch_size")
    if batch_size is not None and (isinstance(batch_size, bool) or not isinstance(batch_size, int)):
        raise TypeError(f'batch_size must be an int, got {type(batch_size).__name__}')
    if batch_size is not None and batch_size < 1:
        raise ValueError(f'batch_size must be a positive integer, got {batch_size}')


def stream(
        connection:Any,
        sql:str,
        params:Params=None,
        options:Mapping[str, Any]|None=None,
        *,
        controller:StreamController|None=None
    ) -> RowStream|StreamSetupError:
    """Runs [sql] on [connection] and returns a RowStream over its rows, or the StreamSetupError if the query
    could not be started.

        NOTE:
            - The cursor is opened before this returns, so a bad query is reported here (as a returned error value,
              not a raised one) while a query that matches nothing gives an empty RowStream
            - [params] are forwarded to the driver untouched (positional sequence or named mapping)
            - [options]: "batch_size" (rows per pull, default 500) and "raise_on_error" (raise a StreamFetchError
              mid-stream instead of logging it and ending early, default False); they apply to this call only
    """

    _validate_call(connection, sql, options)

    controller = controller if controller is not None else get_default_controller()
    options = dict(options or {})

    acc = controller.begin(connection, sql, params, options)
    if isinstance(acc, StreamSetupError):
        return acc

    return RowStream(controller, acc, raise_on_error=bool(options.get("raise_on_error", False)))
