# Standard imports
from __future__ import annotations
import logging
from typing import Any, Mapping

# Custom utils and objs
from ..utils.general import setup_logger, DEFAULT_LOG_FORMAT
from ..utils.row_mapper import map_rows
from ..exceptions import StreamSetupError, StreamFetchError, StreamCloseError
from .cursor_accumulator import CursorAccumulator, DEFAULT_BATCH_SIZE
from .cursor_driver import CursorDriver
from .cursor_handle import CursorHandle
from .db_cursor import Params
from .stream_signal import StreamSignal


# StreamController class definition
class StreamController(object):
    """Owns the three lifecycle steps of a streamed query and all of their error handling.

        - begin(): opens the cursor and reads its columns; failures are returned as a StreamSetupError
        - pull(): fetches and maps the next batch; failures are logged and end the stream
        - end(): releases the cursor; failures are logged and never raised
    """

    driver:CursorDriver             # The collaborator that talks to the DB-API connection
    enable_logging:bool             # Optional - specify whether to enable logging for this instance; defaults to True
    logger:logging.Logger|None      # Logger for debug/info/etc


    def __init__(
            self,
            driver:CursorDriver|None=None,
            *,
            enable_logging:bool=True,
            logger:logging.Logger|None=None,
            log_file_path:str|None=None,
            logger_name:str='database_streams',
            logger_min_level:int=logging.DEBUG,
            logger_format:str=DEFAULT_LOG_FORMAT
        ):

        self.driver = driver if driver is not None else CursorDriver()
        self.enable_logging = enable_logging
        self.logger = None

        # Setup logging if configured (an injected logger is used as-is)
        if enable_logging:
            self.logger = logger if logger is not None else setup_logger(
                log_file_path=log_file_path,
                logger_name=logger_name,
                min_level=logger_min_level,
                log_format=logger_format,
            )


    # ---- Helper functions for standardizing logging ---- #
    def _log(
        self,
        level:int,
        fmt:str,
        *args,
        exc:BaseException|None=None,
        handle:CursorHandle|None=None,
        stacklevel:int=2,
    ) -> None:
        """Helper func to standardize logging format (or do nothing if not [self.enable_logging] or not self.logger).
        Log format is: "[calling_function]: [message|Exception]"; records about a cursor carry its [handle_id]."""

        # Check if enable logging is True
        if not getattr(self, "enable_logging", False): return

        # Make sure self.logger is not None
        logger:logging.Logger = getattr(self, "logger", None)
        if logger is None: return

        extra:dict[str, Any]|None = {"handle_id": handle.handle_id} if handle is not None else None

        # Write to the log
        logger.log(level, fmt, *args, exc_info=exc, extra=extra, stacklevel=stacklevel)


    def log_debug(self, calling_func:str, message:str, handle:CursorHandle|None=None, stacklevel:int=3) -> None:
        """Logs a DEBUG message."""
        self._log(logging.DEBUG, "%s: %s", calling_func, message, handle=handle, stacklevel=stacklevel)


    def log_error(self, calling_func:str, exception:BaseException, handle:CursorHandle|None=None, stacklevel:int=3) -> None:
        """Logs an ERROR message."""
        self._log(logging.ERROR, "%s failed: %s - %s", calling_func, type(exception).__name__, exception, exc=exception, handle=handle, stacklevel=stacklevel)


    # ---- Stream lifecycle ---- #
    def begin(self, connection:Any, sql:str, params:Params=None, options:Mapping[str, Any]|None=None) -> CursorAccumulator|StreamSetupError:
        """Opens a cursor for [sql] and reads its columns.

            NOTE:
                - Returns (does NOT raise) a StreamSetupError if either step fails
                - If reading the columns fails, the cursor that was just opened is closed before returning, so the
                  caller never has anything to release after a failed begin()
                - [options]["batch_size"] sets the rows per pull (500 when missing or None); anything but a positive int raises ValueError
        """

        options = dict(options or {})
        batch_size = options.get("batch_size")
        if batch_size is None: batch_size = DEFAULT_BATCH_SIZE

        # Validate before anything is opened
        if isinstance(batch_size, bool) or not isinstance(batch_size, int) or batch_size < 1:
            raise ValueError(f'batch_size must be a positive integer, got {batch_size!r}')

        # Open the cursor; nothing to release if this fails
        try:
            handle:CursorHandle = self.driver.open_cursor(connection, sql, params, options)
        except Exception as e:
            error = StreamSetupError("open", sql, e)
            self.log_error('begin()', error)
            return error

        # Read the columns; release the cursor if this fails
        try:
            columns:list[str] = self.driver.fetch_columns(handle)
        except Exception as e:
            error = StreamSetupError("columns", sql, e)
            self.log_error('begin()', error, handle=handle)
            self._close(handle)
            return error

        acc = CursorAccumulator(
            handle,
            columns,
            batch_size=batch_size,
            source_options=options,
        )
        self.log_debug('begin()', f'Opened cursor #{handle.handle_id} with columns {list(acc.columns)} (batch_size={acc.batch_size}).', handle=handle)
        return acc


    def pull(self, acc:CursorAccumulator, raise_on_error:bool=False) -> tuple[list[dict[str, Any]]|StreamSignal, CursorAccumulator]:
        """Fetches the next batch and maps it into row records.

        Returns (rows, acc) while rows remain and (StreamSignal.END_OF_STREAM, acc) afterwards; [acc] is returned
        unchanged either way. A failed fetch is logged and also ends the stream, unless [raise_on_error] is True,
        in which case the StreamFetchError is raised.
        """

        handle:CursorHandle = acc.handle

        try:
            result = self.driver.fetch_rows(handle, acc.batch_size)

            if result is StreamSignal.END_OF_DATA:
                self.log_debug('pull()', f'Cursor #{handle.handle_id} is exhausted.', handle=handle)
                return StreamSignal.END_OF_STREAM, acc

            return map_rows(result, acc.columns), acc

        # Handle exceptions
        except Exception as e:
            error = StreamFetchError(handle.handle_id, e)
            self.log_error('pull()', error, handle=handle)

            # Re-raise if configured
            if raise_on_error: raise error from e
            return StreamSignal.END_OF_STREAM, acc


    def end(self, acc:CursorAccumulator) -> None:
        """Releases the accumulator's cursor. Never raises: close failures are logged."""
        self._close(acc.handle)


    def _close(self, handle:CursorHandle) -> None:
        """Helper that closes [handle] through the driver and logs any errors if they occur."""
        try:
            self.driver.close_cursor(handle)
            self.log_debug('end()', f'Closed cursor #{handle.handle_id}.', handle=handle, stacklevel=4)
        except Exception as e:
            self.log_error('end()', StreamCloseError(handle.handle_id, e), handle=handle, stacklevel=4)
