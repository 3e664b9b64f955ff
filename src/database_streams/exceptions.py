class StreamError(Exception):
    """Base class for every error raised or returned by the streaming layer."""


class StreamSetupError(StreamError):
    """Returned (not raised) when a stream cannot be started: the cursor could not be opened ([stage] = "open")
    or its columns could not be read ([stage] = "columns"). The driver exception is chained as __cause__."""

    def __init__(self, stage:str, sql:str, cause:BaseException):
        self.stage = stage
        self.sql = sql
        self.__cause__ = cause
        super().__init__(f'Could not {"open the cursor" if stage == "open" else "read the columns"} for query {sql!r}: {type(cause).__name__} - {cause}')


class StreamFetchError(StreamError):
    """Raised by a driver fetch mid-stream. Logged and converted to end-of-stream unless [raise_on_error] is set."""

    def __init__(self, handle_id:int, cause:BaseException):
        self.handle_id = handle_id
        self.__cause__ = cause
        super().__init__(f'Failed to fetch rows from cursor #{handle_id}: {type(cause).__name__} - {cause}')


class StreamCloseError(StreamError):
    """Raised by a driver while releasing a cursor. Always logged, never surfaced to the consumer."""

    def __init__(self, handle_id:int, cause:BaseException):
        self.handle_id = handle_id
        self.__cause__ = cause
        super().__init__(f'Failed to close cursor #{handle_id}: {type(cause).__name__} - {cause}')


class InvalidCursorHandle(StreamError, TypeError):
    """Raised when a driver operation is given something that is not a CursorHandle."""

    def __init__(self, value:object):
        self.value = value
        super().__init__(f'Expected a CursorHandle, got {type(value).__name__}.')


class ConnectionBusy(ConnectionError):
    """Raised when a cursor is requested on a MySQL connection that still holds the unread result of another
    unbuffered cursor."""

    def __init__(self):
        super().__init__('The connection still has an unread result from another cursor; finish or close that stream first.')


class DatabaseNotConnected(ConnectionError): 
    """Raised when a cursor is requested on a connection that is closed or unhealthy."""
    
    def __init__(self): 
        super().__init__('The database is not connected or the connection is not healthy.')


class DatabaseTypeNotSupported(ValueError): 
    """Raised when a connection is not one of the types in the DatabaseType enum class."""

    def __init__(self, db_type:str|int): 
        self.db_type = db_type
        super().__init__(f'The current database_type "{db_type}" is not supported. See the DatabaseType enum class for supported types.')
