from enum import Enum


class StreamSignal(Enum): 
    """Distinguished, error-free terminal signals passed between the driver, the controller and the stream."""
    END_OF_DATA = 1         # Returned by CursorDriver.fetch_rows() once the cursor has no more rows
    END_OF_STREAM = 2       # Returned by StreamController.pull() when iteration must stop


class StreamState(Enum): 
    """Lifecycle of a RowStream. A failed setup never produces a stream, so there is no error state here."""
    READY = 1
    DONE = 2
    CLOSED = 3
