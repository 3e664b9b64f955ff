from __future__ import annotations
from collections import deque
from typing import Any, Iterator

import pandas as pd

from .cursor_accumulator import CursorAccumulator
from .stream_controller import StreamController
from .stream_signal import StreamSignal, StreamState


# RowStream class definition
class RowStream(object):
    """Lazy, single-pass iterator over the row records of one streamed query.

    Rows are pulled from the controller one batch at a time, only when the consumer asks for more. The cursor is
    released exactly once, on whichever of these happens first:
        - the rows run out (or a fetch fails and ends the stream)
        - an exception is raised while pulling
        - close() is called, or a `with` block around the stream exits (normally or through an exception)
        - the stream is garbage collected, including a stream that was never iterated

    Prefer the `with` form when breaking out of a loop early, so the cursor is released right away:

        with stream(cxn, "SELECT id, name FROM users") as rows:
            for row in rows:
                ...
    """

    def __init__(self, controller:StreamController, acc:CursorAccumulator, *, raise_on_error:bool=False):
        self._controller = controller
        self._acc = acc
        self._raise_on_error = raise_on_error
        self._buffer:deque[dict[str, Any]] = deque()
        self._state:StreamState = StreamState.READY
        self._finalized:bool = False
        self._pull_count:int = 0


    # ---- Read-only state ---- #
    @property
    def columns(self) -> tuple[str, ...]:
        return self._acc.columns

    @property
    def batch_size(self) -> int:
        return self._acc.batch_size

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state is StreamState.CLOSED

    @property
    def pull_count(self) -> int:
        """Number of pulls that returned rows."""
        return self._pull_count


    # ---- Pulling ---- #
    def _pull(self) -> list[dict[str, Any]]|None:
        """Pulls the next batch, or returns None (after finalizing) once the stream has ended."""

        # Base case: the stream already ended
        if self._state is not StreamState.READY: return None

        try:
            batch, self._acc = self._controller.pull(self._acc, raise_on_error=self._raise_on_error)
        except BaseException:
            self.close()
            raise

        if batch is StreamSignal.END_OF_STREAM:
            self._state = StreamState.DONE
            self.close()
            return None

        self._pull_count += 1
        return batch


    def __iter__(self) -> RowStream:
        return self


    def __next__(self) -> dict[str, Any]:
        while not self._buffer:
            batch = self._pull()
            if batch is None:
                raise StopIteration
            self._buffer.extend(batch)
        return self._buffer.popleft()


    def iter_batches(self) -> Iterator[list[dict[str, Any]]]:
        """Yields the remaining rows one batch (at most [batch_size] rows) at a time.
        Rows already buffered by row-wise iteration come out first, as their own batch."""
        if self._buffer:
            pending = list(self._buffer)
            self._buffer.clear()
            yield pending

        while (batch := self._pull()) is not None:
            yield batch


    def iter_dataframes(self) -> Iterator[pd.DataFrame]:
        """Yields the remaining rows as one DataFrame per batch."""
        for batch in self.iter_batches():
            yield pd.DataFrame.from_records(batch, columns=list(self.columns))


    def to_df(self) -> pd.DataFrame:
        """Drains the rest of the stream into a single DataFrame (empty, with the stream's columns, if no rows remain)."""
        frames:list[pd.DataFrame] = list(self.iter_dataframes())
        if not frames:
            return pd.DataFrame(columns=list(self.columns))
        return pd.concat(frames, ignore_index=True)


    # ---- Finalization ---- #
    def close(self) -> None:
        """Releases the cursor. Only the first call does anything."""
        if getattr(self, "_finalized", True): return

        # Set the flag first so a failure (or re-entry) can never release twice
        self._finalized = True
        self._buffer.clear()
        self._state = StreamState.CLOSED
        self._controller.end(self._acc)


    def __enter__(self) -> RowStream:
        return self


    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


    def __del__(self) -> None:
        self.close()


    def __repr__(self) -> str:
        return f'<RowStream {self._state.name} columns={list(self.columns)} batch_size={self.batch_size}>'
