from __future__ import annotations
from typing import Protocol, Any, Mapping, Sequence, runtime_checkable

# NOTE: rows are tuples by default, but sqlite3.Row and lists also work since they are iterated in column order
Row = Sequence[Any]

# Positional (sequence) or named (mapping) parameters; forwarded to execute() untouched
Params = Sequence[Any] | Mapping[str, Any] | None


@runtime_checkable
class DBCursor(Protocol):
    """The subset of a DB-API 2.0 cursor that the CursorDriver relies on."""

    # Sequence of 7-item column descriptors, or None when the statement has no result set
    description: Sequence[Sequence[Any]] | None

    def execute(self, operation: str, params: Params = None) -> Any: ...

    def fetchmany(self, size: int = ...) -> list[Row]: ...

    def close(self) -> None: ...
