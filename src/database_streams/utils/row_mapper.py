from typing import Any, Iterable, Sequence


def map_row(row:Iterable[Any], columns:Sequence[str]) -> dict[str, Any]:
    """Pairs the values of [row] with [columns] by position. If a column name repeats, the last value wins.
    Raises ValueError if the row and the columns differ in length."""
    return dict(zip(columns, row, strict=True))


def map_rows(rows:Iterable[Iterable[Any]], columns:Sequence[str]) -> list[dict[str, Any]]:
    """Maps a batch of raw rows into row records, keeping their order."""
    return [map_row(row, columns) for row in rows]
