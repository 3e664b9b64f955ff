import logging
import sqlite3

import pandas as pd
import pytest

from database_streams import stream, RowStream, StreamSetupError
from database_streams.classes.cursor_driver import CursorDriver
from database_streams.classes.database_type import DatabaseType
from database_streams.classes.stream_controller import StreamController
from database_streams.classes.stream_signal import StreamSignal
from database_streams.exceptions import DatabaseNotConnected, DatabaseTypeNotSupported, InvalidCursorHandle


@pytest.fixture
def cxn():
    """A fresh in-memory SQLite connection with a two-row "users" table for each test."""
    connection = sqlite3.connect(":memory:")
    connection.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT)")
    connection.executemany("INSERT INTO users (id, name) VALUES (?, ?)", [(1, "Alice"), (2, "Bob")])
    connection.commit()
    yield connection
    connection.close()


@pytest.fixture
def controller():
    """A StreamController with the real driver, logging through a propagating test logger."""
    return StreamController(logger=logging.getLogger("tests.sqlite_e2e"))


@pytest.fixture
def driver():
    return CursorDriver()


def test_two_rows_with_batch_size_one(cxn, controller):
    """Testing begin()/pull() directly: two rows with batch_size=1 take two pulls, then END_OF_STREAM."""

    acc = controller.begin(cxn, "SELECT id, name FROM users ORDER BY id", [], {"batch_size": 1})

    first, acc = controller.pull(acc)
    second, acc = controller.pull(acc)
    third, acc = controller.pull(acc)
    controller.end(acc)

    assert first == [{"id": 1, "name": "Alice"}]
    assert second == [{"id": 2, "name": "Bob"}]
    assert third is StreamSignal.END_OF_STREAM
    assert acc.handle.closed


def test_stream_batches_match_native_order(cxn, controller):
    """Testing stream() end to end with batch_size=1."""

    rows = stream(cxn, "SELECT id, name FROM users ORDER BY id", options={"batch_size": 1}, controller=controller)

    assert isinstance(rows, RowStream)
    assert rows.columns == ("id", "name")
    assert list(rows.iter_batches()) == [[{"id": 1, "name": "Alice"}], [{"id": 2, "name": "Bob"}]]
    assert rows.closed


def test_stream_many_rows(cxn, controller):
    """Testing a larger result set across several batches."""

    cxn.executemany("INSERT INTO users (id, name) VALUES (?, ?)", [(i, f"user{i}") for i in range(3, 1003)])

    with stream(cxn, "SELECT id FROM users ORDER BY id", options={"batch_size": 128}, controller=controller) as rows:
        ids = [r["id"] for r in rows]

    assert ids == list(range(1, 1003))
    assert rows.pull_count == 8     # ceil(1002 / 128)


def test_zero_matching_rows(cxn, controller):
    rows = stream(cxn, "SELECT id, name FROM users WHERE id > 100", controller=controller)

    assert isinstance(rows, RowStream)
    assert list(rows) == []
    assert rows.pull_count == 0


def test_invalid_sql_returns_error(cxn, controller, caplog):
    """Testing that a syntax error comes back from stream() as a StreamSetupError value."""

    with caplog.at_level(logging.ERROR, logger="tests.sqlite_e2e"):
        result = stream(cxn, "SELEKT * FROM users", controller=controller)

    assert isinstance(result, StreamSetupError)
    assert result.stage == "open"
    assert isinstance(result.__cause__, sqlite3.OperationalError)
    assert "SELEKT" in str(result)
    assert caplog.records


def test_missing_table_returns_error(cxn, controller):
    result = stream(cxn, "SELECT id FROM no_such_table", controller=controller)

    assert isinstance(result, StreamSetupError)
    assert "no such table" in str(result.__cause__)


def test_positional_and_named_params(cxn, controller):
    """Testing that positional and named params are forwarded to the driver as given."""

    positional = stream(cxn, "SELECT name FROM users WHERE id = ?", [2], controller=controller)
    named = stream(cxn, "SELECT id FROM users WHERE name = :name", {"name": "Alice"}, controller=controller)

    assert list(positional) == [{"name": "Bob"}]
    assert list(named) == [{"id": 1}]


def test_too_many_params_returns_error(cxn, controller):
    result = stream(cxn, "SELECT id FROM users WHERE id = ?", [1, "extra"], controller=controller)

    assert isinstance(result, StreamSetupError)
    assert isinstance(result.__cause__, sqlite3.ProgrammingError)


@pytest.mark.parametrize("sql", ["CREATE TABLE extra (x INTEGER)", "", "-- just a comment", "   "])
def test_statement_without_result_set(cxn, controller, sql):
    """Testing that DDL, empty, comment-only and blank SQL each stream zero rows and no columns."""

    rows = stream(cxn, sql, controller=controller)

    assert isinstance(rows, RowStream)
    assert rows.columns == ()
    assert list(rows) == []
    assert rows.closed


def test_column_aliases_and_types(cxn, controller):
    """Testing column names come from the result set (aliases included) and values keep their SQLite types."""

    cxn.execute("CREATE TABLE blobs (b BLOB, r REAL, n TEXT)")
    cxn.execute("INSERT INTO blobs VALUES (?, ?, ?)", (b"\x01\x02", 1.5, None))

    rows = stream(cxn, "SELECT b AS payload, r, n FROM blobs", controller=controller)

    assert list(rows) == [{"payload": b"\x01\x02", "r": 1.5, "n": None}]


def test_to_df(cxn, controller):
    df = stream(cxn, "SELECT id, name FROM users ORDER BY id", options={"batch_size": 1}, controller=controller).to_df()

    assert isinstance(df, pd.DataFrame)
    assert df.shape == (2, 2)
    assert list(df["name"]) == ["Alice", "Bob"]


def test_default_controller(cxn):
    """Testing stream() without an explicit controller."""
    rows = stream(cxn, "SELECT id FROM users ORDER BY id")

    assert rows.batch_size == 500
    assert [r["id"] for r in rows] == [1, 2]


def test_closed_connection_is_setup_error(controller):
    connection = sqlite3.connect(":memory:")
    connection.close()

    result = stream(connection, "SELECT 1", controller=controller)

    assert isinstance(result, StreamSetupError)
    assert isinstance(result.__cause__, DatabaseNotConnected)


def test_unsupported_connection_is_setup_error(controller):
    result = stream(object(), "SELECT 1", controller=controller)

    assert isinstance(result, StreamSetupError)
    assert isinstance(result.__cause__, DatabaseTypeNotSupported)


# ---- Driver ---- #
def test_driver_close_is_idempotent_and_keeps_columns(cxn, driver):
    """Testing CursorDriver.close_cursor() twice on the same handle, and the columns after close."""

    handle = driver.open_cursor(cxn, "SELECT name FROM users")
    assert driver.fetch_columns(handle) == ["name"]

    driver.close_cursor(handle)
    driver.close_cursor(handle)

    assert handle.closed
    assert handle.cursor is None
    assert driver.fetch_columns(handle) == ["name"]
    assert driver.fetch_rows(handle, 10) is StreamSignal.END_OF_DATA


def test_driver_short_batch_marks_done(cxn, driver):
    """Testing that a batch shorter than batch_size ends the handle without another fetch."""

    handle = driver.open_cursor(cxn, "SELECT id FROM users ORDER BY id")
    driver.fetch_columns(handle)

    assert driver.fetch_rows(handle, 5) == [(1,), (2,)]
    assert handle.done
    assert driver.fetch_rows(handle, 5) is StreamSignal.END_OF_DATA

    driver.close_cursor(handle)


def test_driver_rejects_bad_input(cxn, driver):
    """Testing the driver with a non-handle and with a non-positive batch size."""

    with pytest.raises(InvalidCursorHandle):
        driver.fetch_rows(cxn, 10)
    with pytest.raises(InvalidCursorHandle):
        driver.close_cursor("not a handle")

    handle = driver.open_cursor(cxn, "SELECT id FROM users")
    with pytest.raises(ValueError):
        driver.fetch_rows(handle, 0)
    driver.close_cursor(handle)


def test_driver_open_failure_leaves_connection_usable(cxn, driver):
    with pytest.raises(sqlite3.OperationalError):
        driver.open_cursor(cxn, "SELEKT 1")

    assert driver.is_connected(cxn, DatabaseType.SQLITE)
