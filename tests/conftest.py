"""Shared pytest fixtures for nanamemo tests."""

import json
import zlib
from typing import List

import pytest
import sqlalchemy

MIMI_SCHEMA = (
    "CREATE TABLE NOTE_TB (_id INTEGER PRIMARY KEY, title TEXT, text TEXT, "
    "creation_date TEXT, update_date TEXT, ear INTEGER)"
)


@pytest.fixture
def sqlite_backup(tmp_path):
    """Factory for SQLite backup bytes.

    Usage:
        sqlite_backup(["CREATE TABLE notes (id TEXT)", "INSERT INTO notes VALUES ('1')"])
    """
    counter = {"n": 0}

    def _create(statements: List[str]) -> bytes:
        counter["n"] += 1
        path = tmp_path / f"backup_{counter['n']}.db"
        engine = sqlalchemy.create_engine(f"sqlite+pysqlite:///{path.as_posix()}")
        with engine.begin() as connection:
            for statement in statements:
                connection.exec_driver_sql(statement)
        engine.dispose()
        return path.read_bytes()

    return _create


@pytest.fixture
def mimi_backup(sqlite_backup):
    """Legacy export with three notes in NOTE_TB."""
    return sqlite_backup(
        [
            MIMI_SCHEMA,
            "INSERT INTO NOTE_TB VALUES (1, 'Shopping', 'milk, eggs', '2023-04-01 10:00:00', '2023-04-02 11:30:00', 1)",
            "INSERT INTO NOTE_TB VALUES (2, '', 'only body', '2023-04-03 09:15:00', '2023-04-03 09:15:00', 0)",
            "INSERT INTO NOTE_TB VALUES (3, 'same', 'same', NULL, 'not a date', NULL)",
        ]
    )


@pytest.fixture
def compress():
    return zlib.compress


@pytest.fixture
def native_json():
    """Factory for native JSON backup bytes."""

    def _create(records) -> bytes:
        return json.dumps(records).encode("utf-8")

    return _create
