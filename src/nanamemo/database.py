"""Reading notes from legacy SQLite exports.

Source app changed its schema between versions, so nothing here assumes a
fixed layout. Tables and columns are found with ordered lists of named
rules, first match wins. Rules are module level so each can be tested on its
own.
"""

import base64
from contextlib import contextmanager
import logging
import os
from pathlib import Path
import tempfile
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

import sqlalchemy
from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError

from nanamemo.config import Configuration, DatabaseHeuristics
from nanamemo.decompress import probe
from nanamemo.errors import DatabaseParseError, NoTablesFound, NoteTableNotFound
from nanamemo.model import Note, ensure_unique_ids, synthesize_id
from nanamemo.utils import now_ms, parse_backup_date, try_cast

log = logging.getLogger(__name__)

#: Files SQLite may create next to database while reading it.
SQLITE_SIDE_FILES = ["-journal", "-wal", "-shm"]

TableRule = Callable[[str, DatabaseHeuristics], bool]
ColumnRule = Callable[[List[str], DatabaseHeuristics], List[str]]

#: How notes table is chosen, in priority order.
TABLE_RULES: List[Tuple[str, TableRule]] = [
    ("canonical_name", lambda name, h: name.lower() == h.canonical_table.lower()),
    ("contains_note", lambda name, h: h.table_substring.lower() in name.lower()),
    ("first_table", lambda name, h: True),
]


def configured_id_columns(columns: List[str], heuristics: DatabaseHeuristics) -> List[str]:
    lookup = {column.lower(): column for column in columns}
    return [lookup[name.lower()] for name in heuristics.id_columns if name.lower() in lookup]


def suffixed_id_columns(columns: List[str], heuristics: DatabaseHeuristics) -> List[str]:
    return [column for column in columns if column.lower().endswith("_id")]


#: Where note identifier is taken from, in priority order.
#:
#: Older app versions call row id ``_id``, some exports only have a foreign
#: key looking ``*_id`` column. When several columns qualify, configured names
#: win (in configured order), then ``*_id`` columns in table order. Value of
#: first candidate that is not empty is used, so a row with empty ``_id`` can
#: still get its id from ``note_id``.
ID_COLUMN_RULES: List[Tuple[str, ColumnRule]] = [
    ("configured_name", configured_id_columns),
    ("id_suffix", suffixed_id_columns),
]


def decode_text(value: bytes) -> str:
    """Decode TEXT cell, invalid UTF-8 is replaced instead of failing whole query."""
    return value.decode("utf-8", errors="replace")


def lenient_text_factory(dbapi_connection, connection_record) -> None:
    dbapi_connection.text_factory = decode_text


@contextmanager
def open_backup_database(buffer: bytes) -> Iterator[sqlalchemy.Engine]:
    """Expose backup bytes as SQLAlchemy engine.

    SQLite can only open files, so buffer goes to a private temporary file.
    Engine is disposed and file removed on every exit path.
    """
    fd, name = tempfile.mkstemp(prefix="nanamemo_", suffix=".db")
    path = Path(name)
    engine = None
    try:
        with os.fdopen(fd, "wb") as file:
            file.write(buffer)
        engine = sqlalchemy.create_engine(f"sqlite+pysqlite:///{path.as_posix()}", echo=False, future=True)
        event.listen(engine, "connect", lenient_text_factory)
        yield engine
    finally:
        if engine is not None:
            engine.dispose()
        path.unlink(missing_ok=True)
        for suffix in SQLITE_SIDE_FILES:
            Path(f"{path}{suffix}").unlink(missing_ok=True)


def list_tables(connection: sqlalchemy.Connection) -> List[str]:
    """User tables, in the order they were created."""
    result = connection.execute(sqlalchemy.text("SELECT name FROM sqlite_master WHERE type='table' ORDER BY rowid"))
    return [name for (name,) in result if not name.startswith("sqlite_")]


def select_table(tables: List[str], heuristics: DatabaseHeuristics) -> Optional[str]:
    for rule_name, matches in TABLE_RULES:
        for table in tables:
            if matches(table, heuristics):
                log.debug("Selected table %s by rule %s", table, rule_name)
                return table
    return None


def read_table(connection: sqlalchemy.Connection, table_name: str) -> Tuple[List[str], List[Tuple[Any, ...]]]:
    """All columns and rows of table.

    Plain ``SELECT *`` is used instead of reflection, reflected date columns
    would make SQLAlchemy parse values we want to parse ourselves.
    """
    quoted = connection.dialect.identifier_preparer.quote_identifier(table_name)
    result = connection.exec_driver_sql(f"SELECT * FROM {quoted}")
    columns = list(result.keys())
    rows = [tuple(row) for row in result]
    return columns, rows


def find_column(columns: List[str], candidates: List[str]) -> Optional[str]:
    lookup = {column.lower(): column for column in columns}
    for candidate in candidates:
        if candidate.lower() in lookup:
            return lookup[candidate.lower()]
    return None


def id_columns(columns: List[str], heuristics: DatabaseHeuristics) -> List[str]:
    found: List[str] = []
    for _, rule in ID_COLUMN_RULES:
        for column in rule(columns, heuristics):
            if column not in found:
                found.append(column)
    return found


def text_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def combine_content(title: str, body: str) -> str:
    """Join title and body the way the editor shows them."""
    if title and body and title != body:
        return f"<b>{title}</b><br><br>{body}"
    return body or title


class RowMapper:
    """Converts rows of selected notes table into notes."""

    def __init__(self, columns: List[str], config: Configuration, now: int) -> None:
        heuristics = config.database
        self.config = config
        self.now = now
        self.sentinel = heuristics.pinned_sentinel
        self.index = {column: position for position, column in enumerate(columns)}
        self.id_columns = id_columns(columns, heuristics)
        self.title_column = find_column(columns, heuristics.title_columns)
        self.body_column = find_column(columns, heuristics.body_columns)
        self.created_column = find_column(columns, heuristics.created_columns)
        self.updated_column = find_column(columns, heuristics.updated_columns)
        self.pinned_column = find_column(columns, [heuristics.pinned_column])
        log.debug(
            "Column mapping: id=%s title=%s body=%s created=%s updated=%s pinned=%s",
            self.id_columns,
            self.title_column,
            self.body_column,
            self.created_column,
            self.updated_column,
            self.pinned_column,
        )

    def value(self, row: Tuple[Any, ...], column: Optional[str]) -> Any:
        if column is None:
            return None
        return row[self.index[column]]

    def note_id(self, row: Tuple[Any, ...], timestamp: int) -> str:
        for column in self.id_columns:
            value = text_value(self.value(row, column)).strip()
            if value:
                return value
        return synthesize_id(timestamp)

    def timestamp(self, row: Tuple[Any, ...], column: Optional[str], row_number: int) -> int:
        parsed = parse_backup_date(self.value(row, column))
        if parsed is None:
            return self.now + row_number
        return parsed

    def map(self, row: Tuple[Any, ...], row_number: int) -> Note:
        created_at = self.timestamp(row, self.created_column, row_number)
        updated_at = self.timestamp(row, self.updated_column, row_number)
        title = text_value(self.value(row, self.title_column))
        body = text_value(self.value(row, self.body_column))
        pinned = try_cast(self.value(row, self.pinned_column), int)
        return Note(
            id=self.note_id(row, created_at),
            content=combine_content(title, body),
            created_at=created_at,
            updated_at=updated_at,
            is_pinned=pinned == self.sentinel,
            color=self.config.defaults.color,
            font=self.config.defaults.font,
            font_size=self.config.defaults.font_size,
        )


def parse_database(buffer: bytes, config: Optional[Configuration] = None) -> List[Note]:
    """Extract notes from SQLite backup.

    :param buffer: bytes of SQLite database file
    :param config: configuration, default one if not given
    :return: list of notes, empty if notes table has no rows
    :raises NoTablesFound: database has no user tables
    :raises NoteTableNotFound: no table could be selected
    :raises DatabaseParseError: database could not be opened or read
    """
    if config is None:
        config = Configuration()
    try:
        with open_backup_database(buffer) as engine, engine.connect() as connection:
            tables = list_tables(connection)
            if not tables:
                raise NoTablesFound("No tables found in database")
            table_name = select_table(tables, config.database)
            if table_name is None:
                raise NoteTableNotFound("Notes table not found in database")
            columns, rows = read_table(connection, table_name)
    except SQLAlchemyError as error:
        cause = getattr(error, "orig", None) or error
        raise DatabaseParseError(str(cause)) from error
    log.debug("Read %d rows from table %s", len(rows), table_name)
    if not rows:
        return []
    mapper = RowMapper(columns, config, now_ms())
    return ensure_unique_ids([mapper.map(row, number) for number, row in enumerate(rows)])


def dump_value(value: Any) -> Any:
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    return value


def dump_tables(buffer: bytes) -> Dict[str, Dict[str, List[Any]]]:
    """Dump every table of (possibly compressed) database backup.

    Result is JSON serializable: ``{table: {"columns": [...], "values": [[...]]}}``,
    binary values are base64 encoded.

    :raises DatabaseParseError: database could not be opened or read
    """
    buffer = probe(buffer)
    result: Dict[str, Dict[str, List[Any]]] = {}
    try:
        with open_backup_database(buffer) as engine, engine.connect() as connection:
            for table_name in list_tables(connection):
                columns, rows = read_table(connection, table_name)
                result[table_name] = {
                    "columns": columns,
                    "values": [[dump_value(value) for value in row] for row in rows],
                }
    except SQLAlchemyError as error:
        cause = getattr(error, "orig", None) or error
        raise DatabaseParseError(str(cause)) from error
    return result
