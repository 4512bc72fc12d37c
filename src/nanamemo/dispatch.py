"""Choosing how a backup buffer should be parsed."""

from enum import Enum
import logging
from typing import Optional

from nanamemo.config import Configuration
from nanamemo.errors import UnsupportedFormat
from nanamemo.utils import file_extension

log = logging.getLogger(__name__)

#: Every SQLite 3 database file starts with this header.
SQLITE_HEADER = "SQLite format 3"


class ParseStrategy(str, Enum):
    """Parsing algorithm for backup buffer."""

    JSON = "json"
    DATABASE = "database"
    TEXT = "text"


def has_sqlite_header(buffer: bytes) -> bool:
    head = buffer[:16].decode("ascii", errors="replace")
    return head.startswith(SQLITE_HEADER)


def dispatch(buffer: bytes, filename: Optional[str] = None, config: Optional[Configuration] = None) -> ParseStrategy:
    """Select parse strategy from file name and leading bytes.

    * JSON extension always means JSON, content is not checked.
    * Legacy export extension (or no extension at all) means database if the
      SQLite header is there, text extraction otherwise.
    * Other extensions are accepted only with SQLite header.

    :param buffer: backup bytes, already decompressed
    :param filename: name of file buffer was read from
    :param config: configuration, default one if not given
    :raises UnsupportedFormat: if neither name nor content are recognized
    """
    if config is None:
        config = Configuration()
    extension = file_extension(filename)
    if extension in config.json_extensions:
        strategy = ParseStrategy.JSON
    elif has_sqlite_header(buffer):
        strategy = ParseStrategy.DATABASE
    elif extension == "" or extension in config.database_extensions:
        strategy = ParseStrategy.TEXT
    else:
        raise UnsupportedFormat(f"Unsupported file format: {filename}")
    log.debug("Using %s strategy for %s", strategy.value, filename)
    return strategy
