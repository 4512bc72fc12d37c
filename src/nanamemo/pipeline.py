"""Backup import entry point."""

import logging
from typing import List, Optional

from nanamemo.config import Configuration
from nanamemo.database import parse_database
from nanamemo.decompress import probe
from nanamemo.dispatch import ParseStrategy, dispatch
from nanamemo.errors import DatabaseError, EmptyInput, FileTooLarge
from nanamemo.json_strategy import parse_json
from nanamemo.model import Note
from nanamemo.text_extract import parse_as_text

log = logging.getLogger(__name__)


def check_admission(buffer: bytes, config: Configuration) -> None:
    if not buffer:
        raise EmptyInput("File is empty")
    if config.max_file_size and len(buffer) > config.max_file_size:
        raise FileTooLarge(f"File is too large: {len(buffer)} bytes, limit is {config.max_file_size} bytes")


def database_with_fallback(buffer: bytes, config: Configuration) -> List[Note]:
    """Read buffer as database, recover text fragments if that fails."""
    try:
        return parse_database(buffer, config)
    except DatabaseError as database_error:
        log.warning("Database parsing failed, attempting text extraction: %s", database_error)
        return parse_as_text(buffer, database_error=database_error, config=config)


def import_backup(buffer: bytes, filename: Optional[str] = None, config: Optional[Configuration] = None) -> List[Note]:
    """Import notes from backup file contents.

    Buffer may be zlib compressed. Native JSON backups, legacy SQLite exports
    and damaged legacy exports (by text recovery) are understood. Result is
    all or nothing, on failure an exception is raised and no notes are
    returned.

    :param buffer: file contents
    :param filename: file name, extension drives format detection
    :param config: configuration, default one if not given
    :return: imported notes, ids are unique
    :raises BackupImportError: when notes can't be imported, subclass tells why
    """
    if config is None:
        config = Configuration()
    check_admission(buffer, config)
    data = probe(buffer)
    strategy = dispatch(data, filename, config)
    if strategy == ParseStrategy.JSON:
        notes = parse_json(data, config)
    elif strategy == ParseStrategy.DATABASE:
        notes = database_with_fallback(data, config)
    else:
        header_error = DatabaseError("SQLite header not found")
        notes = parse_as_text(data, database_error=header_error, config=config)
    log.info("Imported %d notes from %s", len(notes), filename or "backup")
    return notes
