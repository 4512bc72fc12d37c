"""Exceptions raised by the backup import pipeline.

Every exception carries ``kind``, a short stable name that survives being
sent across a worker boundary as plain text (see :mod:`nanamemo.worker`).
"""

from typing import Optional


class BackupImportError(Exception):
    """Base for all failures of a backup import."""

    kind = "ImportError"


class EmptyInput(BackupImportError):
    """Raised when backup buffer has no bytes at all."""

    kind = "EmptyInput"


class FileTooLarge(BackupImportError):
    """Raised when backup buffer exceeds configured size limit."""

    kind = "FileTooLarge"


class UnsupportedFormat(BackupImportError):
    """Raised when neither file name nor content match a known format."""

    kind = "UnsupportedFormat"


class InvalidJsonFormat(BackupImportError):
    """Raised when JSON backup does not have expected shape."""

    kind = "InvalidJsonFormat"


class DatabaseError(BackupImportError):
    """Base for failures of database strategy, those trigger text fallback."""

    kind = "DatabaseError"


class NoTablesFound(DatabaseError):
    kind = "NoTablesFound"


class NoteTableNotFound(DatabaseError):
    kind = "NoteTableNotFound"


class DatabaseParseError(DatabaseError):
    """Raised when database can't be opened or queried.

    :param cause: text of underlying driver error
    """

    kind = "DatabaseParseError"

    def __init__(self, cause: str) -> None:
        super().__init__(f"Failed to read database: {cause}")
        self.cause = cause


class ExtractionFailed(BackupImportError):
    """Raised when text fallback recovered no notes.

    :param database_error: error of database strategy, if it was tried first
    """

    kind = "ExtractionFailed"

    def __init__(self, message: str, database_error: Optional[BaseException] = None) -> None:
        if database_error is not None:
            message = f"{message} (database error: {database_error})"
        super().__init__(message)
        self.database_error = database_error
