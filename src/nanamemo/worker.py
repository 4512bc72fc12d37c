"""Running imports away from caller's thread.

Large legacy exports take a while to parse. Callers that must stay
responsive can hand the work to any :class:`concurrent.futures.Executor`.
Only an :class:`ImportRequest` goes in and only an :class:`ImportResponse`
comes out, both are plain picklable models, so process pools work too.
"""

from concurrent.futures import Executor, Future
import logging
from typing import Optional

from nanamemo.config import Configuration
from nanamemo.errors import BackupImportError
from nanamemo.model import ImportRequest, ImportResponse
from nanamemo.pipeline import import_backup

log = logging.getLogger(__name__)


def handle_request(request: ImportRequest, config: Optional[Configuration] = None) -> ImportResponse:
    """Run import and wrap its outcome into response message."""
    try:
        notes = import_backup(request.buffer, request.filename, config)
    except BackupImportError as error:
        log.error("Import of %s failed: %s", request.filename, error)
        return ImportResponse(success=False, error=str(error), error_kind=error.kind)
    return ImportResponse(success=True, notes=notes)


def submit_import(
    executor: Executor, buffer: bytes, filename: Optional[str] = None, config: Optional[Configuration] = None
) -> "Future[ImportResponse]":
    """Schedule import on executor.

    :param executor: thread or process pool
    :param buffer: file contents
    :param filename: file name
    :param config: configuration, default one if not given
    :return: future resolving to response, never to a :class:`BackupImportError`
    """
    request = ImportRequest(buffer=buffer, filename=filename)
    return executor.submit(handle_request, request, config)
