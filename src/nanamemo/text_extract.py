"""Last resort recovery of notes from unreadable backups.

Even when a legacy export can't be opened as database, note texts are still
stored inside it as ``"text": "..."`` fragments. We look for those and turn
each one into a note.
"""

import json
import logging
import re
from typing import List, Optional

from nanamemo.config import Configuration
from nanamemo.errors import ExtractionFailed
from nanamemo.model import Note
from nanamemo.utils import now_ms

log = logging.getLogger(__name__)

TEXT_FIELD_RE = re.compile(r'"text"\s*:\s*"((?:\\"|[^"])*)"')


def unescape(fragment: str) -> Optional[str]:
    """Unescape captured fragment as JSON string, None if it is not one."""
    try:
        value = json.loads(f'"{fragment}"', strict=False)
    except ValueError:
        log.warning("Could not parse extracted text: %.80s", fragment)
        return None
    return value if isinstance(value, str) else None


def extract_fragments(text: str) -> List[str]:
    fragments = []
    for match in TEXT_FIELD_RE.finditer(text):
        value = unescape(match.group(1))
        if value is not None and value.strip():
            fragments.append(value)
    return fragments


def parse_as_text(
    buffer: bytes,
    database_error: Optional[BaseException] = None,
    config: Optional[Configuration] = None,
) -> List[Note]:
    """Recover notes from ``"text": "..."`` fragments in raw bytes.

    Notes get consecutive millisecond timestamps starting now, so they keep
    the order found in file and ids are unique.

    :param buffer: raw backup bytes
    :param database_error: failure of database strategy, kept for diagnostics
    :param config: configuration, default one if not given
    :raises ExtractionFailed: when no fragment could be recovered
    """
    if config is None:
        config = Configuration()
    fragments = extract_fragments(buffer.decode("utf-8", errors="replace"))
    if not fragments:
        raise ExtractionFailed("Failed to extract notes from text data", database_error=database_error)
    start = now_ms()
    log.debug("Recovered %d text fragments", len(fragments))
    notes = []
    for counter, content in enumerate(fragments):
        timestamp = start + counter
        notes.append(
            Note(
                id=str(timestamp),
                content=content,
                created_at=timestamp,
                updated_at=timestamp,
                is_pinned=False,
                color=config.defaults.color,
                font=config.defaults.font,
                font_size=config.defaults.font_size,
            )
        )
    return notes
