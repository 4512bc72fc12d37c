"""Parsing of JSON backups.

Two shapes are understood:

* native - array of notes exactly as this app writes them (``id``,
  ``content``, ``createdAt``...), see :func:`nanamemo.export.export_notes`,
* legacy - array of records with ``note_id``, ``text``, ``created_at``,
  ``updated_at`` and ``pinned`` written by older exporters.

Shape is decided once, from the first element.
"""

from enum import Enum
import json
import logging
from typing import Any, Callable, List, Optional, Tuple

from pydantic import ValidationError

from nanamemo.config import Configuration
from nanamemo.errors import InvalidJsonFormat, UnsupportedFormat
from nanamemo.model import Note, ensure_unique_ids, synthesize_id
from nanamemo.utils import now_ms, parse_backup_date, to_bool

log = logging.getLogger(__name__)


class JsonVariant(str, Enum):
    NATIVE = "native"
    LEGACY = "legacy"


NATIVE_KEYS = ("id", "content", "createdAt")
LEGACY_KEYS = ("note_id", "text")

#: Checked in order, first matching variant wins.
VARIANT_RULES: List[Tuple[JsonVariant, Callable[[dict], bool]]] = [
    (JsonVariant.NATIVE, lambda record: all(key in record for key in NATIVE_KEYS)),
    (JsonVariant.LEGACY, lambda record: all(key in record for key in LEGACY_KEYS)),
]


def detect_variant(record: Any) -> Optional[JsonVariant]:
    if not isinstance(record, dict):
        return None
    for variant, matches in VARIANT_RULES:
        if matches(record):
            return variant
    return None


def load_records(buffer: bytes) -> List[Any]:
    """Decode buffer into JSON array.

    :raises InvalidJsonFormat: if buffer is not UTF-8 JSON array
    """
    try:
        data = json.loads(buffer.decode("utf-8-sig"))
    except (UnicodeDecodeError, ValueError) as error:
        raise InvalidJsonFormat(f"Invalid JSON file: {error}") from error
    if not isinstance(data, list):
        raise InvalidJsonFormat("Invalid JSON file format: expected an array of notes")
    return data


def native_note(record: dict, config: Configuration) -> Note:
    defaults = config.defaults
    values = {
        "isPinned": False,
        "color": defaults.color,
        "font": defaults.font,
        "fontSize": defaults.font_size,
        **{key: value for key, value in record.items() if value is not None},
    }
    values.setdefault("updatedAt", values.get("createdAt"))
    if not isinstance(values.get("id"), str) and values.get("id") is not None:
        values["id"] = str(values["id"])
    values["isPinned"] = to_bool(values["isPinned"])
    return Note.model_validate(values)


def legacy_note(record: dict, index: int, config: Configuration, now: int) -> Note:
    fallback = now - index
    created_at = parse_backup_date(record.get("created_at"))
    if created_at is None:
        created_at = fallback
    updated_at = parse_backup_date(record.get("updated_at"))
    if updated_at is None:
        updated_at = fallback
    note_id = record.get("note_id")
    if note_id is None or str(note_id) == "":
        note_id = synthesize_id(fallback)
    text = record.get("text")
    return Note(
        id=str(note_id),
        content="" if text is None else str(text),
        created_at=created_at,
        updated_at=updated_at,
        is_pinned=to_bool(record.get("pinned")),
        color=config.defaults.color,
        font=config.defaults.font,
        font_size=config.defaults.font_size,
    )


def parse_json(buffer: bytes, config: Optional[Configuration] = None) -> List[Note]:
    """Parse JSON backup into notes.

    :param buffer: UTF-8 encoded JSON
    :param config: configuration, default one if not given
    :return: list of notes, empty for empty array
    :raises InvalidJsonFormat: when root is not an array, or records are malformed
    :raises UnsupportedFormat: when records are neither native nor legacy
    """
    if config is None:
        config = Configuration()
    records = load_records(buffer)
    if not records:
        return []
    if not isinstance(records[0], dict):
        raise InvalidJsonFormat("Invalid JSON file format: notes must be objects")
    variant = detect_variant(records[0])
    if variant is None:
        raise UnsupportedFormat("Unrecognized note format in JSON file")
    log.debug("JSON backup with %d %s records", len(records), variant.value)

    now = now_ms()
    notes = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise InvalidJsonFormat(f"Invalid note at index {index}: not an object")
        try:
            if variant == JsonVariant.NATIVE:
                notes.append(native_note(record, config))
            else:
                notes.append(legacy_note(record, index, config, now))
        except ValidationError as error:
            raise InvalidJsonFormat(f"Invalid note at index {index}: {error}") from error
    return ensure_unique_ids(notes)
