"""Writing notes as native JSON backup."""

from datetime import date
import json
from typing import Iterable, Optional

from nanamemo.model import Note


def export_notes(notes: Iterable[Note]) -> bytes:
    """Serialize notes to native JSON backup, readable by :func:`nanamemo.json_strategy.parse_json`."""
    data = [note.to_native() for note in notes]
    return json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8")


def backup_filename(when: Optional[date] = None) -> str:
    """Name of backup file, like ``nanamemo_backup_20240131.json``."""
    if when is None:
        when = date.today()
    return f"nanamemo_backup_{when.strftime('%Y%m%d')}.json"
