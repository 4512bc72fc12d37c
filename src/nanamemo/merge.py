"""Reconciling imported notes with existing collection."""

import logging
from typing import Dict, Iterable, List, Mapping, Union

from nanamemo.model import MergeResult, Note

log = logging.getLogger(__name__)

NoteCollection = Union[Iterable[Note], Mapping[str, Note]]


def reconcile(existing: NoteCollection, imported: Iterable[Note]) -> MergeResult:
    """Merge imported notes into existing ones, newest wins.

    Imported note replaces existing note with the same id when its
    ``updated_at`` is newer or equal. Ties go to imported note, so importing
    the same backup twice gives the same result as importing it once.

    Nothing is modified in place.

    :param existing: current notes, as list or mapping of id to note
    :param imported: notes returned by :func:`nanamemo.pipeline.import_backup`
    :return: merged notes (in no particular order) and counters
    """
    if isinstance(existing, Mapping):
        existing = existing.values()
    notes: Dict[str, Note] = {note.id: note for note in existing}
    added = replaced = kept = 0
    for note in imported:
        current = notes.get(note.id)
        if current is None:
            notes[note.id] = note
            added += 1
        elif note.updated_at >= current.updated_at:
            notes[note.id] = note
            replaced += 1
        else:
            kept += 1
    log.debug("Merged notes: %d added, %d replaced, %d kept", added, replaced, kept)
    return MergeResult(notes=list(notes.values()), added=added, replaced=replaced, kept=kept)


def merge(existing: NoteCollection, imported: Iterable[Note]) -> List[Note]:
    """Merged collection only, see :func:`reconcile`."""
    return reconcile(existing, imported).notes
