"""Pydantic models for notes and import/merge results."""

import logging
import math
import uuid
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from nanamemo.config import NoteDefaults

log = logging.getLogger(__name__)

DEFAULT_COLOR = NoteDefaults().color
DEFAULT_FONT = NoteDefaults().font
DEFAULT_FONT_SIZE = NoteDefaults().font_size


class Note(BaseModel):
    """Single note, as stored by the app.

    Field aliases are the keys of the native JSON backup, so
    ``Note.model_validate(record)`` and :meth:`to_native` are symmetric.
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    id: str = Field(..., min_length=1, description="Stable unique identifier")
    content: str = Field("", description="HTML-ish content, may contain <b> and <br>")
    created_at: int = Field(..., alias="createdAt", description="Creation time, epoch milliseconds")
    updated_at: int = Field(..., alias="updatedAt", description="Last update time, epoch milliseconds")
    is_pinned: bool = Field(False, alias="isPinned")
    color: str = DEFAULT_COLOR
    font: str = DEFAULT_FONT
    font_size: str = Field(DEFAULT_FONT_SIZE, alias="fontSize")

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def validate_timestamp(cls, v):
        """Accept float timestamps, but never NaN or infinity."""
        if isinstance(v, bool):
            raise ValueError("timestamp must be a number, not boolean")
        if isinstance(v, float):
            if not math.isfinite(v):
                raise ValueError("timestamp must be finite")
            return int(v)
        return v

    def to_native(self) -> dict:
        """Dump note with native JSON keys."""
        return self.model_dump(by_alias=True)


def synthesize_id(timestamp: int) -> str:
    """Make up an identifier for a note that has none.

    Timestamp keeps ids roughly sortable, random part keeps them unique
    within batch.
    """
    return f"{timestamp}-{uuid.uuid4().hex[:8]}"


def ensure_unique_ids(notes: List[Note]) -> List[Note]:
    """Give every note with an already seen id a new synthesized one."""
    seen = set()
    result = []
    for note in notes:
        if note.id in seen:
            new_id = synthesize_id(note.created_at)
            while new_id in seen:
                new_id = synthesize_id(note.created_at)
            log.debug("Duplicate note id %s replaced with %s", note.id, new_id)
            note = note.model_copy(update={"id": new_id})
        seen.add(note.id)
        result.append(note)
    return result


class MergeResult(BaseModel):
    """Outcome of reconciling imported notes with existing collection."""

    notes: List[Note] = Field(default_factory=list, description="Merged collection")
    added: int = Field(0, ge=0, description="Imported notes with new id")
    replaced: int = Field(0, ge=0, description="Existing notes replaced by newer or equal import")
    kept: int = Field(0, ge=0, description="Existing notes kept, because they were newer")

    @property
    def imported(self) -> int:
        return self.added + self.replaced + self.kept

    def print_report(self):
        """Print human-readable merge report."""
        print("\n" + "=" * 80)
        print("NOTE IMPORT SUMMARY")
        print("=" * 80)
        print(f"Notes in backup:         {self.imported}")
        print(f"Added:                   {self.added}")
        print(f"Replaced (newer):        {self.replaced}")
        print(f"Kept existing (newer):   {self.kept}")
        print(f"Total notes after merge: {len(self.notes)}")
        print("=" * 80)

        if self.kept > 0:
            print(f"\n⚠  {self.kept} notes were skipped, existing versions are newer")

        if self.added + self.replaced > 0:
            print(f"\n✓ Successfully restored {self.added + self.replaced} notes")


class ImportRequest(BaseModel):
    """Message sent to background import."""

    buffer: bytes
    filename: Optional[str] = None


class ImportResponse(BaseModel):
    """Message returned from background import."""

    success: bool
    notes: List[Note] = Field(default_factory=list)
    error: Optional[str] = None
    error_kind: Optional[str] = None
