"""Stuff related to application configuration."""

from pydantic import BaseModel, ConfigDict, field_validator
from typing import TypeAlias, List, Optional

#: General JSON type
JSON: TypeAlias = dict[str, "JSON"] | list["JSON"] | str | int | float | bool | None


class NoteDefaults(BaseModel):
    """Presentation attributes given to every imported note.

    Backup formats we import from don't carry any of these, so they are
    always set from here.
    """

    color: str = "text-slate-800 dark:text-slate-200"
    font: str = "font-sans"
    font_size: str = "text-lg"


class DatabaseHeuristics(BaseModel):
    """Names used to find notes inside a legacy database export.

    Schema of the source app changed between versions, so all lookups are
    done by trying candidates in order. Column names are compared case
    insensitive.
    """

    #: Table name used by the source app, matched case insensitive.
    canonical_table: str = "NOTE_TB"
    #: Any table containing this substring is a good second guess.
    table_substring: str = "note"
    #: Row identifier columns, in priority order.
    id_columns: List[str] = ["_id", "id", "note_id"]
    title_columns: List[str] = ["title", "subject"]
    body_columns: List[str] = ["text", "body", "content", "memo"]
    created_columns: List[str] = ["creation_date", "created_at", "create_date", "created"]
    updated_columns: List[str] = ["update_date", "updated_at", "modified_date", "updated"]
    #: Integer flag column marking pinned notes.
    pinned_column: str = "ear"
    #: Value of pinned column meaning "pinned".
    pinned_sentinel: int = 1


class Configuration(BaseModel):
    model_config = ConfigDict(extra="forbid", validate_assignment=True)
    defaults: NoteDefaults = NoteDefaults()
    database: DatabaseHeuristics = DatabaseHeuristics()
    #: Extensions always parsed as native JSON backup.
    json_extensions: List[str] = [".json"]
    #: Extensions of legacy binary exports, sniffed for SQLite header.
    database_extensions: List[str] = [".mimibk", ".db", ".sqlite", ".sqlite3"]
    #: Reject backups larger than this many bytes, 0 disables the check.
    max_file_size: int = 50 * 1024 * 1024
    #: Note store used by command line when --store is not given.
    store_path: Optional[str] = None

    @field_validator("json_extensions", "database_extensions")
    @classmethod
    def lowercase_extensions(cls, value: List[str]) -> List[str]:
        """File names are matched by lowercased extension."""
        return [extension.lower() for extension in value]
