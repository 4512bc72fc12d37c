"""Import of note backups, native JSON and legacy database exports."""

from nanamemo.export import export_notes
from nanamemo.merge import merge, reconcile
from nanamemo.model import Note
from nanamemo.pipeline import import_backup

__all__ = ["Note", "import_backup", "merge", "reconcile", "export_notes"]
