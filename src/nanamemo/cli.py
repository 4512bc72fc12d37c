import click
import json
import logging
from pathlib import Path
from functools import wraps
from typing import List, Optional
from nanamemo.config import Configuration
from nanamemo.database import dump_tables
from nanamemo.errors import BackupImportError
from nanamemo.export import backup_filename, export_notes
from nanamemo.json_strategy import parse_json
from nanamemo.merge import reconcile
from nanamemo.model import Note
from nanamemo.pipeline import import_backup
from nanamemo.utils import load_config, LogFormatter

log = logging.getLogger(__name__)


def setup_command(func):
    """Decorator to handle common CLI setup (logging, config loading, version)."""

    @wraps(func)
    def wrapper(config, debug, version=None, **kwargs):
        # Handle --version flag
        if version is not None and version:
            import tomllib

            with open("pyproject.toml", "rb") as f:
                data = tomllib.load(f)
            click.echo(data["project"]["version"])
            return

        # Setup logging
        log_handler = logging.StreamHandler()
        log_handler.setFormatter(LogFormatter())
        logging.basicConfig(level=logging.DEBUG if debug else logging.WARNING, handlers=[log_handler])

        # Load config
        config_obj = load_config(config) if config is not None else Configuration()
        if debug:
            log.debug(json.dumps(config_obj.model_dump(), indent=4))

        # Call actual command with config_obj
        return func(config_obj=config_obj, debug=debug, **kwargs)

    return wrapper


def load_store(path: Path, config: Configuration) -> List[Note]:
    """Read note store, missing or empty store has no notes."""
    if not path.exists():
        log.info("Store %s does not exist, starting empty", path)
        return []
    data = path.read_bytes()
    if not data.strip():
        return []
    try:
        return parse_json(data, config)
    except BackupImportError as error:
        raise click.ClickException(f"Cannot read store {path}: {error}") from error


def write_output(content: bytes, output: Optional[str]):
    if output:
        Path(output).write_bytes(content)
        click.echo(f"Written to {output}")
    else:
        click.echo(content.decode("utf-8"))


@click.group()
def cli():
    pass


@click.command("import")
@click.argument("backup", type=click.Path(exists=True, dir_okay=False))
@click.option("--config", default=None, help="Configuration file.")
@click.option("--debug", default=False, is_flag=True, help="Enable debug.")
@click.option("--version", is_flag=True, help="Show the application's version.")
@click.option("--store", default=None, help="Note store (JSON) to merge imported notes into.")
@click.option("--dry-run/--no-dry-run", default=False, help="Show merge result without writing the store.")
@click.option("--output", default=None, help="Output file for imported notes when no store is used (default: stdout).")
@setup_command
def import_(config_obj, debug, backup, store, dry_run, output):
    """Import notes from backup file (JSON, legacy database export)."""
    path = Path(backup)
    try:
        notes = import_backup(path.read_bytes(), path.name, config_obj)
    except BackupImportError as error:
        raise click.ClickException(f"Restore failed: {error}") from error

    store = store or config_obj.store_path
    if store is None:
        write_output(export_notes(notes), output)
        return

    store_path = Path(store)
    result = reconcile(load_store(store_path, config_obj), notes)
    result.print_report()
    if dry_run:
        click.echo("\nDry run, store not written. Run with --no-dry-run to apply changes")
        return
    notes_sorted = sorted(result.notes, key=lambda n: n.updated_at, reverse=True)
    store_path.write_bytes(export_notes(notes_sorted))
    click.echo(f"✓ Store {store_path} now has {len(result.notes)} notes")


@click.command()
@click.argument("backup", type=click.Path(exists=True, dir_okay=False))
@click.option("--config", default=None, help="Configuration file.")
@click.option("--debug", default=False, is_flag=True, help="Enable debug.")
@click.option("--version", is_flag=True, help="Show the application's version.")
@click.option("--output", default=None, help="Output file path (default: stdout).")
@setup_command
def convert(config_obj, debug, backup, output):
    """Dump all tables of legacy database export as JSON."""
    try:
        tables = dump_tables(Path(backup).read_bytes())
    except BackupImportError as error:
        raise click.ClickException(f"Conversion failed: {error}") from error
    write_output(json.dumps(tables, indent=2, ensure_ascii=False).encode("utf-8"), output)


@click.command()
@click.argument("store", type=click.Path(exists=True, dir_okay=False))
@click.option("--config", default=None, help="Configuration file.")
@click.option("--debug", default=False, is_flag=True, help="Enable debug.")
@click.option("--version", is_flag=True, help="Show the application's version.")
@click.option("--output-dir", default=".", help="Directory for backup file.")
@setup_command
def export(config_obj, debug, store, output_dir):
    """Write note store as dated backup file."""
    notes = load_store(Path(store), config_obj)
    target = Path(output_dir) / backup_filename()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(export_notes(notes))
    click.echo(f"✓ Backup of {len(notes)} notes written to {target}")


cli.add_command(import_)
cli.add_command(convert)
cli.add_command(export)

if __name__ == "__main__":
    cli()
