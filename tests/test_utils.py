from nanamemo.utils import (
    load_config,
    to_bool,
    try_cast,
    file_extension,
    parse_backup_date,
)
from datetime import datetime, timezone
from pathlib import Path
import pytest


def test_load_json() -> None:
    path = Path(__file__).parent / "data" / "config.json"
    config = load_config(path)
    assert config.defaults.color == "text-blue-600 dark:text-blue-400"
    assert config.database.canonical_table == "memo_table"
    assert config.database.pinned_column == "ear"
    assert config.max_file_size == 1024


def test_load_yaml() -> None:
    path = Path(__file__).parent / "data" / "config.yaml"
    config = load_config(path)
    assert config.defaults.color == "text-blue-600 dark:text-blue-400"
    assert config.defaults.font == "font-sans"
    assert config.database.canonical_table == "memo_table"
    assert config.max_file_size == 1024


def test_load_sample_config() -> None:
    path = Path(__file__).parent.parent / "config" / "default.yaml"
    config = load_config(path)
    assert config.database.canonical_table == "NOTE_TB"
    assert ".mimibk" in config.database_extensions


def test_load_file_does_not_exist() -> None:
    path = "not_exists"
    with pytest.raises(FileNotFoundError):
        load_config(path)


def test_load_file_wrong_data() -> None:
    path = Path(__file__).parent / "data" / "wrong.yaml"
    with pytest.raises(ValueError):
        load_config(path)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("", False),
        ("0", False),
        ("false", False),
        ("1", True),
        ("True", True),
        (1, True),
        (0, False),
        (None, False),
        (True, True),
    ],
)
def test_to_bool(value, expected) -> None:
    assert to_bool(value) == expected


def test_try_cast() -> None:
    assert try_cast("5", int) == 5
    assert try_cast("five", int) is None
    assert try_cast(None, int, -1) == -1


@pytest.mark.parametrize(
    "filename,expected",
    [
        ("backup.json", ".json"),
        ("BACKUP.MimiBK", ".mimibk"),
        ("archive.tar.db", ".db"),
        ("backup", ""),
        (None, ""),
        ("", ""),
    ],
)
def test_file_extension(filename, expected) -> None:
    assert file_extension(filename) == expected


def local_ms(*args) -> int:
    return int(datetime(*args).timestamp() * 1000)


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, None),
        ("", None),
        ("   ", None),
        ("yesterday", None),
        (True, None),
        (float("nan"), None),
        (float("inf"), None),
        (1700000000, 1700000000000),
        (1700000000123, 1700000000123),
        (1700000000.5, 1700000000000),
        ("1700000000", 1700000000000),
        ("2023-04-01 10:00:00", local_ms(2023, 4, 1, 10, 0, 0)),
        ("2023-04-01T10:00:00", local_ms(2023, 4, 1, 10, 0, 0)),
        ("2023-04-01", local_ms(2023, 4, 1)),
        ("2023/04/01 10:00:00", local_ms(2023, 4, 1, 10, 0, 0)),
        ("2023/04/01", local_ms(2023, 4, 1)),
        ("2023/04/01 10:00", local_ms(2023, 4, 1, 10, 0, 0)),
        ("2023.04.01 10:00:00", None),
        ("2023-04-01T10:00:00+00:00", int(datetime(2023, 4, 1, 10, tzinfo=timezone.utc).timestamp() * 1000)),
    ],
)
def test_parse_backup_date(value, expected) -> None:
    assert parse_backup_date(value) == expected
