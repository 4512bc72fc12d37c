import json
import yaml
import logging
import math
import time
from datetime import datetime
from pydantic import ValidationError
from pathlib import Path, PurePath
from nanamemo.config import Configuration, JSON
from typing import Any, Optional

#: Formats tried after ISO 8601 parsing failed.
DATE_FORMATS = [
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d",
    "%Y-%m-%d %H:%M",
]


def to_bool(val: bool | int | float | str | None) -> bool:
    """Heuristic conversion to boolean value.

    :param val: value to be converted
    :return: boolean value
    """
    if isinstance(val, str):
        if val.strip().lower() in ["1", "true", "yes"]:
            return True
        else:
            return False
    if val:
        return True
    return False


def try_cast(value: Any, value_type, default=None) -> Any:
    try:
        return value_type(value)
    except (TypeError, ValueError):
        return default


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def file_extension(filename: Optional[str]) -> str:
    """Lower case extension with a dot, or empty string."""
    if not filename:
        return ""
    return PurePath(filename).suffix.lower()


def parse_backup_date(value: Any) -> Optional[int]:
    """Convert date found in backup to epoch milliseconds.

    Numbers with 10 digits are treated as seconds, other numbers as
    milliseconds. Strings like ``2023-04-01 12:30:00`` are normalized to ISO
    form (first space becomes ``T``) before parsing, naive dates are local
    time.

    :param value: value of date column or JSON field
    :return: milliseconds, or None when value is missing or unparseable
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        value = int(value)
        return value * 1000 if len(str(abs(value))) == 10 else value
    if not isinstance(value, str):
        return None
    value = value.strip()
    if value == "":
        return None
    number = try_cast(value, float)
    if number is not None:
        return parse_backup_date(number)
    candidate = value.replace(" ", "T", 1) if " " in value and ":" in value else value
    try:
        return int(datetime.fromisoformat(candidate).timestamp() * 1000)
    except ValueError:
        pass
    for date_format in DATE_FORMATS:
        try:
            return int(datetime.strptime(value, date_format).timestamp() * 1000)
        except ValueError:
            continue
    return None


def load_config_file(path: str | Path) -> JSON:
    if isinstance(path, str):
        path = Path(path)
    with open(path, encoding="UTF-8") as file:
        if path.suffix in [".yaml", ".yml"]:
            loaded = yaml.safe_load(file)
        else:
            loaded = json.load(file)
    return loaded


def load_config(file_name: str | Path) -> Configuration:
    try:
        return Configuration().model_validate(load_config_file(file_name) or {})
    except ValidationError as error:
        raise ValueError("Error parsing configuration file") from error


class LogFormatter(logging.Formatter):
    _grey = "\x1b[38;21m"
    _green = "\x1b[32m"
    _red = "\x1b[31;21m"
    _bold_red = "\x1b[31;1m"
    _yellow = "\u001b[33m"
    _blue = "\u001b[34m"
    _white = "\u001b[37m"
    _reset = "\x1b[0m"
    _bold = "\u001b[1m"
    _prefix = (
        _green
        + "%(asctime)s  "
        + _reset
        + _blue
        + "%(name)s "
        + _reset
        + _white
        + "%(funcName)s "
        + _reset
        + _bold
        + _grey
        + "%(levelname)s "
        + _reset
    )
    _message = "%(message)s"
    _formats = {
        logging.DEBUG: _prefix + _grey + _message + _reset,
        logging.INFO: _prefix + _white + _message + _reset,
        logging.WARNING: _prefix + _yellow + _message + _reset,
        logging.ERROR: _prefix + _red + _message + _reset,
        logging.CRITICAL: _prefix + _bold_red + _message + _reset,
    }

    def format(self, record):
        log_fmt = self._formats.get(record.levelno)
        formatter = logging.Formatter(log_fmt)
        return formatter.format(record)

    @classmethod
    def factory(cls):
        return cls()
