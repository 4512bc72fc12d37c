import pytest

from nanamemo.errors import DatabaseParseError, ExtractionFailed
from nanamemo.model import DEFAULT_COLOR
from nanamemo.text_extract import extract_fragments, parse_as_text, unescape
from nanamemo.utils import now_ms


def test_fragments_are_unescaped() -> None:
    text = r'junk {"text": "line\nbreak", "x": 1} more {"text":"quote \" inside"} "text" : "あ"'
    assert extract_fragments(text) == ["line\nbreak", 'quote " inside', "あ"]


def test_blank_fragments_are_skipped() -> None:
    assert extract_fragments('"text": "", "text": "   ", "text": "\\n"') == []


def test_bad_escape_is_skipped(caplog) -> None:
    assert unescape(r"bad \x escape") is None
    assert extract_fragments(r'"text": "bad \x escape" "text": "good"') == ["good"]
    assert "Could not parse extracted text" in caplog.text


def test_notes_from_binary_garbage() -> None:
    before = now_ms()
    buffer = b'\x00\x01\xff"text": "first"\x00\x9c\x02"text": "second"\xfe'
    notes = parse_as_text(buffer)
    assert [note.content for note in notes] == ["first", "second"]
    assert notes[0].created_at >= before
    assert notes[1].created_at == notes[0].created_at + 1
    assert notes[1].updated_at == notes[1].created_at
    assert notes[0].id == str(notes[0].created_at)
    assert notes[0].id != notes[1].id
    assert all(note.is_pinned is False for note in notes)
    assert all(note.color == DEFAULT_COLOR for note in notes)


def test_nothing_recoverable() -> None:
    with pytest.raises(ExtractionFailed) as error:
        parse_as_text(b"\x00\x01 nothing here")
    assert error.value.database_error is None


def test_failure_mentions_database_error() -> None:
    database_error = DatabaseParseError("file is not a database")
    with pytest.raises(ExtractionFailed, match="file is not a database") as error:
        parse_as_text(b"nothing", database_error=database_error)
    assert error.value.database_error is database_error
