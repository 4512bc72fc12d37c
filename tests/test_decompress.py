import zlib

from nanamemo.decompress import probe, looks_compressed, ZLIB_MAGIC


def test_compressed_buffer_is_inflated() -> None:
    data = b'[{"id": "1"}]' * 20
    packed = zlib.compress(data)
    assert packed[0] == ZLIB_MAGIC
    assert probe(packed) == data


def test_plain_buffer_passes_through() -> None:
    data = b"SQLite format 3\x00rest"
    assert probe(data) is data


def test_short_buffer_passes_through() -> None:
    assert probe(b"") == b""
    assert probe(b"x") == b"x"
    assert probe(b"x\x9c") == b"x\x9c"
    assert not looks_compressed(b"x\x9c")


def test_fake_magic_does_not_raise(caplog) -> None:
    # Starts with "x" (0x78), but it is not a zlib stream.
    data = b'xyz "text": "hello"'
    assert looks_compressed(data)
    assert probe(data) is data
    assert "decompression failed" in caplog.text


def test_truncated_stream_returns_original() -> None:
    packed = zlib.compress(b"hello world" * 100)[:-10]
    assert probe(packed) == packed
