"""Optional zlib decompression of backup buffers."""

import logging
import zlib

log = logging.getLogger(__name__)

#: First byte of zlib stream (deflate, 32K window) regardless of compression level.
ZLIB_MAGIC = 0x78


def looks_compressed(buffer: bytes) -> bool:
    return len(buffer) > 2 and buffer[0] == ZLIB_MAGIC


def probe(buffer: bytes) -> bytes:
    """Inflate buffer if it looks like zlib stream.

    Failure to inflate is not an error, it only means buffer was not
    compressed after all (``x`` is also a perfectly normal first character of
    a text file). In that case original buffer is returned.

    :param buffer: raw backup bytes
    :return: inflated or original bytes
    """
    if not looks_compressed(buffer):
        return buffer
    try:
        inflated = zlib.decompress(buffer)
    except zlib.error as error:
        log.warning("zlib decompression failed, proceeding with original data: %s", error)
        return buffer
    log.debug("Decompressed zlib backup, %d -> %d bytes", len(buffer), len(inflated))
    return inflated
