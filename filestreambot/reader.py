"""Sequential reading of a byte range of a remote file fetched in aligned chunks."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator

log = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1024 * 1024

ChunkFetcher = Callable[[int, int], bytes]


def iter_parts(
    fetch_chunk: ChunkFetcher, start: int, end: int, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> Iterator[bytes]:
    """Yield the bytes from ``start`` to ``end`` inclusive, one aligned chunk at a time.

    ``fetch_chunk(offset, limit)`` returns the bytes of the file at a chunk-aligned
    offset. Iteration stops early if it returns nothing.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if start < 0 or end < start:
        raise ValueError(f"invalid range {start}-{end}")
    return _parts(fetch_chunk, start, end, chunk_size)


def _parts(fetch_chunk: ChunkFetcher, start: int, end: int, chunk_size: int) -> Iterator[bytes]:
    offset = start - start % chunk_size
    first_cut = start - offset
    last_cut = end % chunk_size + 1
    part_count = (end - offset + chunk_size) // chunk_size
    for part in range(1, part_count + 1):
        data = fetch_chunk(offset, chunk_size)
        if not data:
            return
        if part_count == 1:
            data = data[first_cut:last_cut]
        elif part == 1:
            data = data[first_cut:]
        elif part == part_count:
            data = data[:last_cut]
        offset += chunk_size
        log.debug("Part %d/%d", part, part_count)
        yield bytes(data)


class TelegramReader:
    """A readable stream over ``content_length`` bytes of a file starting at ``start``."""

    def __init__(
        self,
        fetch_chunk: ChunkFetcher,
        start: int,
        end: int,
        content_length: int,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self._fetch_chunk = fetch_chunk
        self._start = start
        self._end = end
        self._content_length = content_length
        self._chunk_size = chunk_size
        self._parts = iter_parts(fetch_chunk, start, end, chunk_size)
        self._buffer = b""
        self._pos = 0
        self._bytes_read = 0
        self._closed = False
        log.debug("Start")

    def _next_buffer(self) -> bytes:
        buffer = next(self._parts, b"")
        log.debug("Next buffer of %d bytes", len(buffer))
        if not buffer:
            self._parts = iter_parts(self._fetch_chunk, self._start, self._end, self._chunk_size)
            buffer = next(self._parts, b"")
        return buffer

    def _read_some(self, size: int) -> bytes:
        remaining = self._content_length - self._bytes_read
        if remaining <= 0 or size == 0:
            return b""
        if self._pos >= len(self._buffer):
            self._buffer = self._next_buffer()
            self._pos = 0
            if not self._buffer:
                return b""
        count = min(size, remaining)
        piece = self._buffer[self._pos : self._pos + count]
        self._pos += len(piece)
        self._bytes_read += len(piece)
        return piece

    def read(self, size: int = -1) -> bytes:
        """Return up to ``size`` bytes, or all remaining bytes if ``size`` is negative."""
        if self._closed:
            raise ValueError("I/O operation on closed reader")
        if size is None or size < 0:
            pieces = []
            while piece := self._read_some(self._content_length - self._bytes_read):
                pieces.append(piece)
            return b"".join(pieces)
        return self._read_some(size)

    def __iter__(self) -> Iterator[bytes]:
        while piece := self.read(self._chunk_size):
            yield piece

    def close(self) -> None:
        self._closed = True

    def __enter__(self) -> TelegramReader:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()