import pytest

from filestreambot.reader import TelegramReader, iter_parts

DATA = bytes(range(100))
CHUNK = 16


def fetch(offset, limit):
    return DATA[offset : offset + limit]


RANGES = [(0, 99), (5, 40), (16, 31), (3, 7), (17, 17), (0, 15), (50, 99)]


@pytest.mark.parametrize("start,end", RANGES)
def test_iter_parts_covers_range(start, end):
    assert b"".join(iter_parts(fetch, start, end, CHUNK)) == DATA[start : end + 1]


@pytest.mark.parametrize("start,end", RANGES)
def test_reader_read_all(start, end):
    reader = TelegramReader(fetch, start, end, end - start + 1, CHUNK)
    assert reader.read() == DATA[start : end + 1]
    assert reader.read() == b""


@pytest.mark.parametrize("start,end", RANGES)
def test_reader_small_reads(start, end):
    reader = TelegramReader(fetch, start, end, end - start + 1, CHUNK)
    pieces = []
    while piece := reader.read(3):
        assert len(piece) <= 3
        pieces.append(piece)
    assert b"".join(pieces) == DATA[start : end + 1]


def test_reader_iteration():
    reader = TelegramReader(fetch, 5, 70, 66, CHUNK)
    assert b"".join(reader) == DATA[5:71]


def test_fetches_are_aligned():
    calls = []

    def recording(offset, limit):
        calls.append((offset, limit))
        return fetch(offset, limit)

    parts = list(iter_parts(recording, 5, 70, CHUNK))
    assert b"".join(parts) == DATA[5:71]
    assert calls == [(0, 16), (16, 16), (32, 16), (48, 16), (64, 16)]


def test_reader_stops_at_content_length():
    reader = TelegramReader(fetch, 0, 99, 10, CHUNK)
    assert reader.read() == DATA[:10]


def test_empty_fetch_gives_empty_read():
    reader = TelegramReader(lambda offset, limit: b"", 0, 20, 21, CHUNK)
    assert reader.read() == b""


def test_closed_reader_raises():
    with TelegramReader(fetch, 0, 9, 10, CHUNK) as reader:
        assert reader.read(4) == DATA[:4]
    with pytest.raises(ValueError):
        reader.read()


def test_invalid_chunk_size():
    with pytest.raises(ValueError):
        iter_parts(fetch, 0, 10, 0)


def test_invalid_range():
    with pytest.raises(ValueError):
        iter_parts(fetch, 10, 5, CHUNK)