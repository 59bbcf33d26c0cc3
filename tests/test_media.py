import pytest

from filestreambot.cache import FileCache
from filestreambot.media import (
    Document,
    DocumentLocation,
    MediaError,
    Photo,
    PhotoLocation,
    PhotoSize,
    file_from_media,
    file_from_message,
    is_allowed,
)


def make_document():
    return Document(id=11, access_hash=22, file_reference=b"ref", size=4096, mime_type="video/mp4", file_name="a.mp4")


def make_photo(sizes=None):
    return Photo(id=33, access_hash=44, file_reference=b"pref", sizes=sizes or [PhotoSize("s"), PhotoSize("y")])


def test_document_file():
    doc = make_document()
    file = file_from_media(doc)
    assert file.location == DocumentLocation(doc.id, doc.access_hash, doc.file_reference)
    assert (file.file_size, file.file_name, file.mime_type, file.id) == (doc.size, doc.file_name, doc.mime_type, doc.id)


def test_photo_uses_largest_size():
    photo = make_photo()
    file = file_from_media(photo)
    assert file.location == PhotoLocation(photo.id, photo.access_hash, photo.file_reference, "y")
    assert file.file_size == 0
    assert file.file_name == f"photo_{photo.id}.jpg"
    assert file.mime_type == "image/jpeg"


def test_photo_without_sizes():
    with pytest.raises(MediaError, match="no sizes"):
        file_from_media(Photo(1, 2, b"", []))


def test_photo_empty_last_size():
    with pytest.raises(MediaError, match="empty"):
        file_from_media(make_photo([PhotoSize("s"), PhotoSize("y", empty=True)]))


def test_unexpected_media():
    with pytest.raises(MediaError, match="unexpected type"):
        file_from_media("text")


def test_file_from_message_caches():
    cache = FileCache()
    calls = []

    def fetch(message_id):
        calls.append(message_id)
        return make_document()

    first = file_from_message(cache, 7, 100, fetch)
    second = file_from_message(cache, 7, 100, fetch)
    assert first == second
    assert calls == [100]


def test_file_from_message_keyed_by_client():
    cache = FileCache()
    calls = []

    def fetch(message_id):
        calls.append(message_id)
        return make_photo()

    first = file_from_message(cache, 1, 5, fetch)
    second = file_from_message(cache, 2, 5, fetch)
    assert calls == [5, 5]
    assert first == second
    assert first.file_name == "photo_33.jpg"
    assert cache.get("file:5:1") == first
    assert cache.get("file:5:2") == second


def test_file_from_message_deleted():
    cache = FileCache()
    with pytest.raises(MediaError, match="deleted"):
        file_from_message(cache, 1, 5, lambda message_id: None)
    with pytest.raises(KeyError):
        cache.get("file:5:1")


def test_is_allowed():
    assert is_allowed([], 42)
    assert is_allowed([1, 42], 42)
    assert not is_allowed([1, 2], 42)