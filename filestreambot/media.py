"""File descriptions from message media, with caching and access checks."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from filestreambot.cache import FileCache
from filestreambot.files import File

log = logging.getLogger(__name__)

CACHE_SECONDS = 3600


class MediaError(Exception):
    """Raised when media cannot be turned into a file description."""


@dataclass(frozen=True)
class DocumentLocation:
    """Where a document can be downloaded from."""

    id: int
    access_hash: int
    file_reference: bytes
    thumb_size: str = ""


@dataclass(frozen=True)
class PhotoLocation:
    """Where one size of a photo can be downloaded from."""

    id: int
    access_hash: int
    file_reference: bytes
    thumb_size: str


@dataclass(frozen=True)
class Document:
    """A document attached to a message."""

    id: int
    access_hash: int
    file_reference: bytes
    size: int
    mime_type: str
    file_name: str = ""


@dataclass(frozen=True)
class PhotoSize:
    """One available size of a photo; an empty size carries no image."""

    type: str
    empty: bool = False


@dataclass(frozen=True)
class Photo:
    """A photo attached to a message, with its sizes from smallest to largest."""

    id: int
    access_hash: int
    file_reference: bytes
    sizes: list[PhotoSize] = field(default_factory=list)


def file_from_media(media: Any) -> File:
    """Describe the file held by a document or photo."""
    if isinstance(media, Document):
        return File(
            location=DocumentLocation(media.id, media.access_hash, media.file_reference),
            file_size=media.size,
            file_name=media.file_name,
            mime_type=media.mime_type,
            id=media.id,
        )
    if isinstance(media, Photo):
        if not media.sizes:
            raise MediaError("photo has no sizes")
        size = media.sizes[-1]
        if size.empty:
            raise MediaError("photo size is empty")
        return File(
            location=PhotoLocation(media.id, media.access_hash, media.file_reference, size.type),
            file_size=0,
            file_name=f"photo_{media.id}.jpg",
            mime_type="image/jpeg",
            id=media.id,
        )
    raise MediaError(f"unexpected type {type(media).__name__}")


def file_from_message(
    cache: FileCache, client_id: int, message_id: int, fetch_media: Callable[[int], Any]
) -> File:
    """Describe the file of a log channel message, using the cache when possible.

    ``fetch_media(message_id)`` returns the message's media, or None if the message is gone.
    """
    key = f"file:{message_id}:{client_id}"
    try:
        cached = cache.get(key)
    except KeyError:
        pass
    else:
        log.debug("Using cached media of message %d for client %d", message_id, client_id)
        return cached
    log.debug("Fetching file properties of message %d for client %d", message_id, client_id)
    media = fetch_media(message_id)
    if media is None:
        raise MediaError("this file was deleted")
    file = file_from_media(media)
    cache.set(key, file, CACHE_SECONDS)
    return file


def is_allowed(allowed_users: Iterable[int], chat_id: int) -> bool:
    """Tell whether a chat may use the bot; an empty list allows everyone."""
    users = list(allowed_users)
    return not users or chat_id in users