"""Replies of the bot: greetings and stream links for received files."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from filestreambot.files import File, get_short_hash, pack_file
from filestreambot.media import is_allowed

NOT_ALLOWED_TEXT = "You are not allowed to use this bot."
GREETING_TEXT = "Hi, send me any file to get a direct streamble link to that file."
UNSUPPORTED_TEXT = "Sorry, this message type is unsupported."

_STREAMABLE = ("video", "audio", "pdf")


@dataclass(frozen=True)
class Button:
    """An inline keyboard button that opens a URL."""

    text: str
    url: str


@dataclass(frozen=True)
class LinkReply:
    """The reply to a received file: the link, shown as code, and its buttons."""

    link: str
    buttons: list[Button] = field(default_factory=list)


def start_message(allowed_users: Iterable[int], chat_id: int) -> str:
    """Return the reply to the start command."""
    return GREETING_TEXT if is_allowed(allowed_users, chat_id) else NOT_ALLOWED_TEXT


def is_streamable(mime_type: str) -> bool:
    """Tell whether a file can be played or viewed in the browser."""
    return any(kind in mime_type for kind in _STREAMABLE)


def build_stream_link(host: str, message_id: int, short_hash: str) -> str:
    """Return the stream URL of a log channel message."""
    return f"{host}/stream/{message_id}?hash={short_hash}"


def link_reply(host: str, message_id: int, file: File, hash_length: int) -> LinkReply:
    """Build the reply carrying the links of a file forwarded to the log channel."""
    full_hash = pack_file(file.file_name, file.file_size, file.mime_type, file.id)
    link = build_stream_link(host, message_id, get_short_hash(full_hash, hash_length))
    if "http://localhost" in link:
        return LinkReply(link)
    buttons = [Button("Download", link + "&d=true")]
    if is_streamable(file.mime_type):
        buttons.append(Button("Stream", link))
    return LinkReply(link, buttons)