"""Encoding of login sessions as Pyrogram session strings."""

from __future__ import annotations

import base64
import struct
from dataclasses import dataclass

AUTH_KEY_LENGTH = 256
AUTH_KEY_ID_LENGTH = 8


@dataclass(frozen=True)
class SessionData:
    """The parts of an authorised session that a session string carries."""

    dc: int
    auth_key: bytes
    auth_key_id: bytes
    test_mode: bool = False


def encode_pyrogram_session(data: SessionData, app_id: int) -> str:
    """Return the unpadded URL-safe base64 Pyrogram session string."""
    if len(data.auth_key) != AUTH_KEY_LENGTH:
        raise ValueError("auth key must be 256 bytes long")
    if len(data.auth_key_id) != AUTH_KEY_ID_LENGTH:
        raise ValueError("auth key ID must be 8 bytes long")
    raw = b"".join(
        (
            struct.pack(">BIB", data.dc & 0xFF, app_id & 0xFFFFFFFF, 1 if data.test_mode else 0),
            data.auth_key,
            data.auth_key_id,
            b"\x00",
        )
    )
    return base64.urlsafe_b64encode(raw).decode().rstrip("=")