"""File descriptions, their link hashes and the status response."""

from __future__ import annotations

import hashlib
from dataclasses import asdict, dataclass
from typing import Any


@dataclass
class File:
    """A file stored in the log channel."""

    location: Any
    file_size: int
    file_name: str
    mime_type: str
    id: int


@dataclass(frozen=True)
class HashableFile:
    """The fields of a file that make up its link hash."""

    file_name: str
    file_size: int
    mime_type: str
    file_id: int

    def pack(self) -> str:
        """Return the hex MD5 of the fields written one after another."""
        hasher = hashlib.md5()
        for part in (self.file_name, str(self.file_size), self.mime_type, str(self.file_id)):
            hasher.update(part.encode())
        return hasher.hexdigest()


@dataclass
class RootResponse:
    """Body of the server's status page."""

    message: str
    ok: bool
    uptime: str
    version: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def pack_file(file_name: str, file_size: int, mime_type: str, file_id: int) -> str:
    """Return the full hash of a file."""
    return HashableFile(file_name, file_size, mime_type, file_id).pack()


def get_short_hash(full_hash: str, length: int) -> str:
    """Return the first ``length`` characters of a full hash."""
    if not 0 <= length <= len(full_hash):
        raise ValueError(f"hash length {length} out of range")
    return full_hash[:length]


def check_hash(input_hash: str, expected_hash: str, length: int) -> bool:
    """Tell whether a short hash matches the full hash it should come from."""
    return input_hash == get_short_hash(expected_hash, length)