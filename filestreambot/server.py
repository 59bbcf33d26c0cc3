"""The HTTP server that streams files from the log channel."""

from __future__ import annotations

import json
import logging
import re
import socketserver
import time
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any
from urllib.parse import parse_qs
from wsgiref.simple_server import WSGIServer, make_server

from filestreambot.config import Config
from filestreambot.files import File, RootResponse, check_hash, pack_file
from filestreambot.reader import TelegramReader
from filestreambot.timefmt import time_format
from filestreambot.workers import Worker, WorkerPool

log = logging.getLogger(__name__)

VERSION = "3.1.0"
PHOTO_LIMIT = 1024 * 1024
DEFAULT_MIME_TYPE = "application/octet-stream"

_STREAM_PATH = re.compile(r"/stream/([^/]+)")
_DECIMAL = re.compile(r"[+-]?\d+")

FetchFile = Callable[[Worker, int], File]
StartResponse = Callable[..., Any]


class RangeError(ValueError):
    """Raised when a Range header is malformed or cannot be satisfied."""


@dataclass(frozen=True)
class ByteRange:
    """An inclusive range of byte positions."""

    start: int
    end: int


def parse_range(size: int, header: str) -> list[ByteRange]:
    """Parse a ``bytes=`` Range header against a resource of ``size`` bytes."""
    prefix = "bytes="
    if not header.startswith(prefix):
        raise RangeError("invalid range header: missing 'bytes=' prefix")
    ranges = []
    for spec in header[len(prefix):].split(","):
        spec = spec.strip()
        if not spec:
            continue
        first, sep, last = spec.partition("-")
        first, last = first.strip(), last.strip()
        if not sep or (first and not first.isdigit()) or (last and not last.isdigit()):
            raise RangeError(f"invalid range {spec!r}")
        if not first:
            if not last:
                raise RangeError(f"invalid range {spec!r}")
            start, end = max(size - int(last), 0), size - 1
        else:
            start = int(first)
            end = int(last) if last else size - 1
            end = min(end, size - 1)
        if start >= size or start > end:
            raise RangeError(f"range {spec!r} not satisfiable")
        ranges.append(ByteRange(start, end))
    if not ranges:
        raise RangeError("invalid range header: no ranges")
    return ranges


def _status(code: int) -> str:
    status = HTTPStatus(code)
    return f"{status.value} {status.phrase}"


def _error(start_response: StartResponse, code: int, message: str) -> list[bytes]:
    body = (message + "\n").encode()
    start_response(
        _status(code),
        [
            ("Content-Type", "text/plain; charset=utf-8"),
            ("X-Content-Type-Options", "nosniff"),
            ("Content-Length", str(len(body))),
        ],
    )
    return [body]


def _stream_body(reader: TelegramReader) -> Iterator[bytes]:
    try:
        with reader:
            yield from reader
    except Exception:
        log.exception("Error while copying stream")


class StreamApp:
    """WSGI application serving the status page and ``/stream/<message id>``.

    ``fetch_file(worker, message_id)`` describes the file of a log channel message;
    ``worker.client.download(location, offset, limit)`` returns the bytes of a file.
    """

    def __init__(self, pool: WorkerPool, config: Config, fetch_file: FetchFile, start_time: float) -> None:
        self.pool = pool
        self.config = config
        self.fetch_file = fetch_file
        self.start_time = start_time

    def __call__(self, environ: dict[str, Any], start_response: StartResponse) -> Iterable[bytes]:
        path = environ.get("PATH_INFO") or "/"
        method = environ.get("REQUEST_METHOD", "GET").upper()
        if method in ("GET", "HEAD"):
            if path == "/":
                return self._root(start_response, method == "HEAD")
            match = _STREAM_PATH.fullmatch(path)
            if match:
                return self._stream(environ, start_response, match.group(1), method == "HEAD")
        body = b"404 page not found"
        start_response(
            _status(HTTPStatus.NOT_FOUND),
            [("Content-Type", "text/plain"), ("Content-Length", str(len(body)))],
        )
        return [body]

    def _root(self, start_response: StartResponse, head: bool) -> list[bytes]:
        response = RootResponse(
            message="Server is running.",
            ok=True,
            uptime=time_format(max(int(time.time() - self.start_time), 0)),
            version=VERSION,
        )
        body = json.dumps(response.to_dict()).encode()
        start_response(
            _status(HTTPStatus.OK),
            [("Content-Type", "application/json; charset=utf-8"), ("Content-Length", str(len(body)))],
        )
        return [] if head else [body]

    def _stream(
        self, environ: dict[str, Any], start_response: StartResponse, raw_id: str, head: bool
    ) -> Iterable[bytes]:
        if not _DECIMAL.fullmatch(raw_id):
            return _error(start_response, HTTPStatus.BAD_REQUEST, f"invalid message ID {raw_id!r}")
        message_id = int(raw_id)

        query = parse_qs(environ.get("QUERY_STRING", ""), keep_blank_values=True)
        auth_hash = query.get("hash", [""])[0]
        if not auth_hash:
            return _error(start_response, HTTPStatus.BAD_REQUEST, "missing hash param")

        try:
            worker = self.pool.next_worker()
        except LookupError as exc:
            return _error(start_response, HTTPStatus.SERVICE_UNAVAILABLE, str(exc))

        try:
            file = self.fetch_file(worker, message_id)
        except Exception as exc:
            log.debug("Failed to get file of message %d: %s", message_id, exc)
            return _error(start_response, HTTPStatus.BAD_REQUEST, str(exc))

        expected = pack_file(file.file_name, file.file_size, file.mime_type, file.id)
        if not check_hash(auth_hash, expected, self.config.hash_length):
            return _error(start_response, HTTPStatus.BAD_REQUEST, "invalid hash")

        def fetch_chunk(offset: int, limit: int) -> bytes:
            return worker.client.download(file.location, offset, limit)

        if file.file_size == 0:
            try:
                data = fetch_chunk(0, PHOTO_LIMIT)
            except Exception as exc:
                return _error(start_response, HTTPStatus.INTERNAL_SERVER_ERROR, str(exc))
            start_response(
                _status(HTTPStatus.OK),
                [
                    ("Content-Disposition", f'inline; filename="{file.file_name}"'),
                    ("Content-Type", file.mime_type),
                    ("Content-Length", str(len(data))),
                ],
            )
            return [] if head else [data]

        headers = [("Accept-Ranges", "bytes")]
        range_header = environ.get("HTTP_RANGE", "")
        if not range_header:
            start, end = 0, file.file_size - 1
            code = HTTPStatus.OK
        else:
            try:
                first = parse_range(file.file_size, range_header)[0]
            except RangeError as exc:
                return _error(start_response, HTTPStatus.BAD_REQUEST, str(exc))
            start, end = first.start, first.end
            headers.append(("Content-Range", f"bytes {start}-{end}/{file.file_size}"))
            log.info("Content-Range start=%d end=%d fileSize=%d", start, end, file.file_size)
            code = HTTPStatus.PARTIAL_CONTENT

        content_length = end - start + 1
        disposition = "attachment" if query.get("d", [""])[0] == "true" else "inline"
        headers += [
            ("Content-Type", file.mime_type or DEFAULT_MIME_TYPE),
            ("Content-Length", str(content_length)),
            ("Content-Disposition", f'{disposition}; filename="{file.file_name}"'),
        ]
        start_response(_status(code), headers)
        if head:
            return []
        return _stream_body(TelegramReader(fetch_chunk, start, end, content_length))


class _ThreadingWSGIServer(socketserver.ThreadingMixIn, WSGIServer):
    daemon_threads = True


def serve(app: Callable[..., Iterable[bytes]], port: int) -> None:
    """Serve ``app`` on every interface at ``port`` until interrupted."""
    with make_server("", port, app, server_class=_ThreadingWSGIServer) as httpd:
        log.info("Server started on port %d", port)
        httpd.serve_forever()