# filestreambot

The serving side of a Telegram file-stream bot. It has a WSGI application that
streams files from a log channel over HTTP with byte-range support. It also has
helpers that build the stream links and button replies a bot sends back, plus the
configuration, caching, logging and worker-pool pieces around them.

## Installation

```
pip install .
```

## The `fsb` command

```
fsb --version
fsb run --port 8080
fsb run --help
fsb session -I 12345 -H placeholder -T phone
```

- `fsb` with no subcommand prints the help text.
- `fsb run` sets up logging and loads the configuration (see below). It then
  serves `filestreambot.server.StreamApp` on every interface at the configured
  port. Flags: `--api-id`, `--api-hash`, `--bot-token`, `--log-channel`, `--dev`,
  `-p/--port`, `--host`, `--hash-length`, `--use-session-file`, `--user-session`,
  `--use-public-ip`, `--multi-token-txt-file`. A flag given a non-zero or true
  value overrides the matching environment variable. If the configuration is
  invalid, `run` logs the error and exits with status 1.
- `fsb session` takes `-T/--login-type` (`qr` by default or `phone`), plus the
  required `-I/--api-id` and `-H/--api-hash`. See "What it does not do" for
  what each login type does.

## Configuration

`filestreambot.config.load()` first reads `fsb.env` from the working directory.
Variables from that file never replace ones already set. Command-line flags come
next, and then `Config.from_env` parses the environment:

```
API_ID=12345
API_HASH=placeholder
BOT_TOKEN=token
LOG_CHANNEL=-100123
PORT=8080
HOST=
HASH_LENGTH=6
DEV=false
USE_SESSION_FILE=true
USE_PUBLIC_IP=false
USER_SESSION=
ALLOWED_USERS=111,222
MULTI_TOKEN1=token
```

- `API_ID`, `API_HASH`, `BOT_TOKEN` and `LOG_CHANNEL` are required. A missing or
  malformed value raises `ConfigError`.
- Boolean values accept `1/t/T/true/TRUE/True` and `0/f/F/false/FALSE/False`.
- If `HOST` is empty, it becomes `http://<ip>:<port>`. The IP is the machine's
  local address. With `USE_PUBLIC_IP` it is the public address instead, which is
  checked for reachability on port 80. If neither can be found, `localhost` is
  used.
- `LOG_CHANNEL` loses its sign and its first `100`, so `-100123` becomes `123`.
- `HASH_LENGTH` is kept between 5 and 32. A value of 0 or below 5 becomes 6, and
  a value above 32 becomes 32.
- `ALLOWED_USERS` is a comma-separated list of user IDs. `MULTI_TOKEN<n>`
  variables are gathered into `Config.multi_tokens`.

`filestreambot.logging_setup.init_logger(debug_mode, log_dir)` logs to the console.
It also writes JSON lines to `<log_dir>/app.log`. The file rotates at 10 MiB, keeps
3 gzipped backups and removes backups older than 7 days.

## HTTP endpoints

- `GET /` returns JSON with `message`, `ok`, `uptime` and `version`.
- `GET /stream/<message id>?hash=<short hash>` checks the hash against the file's
  MD5-based hash. It then streams the file in 1 MiB aligned parts. A `Range`
  header gives `206` with `Content-Range`. `&d=true` serves the file as an
  attachment. Photos, which have a size of 0, are sent whole in a single
  request of up to 1 MiB. `HEAD` returns only the headers.
- A bad message ID, a missing or wrong hash, or a bad range gives `400`. If no
  worker is in the pool, the response is `503`.

## Using the pieces as a library

```python
import time
from filestreambot.config import Config
from filestreambot.workers import WorkerPool
from filestreambot.server import StreamApp, serve, parse_range
from filestreambot.links import link_reply
from filestreambot.timefmt import time_format

time_format(3661)                 # '1 hour, 1 minute, 1 second'
parse_range(1000, "bytes=0-499")  # [ByteRange(start=0, end=499)]

pool = WorkerPool()
pool.add_default(client, user)    # client.download(location, offset, limit) -> bytes
app = StreamApp(pool, config, fetch_file, time.time())
serve(app, 8080)
```

`fetch_file(worker, message_id)` must return a `filestreambot.files.File`.
`filestreambot.media.file_from_message` can build it from a fetcher of message
media (`Document` or `Photo`), and caches the result in a `FileCache` for an hour.

Other pieces:

- `filestreambot.links.link_reply(host, message_id, file, hash_length)` returns a
  `LinkReply`. It holds the stream link and a "Download" button, plus a "Stream"
  button for video, audio and PDF files. Links on `http://localhost` get no
  buttons. `start_message` gives the greeting, or a refusal for users not listed
  in `ALLOWED_USERS`.
- `filestreambot.workers.WorkerPool` hands out workers round robin.
  `start_all(tokens, start_worker, timeout)` starts bots concurrently. `RateLimiter`
  is a token bucket.
- `filestreambot.reader.TelegramReader` reads a byte range through a chunk-fetch
  callable.
- `filestreambot.cache.FileCache` is a size-bounded LRU cache with per-entry
  expiry.
- `filestreambot.session_string.encode_pyrogram_session` builds a Pyrogram session
  string from a `SessionData` record.

## What it does not do

The package has no Telegram client. It does not log in as a bot, receive
messages, forward files to the log channel, download from Telegram, or start
worker bots from `MULTI_TOKEN` variables. Those clients have to be supplied by
the code that uses the library.

As a result, `fsb run` starts the server with an empty worker pool. Only the
status page works, and stream requests get `503`. `fsb session -T qr` reports
that QR login is unavailable and exits with status 1. `-T phone` prints that
phone sessions are not implemented.