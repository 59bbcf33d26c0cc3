"""Runtime configuration read from the environment, an env file and command-line flags."""

from __future__ import annotations

import argparse
import logging
import os
import re
import socket
import urllib.request
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import dotenv_values

log = logging.getLogger(__name__)

ENV_FILE = "fsb.env"
PUBLIC_IP_URL = "https://api.ipify.org?format=text"
DEFAULT_HASH_LENGTH = 6
MIN_HASH_LENGTH = 5
MAX_HASH_LENGTH = 32

_WORKER_VAR_RE = re.compile(r"MULTI_TOKEN\d+=(.*)")
_DECIMAL_RE = re.compile(r"[+-]?\d+")
_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})


class ConfigError(Exception):
    """Raised when the configuration is missing or malformed."""


def _parse_bool(key: str, value: str) -> bool:
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"{key}: invalid boolean value {value!r}")


def _parse_int(key: str, value: str, bits: int) -> int:
    try:
        number = int(value, 0)
    except ValueError as exc:
        raise ConfigError(f"{key}: invalid integer value {value!r}") from exc
    limit = 1 << (bits - 1)
    if not -limit <= number < limit:
        raise ConfigError(f"{key}: value {value!r} out of range")
    return number


def parse_allowed_users(value: str) -> list[int]:
    """Parse a comma separated list of user IDs."""
    if value == "":
        return []
    users = []
    for part in value.split(","):
        if not _DECIMAL_RE.fullmatch(part):
            raise ConfigError(f"ALLOWED_USERS: invalid user ID {part!r}")
        users.append(int(part))
    return users


def parse_multi_tokens(environ: Mapping[str, str]) -> list[str]:
    """Collect worker bot tokens from MULTI_TOKEN<n> variables, in environment order."""
    tokens = []
    for name, value in environ.items():
        if not name.startswith("MULTI_TOKEN"):
            continue
        match = _WORKER_VAR_RE.search(f"{name}={value}")
        if match:
            tokens.append(match.group(1))
    return tokens


def strip_int(value: int) -> int:
    """Drop the sign and the first "100" from a channel ID."""
    digits = str(abs(value)).replace("100", "", 1)
    try:
        return int(digits)
    except ValueError as exc:
        raise ConfigError(f"invalid channel ID {value}") from exc


@dataclass
class Config:
    """Settings of the bot and its HTTP server."""

    api_id: int
    api_hash: str
    bot_token: str
    log_channel_id: int
    dev: bool = False
    port: int = 8080
    host: str = ""
    hash_length: int = DEFAULT_HASH_LENGTH
    use_session_file: bool = True
    user_session: str = ""
    use_public_ip: bool = False
    allowed_users: list[int] = field(default_factory=list)
    multi_tokens: list[str] = field(default_factory=list)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Config:
        """Build a configuration from environment variables."""
        env = os.environ if environ is None else environ

        def required(key: str) -> str:
            if key not in env:
                raise ConfigError(f"required key {key} missing value")
            return env[key]

        options: dict[str, object] = {}
        options["api_id"] = _parse_int("API_ID", required("API_ID"), 32)
        for key, attr in (("API_HASH", "api_hash"), ("BOT_TOKEN", "bot_token")):
            options[attr] = required(key)
        options["log_channel_id"] = _parse_int("LOG_CHANNEL", required("LOG_CHANNEL"), 64)
        for key, attr in (("PORT", "port"), ("HASH_LENGTH", "hash_length")):
            if key in env:
                options[attr] = _parse_int(key, env[key], 64)
        for key, attr in (
            ("DEV", "dev"),
            ("USE_SESSION_FILE", "use_session_file"),
            ("USE_PUBLIC_IP", "use_public_ip"),
        ):
            if key in env:
                options[attr] = _parse_bool(key, env[key])
        for key, attr in (("HOST", "host"), ("USER_SESSION", "user_session")):
            if key in env:
                options[attr] = env[key]
        if "ALLOWED_USERS" in env:
            options["allowed_users"] = parse_allowed_users(env["ALLOWED_USERS"])

        return cls(multi_tokens=parse_multi_tokens(env), **options)

    def normalize(self) -> None:
        """Strip the channel ID prefix and keep the hash length within bounds."""
        self.log_channel_id = strip_int(self.log_channel_id)
        if self.hash_length == 0:
            log.info("HASH_LENGTH can't be 0, defaulting to %d", DEFAULT_HASH_LENGTH)
            self.hash_length = DEFAULT_HASH_LENGTH
        if self.hash_length > MAX_HASH_LENGTH:
            log.info("HASH_LENGTH can't be more than %d, changing to %d", MAX_HASH_LENGTH, MAX_HASH_LENGTH)
            self.hash_length = MAX_HASH_LENGTH
        if self.hash_length < MIN_HASH_LENGTH:
            log.info(
                "HASH_LENGTH can't be less than %d, defaulting to %d", MIN_HASH_LENGTH, DEFAULT_HASH_LENGTH
            )
            self.hash_length = DEFAULT_HASH_LENGTH


def load_env_file(path: str | os.PathLike[str], environ: MutableMapping[str, str]) -> bool:
    """Load variables from an env file without overriding existing ones.

    Returns False when the file does not exist.
    """
    env_path = Path(os.path.normpath(path))
    log.info("Trying to load ENV vars from %s", env_path)
    if not env_path.is_file():
        log.error("ENV file not found: %s", env_path)
        log.info("Please create %s file", env_path.name)
        log.info("Please ignore this message if you are hosting it in a service like Heroku or other alternatives.")
        return False
    try:
        values = dotenv_values(env_path)
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Unknown error while parsing env file: {exc}") from exc
    for key, value in values.items():
        if value is not None:
            environ.setdefault(key, value)
    return True


def add_run_arguments(parser: argparse.ArgumentParser) -> None:
    """Register the flags that override configuration variables."""
    parser.add_argument("--api-id", type=int, default=0, help="Telegram API ID")
    parser.add_argument("--api-hash", default="", help="Telegram API Hash")
    parser.add_argument("--bot-token", default="", help="Telegram Bot Token")
    parser.add_argument("--log-channel", type=int, default=0, help="Telegram Log Channel ID")
    parser.add_argument("--dev", action="store_true", help="Enable development mode")
    parser.add_argument("-p", "--port", type=int, default=0, help="Server port")
    parser.add_argument("--host", default="", help="Server host that will be included in links")
    parser.add_argument("--hash-length", type=int, default=0, help="Hash length in links")
    parser.add_argument("--use-session-file", action="store_true", help="Use session files")
    parser.add_argument("--user-session", default="", help="Pyrogram user session")
    parser.add_argument("--use-public-ip", action="store_true", help="Use public IP instead of local IP")
    parser.add_argument("--multi-token-txt-file", default="", help="Multi token txt file")


def apply_arguments(args: argparse.Namespace, environ: MutableMapping[str, str]) -> None:
    """Copy every flag that was given a non-zero value into the environment."""
    for attr, key in (
        ("api_id", "API_ID"),
        ("log_channel", "LOG_CHANNEL"),
        ("port", "PORT"),
        ("hash_length", "HASH_LENGTH"),
    ):
        number = getattr(args, attr, 0)
        if number:
            environ[key] = str(number)
    for attr, key in (
        ("api_hash", "API_HASH"),
        ("bot_token", "BOT_TOKEN"),
        ("host", "HOST"),
        ("user_session", "USER_SESSION"),
        ("multi_token_txt_file", "MULTI_TOKEN_TXT_FILE"),
    ):
        text = getattr(args, attr, "")
        if text:
            environ[key] = text
    for attr, key in (
        ("dev", "DEV"),
        ("use_session_file", "USE_SESSION_FILE"),
        ("use_public_ip", "USE_PUBLIC_IP"),
    ):
        if getattr(args, attr, False):
            environ[key] = "true"


def _internal_ip() -> str:
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(("8.8.8.8", 80))
            return sock.getsockname()[0]
    except OSError as exc:
        raise ConnectionError("no internet connection") from exc


def _is_accessible(ip: str) -> bool:
    try:
        with socket.create_connection((ip, 80), timeout=10):
            return True
    except OSError:
        return False


def get_public_ip() -> str:
    """Return the public IP address; raise ConnectionError if port 80 is unreachable on it."""
    with urllib.request.urlopen(PUBLIC_IP_URL, timeout=30) as response:
        ip = response.read().decode()
    if not _is_accessible(ip):
        raise ConnectionError("PORT is blocked by firewall")
    return ip


def get_ip(public: bool) -> str:
    """Return the public or the local IP address, or "localhost" if none is known."""
    ip = get_public_ip() if public else _internal_ip()
    return ip or "localhost"


def load(args: argparse.Namespace | None = None, environ: MutableMapping[str, str] | None = None) -> Config:
    """Load the configuration from the env file, the flags and the environment."""
    env = os.environ if environ is None else environ
    load_env_file(ENV_FILE, env)
    if args is not None:
        apply_arguments(args, env)
    config = Config.from_env(env)
    if not config.host:
        try:
            ip = get_ip(config.use_public_ip)
            blocked = False
        except OSError as exc:
            log.error("Error while getting IP: %s", exc)
            ip, blocked = "localhost", True
        config.host = f"http://{ip}:{config.port}"
        if config.use_public_ip:
            if blocked:
                log.warning("Can't get public IP, using local IP")
            else:
                log.warning(
                    "You are using a public IP, please be aware of the security risks "
                    "while exposing your IP to the internet."
                )
                log.warning("Use 'HOST' variable to set a domain name")
        log.info("HOST not set, automatically set to %s", config.host)
    config.normalize()
    log.info("Loaded config")
    return config