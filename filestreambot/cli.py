"""Command line entry point."""

from __future__ import annotations

import argparse
import sys
import time
from collections.abc import Callable, Sequence

from filestreambot import config as config_module
from filestreambot.cache import FileCache
from filestreambot.files import File
from filestreambot.logging_setup import init_logger
from filestreambot.media import file_from_message
from filestreambot.server import VERSION, StreamApp, serve
from filestreambot.workers import Worker, WorkerPool

PHONE_NOT_IMPLEMENTED = "Phone session is not implemented yet."
QR_UNAVAILABLE = "QR login needs a Telegram client, which this installation does not provide."
INVALID_LOGIN_TYPE = "Invalid login type. Please use either 'qr' or 'phone'"


def build_parser() -> argparse.ArgumentParser:
    """Build the parser of the ``fsb`` command and its subcommands."""
    parser = argparse.ArgumentParser(
        prog="fsb",
        description="Telegram Bot to generate direct streamable links for telegram media.",
        epilog="Example: fsb run --port 8080",
    )
    parser.add_argument(
        "-v", "--version", action="version", version=f"Telegram File Stream Bot version {VERSION}"
    )
    commands = parser.add_subparsers(dest="command")

    run = commands.add_parser("run", help="Run the bot with the given configuration.")
    config_module.add_run_arguments(run)

    session = commands.add_parser("session", help="Generate a string session.")
    session.add_argument(
        "-T", "--login-type", default="qr", help="The login type to use. Can be either 'qr' or 'phone'"
    )
    session.add_argument(
        "-I", "--api-id", type=int, required=True, help="The API ID to use for the session (required)."
    )
    session.add_argument("-H", "--api-hash", required=True, help="The API hash to use for the session (required).")
    return parser


def _file_fetcher(cache: FileCache) -> Callable[[Worker, int], File]:
    def fetch(worker: Worker, message_id: int) -> File:
        return file_from_message(cache, worker.user.id, message_id, worker.client.get_media)

    return fetch


def _run(args: argparse.Namespace) -> int:
    logger = init_logger(args.dev)
    logger.info("Starting server")
    try:
        config = config_module.load(args)
    except config_module.ConfigError as exc:
        logger.error("Error while parsing env variables: %s", exc)
        return 1
    app = StreamApp(WorkerPool(), config, _file_fetcher(FileCache()), time.time())
    logger.info("File Stream Bot version %s", VERSION)
    logger.info("Server is running at %s", config.host)
    serve(app, config.port)
    return 0


def _session(args: argparse.Namespace) -> int:
    if args.login_type == "qr":
        print(QR_UNAVAILABLE, file=sys.stderr)
        return 1
    if args.login_type == "phone":
        print(PHONE_NOT_IMPLEMENTED)
        return 0
    print(INVALID_LOGIN_TYPE)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the ``fsb`` command; return its exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "run":
        return _run(args)
    if args.command == "session":
        return _session(args)
    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())