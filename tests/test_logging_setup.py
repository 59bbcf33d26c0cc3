import json
import logging

import pytest

from filestreambot.logging_setup import init_logger


@pytest.fixture
def reset_logger():
    yield
    logger = logging.getLogger("filestreambot")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def _read_records(path):
    return [json.loads(line) for line in path.read_text().splitlines()]


def test_file_log_is_json(tmp_path, reset_logger):
    logger = init_logger(False, tmp_path)
    logger.getChild("Main").info("hello %s", "world")
    records = _read_records(tmp_path / "app.log")
    assert records[-1]["msg"] == "hello world"
    assert records[-1]["level"] == "info"
    assert records[-1]["logger"] == "filestreambot.Main"


def test_debug_hidden_on_console_outside_debug_mode(tmp_path, capsys, reset_logger):
    logger = init_logger(False, tmp_path)
    logger.debug("quiet-line")
    logger.info("loud-line")
    out = capsys.readouterr().out
    assert "quiet-line" not in out
    assert "loud-line" in out
    messages = [record["msg"] for record in _read_records(tmp_path / "app.log")]
    assert messages == ["quiet-line", "loud-line"]


def test_debug_shown_in_debug_mode(tmp_path, capsys, reset_logger):
    logger = init_logger(True, tmp_path)
    logger.debug("verbose-line")
    assert "verbose-line" in capsys.readouterr().out


def test_reinit_does_not_duplicate_handlers(tmp_path, reset_logger):
    init_logger(False, tmp_path)
    logger = init_logger(False, tmp_path)
    assert len(logger.handlers) == 2
    logger.info("once")
    messages = [record["msg"] for record in _read_records(tmp_path / "app.log")]
    assert messages.count("once") == 1