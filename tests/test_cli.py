import pytest

from filestreambot.cli import INVALID_LOGIN_TYPE, PHONE_NOT_IMPLEMENTED, build_parser, main


def test_version(capsys):
    with pytest.raises(SystemExit) as info:
        main(["--version"])
    assert info.value.code == 0
    assert "Telegram File Stream Bot version 3.1.0" in capsys.readouterr().out


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "usage: fsb" in out
    assert "run" in out and "session" in out


def test_run_flags_parsed():
    args = build_parser().parse_args(["run", "-p", "9000", "--dev", "--host", "https://example.com"])
    assert args.command == "run"
    assert args.port == 9000
    assert args.dev is True
    assert args.host == "https://example.com"


def test_session_defaults_to_qr():
    args = build_parser().parse_args(["session", "-I", "12", "-H", "placeholder"])
    assert args.login_type == "qr"
    assert args.api_id == 12


def test_session_phone(capsys):
    assert main(["session", "-T", "phone", "-I", "12", "-H", "placeholder"]) == 0
    assert capsys.readouterr().out.strip() == PHONE_NOT_IMPLEMENTED


def test_session_invalid_type(capsys):
    assert main(["session", "-T", "fax", "-I", "12", "-H", "placeholder"]) == 0
    assert capsys.readouterr().out.strip() == INVALID_LOGIN_TYPE


def test_session_qr_unavailable():
    assert main(["session", "-I", "12", "-H", "placeholder"]) == 1


def test_session_requires_api_id():
    with pytest.raises(SystemExit) as info:
        main(["session", "-H", "placeholder"])
    assert info.value.code == 2