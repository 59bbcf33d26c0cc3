import base64

import pytest

from filestreambot.session_string import SessionData, encode_pyrogram_session


def _decode(text):
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def _session(**overrides):
    fields = {"dc": 2, "auth_key": bytes(range(256)), "auth_key_id": b"\x01" * 8, "test_mode": True}
    fields.update(overrides)
    return SessionData(**fields)


def test_layout_round_trip():
    data = _session()
    raw = _decode(encode_pyrogram_session(data, 12345))
    assert len(raw) == 1 + 4 + 1 + 256 + 8 + 1
    assert raw[0] == 2
    assert raw[1:5] == (12345).to_bytes(4, "big")
    assert raw[5] == 1
    assert raw[6:262] == data.auth_key
    assert raw[262:270] == data.auth_key_id
    assert raw[270] == 0


def test_no_padding_and_url_safe():
    text = encode_pyrogram_session(_session(auth_key=b"\xff" * 256), 1)
    assert "=" not in text
    assert "+" not in text and "/" not in text


def test_test_mode_flag_off():
    raw = _decode(encode_pyrogram_session(_session(test_mode=False), 1))
    assert raw[5] == 0


def test_negative_app_id_wraps():
    raw = _decode(encode_pyrogram_session(_session(), -1))
    assert raw[1:5] == b"\xff" * 4


def test_wrong_auth_key_length():
    with pytest.raises(ValueError):
        encode_pyrogram_session(_session(auth_key=b"\x00" * 255), 1)


def test_wrong_auth_key_id_length():
    with pytest.raises(ValueError):
        encode_pyrogram_session(_session(auth_key_id=b"\x00" * 7), 1)