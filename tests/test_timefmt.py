import pytest

from filestreambot.timefmt import time_format


def test_zero_is_empty():
    assert time_format(0) == ""


def test_single_second():
    assert time_format(1) == "1 second"


def test_minutes_keep_trailing_separator():
    assert time_format(60) == "1 minute, "


@pytest.mark.parametrize("count", [2, 5, 59])
def test_plural_seconds(count):
    assert time_format(count) == f"{count} seconds"


@pytest.mark.parametrize("count", [2, 7, 30])
def test_plural_days(count):
    assert time_format(count * 86400) == f"{count} days, "


def test_all_units_present_in_order():
    text = time_format(2 * 86400 + 3 * 3600 + 4 * 60 + 5)
    assert text.index("days") < text.index("hours") < text.index("minutes") < text.index("seconds")
    assert text.startswith("2 days, 3 hours, 4 minutes, ")
    assert text.endswith("5 seconds")


def test_negative_rejected():
    with pytest.raises(ValueError):
        time_format(-1)