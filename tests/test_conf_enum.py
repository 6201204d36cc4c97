import logging
from enum import Enum

import pytest

from bootchart.conf_enum import config_parse_enum, config_parse_enum_list


class Color(Enum):
    RED = "red"
    GREEN = "green"
    BLUE = "blue"


def color_from_string(text):
    return Color(text)


def lookup_or_none(text):
    return {"one": 1, "two": 2}.get(text)


def test_enum_known_value():
    assert config_parse_enum("a.conf", 1, "green", color_from_string) is Color.GREEN


def test_enum_unknown_value_returns_none_and_logs(caplog):
    with caplog.at_level(logging.ERROR, logger="bootchart.conf_enum"):
        result = config_parse_enum("a.conf", 7, "purple", color_from_string)
    assert result is None
    assert "purple" in caplog.text
    assert "a.conf:7" in caplog.text


def test_enum_accepts_none_returning_converter():
    assert config_parse_enum("a.conf", 1, "two", lookup_or_none) == 2
    assert config_parse_enum("a.conf", 1, "three", lookup_or_none) is None


def test_enum_key_error_is_unknown():
    mapping = {"x": 10}
    assert config_parse_enum("a.conf", 1, "y", mapping.__getitem__) is None


def test_enum_list_keeps_order():
    result = config_parse_enum_list("a.conf", 1, "blue red green", color_from_string)
    assert result == [Color.BLUE, Color.RED, Color.GREEN]


def test_enum_list_skips_unknown_and_duplicates(caplog):
    with caplog.at_level(logging.ERROR, logger="bootchart.conf_enum"):
        result = config_parse_enum_list("a.conf", 3, "red purple red blue", color_from_string)
    assert result == [Color.RED, Color.BLUE]
    assert "Duplicate entry" in caplog.text
    assert "purple" in caplog.text


def test_enum_list_handles_mixed_whitespace():
    result = config_parse_enum_list("a.conf", 1, "  one\ttwo \n one ", lookup_or_none)
    assert result == [1, 2]


@pytest.mark.parametrize("rvalue", ["", "   ", "\t\n"])
def test_enum_list_empty(rvalue):
    assert config_parse_enum_list("a.conf", 1, rvalue, color_from_string) == []