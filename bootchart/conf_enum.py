"""Parsers for configuration settings whose values come from a fixed set of names."""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

from .fileio import WHITESPACE

log = logging.getLogger(__name__)

T = TypeVar("T")


def _log_syntax(filename: str, line: int, message: str, *args: Any) -> None:
    log.error("%s:%d: " + message, filename, line, *args)


def _convert(from_string: Callable[[str], T | None], word: str) -> T | None:
    try:
        return from_string(word)
    except (ValueError, KeyError):
        return None


def config_parse_enum(
    filename: str,
    line: int,
    rvalue: str,
    from_string: Callable[[str], T | None],
) -> T | None:
    """Convert ``rvalue`` with ``from_string``; log and return None if it is not a known name.

    ``from_string`` may signal an unknown name by returning None or by raising
    ValueError or KeyError.
    """
    value = _convert(from_string, rvalue)
    if value is None:
        _log_syntax(filename, line, "Failed to parse %s, ignoring: %s", "value", rvalue)
    return value


def config_parse_enum_list(
    filename: str,
    line: int,
    rvalue: str,
    from_string: Callable[[str], T | None],
) -> list[T]:
    """Convert every whitespace-separated word of ``rvalue`` and return them in order.

    Unknown words and repeated entries are logged and skipped.
    """
    values: list[T] = []
    words = "".join(" " if char in WHITESPACE else char for char in rvalue).split(" ")
    for word in filter(None, words):
        value = _convert(from_string, word)
        if value is None:
            _log_syntax(filename, line, "Failed to parse %s, ignoring: %s", "value", word)
            continue
        if value in values:
            _log_syntax(filename, line, "Duplicate entry, ignoring: %s", word)
            continue
        values.append(value)
    return values