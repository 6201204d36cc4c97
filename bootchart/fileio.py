"""Small file-reading helpers: whole files, first lines, env-style files and /proc fields."""

from __future__ import annotations

import io
import os
import stat
from enum import Enum, auto
from typing import IO, Iterable, Iterator

LINE_MAX = 2048
NEWLINE = "\n\r"
WHITESPACE = " \t\n\r"
COMMENTS = "#;"
_C_SPACE = " \t\n\v\f\r"

# Upper bound on the size of files read in full.
MAX_FILE_SIZE = 4 * 1024 * 1024


class FileTooLargeError(OSError):
    """Raised when a file is too large to be read in full."""


class EnvParseError(ValueError):
    """Raised when an environment-style file holds an invalid assignment."""


def _decode(data: bytes | str) -> str:
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="surrogateescape")
    return data


def _truncate_nl(text: str) -> str:
    for index, char in enumerate(text):
        if char in NEWLINE:
            return text[:index]
    return text


def read_one_line_file(path: str | os.PathLike) -> str:
    """Return the first line of a file, without its line terminator."""
    with open(path, "rb") as stream:
        line = stream.readline(LINE_MAX - 1)
    return _truncate_nl(_decode(line))


def read_full_stream(stream: IO) -> str:
    """Read an open stream to its end and return the contents as text.

    Regular files larger than the limit are refused up front; the read
    buffer doubles after every successful read and may not outgrow the limit.
    """
    size = LINE_MAX
    try:
        st = os.fstat(stream.fileno())
    except (AttributeError, OSError, io.UnsupportedOperation):
        st = None

    if st is not None and stat.S_ISREG(st.st_mode):
        if st.st_size > MAX_FILE_SIZE:
            raise FileTooLargeError(f"file of {st.st_size} bytes is too large")
        if st.st_size > 0:
            size = st.st_size

    chunks = []
    have = 0
    while True:
        chunk = stream.read(size - have)
        if not chunk:
            break
        chunks.append(chunk)
        have += len(chunk)
        size *= 2
        if size > MAX_FILE_SIZE:
            raise FileTooLargeError("stream is too large to be read in full")

    if not chunks:
        return ""
    if isinstance(chunks[0], bytes):
        return _decode(b"".join(chunks))
    return "".join(chunks)


def read_full_file(path: str | os.PathLike) -> str:
    """Read a whole file and return its contents as text."""
    with open(path, "rb") as stream:
        return read_full_stream(stream)


class _State(Enum):
    PRE_KEY = auto()
    KEY = auto()
    PRE_VALUE = auto()
    VALUE = auto()
    VALUE_ESCAPE = auto()
    SINGLE_QUOTE_VALUE = auto()
    SINGLE_QUOTE_VALUE_ESCAPE = auto()
    DOUBLE_QUOTE_VALUE = auto()
    DOUBLE_QUOTE_VALUE_ESCAPE = auto()
    COMMENT = auto()
    COMMENT_ESCAPE = auto()


_PENDING_AT_END = {
    _State.PRE_VALUE,
    _State.VALUE,
    _State.VALUE_ESCAPE,
    _State.SINGLE_QUOTE_VALUE,
    _State.SINGLE_QUOTE_VALUE_ESCAPE,
    _State.DOUBLE_QUOTE_VALUE,
    _State.DOUBLE_QUOTE_VALUE_ESCAPE,
}


def _assignment(
    key: list[str],
    last_key_ws: int | None,
    value: list[str] | None,
    last_value_ws: int | None,
) -> tuple[str, str | None]:
    name = "".join(key if last_key_ws is None else key[:last_key_ws])
    if value is None:
        return name, None
    return name, "".join(value if last_value_ws is None else value[:last_value_ws])


def iter_env_assignments(text: str, newline: str = NEWLINE) -> Iterator[tuple[str, str | None]]:
    """Yield ``(key, value)`` pairs from shell-like ``KEY=value`` text.

    Quoting with single or double quotes and backslash escapes are honoured,
    comments start with ``#`` or ``;``, and lines without ``=`` are skipped.
    A key whose value holds no characters yields ``None`` as its value.
    """
    state = _State.PRE_KEY
    key: list[str] = []
    value: list[str] | None = None
    last_key_ws: int | None = None
    last_value_ws: int | None = None

    def append(char: str) -> None:
        nonlocal value
        if value is None:
            value = []
        value.append(char)

    for char in text:
        if state is _State.PRE_KEY:
            if char in COMMENTS:
                state = _State.COMMENT
            elif char not in WHITESPACE:
                state = _State.KEY
                last_key_ws = None
                key = [char]

        elif state is _State.KEY:
            if char in newline:
                state = _State.PRE_KEY
                key = []
            elif char == "=":
                state = _State.PRE_VALUE
                last_value_ws = None
            else:
                if char not in WHITESPACE:
                    last_key_ws = None
                elif last_key_ws is None:
                    last_key_ws = len(key)
                key.append(char)

        elif state is _State.PRE_VALUE:
            if char in newline:
                state = _State.PRE_KEY
                yield _assignment(key, last_key_ws, value, None)
                key = []
                value = None
            elif char == "'":
                state = _State.SINGLE_QUOTE_VALUE
            elif char == '"':
                state = _State.DOUBLE_QUOTE_VALUE
            elif char == "\\":
                state = _State.VALUE_ESCAPE
            elif char not in WHITESPACE:
                state = _State.VALUE
                append(char)

        elif state is _State.VALUE:
            if char in newline:
                state = _State.PRE_KEY
                yield _assignment(key, last_key_ws, value, last_value_ws)
                key = []
                value = None
            elif char == "\\":
                state = _State.VALUE_ESCAPE
                last_value_ws = None
            else:
                if char not in WHITESPACE:
                    last_value_ws = None
                elif last_value_ws is None:
                    last_value_ws = len(value) if value is not None else 0
                append(char)

        elif state is _State.VALUE_ESCAPE:
            state = _State.VALUE
            # Escaped newlines are dropped entirely.
            if char not in newline:
                append(char)

        elif state is _State.SINGLE_QUOTE_VALUE:
            if char == "'":
                state = _State.PRE_VALUE
            elif char == "\\":
                state = _State.SINGLE_QUOTE_VALUE_ESCAPE
            else:
                append(char)

        elif state is _State.SINGLE_QUOTE_VALUE_ESCAPE:
            state = _State.SINGLE_QUOTE_VALUE
            if char not in newline:
                append(char)

        elif state is _State.DOUBLE_QUOTE_VALUE:
            if char == '"':
                state = _State.PRE_VALUE
            elif char == "\\":
                state = _State.DOUBLE_QUOTE_VALUE_ESCAPE
            else:
                append(char)

        elif state is _State.DOUBLE_QUOTE_VALUE_ESCAPE:
            state = _State.DOUBLE_QUOTE_VALUE
            if char not in newline:
                append(char)

        elif state is _State.COMMENT:
            if char == "\\":
                state = _State.COMMENT_ESCAPE
            elif char in newline:
                state = _State.PRE_KEY

        elif state is _State.COMMENT_ESCAPE:
            state = _State.COMMENT

    if state in _PENDING_AT_END:
        trim = last_value_ws if state is _State.VALUE else None
        yield _assignment(key, last_key_ws, value, trim)


def _is_valid_utf8(text: str) -> bool:
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def parse_env_file(
    path: str | os.PathLike,
    keys: Iterable[str],
    newline: str | None = None,
) -> dict[str, str | None]:
    """Return the values of the wanted keys assigned in an env-style file.

    Keys that are not assigned are absent from the result; when a key is
    assigned more than once the last assignment wins.
    """
    if newline is None:
        newline = NEWLINE
    wanted = set(keys)
    found: dict[str, str | None] = {}

    for key, value in iter_env_assignments(read_full_file(path), newline):
        if not _is_valid_utf8(key):
            raise EnvParseError(f"{path}: invalid UTF-8 in key {key!r}")
        if value is not None and not _is_valid_utf8(value):
            raise EnvParseError(f"{path}: invalid UTF-8 value for key {key}")
        if key in wanted:
            found[key] = value

    return found


def get_proc_field(path: str | os.PathLike, pattern: str, terminator: str) -> str:
    """Return one field of a ``Name: value`` file such as /proc/self/status.

    The pattern must start a line; whitespace before the colon is skipped,
    as are whitespace and leading zeros after it. The value ends at the first
    character from ``terminator``. Raises KeyError if the field is missing.
    """
    status = read_full_file(path)
    length = len(status)
    pos = 0

    while True:
        while True:
            index = status.find(pattern, pos)
            if index < 0:
                raise KeyError(pattern)
            at_line_start = index == 0 or status[index - 1] == "\n"
            pos = index + len(pattern)
            if at_line_start:
                break

        while pos < length and status[pos] in " \t":
            pos += 1
        if pos >= length:
            raise KeyError(pattern)
        if status[pos] == ":":
            break

    pos += 1

    if pos < length:
        while pos < length and status[pos] in " \t":
            pos += 1
        # Leading zeros are dropped so equal capability sets compare equal.
        while pos < length and status[pos] == "0":
            pos += 1
        if pos >= length or status[pos] in _C_SPACE:
            pos -= 1

    end = pos
    while end < length and status[end] not in terminator:
        end += 1
    return status[pos:end]