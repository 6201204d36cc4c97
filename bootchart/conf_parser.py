"""Parser for simple line-based ``[Section]`` / ``Key=value`` configuration files."""

from __future__ import annotations

import logging
import math
import os
import re
import stat
from dataclasses import dataclass
from typing import IO, Any, Callable, Collection, Iterable, Iterator, Sequence

from .conf_files import conf_files_list
from .fileio import COMMENTS, LINE_MAX, NEWLINE, WHITESPACE

log = logging.getLogger(__name__)

ValueParser = Callable[[str, int, str], Any]

_TRUE_WORDS = ("1", "yes", "y", "true", "t", "on")
_FALSE_WORDS = ("0", "no", "n", "false", "f", "off")

_INT_RE = re.compile(r"[ \t\n\v\f\r]*([+-]?)(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)\Z")
_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1


class ConfigParseError(ValueError):
    """Raised when a configuration file holds a line that cannot be parsed."""


@dataclass(frozen=True)
class ConfigTableItem:
    """One known setting: where it lives, how to parse it, and where to put it.

    ``parse`` is called as ``parse(filename, line, rvalue)`` and returns the
    parsed value, or None when the value was rejected and should be ignored.
    ``store`` receives every value that was accepted.
    """

    section: str | None
    lvalue: str
    parse: ValueParser | None
    store: Callable[[Any], None] | None = None


def _log_syntax(level: int, filename: str, line: int, message: str, *args: Any) -> None:
    log.log(level, "%s:%d: " + message, filename, line, *args)


def parse_boolean(text: str) -> bool:
    """Parse a boolean word such as ``yes``, ``off`` or ``1``; raise ValueError otherwise."""
    if text == "1" or text.lower() in _TRUE_WORDS:
        return True
    if text == "0" or text.lower() in _FALSE_WORDS:
        return False
    raise ValueError(f"invalid boolean {text!r}")


def _permission_warnings(path: str, mode: int) -> list[str]:
    warnings = []
    if mode & 0o111:
        warnings.append(
            f"Configuration file {path} is marked executable. "
            "Please remove executable permission bits. Proceeding anyway."
        )
    if mode & 0o002:
        warnings.append(
            f"Configuration file {path} is marked world-writable. "
            "Please remove world writability permission bits. Proceeding anyway."
        )
    if os.getpid() == 1 and (mode & 0o044) != 0o044:
        warnings.append(
            f"Configuration file {path} is marked world-inaccessible. This has no effect "
            "as configuration data is accessible via APIs without restrictions. Proceeding anyway."
        )
    for message in warnings:
        log.warning("%s", message)
    return warnings


def warn_permissions(path: str | os.PathLike) -> list[str]:
    """Log and return warnings about dubious permission bits on a configuration file."""
    st = os.stat(path)
    return _permission_warnings(os.fspath(path), st.st_mode)


def table_lookup(
    table: Iterable[ConfigTableItem], section: str | None, lvalue: str
) -> ConfigTableItem | None:
    """Return the table entry for ``lvalue`` in ``section``, or None if there is none."""
    for item in table:
        if item.lvalue == lvalue and item.section == section:
            return item
    return None


def _is_valid_utf8(text: str) -> bool:
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def _kill_slashes(path: str) -> str:
    collapsed = re.sub(r"/+", "/", path)
    if len(collapsed) > 1:
        collapsed = collapsed.rstrip("/") or "/"
    return collapsed


def _safe_atoi(text: str) -> int:
    match = _INT_RE.match(text)
    if not match:
        raise ValueError(f"invalid integer {text!r}")
    sign, digits = match.groups()
    if digits[:2] in ("0x", "0X"):
        value = int(digits[2:], 16)
    elif digits.startswith("0"):
        value = int(digits, 8)
    else:
        value = int(digits)
    if sign == "-":
        value = -value
    if not _INT_MIN <= value <= _INT_MAX:
        raise ValueError(f"integer out of range {text!r}")
    return value


def _safe_atod(text: str) -> float:
    if not text or "_" in text or text != text.rstrip():
        raise ValueError(f"invalid number {text!r}")
    value = float(text)
    if math.isinf(value) and text.strip().lstrip("+-").lower() not in ("inf", "infinity"):
        raise ValueError(f"number out of range {text!r}")
    return value


def config_parse_int(filename: str, line: int, rvalue: str) -> int | None:
    """Parse an integer setting; log and return None if it is invalid."""
    try:
        return _safe_atoi(rvalue)
    except ValueError:
        _log_syntax(logging.ERROR, filename, line, "Failed to parse int value, ignoring: %s", rvalue)
        return None


def config_parse_double(filename: str, line: int, rvalue: str) -> float | None:
    """Parse a floating point setting; log and return None if it is invalid."""
    try:
        return _safe_atod(rvalue)
    except ValueError:
        _log_syntax(logging.ERROR, filename, line, "Failed to parse double value, ignoring: %s", rvalue)
        return None


def config_parse_bool(filename: str, line: int, rvalue: str) -> bool | None:
    """Parse a boolean setting; log and return None if it is invalid."""
    try:
        return parse_boolean(rvalue)
    except ValueError:
        _log_syntax(logging.ERROR, filename, line, "Failed to parse boolean value, ignoring: %s", rvalue)
        return None


def config_parse_path(filename: str, line: int, rvalue: str) -> str | None:
    """Parse an absolute path setting, collapsing redundant slashes.

    Invalid UTF-8 and relative paths are logged and yield None.
    """
    if not _is_valid_utf8(rvalue):
        _log_syntax(logging.ERROR, filename, line, "String is not UTF-8 clean, ignoring assignment: %r", rvalue)
        return None
    if not rvalue.startswith("/"):
        _log_syntax(logging.ERROR, filename, line, "Not an absolute path, ignoring: %s", rvalue)
        return None
    return _kill_slashes(rvalue)


def _file_in_same_dir(filename: str, path: str) -> str:
    if path.startswith("/"):
        return path
    return os.path.join(os.path.dirname(filename), path)


class _ParserState:
    def __init__(self) -> None:
        self.section: str | None = None
        self.section_line = 0
        self.section_ignored = False


def _next_assignment(
    filename: str,
    line: int,
    table: Sequence[ConfigTableItem],
    section: str | None,
    lvalue: str,
    rvalue: str,
    relaxed: bool,
) -> None:
    item = table_lookup(table, section, lvalue)
    if item is not None:
        if item.parse is not None:
            value = item.parse(filename, line, rvalue)
            if value is not None and item.store is not None:
                item.store(value)
        return

    if not relaxed and not lvalue.startswith("X-"):
        _log_syntax(logging.WARNING, filename, line, "Unknown lvalue '%s' in section '%s'", lvalue, section)


def _parse_line(
    filename: str,
    line: int,
    sections: Collection[str] | None,
    table: Sequence[ConfigTableItem],
    relaxed: bool,
    allow_include: bool,
    state: _ParserState,
    text: str,
) -> None:
    text = text.strip(WHITESPACE)
    if not text or text[0] in COMMENTS + "\n":
        return

    if text.startswith(".include "):
        if not allow_include:
            _log_syntax(logging.ERROR, filename, line, ".include not allowed here. Ignoring.")
            return
        included = _file_in_same_dir(filename, text[9:].strip(WHITESPACE))
        config_parse(included, table, sections, relaxed, False, False)
        return

    if text[0] == "[":
        if text[-1] != "]":
            _log_syntax(logging.ERROR, filename, line, "Invalid section header '%s'", text)
            raise ConfigParseError(f"{filename}:{line}: invalid section header {text!r}")
        name = text[1:-1]
        if sections is not None and name not in sections:
            if not relaxed and not name.startswith("X-"):
                _log_syntax(logging.WARNING, filename, line, "Unknown section '%s'. Ignoring.", name)
            state.section = None
            state.section_line = 0
            state.section_ignored = True
        else:
            state.section = name
            state.section_line = line
            state.section_ignored = False
        return

    if sections is not None and state.section is None:
        if not relaxed and not state.section_ignored:
            _log_syntax(logging.WARNING, filename, line, "Assignment outside of section. Ignoring.")
        return

    lvalue, sep, rvalue = text.partition("=")
    if not sep:
        _log_syntax(logging.WARNING, filename, line, "Missing '='.")
        raise ConfigParseError(f"{filename}:{line}: missing '='")

    _next_assignment(
        filename, line, table, state.section, lvalue.strip(WHITESPACE), rvalue.strip(WHITESPACE), relaxed
    )


def _read_lines(stream: IO) -> Iterator[str]:
    for raw in stream:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8", errors="surrogateescape")
        while len(raw) > LINE_MAX - 1:
            yield raw[: LINE_MAX - 1]
            raw = raw[LINE_MAX - 1:]
        if raw:
            yield raw


def _truncate_nl(text: str) -> str:
    for index, char in enumerate(text):
        if char in NEWLINE:
            return text[:index]
    return text


def _parse_stream(
    filename: str,
    stream: IO,
    table: Sequence[ConfigTableItem],
    sections: Collection[str] | None,
    relaxed: bool,
    allow_include: bool,
) -> None:
    state = _ParserState()
    continuation: str | None = None
    line = 0

    for raw in _read_lines(stream):
        text = _truncate_nl(raw)
        if continuation is not None:
            text = continuation + text
            continuation = None

        escaped = False
        for char in text:
            escaped = False if escaped else char == "\\"
        if escaped:
            continuation = text[:-1] + " "
            continue

        line += 1
        _parse_line(filename, line, sections, table, relaxed, allow_include, state, text)


def config_parse(
    filename: str | os.PathLike,
    table: Sequence[ConfigTableItem],
    sections: Collection[str] | None = None,
    relaxed: bool = False,
    allow_include: bool = False,
    warn: bool = True,
    stream: IO | None = None,
) -> None:
    """Parse one configuration file and store every recognised setting.

    ``sections`` restricts the accepted section names; None accepts all. A
    missing file is silently skipped. Lines ending in a backslash continue on
    the next line. Raises ConfigParseError for malformed lines and OSError if
    the file cannot be read.
    """
    filename = os.fspath(filename)
    table = list(table)

    if stream is None:
        try:
            handle = open(filename, encoding="utf-8", errors="surrogateescape")
        except FileNotFoundError:
            log.debug("Failed to open configuration file '%s': not found", filename)
            return
        except OSError as exc:
            if warn:
                log.error("Failed to open configuration file '%s': %s", filename, exc)
            raise
        with handle:
            _check_permissions(filename, handle)
            _parse_with_warning(filename, handle, table, sections, relaxed, allow_include, warn)
        return

    _check_permissions(filename, stream)
    _parse_with_warning(filename, stream, table, sections, relaxed, allow_include, warn)


def _check_permissions(filename: str, stream: IO) -> None:
    try:
        st = os.fstat(stream.fileno())
    except (AttributeError, OSError, ValueError):
        return
    if stat.S_ISREG(st.st_mode):
        _permission_warnings(filename, st.st_mode)


def _parse_with_warning(
    filename: str,
    stream: IO,
    table: Sequence[ConfigTableItem],
    sections: Collection[str] | None,
    relaxed: bool,
    allow_include: bool,
    warn: bool,
) -> None:
    try:
        _parse_stream(filename, stream, table, sections, relaxed, allow_include)
    except (ConfigParseError, OSError) as exc:
        if warn:
            log.warning("Failed to parse file '%s': %s", filename, exc)
        raise


def config_parse_many(
    conf_file: str | os.PathLike | None,
    conf_dirs: Iterable[str],
    table: Sequence[ConfigTableItem],
    sections: Collection[str] | None = None,
    relaxed: bool = False,
) -> None:
    """Parse a main configuration file, then every ``*.conf`` drop-in in ``conf_dirs``.

    Drop-ins are applied in order of their file names, so later ones override
    earlier settings.
    """
    files = conf_files_list(".conf", None, conf_dirs)
    if conf_file is not None:
        config_parse(conf_file, table, sections, relaxed, False, True)
    for path in files:
        config_parse(path, table, sections, relaxed, False, True)