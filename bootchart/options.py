"""Command line and configuration file handling for the chart recorder."""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from typing import Any, Callable, Iterable, Iterator, Sequence

from .conf_files import conf_paths
from .conf_parser import (
    ConfigParseError,
    ConfigTableItem,
    _kill_slashes,
    _safe_atod,
    _safe_atoi,
    config_parse_bool,
    config_parse_double,
    config_parse_int,
    config_parse_many,
    config_parse_path,
)
from .settings import (
    DEFAULT_HZ,
    DEFAULT_INIT,
    DEFAULT_OUTPUT,
    DEFAULT_SAMPLES_LEN,
    DEFAULT_SCALE_X,
    DEFAULT_SCALE_Y,
    BootchartOptions,
)

log = logging.getLogger(__name__)

PATH_MAX = 4096
CONF_FILE = "/etc/systemd/bootchart.conf"
CONF_DROPIN_NAME = "systemd/bootchart.conf.d"
SECTION = "Bootchart"


class UsageError(ValueError):
    """Raised when the command line cannot be accepted."""


def help_text(prog: str) -> str:
    """Return the usage message, showing the built-in defaults."""
    return (
        f"Usage: {prog} [OPTIONS]\n\n"
        "Options:\n"
        "  -r --rel             Record time relative to recording\n"
        f"  -f --freq=FREQ       Sample frequency [{DEFAULT_HZ:g}]\n"
        f"  -n --samples=N       Stop sampling at [{DEFAULT_SAMPLES_LEN}] samples\n"
        f"  -x --scale-x=N       Scale the graph horizontally [{DEFAULT_SCALE_X:g}] \n"
        f"  -y --scale-y=N       Scale the graph vertically [{DEFAULT_SCALE_Y:g}] \n"
        "  -p --pss             Enable PSS graph (CPU intensive)\n"
        "  -e --entropy         Enable the entropy_avail graph\n"
        f"  -o --output=PATH     Path to output files [{DEFAULT_OUTPUT}]\n"
        f"  -i --init=PATH       Path to init executable [{DEFAULT_INIT}]\n"
        "  -F --no-filter       Disable filtering of unimportant or ephemeral processes\n"
        "  -C --cmdline         Display full command lines with arguments\n"
        "  -c --control-group   Display process control group\n"
        "     --per-cpu         Draw each CPU utilization and wait bar also\n"
        "  -h --help            Display this message\n\n"
        "See bootchart.conf for more information.\n"
    )


def _truncate_path(path: str) -> str:
    return path[: PATH_MAX - 1]


def _setter(options: BootchartOptions, attr: str, convert: Callable[[Any], Any] | None = None):
    def store(value: Any) -> None:
        setattr(options, attr, convert(value) if convert else value)

    return store


def config_table(options: BootchartOptions) -> list[ConfigTableItem]:
    """Return the settings known in the ``[Bootchart]`` section, storing into ``options``."""
    entries = [
        ("Samples", config_parse_int, "samples_len", None),
        ("Frequency", config_parse_double, "hz", None),
        ("Relative", config_parse_bool, "relative", None),
        ("Filter", config_parse_bool, "filter", None),
        ("Output", config_parse_path, "output_path", _truncate_path),
        ("Init", config_parse_path, "init_path", _truncate_path),
        ("PlotMemoryUsage", config_parse_bool, "pss", None),
        ("PlotEntropyGraph", config_parse_bool, "entropy", None),
        ("ScaleX", config_parse_double, "scale_x", None),
        ("ScaleY", config_parse_double, "scale_y", None),
        ("ControlGroup", config_parse_bool, "show_cgroup", None),
        ("PerCPU", config_parse_bool, "percpu", None),
        ("Cmdline", config_parse_bool, "show_cmdline", None),
    ]
    return [
        ConfigTableItem(SECTION, lvalue, parse, _setter(options, attr, convert))
        for lvalue, parse, attr, convert in entries
    ]


def parse_conf(
    options: BootchartOptions,
    conf_file: str | os.PathLike | None = CONF_FILE,
    conf_dirs: Iterable[str] | None = None,
) -> BootchartOptions:
    """Apply the main configuration file and its drop-ins to ``options``.

    Problems with the files are logged and otherwise ignored; settings read
    before a problem stay applied.
    """
    if conf_dirs is None:
        conf_dirs = conf_paths(CONF_DROPIN_NAME)
    try:
        config_parse_many(conf_file, conf_dirs, config_table(options), None, True)
    except (ConfigParseError, OSError) as exc:
        log.debug("Failed to read configuration, ignoring: %s", exc)
    return options


_LONG_OPTIONS: dict[str, tuple[str, bool]] = {
    "rel": ("r", False),
    "freq": ("f", True),
    "samples": ("n", True),
    "pss": ("p", False),
    "output": ("o", True),
    "init": ("i", True),
    "no-filter": ("F", False),
    "cmdline": ("C", False),
    "control-group": ("c", False),
    "help": ("h", False),
    "scale-x": ("x", True),
    "scale-y": ("y", True),
    "entropy": ("e", False),
    "per-cpu": ("per-cpu", False),
}
_SHORT_WITH_ARG = frozenset("fnoixy")
_SHORT_FLAGS = frozenset("erpFCch")

_FLAGS = {
    "r": ("relative", True),
    "F": ("filter", False),
    "C": ("show_cmdline", True),
    "c": ("show_cgroup", True),
    "p": ("pss", True),
    "e": ("entropy", True),
    "per-cpu": ("percpu", True),
}
_NUMBERS = {
    "f": ("hz", _safe_atod, "--freq/-f"),
    "n": ("samples_len", _safe_atoi, "--samples/-n"),
    "x": ("scale_x", _safe_atod, "--scale-x/-x"),
    "y": ("scale_y", _safe_atod, "--scale-y/-y"),
}
_PATHS = {"o": "output_path", "i": "init_path"}


def _match_long(name: str) -> str:
    if name in _LONG_OPTIONS:
        return name
    candidates = [option for option in _LONG_OPTIONS if option.startswith(name)]
    if len(candidates) == 1:
        return candidates[0]
    if candidates:
        raise UsageError(f"option '--{name}' is ambiguous")
    raise UsageError(f"unrecognized option '--{name}'")


def _iter_options(args: Sequence[str]) -> Iterator[tuple[str, str | None]]:
    """Yield options one at a time, raising UsageError only when a bad one is reached."""
    it = iter(args)
    for arg in it:
        if arg == "--":
            return
        if arg.startswith("--"):
            name, eq, value = arg[2:].partition("=")
            option = _match_long(name)
            key, needs_arg = _LONG_OPTIONS[option]
            if needs_arg:
                if not eq:
                    value = next(it, None)
                    if value is None:
                        raise UsageError(f"option '--{option}' requires an argument")
                yield key, value
            else:
                if eq:
                    raise UsageError(f"option '--{option}' doesn't allow an argument")
                yield key, None
        elif arg.startswith("-") and arg != "-":
            rest = arg[1:]
            while rest:
                char, rest = rest[0], rest[1:]
                if char in _SHORT_WITH_ARG:
                    value = rest or next(it, None)
                    if value is None:
                        raise UsageError(f"option requires an argument -- '{char}'")
                    yield char, value
                    break
                if char not in _SHORT_FLAGS:
                    raise UsageError(f"invalid option -- '{char}'")
                yield char, None
        # Positional arguments are ignored.


def _program_name() -> str:
    if sys.argv and sys.argv[0]:
        return os.path.basename(sys.argv[0])
    return "systemd-bootchart"


def parse_argv(
    argv: Sequence[str] | None = None,
    options: BootchartOptions | None = None,
    is_init: bool | None = None,
) -> bool:
    """Apply command line arguments (without the program name) to ``options``.

    Returns True when recording should go ahead and False when the program
    should exit successfully, after showing help or, when running as init,
    after meeting an unknown option. Raises UsageError otherwise.
    """
    if argv is None:
        argv = sys.argv[1:]
    if options is None:
        options = BootchartOptions()
    if is_init is None:
        is_init = os.getpid() == 1

    try:
        for key, value in _iter_options(argv):
            if key == "h":
                print(help_text(_program_name()), end="")
                return False
            if key in _FLAGS:
                attr, flag = _FLAGS[key]
                setattr(options, attr, flag)
            elif key in _NUMBERS:
                attr, convert, label = _NUMBERS[key]
                try:
                    setattr(options, attr, convert(value))
                except ValueError as exc:
                    log.warning("failed to parse %s argument '%s': %s", label, value, exc)
            elif key in _PATHS:
                setattr(options, _PATHS[key], _truncate_path(_kill_slashes(value)))
    except UsageError:
        if is_init:
            return False
        raise

    if options.hz <= 0:
        log.error("Frequency needs to be > 0")
        raise UsageError("Frequency needs to be > 0")

    return True


def output_file_name(options: BootchartOptions, when: datetime | None = None) -> str:
    """Return the path of the chart file written at ``when`` (local time by default)."""
    if when is None:
        when = datetime.now()
    return f"{options.output_path}/bootchart-{when:%Y%m%d-%H%M}.svg"