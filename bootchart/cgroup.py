"""Control group helpers: controller names, hierarchy type and per-process paths."""

from __future__ import annotations

import os
import re
import string

SYSTEMD_CGROUP_CONTROLLER = "name=systemd"

CGROUP_CPU_SHARES_INVALID = 2**64 - 1
CGROUP_CPU_SHARES_MIN = 2
CGROUP_CPU_SHARES_MAX = 262144
CGROUP_CPU_SHARES_DEFAULT = 1024

CGROUP_BLKIO_WEIGHT_INVALID = 2**64 - 1
CGROUP_BLKIO_WEIGHT_MIN = 10
CGROUP_BLKIO_WEIGHT_MAX = 1000
CGROUP_BLKIO_WEIGHT_DEFAULT = 500

FILENAME_MAX = 4096

_CONTROLLER_VALID = frozenset(string.digits + string.ascii_letters + "_")
_MOUNTS_FILE = "/proc/self/mounts"
_unified_cache: dict[str, bool] = {}


class CgroupError(Exception):
    """Raised when cgroup information cannot be determined."""


def cpu_shares_is_ok(value: int) -> bool:
    """Return True if ``value`` is a valid cpu.shares setting or the invalid marker."""
    return value == CGROUP_CPU_SHARES_INVALID or CGROUP_CPU_SHARES_MIN <= value <= CGROUP_CPU_SHARES_MAX


def blkio_weight_is_ok(value: int) -> bool:
    """Return True if ``value`` is a valid blkio.weight setting or the invalid marker."""
    return value == CGROUP_BLKIO_WEIGHT_INVALID or CGROUP_BLKIO_WEIGHT_MIN <= value <= CGROUP_BLKIO_WEIGHT_MAX


def controller_is_valid(name: str | None) -> bool:
    """Return True if ``name`` is a valid controller name, with or without ``name=``."""
    if name is None:
        return False
    if name.startswith("name="):
        name = name[len("name="):]
    if not name or name[0] == "_":
        return False
    if any(char not in _CONTROLLER_VALID for char in name):
        return False
    return len(name) <= FILENAME_MAX


def _unescape_mount(field: str) -> str:
    return re.sub(r"\\([0-7]{3})", lambda m: chr(int(m.group(1), 8)), field)


def _filesystem_type(path: str) -> str:
    target = os.path.realpath(path)
    best: tuple[int, str] | None = None
    with open(_MOUNTS_FILE, encoding="utf-8", errors="surrogateescape") as mounts:
        for line in mounts:
            fields = line.split()
            if len(fields) < 3:
                continue
            mount_point = _unescape_mount(fields[1])
            base = mount_point.rstrip("/")
            if mount_point == "/" or target == base or target.startswith(base + "/"):
                length = len(base)
                if best is None or length >= best[0]:
                    best = (length, fields[2])
    if best is None:
        raise CgroupError(f"no mount found for {path}")
    return best[1]


def cg_unified(mount_point: str = "/sys/fs/cgroup/") -> bool:
    """Return True if the unified cgroup hierarchy is mounted at ``mount_point``.

    Raises OSError if the mount point cannot be examined and CgroupError if
    neither a unified nor a legacy hierarchy is mounted there.
    """
    cached = _unified_cache.get(mount_point)
    if cached is not None:
        return cached

    os.stat(mount_point)
    fs_type = _filesystem_type(mount_point)
    if fs_type == "cgroup2":
        unified = True
    elif fs_type == "tmpfs":
        unified = False
    else:
        raise CgroupError(f"unexpected file system {fs_type!r} at {mount_point}")

    _unified_cache[mount_point] = unified
    return unified


def _truncate_nl(line: str) -> str:
    for index, char in enumerate(line):
        if char in "\n\r":
            return line[:index]
    return line


def pid_get_path(
    controller: str | None = None,
    pid: int = 0,
    proc_root: str | os.PathLike = "/proc",
    unified: bool | None = None,
) -> str:
    """Return the cgroup path of process ``pid`` (0 means the caller).

    On a legacy hierarchy the path of ``controller`` is returned, defaulting
    to the systemd controller. Raises ProcessLookupError if the process does
    not exist and CgroupError if no matching hierarchy is listed.
    """
    if pid < 0:
        raise ValueError("pid must not be negative")
    if unified is None:
        unified = cg_unified()

    if not unified:
        if controller is not None:
            if not controller_is_valid(controller):
                raise ValueError(f"invalid controller name {controller!r}")
        else:
            controller = SYSTEMD_CGROUP_CONTROLLER

    path = os.path.join(os.fspath(proc_root), "self" if pid == 0 else str(pid), "cgroup")
    try:
        stream = open(path, encoding="utf-8", errors="surrogateescape")
    except FileNotFoundError as exc:
        raise ProcessLookupError(f"no such process: {pid}") from exc

    with stream:
        for raw in stream:
            line = _truncate_nl(raw)
            if unified:
                if not line.startswith("0:"):
                    continue
                rest = line[2:]
                colon = rest.find(":")
                if colon < 0:
                    continue
                return rest[colon + 1:]

            first = line.find(":")
            if first < 0:
                continue
            rest = line[first + 1:]
            second = rest.find(":")
            if second < 0:
                continue
            controllers = [word for word in rest[:second].split(",") if word]
            if controller in controllers:
                return rest[second + 1:]

    raise CgroupError(f"no cgroup entry for process {pid}")


def blkio_weight_parse(text: str | None) -> int:
    """Parse a blkio weight; empty input yields the invalid marker."""
    if not text:
        return CGROUP_BLKIO_WEIGHT_INVALID
    stripped = text.strip()
    if not stripped or stripped.startswith("-") or not stripped.lstrip("+").isdigit():
        raise ValueError(f"invalid blkio weight {text!r}")
    value = int(stripped)
    if value >= 2**64:
        raise ValueError(f"blkio weight out of range: {text!r}")
    if value < CGROUP_BLKIO_WEIGHT_MIN or value > CGROUP_BLKIO_WEIGHT_MAX:
        raise ValueError(f"blkio weight out of range: {text!r}")
    return value