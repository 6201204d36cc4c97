"""Discovery of configuration drop-in files across a cascade of directories."""

from __future__ import annotations

import logging
import os
from typing import Iterable

log = logging.getLogger(__name__)


def is_file_with_suffix(entry: os.DirEntry, suffix: str) -> bool:
    """Return True if a directory entry is a regular file or symlink ending in ``suffix``."""
    try:
        usable = entry.is_symlink() or entry.is_file(follow_symlinks=False)
    except OSError:
        # The type could not be determined; treat it like an unknown type.
        usable = True
    if not usable:
        return False
    return entry.name.endswith(suffix)


def conf_paths(name: str) -> list[str]:
    """Return the standard cascade of configuration directories for ``name``."""
    return [
        f"/etc/{name}",
        f"/run/{name}",
        f"/usr/local/lib/{name}",
        f"/usr/lib/{name}",
    ]


def _root_prefix(root: str | None) -> str:
    if not root:
        return ""
    stripped = os.fspath(root).rstrip("/")
    return stripped


def _prefix_root(root: str | None, path: str) -> str:
    prefix = _root_prefix(root)
    if not prefix:
        return path
    return prefix + path


def _resolve_unique(dirs: Iterable[str], root: str | None) -> list[str]:
    """Canonicalize directories below ``root`` and drop duplicates, keeping order."""
    prefix = _root_prefix(root)
    real_prefix = os.path.realpath(prefix) if prefix else ""
    seen: set[str] = set()
    resolved: list[str] = []
    for directory in dirs:
        normal = os.path.normpath(os.fspath(directory))
        if normal.startswith("//"):
            normal = "/" + normal.lstrip("/")
        real = os.path.realpath(_prefix_root(root, normal))
        if real_prefix:
            if real == real_prefix:
                candidate = "/"
            elif real.startswith(real_prefix.rstrip("/") + "/"):
                candidate = real[len(real_prefix.rstrip("/")):]
            else:
                candidate = normal
        else:
            candidate = real
        if candidate not in seen:
            seen.add(candidate)
            resolved.append(candidate)
    return resolved


def _files_add(found: dict[str, str], root: str | None, path: str, suffix: str) -> None:
    dirpath = _prefix_root(root, path)
    try:
        entries = list(os.scandir(dirpath))
    except FileNotFoundError:
        return
    for entry in entries:
        if not is_file_with_suffix(entry, suffix):
            continue
        full = dirpath.rstrip("/") + "/" + entry.name if dirpath != "/" else "/" + entry.name
        if entry.name in found:
            log.debug("Skipping overridden file: %s.", full)
            continue
        found[entry.name] = full


def conf_files_list(suffix: str, root: str | None, dirs: Iterable[str]) -> list[str]:
    """List files ending in ``suffix`` from ``dirs``, sorted by file name.

    When several directories hold a file of the same name, the one in the
    earliest directory wins. Directories that are missing or unreadable are
    skipped.
    """
    found: dict[str, str] = {}
    for directory in _resolve_unique(dirs, root):
        try:
            _files_add(found, root, directory, suffix)
        except OSError as exc:
            log.debug("Failed to search for files in %s, ignoring: %s", directory, exc)
    return [found[name] for name in sorted(found)]