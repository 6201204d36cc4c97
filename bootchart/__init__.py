"""Settings, option and configuration handling, and file and cgroup helpers for a boot chart recorder."""

__version__ = "0.1.0"

__all__ = [
    "cgroup",
    "conf_enum",
    "conf_files",
    "conf_parser",
    "fileio",
    "options",
    "settings",
    "unaligned",
]