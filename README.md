# bootchart

Building blocks for a boot-time process chart recorder on Linux: the
recorder's settings and their defaults, its command-line and configuration
file handling, and the small file and system helpers it relies on.

## Modules

- `bootchart.settings`: `BootchartOptions`, a dataclass holding every setting
  with its default (sample count, frequency, horizontal and vertical scale,
  output and init paths, and the graph switches), with `copy()` for an
  independent copy.
- `bootchart.options`: `parse_argv` applies command-line arguments (without
  the program name) to a `BootchartOptions`; it returns `True` to go ahead,
  `False` after printing help (or, when running as init, after an unknown
  option), and raises `UsageError` for bad usage or a frequency that is not
  above zero. `config_table` and `parse_conf` read the `[Bootchart]` section
  of `/etc/systemd/bootchart.conf` and its `*.conf` drop-ins. `help_text`
  returns the usage message and `output_file_name` the path of the SVG file
  for a given time.
- `bootchart.conf_parser`: `config_parse` reads line-based `[Section]` /
  `Key=Value` files, with backslash line continuation and optional
  `.include`, against a list of `ConfigTableItem` entries; malformed section
  headers and lines without `=` raise `ConfigParseError`. `config_parse_many`
  reads a main file followed by drop-ins. Value parsers: `config_parse_int`,
  `config_parse_double`, `config_parse_bool`, `config_parse_path`; also
  `parse_boolean`, `table_lookup` and `warn_permissions`.
- `bootchart.conf_enum`: `config_parse_enum` and `config_parse_enum_list`
  turn names into values through a conversion function you supply, logging
  and skipping unknown or repeated names.
- `bootchart.conf_files`: `conf_paths` gives the standard cascade of
  configuration directories; `conf_files_list` lists files with a suffix
  across them, sorted by file name, the earliest directory winning for files
  of the same name.
- `bootchart.fileio`: `read_full_file`, `read_full_stream` and
  `read_one_line_file`; `iter_env_assignments` and `parse_env_file` for
  shell-style `KEY=value` files such as `/etc/os-release`; `get_proc_field`
  for files such as `/proc/self/status`. Oversized files raise
  `FileTooLargeError`, invalid UTF-8 in an env file raises `EnvParseError`.
- `bootchart.cgroup`: `controller_is_valid`, `cg_unified` (detects the
  unified hierarchy), `pid_get_path` (a process's cgroup path),
  `blkio_weight_parse`, `cpu_shares_is_ok` and `blkio_weight_is_ok`.
- `bootchart.unaligned`: `read_be16` … `read_le64` and `write_be16` …
  `write_le64` for unsigned integers at any offset of a byte buffer.

## Examples

Read settings from configuration and the command line:

```python
from bootchart.settings import BootchartOptions
from bootchart.options import parse_conf, parse_argv, output_file_name

options = BootchartOptions()
parse_conf(options, "/etc/systemd/bootchart.conf", None)
if parse_argv(["--rel", "--freq=50"], options, False):
    print(output_file_name(options, None))
```

Look up the distribution's pretty name:

```python
from bootchart.fileio import parse_env_file

values = parse_env_file("/etc/os-release", ["PRETTY_NAME"], None)
print(values.get("PRETTY_NAME"))
```

Parse a configuration file against a table of known keys:

```python
from bootchart.conf_parser import ConfigTableItem, config_parse, config_parse_int

found = {}
table = [ConfigTableItem("Main", "Count", config_parse_int, lambda v: found.update(count=v))]
config_parse("/etc/example.conf", table)
```

## What this package does not do

It does not sample processes, read `/proc` statistics during boot, start
init, or draw the SVG chart, and it installs no command. It provides the
settings, option and configuration handling and helpers such a recorder
needs.

## Testing

The test suite uses pytest, installed with the `test` extra.