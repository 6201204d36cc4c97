from datetime import datetime

import pytest

from bootchart.conf_parser import table_lookup
from bootchart.options import (
    UsageError,
    config_table,
    help_text,
    output_file_name,
    parse_argv,
    parse_conf,
)
from bootchart.settings import BootchartOptions


def test_help_text_shows_defaults():
    text = help_text("prog")
    assert text.startswith("Usage: prog [OPTIONS]\n")
    assert "Sample frequency [25]" in text
    assert "Stop sampling at [500] samples" in text
    assert "[/run/log]" in text
    assert "[/usr/lib/systemd/systemd]" in text


def test_flags_set_options():
    opts = BootchartOptions()
    assert parse_argv(["-r", "-p", "-e", "-F", "-C", "-c", "--per-cpu"], opts, False) is True
    assert opts.relative and opts.pss and opts.entropy
    assert opts.filter is False
    assert opts.show_cmdline and opts.show_cgroup and opts.percpu


def test_clustered_short_flags():
    opts = BootchartOptions()
    assert parse_argv(["-rpe"], opts, False) is True
    assert (opts.relative, opts.pss, opts.entropy) == (True, True, True)


def test_numeric_arguments_in_all_forms():
    opts = BootchartOptions()
    assert parse_argv(["-f", "50", "--samples=10", "-x7", "--scale-y", "3.5"], opts, False)
    assert opts.hz == 50.0
    assert opts.samples_len == 10
    assert opts.scale_x == 7.0
    assert opts.scale_y == 3.5


def test_long_option_abbreviation():
    opts = BootchartOptions()
    assert parse_argv(["--sam=10", "--ent"], opts, False)
    assert opts.samples_len == 10
    assert opts.entropy is True


def test_invalid_number_keeps_previous_value():
    opts = BootchartOptions()
    assert parse_argv(["-f", "abc", "-n", "x"], opts, False)
    assert opts.hz == BootchartOptions().hz
    assert opts.samples_len == BootchartOptions().samples_len


def test_zero_frequency_rejected():
    with pytest.raises(UsageError):
        parse_argv(["-f", "0"], BootchartOptions(), False)


def test_unknown_option_raises_unless_init():
    with pytest.raises(UsageError):
        parse_argv(["--bogus"], BootchartOptions(), False)
    assert parse_argv(["--bogus"], BootchartOptions(), True) is False


def test_missing_argument_raises():
    with pytest.raises(UsageError):
        parse_argv(["-r", "-f"], BootchartOptions(), False)


def test_ambiguous_long_option_raises():
    with pytest.raises(UsageError):
        parse_argv(["--scale=2"], BootchartOptions(), False)


def test_argument_to_flag_raises():
    with pytest.raises(UsageError):
        parse_argv(["--rel=yes"], BootchartOptions(), False)


def test_help_stops_processing(capsys):
    opts = BootchartOptions()
    assert parse_argv(["-h", "-r", "--bogus"], opts, False) is False
    assert opts.relative is False
    assert "Usage:" in capsys.readouterr().out


def test_paths_lose_redundant_slashes():
    opts = BootchartOptions()
    assert parse_argv(["-o", "/tmp//out/", "--init=/sbin//init"], opts, False)
    assert opts.output_path == "/tmp/out"
    assert opts.init_path == "/sbin/init"


def test_double_dash_ends_options_and_positionals_ignored():
    opts = BootchartOptions()
    assert parse_argv(["extra", "-p", "--", "-r"], opts, False)
    assert opts.pss is True
    assert opts.relative is False


def test_config_table_stores_parsed_value():
    opts = BootchartOptions()
    table = config_table(opts)
    assert all(item.section == "Bootchart" for item in table)
    item = table_lookup(table, "Bootchart", "Samples")
    item.store(item.parse("f.conf", 1, "42"))
    assert opts.samples_len == 42


def test_parse_conf_applies_main_file_then_dropins(tmp_path):
    main = tmp_path / "bootchart.conf"
    main.write_text("[Bootchart]\nSamples=100\nFrequency=50\nOutput=/var//log\n")
    dropins = tmp_path / "bootchart.conf.d"
    dropins.mkdir()
    (dropins / "10-x.conf").write_text("[Bootchart]\nRelative=yes\nSamples=200\n")
    opts = parse_conf(BootchartOptions(), str(main), [str(dropins)])
    assert opts.samples_len == 200
    assert opts.hz == 50.0
    assert opts.output_path == "/var/log"
    assert opts.relative is True


def test_parse_conf_missing_files_keep_defaults(tmp_path):
    opts = parse_conf(BootchartOptions(), str(tmp_path / "none.conf"), [str(tmp_path / "none.d")])
    assert opts == BootchartOptions()


def test_parse_conf_stops_at_malformed_line(tmp_path):
    main = tmp_path / "bootchart.conf"
    main.write_text("[Bootchart]\nSamples=7\nbogus line\nSamples=9\n")
    opts = parse_conf(BootchartOptions(), str(main), [])
    assert opts.samples_len == 7


def test_output_file_name_uses_timestamp():
    opts = BootchartOptions(output_path="/tmp/charts")
    name = output_file_name(opts, datetime(2016, 3, 4, 5, 6))
    assert name == "/tmp/charts/bootchart-20160304-0506.svg"


def test_output_file_name_default_time_shape():
    name = output_file_name(BootchartOptions())
    assert name.startswith("/run/log/bootchart-")
    assert name.endswith(".svg")