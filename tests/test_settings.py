from bootchart.settings import (
    DEFAULT_HZ,
    DEFAULT_OUTPUT,
    DEFAULT_SAMPLES_LEN,
    BootchartOptions,
)


def test_defaults_match_source():
    options = BootchartOptions()
    assert options.samples_len == 500
    assert options.hz == 25.0
    assert options.scale_x == 100.0
    assert options.scale_y == 20.0
    assert options.output_path == "/run/log"


def test_default_flags():
    options = BootchartOptions()
    assert (options.filter, options.initcall) == (True, True)
    assert not any(
        (
            options.entropy,
            options.relative,
            options.show_cmdline,
            options.show_cgroup,
            options.pss,
            options.percpu,
        )
    )


def test_defaults_use_module_constants():
    options = BootchartOptions()
    assert options.samples_len == DEFAULT_SAMPLES_LEN
    assert options.hz == DEFAULT_HZ
    assert options.output_path == DEFAULT_OUTPUT


def test_copy_is_equal():
    options = BootchartOptions(hz=50.0, pss=True, output_path="/tmp/charts")
    assert options.copy() == options


def test_copy_is_independent():
    options = BootchartOptions()
    clone = options.copy()
    clone.hz = 10.0
    clone.relative = True
    assert options.hz == DEFAULT_HZ
    assert options.relative is False
    assert clone != options