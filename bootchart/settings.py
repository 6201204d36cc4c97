"""Recording and rendering options with their built-in defaults."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass

MAXCPUS = 512
MAXPIDS = 4194304

DEFAULT_SAMPLES_LEN = 500
DEFAULT_HZ = 25.0
DEFAULT_SCALE_X = 100.0  # 100px = 1sec
DEFAULT_SCALE_Y = 20.0
DEFAULT_INIT = "/usr/lib/systemd/systemd"
DEFAULT_OUTPUT = "/run/log"


@dataclass
class BootchartOptions:
    """Settings that control sampling and the drawn chart."""

    entropy: bool = False
    initcall: bool = True
    relative: bool = False
    filter: bool = True
    show_cmdline: bool = False
    show_cgroup: bool = False
    pss: bool = False
    percpu: bool = False
    samples_len: int = DEFAULT_SAMPLES_LEN
    hz: float = DEFAULT_HZ
    scale_x: float = DEFAULT_SCALE_X
    scale_y: float = DEFAULT_SCALE_Y
    init_path: str = DEFAULT_INIT
    output_path: str = DEFAULT_OUTPUT

    def copy(self) -> BootchartOptions:
        """Return an independent copy of these options."""
        return dataclasses.replace(self)