"""Load ramp orchestration."""

from .ramp_controller import RampController, load_levels
from .driver import BenchmarkDriver
from .presets import (
    BENCH_DEFAULTS,
    CPU_PHASE,
    DEFAULT_METRICS,
    IPSEC_PHASE,
    MAXIMIZE_PHASE,
    TOOL_DEFAULTS,
    VM_PHASE,
)

__all__ = [
    "RampController",
    "load_levels",
    "BenchmarkDriver",
    "BENCH_DEFAULTS",
    "CPU_PHASE",
    "DEFAULT_METRICS",
    "IPSEC_PHASE",
    "MAXIMIZE_PHASE",
    "TOOL_DEFAULTS",
    "VM_PHASE",
]
