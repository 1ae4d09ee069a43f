"""Default benchmark settings and the phase table."""

from ..core.models import DEFAULT_METRICS, LoadKind, Phase

# Defaults for every BenchConfig field exposed on the command line
BENCH_DEFAULTS = {
    "load_step": 25,
    "settle_seconds": 5.0,
    "metrics": DEFAULT_METRICS,
    "repeat": 10,
    "sample_seconds": 1.0,
    "method": "all",
    "ipsec": True,
    "vm": True,
    "maximize": True,
    "cpu_info": True,
    "strict_metrics": False,
}

# External tools
TOOL_DEFAULTS = {
    "stress_binary": "stress-ng",
    "sampler_binary": "turbostat",
}

CPU_PHASE = Phase(name="CPUStress", kind=LoadKind.CPU)
IPSEC_PHASE = Phase(name="ipsec", kind=LoadKind.IPSEC)
VM_PHASE = Phase(name="VMStress", kind=LoadKind.VM)
MAXIMIZE_PHASE = Phase(name="maximize", kind=LoadKind.MAXIMIZE)
