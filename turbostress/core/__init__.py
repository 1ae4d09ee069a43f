"""Core benchmarking components."""

from .models import AggregateRow, BenchConfig, ExitInfo, LoadKind, LoadProfile, Phase
from .row_writer import RowWriter
from .sampler import SamplerClient, parse_turbostat_output

__all__ = [
    "AggregateRow",
    "BenchConfig",
    "ExitInfo",
    "LoadKind",
    "LoadProfile",
    "Phase",
    "RowWriter",
    "SamplerClient",
    "parse_turbostat_output",
]
