"""Data models for load ramp benchmarking."""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

# Power metrics read from turbostat by default
DEFAULT_METRICS = ("PkgWatt", "RAMWatt", "PkgTmp")


class LoadKind(Enum):
    """Kind of load generated by the stress process."""

    CPU = "cpu"
    IPSEC = "ipsec"
    VM = "vm"
    MAXIMIZE = "maximize"

    @property
    def has_variable_load(self) -> bool:
        """Only CPU load takes a load percentage."""
        return self is LoadKind.CPU


@dataclass(frozen=True)
class BenchConfig:
    """Configuration for a complete benchmark run.

    Built once at startup and passed down the call chain. Durations are
    in seconds.
    """

    load_step: int = 25
    settle_seconds: float = 5.0
    threads: int = field(default_factory=lambda: os.cpu_count() or 1)
    metrics: Tuple[str, ...] = DEFAULT_METRICS
    repeat: int = 10
    sample_seconds: float = 1.0
    method: str = "all"

    # Phase enables
    ipsec: bool = True
    vm: bool = True
    maximize: bool = True

    # Starting load per phase kind
    cpu_start_load: int = 0
    fixed_start_load: int = 100

    cpu_info: bool = True
    strict_metrics: bool = False

    def __post_init__(self):
        if not 1 <= self.load_step <= 100:
            raise ValueError(f"load_step must be in 1..100, got {self.load_step}")
        if self.threads < 1:
            raise ValueError(f"threads must be at least 1, got {self.threads}")
        if self.repeat < 1:
            raise ValueError(f"repeat must be at least 1, got {self.repeat}")
        if not self.metrics:
            raise ValueError("At least one metric name is required")
        if self.settle_seconds < 0 or self.sample_seconds < 0:
            raise ValueError("Durations must not be negative")
        for start in (self.cpu_start_load, self.fixed_start_load):
            if not 0 <= start <= 100:
                raise ValueError(f"Start load must be in 0..100, got {start}")
        # Metric order is the column order and never changes
        object.__setattr__(self, "metrics", tuple(self.metrics))

    @property
    def header(self) -> List[str]:
        """Column names of the result stream."""
        return ["test", "threads", "load"] + list(self.metrics)


@dataclass(frozen=True)
class LoadProfile:
    """Parameters for one load generator run."""

    kind: LoadKind
    threads: int
    load: Optional[int] = None
    method: Optional[str] = None


@dataclass(frozen=True)
class Phase:
    """One named test phase of the benchmark."""

    name: str
    kind: LoadKind


@dataclass(frozen=True)
class ExitInfo:
    """How a terminated load generator ended."""

    returncode: int

    @property
    def signaled(self) -> bool:
        """True when the process was killed by a signal."""
        return self.returncode < 0

    @property
    def signal_number(self) -> Optional[int]:
        return -self.returncode if self.signaled else None


@dataclass
class AggregateRow:
    """Mean telemetry for one committed load level."""

    test: str
    threads: int
    load: int
    means: List[float]

    def to_fields(self) -> List[str]:
        """Convert to result stream fields, means at 2 decimal places."""
        return [self.test, str(self.threads), str(self.load)] + [
            f"{mean:.2f}" for mean in self.means
        ]
