"""Benchmark phase sequencing."""

import logging
from typing import List, Optional, Tuple

from ..core.models import BenchConfig, Phase
from ..core.row_writer import RowWriter
from ..core.sampler import SamplerClient
from ..process.load_client import LoadClient
from .presets import CPU_PHASE, IPSEC_PHASE, MAXIMIZE_PHASE, VM_PHASE
from .ramp_controller import RampController


class BenchmarkDriver:
    """
    Runs the benchmark phases in order.

    Writes the header row, then the CPU ramp, then each enabled
    fixed-load phase (ipsec, VM, maximize). The first failing phase
    aborts the run.
    """

    def __init__(
        self,
        config: BenchConfig,
        load_client: Optional[LoadClient] = None,
        sampler: Optional[SamplerClient] = None,
        writer: Optional[RowWriter] = None,
    ):
        self.config = config
        self.writer = writer or RowWriter()
        self.controller = RampController(
            config,
            load_client or LoadClient(),
            sampler or SamplerClient(strict=config.strict_metrics),
            self.writer,
        )
        self.logger = logging.getLogger(__name__)

    def phases(self) -> List[Tuple[Phase, int]]:
        """Enabled phases with their starting load."""
        config = self.config
        phases = [(CPU_PHASE, config.cpu_start_load)]
        if config.ipsec:
            phases.append((IPSEC_PHASE, config.fixed_start_load))
        if config.vm:
            phases.append((VM_PHASE, config.fixed_start_load))
        if config.maximize:
            phases.append((MAXIMIZE_PHASE, config.fixed_start_load))
        return phases

    async def run(self) -> None:
        """Write the header and run every enabled phase."""
        self.writer.write(self.config.header)

        for phase, start_load in self.phases():
            self.logger.info("=" * 50)
            self.logger.info(f" Phase {phase.name} (threads={self.config.threads})")
            self.logger.info("=" * 50)
            levels = await self.controller.run_phase(phase, start_load)
            self.logger.info(f"Completed phase {phase.name}: loads {levels}")
