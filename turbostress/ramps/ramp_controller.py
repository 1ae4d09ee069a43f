"""Load ramp orchestration: load, settle, sample, tear down, commit."""

import logging
from typing import Iterator, List

from ..core.errors import PrematureExit, TeardownInconsistency
from ..core.models import AggregateRow, BenchConfig, LoadProfile, Phase
from ..core.row_writer import RowWriter
from ..core.sampler import SamplerClient
from ..process.load_client import LoadClient

GONE_MESSAGE = "stress-ng gone before end of measures, see stress-ng output for details"


def load_levels(start: int, step: int) -> Iterator[int]:
    """
    Yield the load levels of a ramp.

    Levels go from start up by step and are clamped so the last one is
    always exactly 100. The start level is always visited.
    """
    level = start
    while True:
        yield level
        if level >= 100:
            return
        level = min(level + step, 100)


class RampController:
    """
    Drives one test phase across its load levels.

    For every level it:
    - Starts a load generator and waits for the settle duration
    - Takes repeated telemetry samples while the load keeps running
    - Kills the load generator and checks it died from the signal
    - Writes the mean of each metric as one row
    """

    def __init__(
        self,
        config: BenchConfig,
        load_client: LoadClient,
        sampler: SamplerClient,
        writer: RowWriter,
    ):
        self.config = config
        self.load_client = load_client
        self.sampler = sampler
        self.writer = writer

        logging.basicConfig(
            level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
        )
        self.logger = logging.getLogger(__name__)

    def profile_for(self, phase: Phase, load: int) -> LoadProfile:
        """Build the load profile of a phase at a load level."""
        if phase.kind.has_variable_load:
            return LoadProfile(
                kind=phase.kind,
                threads=self.config.threads,
                load=load,
                method=self.config.method,
            )
        return LoadProfile(kind=phase.kind, threads=self.config.threads)

    async def run_phase(self, phase: Phase, start_load: int) -> List[int]:
        """
        Run a phase from start_load up to 100.

        Args:
            phase: Test name and load kind
            start_load: First load level

        Returns:
            The committed load levels, in order
        """
        committed = []
        for load in load_levels(start_load, self.config.load_step):
            row = await self.measure_level(phase, load)
            self.writer.write(row.to_fields())
            committed.append(load)
        return committed

    async def measure_level(self, phase: Phase, load: int) -> AggregateRow:
        """
        Measure one load level.

        Raises:
            PrematureExit: The load generator exited during settle or sampling
            TeardownInconsistency: The load generator was not killed by the signal
        """
        config = self.config
        self.logger.info(
            f"load_duration_before_measure: {config.settle_seconds:g}s, "
            f"load: {load}, threads: {config.threads}"
        )

        sums = [0.0] * len(config.metrics)
        async with self.load_client.run(self.profile_for(phase, load)) as load_run:
            if await load_run.wait_for_exit(config.settle_seconds):
                raise PrematureExit(GONE_MESSAGE)

            for _ in range(config.repeat):
                if not load_run.is_alive():
                    raise PrematureExit(GONE_MESSAGE)
                sample = await self.sampler.sample(config.metrics, config.sample_seconds)
                for index, name in enumerate(config.metrics):
                    sums[index] += sample[name]

            exit_info = await load_run.terminate()
            if not exit_info.signaled:
                raise TeardownInconsistency(
                    f"stress-ng was not terminated by a signal, EC: {exit_info.returncode}"
                )

        return AggregateRow(
            test=phase.name,
            threads=config.threads,
            load=load,
            means=[total / config.repeat for total in sums],
        )
