"""Telemetry sampling through turbostat."""

import asyncio
import logging
import subprocess
from typing import Dict, List, Sequence

from .errors import FormatError, MissingMetricError, ParseError, SamplerFailed, SpawnError

DIAGNOSTIC_FD = 2


def parse_turbostat_output(
    output: str, metric_names: Sequence[str], strict: bool = False
) -> Dict[str, float]:
    """
    Parse the two-line header/value output of a single turbostat iteration.

    Args:
        output: Raw sampler stdout
        metric_names: Requested metrics, in output order
        strict: Fail on a requested metric missing from the header
            instead of reporting 0.0 for it

    Returns:
        Mapping of metric name to value, ordered like metric_names

    Raises:
        ParseError: Fewer than two lines of output
        FormatError: A value field is not numeric
        MissingMetricError: A metric is missing and strict is set
    """
    lines = output.split("\n")
    if len(lines) < 2:
        raise ParseError(f"could not parse turbostat output: {output}")

    names = lines[0].split("\t")
    values = lines[1].split("\t")
    raw: Dict[str, float] = {}
    for index, value in enumerate(values):
        try:
            number = float(value)
        except ValueError as e:
            raise FormatError(
                f"non-numeric turbostat value {value!r} in output: {output}"
            ) from e
        if index < len(names):
            raw[names[index]] = number

    missing = [name for name in metric_names if name not in raw]
    if missing and strict:
        raise MissingMetricError(
            f"metrics {', '.join(missing)} not found in turbostat output: {output}"
        )
    return {name: raw.get(name, 0.0) for name in metric_names}


class SamplerClient:
    """Takes one package-level telemetry reading per call."""

    def __init__(
        self,
        binary: str = "turbostat",
        strict: bool = False,
        diagnostic_fd: int = DIAGNOSTIC_FD,
    ):
        self.binary = binary
        self.strict = strict
        self.diagnostic_fd = diagnostic_fd
        self.logger = logging.getLogger(__name__)

    def command(self, metric_names: Sequence[str], duration: float) -> List[str]:
        """Build the sampler command line for one measurement window."""
        return [
            self.binary,
            "-q",
            "-c",
            "package",
            "--num_iterations",
            "1",
            "--interval",
            f"{duration:02f}",
            "--show",
            ",".join(metric_names),
        ]

    async def sample(self, metric_names: Sequence[str], duration: float) -> Dict[str, float]:
        """
        Run the sampler once and return its reading.

        Blocks until the sampler exits; there is no retry.

        Args:
            metric_names: Metrics to request, in output order
            duration: Measurement window in seconds

        Returns:
            Mapping of metric name to value, ordered like metric_names
        """
        cmd = self.command(metric_names, duration)
        self.logger.info(f"Sampling: {' '.join(cmd)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=subprocess.PIPE,
                stderr=self.diagnostic_fd,
            )
        except OSError as e:
            raise SpawnError(f"Failed to start sampler: {e}\nCommand: {' '.join(cmd)}") from e

        try:
            stdout, _ = await process.communicate()
        except asyncio.CancelledError:
            # Do not leave turbostat running behind a cancelled run
            if process.returncode is None:
                try:
                    process.kill()
                except ProcessLookupError:
                    pass
                await process.wait()
            raise

        if process.returncode != 0:
            raise SamplerFailed(
                f"Sampler exited with status {process.returncode}\nCommand: {' '.join(cmd)}"
            )

        return parse_turbostat_output(
            stdout.decode(errors="replace"), metric_names, strict=self.strict
        )
