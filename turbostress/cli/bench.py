"""CLI for the load ramp benchmark."""

import argparse
import asyncio
import logging
import os
import re
import sys
import traceback
from typing import List, Optional

from ..core.cpu_info import format_preamble, read_cpu_info
from ..core.models import BenchConfig
from ..core.row_writer import RowWriter
from ..core.sampler import SamplerClient
from ..process.load_client import LoadClient
from ..ramps.driver import BenchmarkDriver
from ..ramps.presets import BENCH_DEFAULTS, TOOL_DEFAULTS

DESCRIPTION = """
Generate CPU load and output power metrics for each load level.

Requires adequate privileges (CAP_SYS_RAWIO, or simply run as root) to read
the metrics. Load is generated with stress-ng and metrics are measured with
turbostat. For each load step from 0 to 100 a matching CPU load is started
and several measures are taken; each reported value is their mean. Fixed
load ipsec, VM and maximize tests may follow.

Progress messages are written to STDERR while results are written to STDOUT,
ex: python -m turbostress bench | tee results.csv
"""

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m)?\s*$")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, None: 1.0}


def parse_duration(value: str) -> float:
    """Parse a duration like '5', '5s', '500ms' or '1m' into seconds."""
    match = _DURATION_RE.match(value)
    if not match:
        raise argparse.ArgumentTypeError(f"invalid duration: {value!r}")
    return float(match.group(1)) * _DURATION_UNITS[match.group(2)]


def parse_metrics(metrics_str: str) -> List[str]:
    """Parse comma-separated metric names, keeping their order."""
    metrics = [m.strip() for m in metrics_str.split(",") if m.strip()]
    if not metrics:
        raise argparse.ArgumentTypeError("at least one metric is required")
    return metrics


def build_parser() -> argparse.ArgumentParser:
    """Build the bench argument parser."""
    parser = argparse.ArgumentParser(
        prog="turbostress bench",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    default_metrics = ",".join(BENCH_DEFAULTS["metrics"])

    parser.add_argument(
        "--load-step",
        type=int,
        default=BENCH_DEFAULTS["load_step"],
        help=f"Increment the load from 0 to 100 with this value (default: {BENCH_DEFAULTS['load_step']})",
    )
    parser.add_argument(
        "--load-duration-before-measures",
        type=parse_duration,
        default=BENCH_DEFAULTS["settle_seconds"],
        help=f"Duration to wait between load start and measures (default: {BENCH_DEFAULTS['settle_seconds']:g}s)",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=os.cpu_count() or 1,
        help="Number of threads to use for the load (default: number of CPUs)",
    )
    parser.add_argument(
        "--metrics",
        type=parse_metrics,
        default=list(BENCH_DEFAULTS["metrics"]),
        help=f"Comma-separated turbostat columns to read (default: {default_metrics})",
    )
    parser.add_argument(
        "--repeat",
        type=int,
        default=BENCH_DEFAULTS["repeat"],
        help=f"Measures per load level, the reported value is their mean (default: {BENCH_DEFAULTS['repeat']})",
    )
    parser.add_argument(
        "--duration-between-measures",
        type=parse_duration,
        default=BENCH_DEFAULTS["sample_seconds"],
        help=f"Duration of each measure (default: {BENCH_DEFAULTS['sample_seconds']:g}s)",
    )
    parser.add_argument(
        "--method",
        type=str,
        default=BENCH_DEFAULTS["method"],
        help=f"stress-ng --cpu-method used for the CPU load (default: {BENCH_DEFAULTS['method']})",
    )
    parser.add_argument(
        "--no-cpu-info",
        action="store_true",
        help="Skip the CPU info output before results",
    )
    parser.add_argument(
        "--no-ipsec",
        action="store_true",
        help="Skip the ipsec test (stress-ng --ipsec-mb, triggers AVX and similar instructions)",
    )
    parser.add_argument(
        "--no-vm",
        action="store_true",
        help="Skip the VM test (stress-ng --vm)",
    )
    parser.add_argument(
        "--no-maximize",
        action="store_true",
        help="Skip the maximize test (stress-ng --maximize)",
    )
    parser.add_argument(
        "--strict-metrics",
        action="store_true",
        help="Fail when a metric is missing from turbostat output instead of reporting 0.00",
    )
    parser.add_argument(
        "--stress-binary",
        type=str,
        default=TOOL_DEFAULTS["stress_binary"],
        help=f"Load generator executable (default: {TOOL_DEFAULTS['stress_binary']})",
    )
    parser.add_argument(
        "--sampler-binary",
        type=str,
        default=TOOL_DEFAULTS["sampler_binary"],
        help=f"Telemetry sampler executable (default: {TOOL_DEFAULTS['sampler_binary']})",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Progress log level (default: INFO)",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> BenchConfig:
    """Build the run configuration from parsed arguments."""
    return BenchConfig(
        load_step=args.load_step,
        settle_seconds=args.load_duration_before_measures,
        threads=args.threads,
        metrics=args.metrics,
        repeat=args.repeat,
        sample_seconds=args.duration_between_measures,
        method=args.method,
        ipsec=not args.no_ipsec,
        vm=not args.no_vm,
        maximize=not args.no_maximize,
        cpu_info=not args.no_cpu_info,
        strict_metrics=args.strict_metrics,
    )


async def run_bench(
    config: BenchConfig,
    writer: RowWriter,
    load_client: LoadClient,
    sampler: SamplerClient,
) -> None:
    """Write the optional CPU info preamble and run the benchmark."""
    if config.cpu_info:
        writer.write_raw(format_preamble(await read_cpu_info()))

    driver = BenchmarkDriver(config, load_client, sampler, writer)
    await driver.run()


def main(argv: Optional[List[str]] = None):
    """Main entry point for bench CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        config = config_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    writer = RowWriter(sys.stdout)
    load_client = LoadClient(binary=args.stress_binary)
    sampler = SamplerClient(binary=args.sampler_binary, strict=config.strict_metrics)

    try:
        asyncio.run(run_bench(config, writer, load_client, sampler))
    except KeyboardInterrupt:
        print("\nBenchmark interrupted by user", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error running benchmark: {e}", file=sys.stderr)
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
