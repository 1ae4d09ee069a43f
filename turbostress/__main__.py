"""Main entry point for the turbostress package.

Usage:
    python -m turbostress bench > results.csv
    python -m turbostress bench --load-step 10 --repeat 5 --no-vm --no-maximize
    python -m turbostress report results.csv
"""

import sys


def main():
    """Main entry point that dispatches to subcommands."""
    if len(sys.argv) < 2:
        print_help()
        sys.exit(1)

    command = sys.argv[1]

    if command in ["-h", "--help", "help"]:
        print_help()
        sys.exit(0)

    argv = sys.argv[2:]

    if command == "bench":
        from .cli.bench import main as bench_main

        bench_main(argv)
    elif command == "report":
        from .cli.report import main as report_main

        report_main(argv)
    else:
        print(f"Unknown command: {command}", file=sys.stderr)
        print_help()
        sys.exit(1)


def print_help():
    """Print help message."""
    print(
        """turbostress: CPU load ramp with power metrics

Usage: python -m turbostress <command> [options]

Commands:
    bench     Ramp CPU load and measure power metrics (CSV on STDOUT)
    report    Summarize and chart a saved result file

Examples:
    # Full benchmark, progress on the console, results to a CSV file
    sudo python -m turbostress bench | tee results.csv

    # Ramp in steps of 10, 5 measures per level, CPU test only
    sudo python -m turbostress bench --load-step 10 --repeat 5 --no-ipsec --no-vm --no-maximize

    # Chart results
    python -m turbostress report results.csv

For command-specific help:
    python -m turbostress <command> --help
""",
        file=sys.stderr,
    )


if __name__ == "__main__":
    main()
