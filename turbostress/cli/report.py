"""CLI for reviewing a saved result file."""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from ..results.aggregator import ResultAggregator
from ..results.charts import generate_charts


def main(argv: Optional[List[str]] = None):
    """Main entry point for report CLI."""
    parser = argparse.ArgumentParser(
        prog="turbostress report",
        description="Summarize and chart a result file written by the bench command",
    )
    parser.add_argument(
        "results",
        type=str,
        help="Result file (bench STDOUT saved to disk)",
    )
    parser.add_argument(
        "--no-charts",
        action="store_true",
        help="Skip chart generation",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Chart file path (default: turbostress_results_<timestamp>.png)",
    )
    parser.add_argument(
        "--no-show",
        action="store_true",
        help="Save the chart without displaying it",
    )

    args = parser.parse_args(argv)

    if not Path(args.results).exists():
        print(f"Error: Result file '{args.results}' does not exist")
        sys.exit(1)

    try:
        aggregator = ResultAggregator.load_csv(args.results)
        aggregator.print_summary_table(
            title="LOAD RAMP RESULTS",
            description=f"File: {args.results} | Tests: {', '.join(aggregator.tests)}",
        )

        if not args.no_charts:
            generate_charts(aggregator, output_path=args.output, show=not args.no_show)

    except Exception as e:
        print(f"Error building report: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
