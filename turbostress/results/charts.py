"""Chart generation for benchmark results."""

import matplotlib.pyplot as plt
from datetime import datetime
from typing import Optional

from .aggregator import ResultAggregator


def generate_charts(
    aggregator: ResultAggregator,
    output_path: Optional[str] = None,
    show: bool = True,
) -> Optional[str]:
    """
    Plot every metric against load, one line per test.

    Fixed-load tests have a single row and show up as single markers.

    Args:
        aggregator: Loaded results
        output_path: Path to save the chart (auto-generated if None)
        show: Whether to display the chart

    Returns:
        Path to saved chart file, or None if there was nothing to plot
    """
    metrics = aggregator.metrics
    if aggregator.df.empty or not metrics:
        print("No results to chart.")
        return None

    fig, axes = plt.subplots(
        len(metrics), 1, figsize=(12, 4 * len(metrics)), squeeze=False
    )
    threads = ", ".join(str(t) for t in dict.fromkeys(aggregator.df["threads"]))
    fig.suptitle(f"Power Metrics vs Load (threads: {threads})", fontsize=16, fontweight="bold")

    for ax, metric in zip(axes[:, 0], metrics):
        for test in aggregator.tests:
            rows = aggregator.for_test(test)
            ax.plot(rows["load"], rows[metric], "-o", label=test, linewidth=2, markersize=6)
        ax.set_xlabel("Load (%)")
        ax.set_ylabel(metric)
        ax.set_title(f"{metric} vs Load")
        ax.set_xlim(-5, 105)
        ax.legend()
        ax.grid(True, alpha=0.3)

    plt.tight_layout()

    if output_path:
        saved_path = output_path
    else:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        saved_path = f"turbostress_results_{timestamp}.png"

    plt.savefig(saved_path, dpi=300, bbox_inches="tight")
    print(f"\nChart saved as: {saved_path}")

    if show:
        plt.show()
    plt.close(fig)

    return saved_path
