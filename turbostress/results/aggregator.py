"""Result loading and reporting."""

import io
from pathlib import Path
from typing import List, Optional

import pandas as pd

from ..core.cpu_info import PREAMBLE_SEPARATOR

KEY_COLUMNS = ["test", "threads", "load"]


def strip_preamble(text: str) -> str:
    """Drop the system-info preamble, if any, from a result stream."""
    lines = text.splitlines(keepends=True)
    for index, line in enumerate(lines):
        if line.rstrip("\r\n") == PREAMBLE_SEPARATOR:
            return "".join(lines[index + 1:])
    return text


class ResultAggregator:
    """Loads a saved result stream and formats it for review."""

    def __init__(self, df: Optional[pd.DataFrame] = None):
        self.df = df if df is not None else pd.DataFrame(columns=KEY_COLUMNS)

    @classmethod
    def load_csv(cls, path: str) -> "ResultAggregator":
        """
        Load a result file written by the bench command.

        Args:
            path: Result file, optionally starting with a system-info preamble

        Returns:
            Aggregator holding the rows

        Raises:
            ValueError: If the file has no test/threads/load header
        """
        text = Path(path).read_text()
        return cls.from_text(text)

    @classmethod
    def from_text(cls, text: str) -> "ResultAggregator":
        """Build an aggregator from result stream text."""
        df = pd.read_csv(io.StringIO(strip_preamble(text)))
        missing = [column for column in KEY_COLUMNS if column not in df.columns]
        if missing:
            raise ValueError(f"Not a result file, missing columns: {', '.join(missing)}")
        return cls(df)

    @property
    def metrics(self) -> List[str]:
        """Metric columns, in file order."""
        return [column for column in self.df.columns if column not in KEY_COLUMNS]

    @property
    def tests(self) -> List[str]:
        """Test names, in file order."""
        return list(dict.fromkeys(self.df["test"]))

    def for_test(self, test: str) -> pd.DataFrame:
        """Rows of one test, sorted by load."""
        return self.df[self.df["test"] == test].sort_values("load")

    def to_dataframe(self) -> pd.DataFrame:
        """Rows with metrics formatted to two decimals."""
        formatted = self.df.copy()
        for metric in self.metrics:
            formatted[metric] = formatted[metric].map(lambda value: f"{value:.2f}")
        return formatted

    def get_tsv_string(self) -> str:
        """Get results as TSV string for easy copy/paste to spreadsheet."""
        return self.to_dataframe().to_csv(sep="\t", index=False)

    def print_summary_table(
        self,
        title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> None:
        """Print formatted summary tables, one per test."""
        if self.df.empty:
            print("No results to display.")
            return

        print()
        print("=" * 100)
        if title:
            print(title.center(100))
        else:
            print("BENCHMARK RESULTS SUMMARY".center(100))
        print("=" * 100)

        if description:
            print(description)
            print("-" * 100)

        formatted = self.to_dataframe()
        for test in self.tests:
            print(f"\n{test}:")
            rows = formatted[formatted["test"] == test].drop(columns=["test"])
            print(rows.to_string(index=False))

        print()
        print("=" * 100)
        print("TSV OUTPUT (copy to spreadsheet):")
        print("=" * 100)
        print(self.get_tsv_string())
        print("=" * 100)
