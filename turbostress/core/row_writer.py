"""Delimited row output for the result stream."""

import sys
from typing import List, Optional, TextIO


class RowWriter:
    """Writes one record per line to the result sink.

    Each row is flushed as soon as it is written so a failed run leaves
    only fully committed rows behind.
    """

    def __init__(self, sink: Optional[TextIO] = None, delimiter: str = ","):
        self.sink = sink if sink is not None else sys.stdout
        self.delimiter = delimiter
        self.rows_written = 0

    def write(self, fields: List[str]) -> None:
        """Write a single row."""
        self.sink.write(self.delimiter.join(fields) + "\n")
        self.sink.flush()
        self.rows_written += 1

    def write_raw(self, text: str) -> None:
        """Write free text (the system-info preamble) as-is."""
        self.sink.write(text)
        self.sink.flush()
