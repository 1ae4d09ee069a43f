"""Errors raised while driving a benchmark run.

Every error is fatal for the whole run; nothing here is retried.
"""


class BenchError(RuntimeError):
    """Base class for benchmark failures."""


class SpawnError(BenchError):
    """An external process could not be started."""


class PrematureExit(BenchError):
    """The load generator exited before the end of its measurement window."""


class SamplerFailed(BenchError):
    """The telemetry sampler exited with a non-zero status."""


class ParseError(BenchError):
    """The sampler output could not be parsed."""


class FormatError(ParseError):
    """A sampler value field is not numeric."""


class MissingMetricError(ParseError):
    """A requested metric is absent from the sampler output (strict mode)."""


class TeardownInconsistency(BenchError):
    """The load generator did not die from the termination signal."""


class UnexpectedExit(TeardownInconsistency):
    """The load generator had already exited when termination was requested."""
