"""
Pytest fixtures and configuration for turbostress tests.
"""
import io
import os
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from types import SimpleNamespace

import pytest

# Charts must not need a display
os.environ.setdefault("MPLBACKEND", "Agg")

# Add parent directory to path so the package imports without installing
ROOT_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT_DIR))

from turbostress.core.models import BenchConfig, ExitInfo  # noqa: E402
from turbostress.core.row_writer import RowWriter  # noqa: E402


class FakeLoadRun:
    """Scripted stand-in for a running load generator."""

    def __init__(self, exit_during_settle=False, alive_checks=None, returncode=-9):
        self.exit_during_settle = exit_during_settle
        # Number of is_alive() calls answered True, None for unlimited
        self.alive_checks = alive_checks
        self.returncode = returncode
        self.alive = True
        self.settle_timeouts = []
        self.terminated = False
        self.cleaned_up = False

    async def wait_for_exit(self, timeout):
        self.settle_timeouts.append(timeout)
        if self.exit_during_settle:
            self.alive = False
            return True
        return False

    def is_alive(self):
        if not self.alive:
            return False
        if self.alive_checks is not None:
            if self.alive_checks == 0:
                self.alive = False
                return False
            self.alive_checks -= 1
        return True

    async def terminate(self):
        self.terminated = True
        self.alive = False
        return ExitInfo(returncode=self.returncode)


class FakeLoadClient:
    """Hands out FakeLoadRun objects and records every profile started."""

    def __init__(self, run_factory=None, spawn_error=None):
        self.run_factory = run_factory or (lambda profile: FakeLoadRun())
        self.spawn_error = spawn_error
        self.profiles = []
        self.runs = []

    @asynccontextmanager
    async def run(self, profile):
        if self.spawn_error is not None:
            raise self.spawn_error
        self.profiles.append(profile)
        load_run = self.run_factory(profile)
        self.runs.append(load_run)
        try:
            yield load_run
        finally:
            if load_run.alive:
                load_run.cleaned_up = True
                load_run.alive = False


class FakeSampler:
    """Returns scripted readings in order, cycling when exhausted."""

    def __init__(self, readings=None, error=None, fail_on_call=None):
        self.readings = readings or [{}]
        self.error = error
        self.fail_on_call = fail_on_call
        self.calls = []

    async def sample(self, metric_names, duration):
        self.calls.append((list(metric_names), duration))
        if self.error is not None and (
            self.fail_on_call is None or len(self.calls) == self.fail_on_call
        ):
            raise self.error
        reading = self.readings[(len(self.calls) - 1) % len(self.readings)]
        return {name: reading.get(name, 0.0) for name in metric_names}


@pytest.fixture
def config():
    """Small, fast configuration for orchestration tests."""
    return BenchConfig(
        load_step=50,
        settle_seconds=0.0,
        threads=4,
        metrics=["PkgWatt", "PkgTmp"],
        repeat=2,
        sample_seconds=0.0,
        ipsec=False,
        vm=False,
        maximize=False,
        cpu_info=False,
    )


@pytest.fixture
def sink():
    """In-memory result stream."""
    return io.StringIO()


@pytest.fixture
def writer(sink):
    return RowWriter(sink)


@pytest.fixture
def load_client():
    return FakeLoadClient()


@pytest.fixture
def sampler():
    return FakeSampler([{"PkgWatt": 10.0, "PkgTmp": 40.0}, {"PkgWatt": 20.0, "PkgTmp": 50.0}])


@pytest.fixture
def fakes():
    """Provide the fake collaborator classes for custom scripting."""
    return SimpleNamespace(
        LoadRun=FakeLoadRun,
        LoadClient=FakeLoadClient,
        Sampler=FakeSampler,
    )
