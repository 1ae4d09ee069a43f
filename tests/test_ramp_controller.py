"""
Unit tests for the load ramp state machine.
"""
import asyncio
import dataclasses

import pytest

from turbostress.core.errors import (
    ParseError,
    PrematureExit,
    SpawnError,
    TeardownInconsistency,
)
from turbostress.core.models import LoadKind
from turbostress.core.sampler import parse_turbostat_output
from turbostress.ramps.presets import CPU_PHASE, IPSEC_PHASE
from turbostress.ramps.ramp_controller import RampController, load_levels


class RawOutputSampler:
    """Parses fixed turbostat output like the real sampler would."""

    def __init__(self, output, strict=False):
        self.output = output
        self.strict = strict

    async def sample(self, metric_names, duration):
        return parse_turbostat_output(self.output, metric_names, strict=self.strict)


def run_cpu_phase(config, load_client, sampler, writer, start_load=0):
    controller = RampController(config, load_client, sampler, writer)
    return asyncio.run(controller.run_phase(CPU_PHASE, start_load))


class TestLoadLevels:
    """Tests for the load level sequence."""

    @pytest.mark.parametrize(
        "step, expected",
        [
            (25, [0, 25, 50, 75, 100]),
            (50, [0, 50, 100]),
            (30, [0, 30, 60, 90, 100]),
            (100, [0, 100]),
            (1, list(range(101))),
        ],
    )
    def test_levels_from_zero(self, step, expected):
        """Levels go up by step and always end at exactly 100."""
        assert list(load_levels(0, step)) == expected

    def test_step_larger_than_range(self):
        """A step beyond 100 still visits the start and 100."""
        assert list(load_levels(0, 150)) == [0, 100]

    def test_fixed_load_single_level(self):
        """Starting at 100 is a one-level ramp."""
        assert list(load_levels(100, 25)) == [100]

    def test_levels_strictly_increasing(self):
        """Levels are strictly increasing and 100 appears once."""
        for step in range(1, 101):
            levels = list(load_levels(0, step))
            assert all(b > a for a, b in zip(levels, levels[1:]))
            assert levels.count(100) == 1
            assert levels[-1] == 100


class TestRampController:
    """Tests for RampController.run_phase."""

    def test_end_to_end_rows(self, config, load_client, sampler, writer, sink):
        """step=50, threads=4, repeat=2 gives rows for 0, 50 and 100."""
        committed = run_cpu_phase(config, load_client, sampler, writer)

        assert committed == [0, 50, 100]
        assert sink.getvalue().splitlines() == [
            "CPUStress,4,0,15.00,45.00",
            "CPUStress,4,50,15.00,45.00",
            "CPUStress,4,100,15.00,45.00",
        ]

    def test_takes_repeat_samples_per_level(self, config, load_client, sampler, writer):
        """Each level takes exactly `repeat` samples with the configured window."""
        config = dataclasses.replace(config, sample_seconds=1.5)
        run_cpu_phase(config, load_client, sampler, writer)

        assert len(sampler.calls) == 3 * config.repeat
        assert all(call == (["PkgWatt", "PkgTmp"], 1.5) for call in sampler.calls)

    def test_settle_duration_passed_to_wait(self, config, load_client, sampler, writer):
        """The settle wait races the load run for the settle duration."""
        config = dataclasses.replace(config, settle_seconds=7.0)
        run_cpu_phase(config, load_client, sampler, writer)

        assert all(run.settle_timeouts == [7.0] for run in load_client.runs)

    def test_cpu_profiles(self, config, load_client, sampler, writer):
        """CPU levels start stress with load, threads and method."""
        run_cpu_phase(config, load_client, sampler, writer)

        assert [p.load for p in load_client.profiles] == [0, 50, 100]
        assert all(p.kind is LoadKind.CPU for p in load_client.profiles)
        assert all(p.threads == 4 for p in load_client.profiles)
        assert all(p.method == "all" for p in load_client.profiles)

    def test_every_run_terminated(self, config, load_client, sampler, writer):
        """Every level kills its own load generator before the next starts."""
        run_cpu_phase(config, load_client, sampler, writer)

        assert len(load_client.runs) == 3
        assert all(run.terminated for run in load_client.runs)

    def test_mean_of_samples(self, config, fakes, load_client, writer, sink):
        """Samples 10, 20, 30 average to 20.00."""
        config = dataclasses.replace(config, metrics=["PkgWatt"], repeat=3, load_step=100)
        sampler = fakes.Sampler([{"PkgWatt": 10.0}, {"PkgWatt": 20.0}, {"PkgWatt": 30.0}])

        run_cpu_phase(config, load_client, sampler, writer)

        assert sink.getvalue().splitlines()[0] == "CPUStress,4,0,20.00"

    def test_mean_rounded_to_two_decimals(self, config, fakes, load_client, writer, sink):
        """Means are written with exactly two decimals."""
        config = dataclasses.replace(config, metrics=["PkgWatt"], repeat=3, load_step=100)
        sampler = fakes.Sampler([{"PkgWatt": 1.0}, {"PkgWatt": 1.0}, {"PkgWatt": 2.0}])

        run_cpu_phase(config, load_client, sampler, writer)

        assert sink.getvalue().splitlines()[0] == "CPUStress,4,0,1.33"

    def test_requested_order_kept(self, config, load_client, writer, sink):
        """Row columns follow the configured order, not the sampler's."""
        sampler = RawOutputSampler("PkgTmp\tPkgWatt\n45\t100.5\n")

        run_cpu_phase(config, load_client, sampler, writer)

        assert sink.getvalue().splitlines()[0] == "CPUStress,4,0,100.50,45.00"

    def test_missing_metric_defaults_to_zero(self, config, load_client, writer, sink):
        """A metric missing from sampler output is reported as 0.00."""
        sampler = RawOutputSampler("PkgWatt\n12.5\n")

        run_cpu_phase(config, load_client, sampler, writer)

        assert sink.getvalue().splitlines()[0] == "CPUStress,4,0,12.50,0.00"

    def test_missing_metric_strict_aborts(self, config, load_client, writer, sink):
        """Strict sampling turns a missing metric into a failure."""
        sampler = RawOutputSampler("PkgWatt\n12.5\n", strict=True)

        with pytest.raises(ParseError):
            run_cpu_phase(config, load_client, sampler, writer)
        assert sink.getvalue() == ""

    def test_exit_during_settle(self, config, fakes, sampler, writer, sink):
        """A load generator that dies while settling aborts with no rows."""
        load_client = fakes.LoadClient(lambda profile: fakes.LoadRun(exit_during_settle=True))

        with pytest.raises(PrematureExit):
            run_cpu_phase(config, load_client, sampler, writer)

        assert sink.getvalue() == ""
        assert sampler.calls == []

    def test_exit_during_sampling(self, config, fakes, sampler, writer, sink):
        """A load generator that dies between samples aborts the level."""
        load_client = fakes.LoadClient(lambda profile: fakes.LoadRun(alive_checks=1))

        with pytest.raises(PrematureExit):
            run_cpu_phase(config, load_client, sampler, writer)

        assert sink.getvalue() == ""
        assert len(sampler.calls) == 1

    def test_not_killed_by_signal(self, config, fakes, sampler, writer, sink):
        """A clean exit on teardown aborts and drops that level's row."""
        load_client = fakes.LoadClient(
            lambda profile: fakes.LoadRun(returncode=0 if profile.load == 50 else -9)
        )

        with pytest.raises(TeardownInconsistency, match="EC: 0"):
            run_cpu_phase(config, load_client, sampler, writer)

        assert sink.getvalue().splitlines() == ["CPUStress,4,0,15.00,45.00"]

    def test_sampler_error_kills_load(self, config, fakes, load_client, writer, sink):
        """A sampler failure aborts and the live load generator is cleaned up."""
        sampler = fakes.Sampler(error=ParseError("could not parse turbostat output: "))

        with pytest.raises(ParseError):
            run_cpu_phase(config, load_client, sampler, writer)

        assert sink.getvalue() == ""
        assert load_client.runs[0].cleaned_up is True

    def test_sampler_error_mid_ramp(self, config, fakes, load_client, writer, sink):
        """Rows already committed stay, nothing partial is added."""
        sampler = fakes.Sampler(
            [{"PkgWatt": 1.0, "PkgTmp": 2.0}],
            error=ParseError("bad"),
            fail_on_call=4,
        )

        with pytest.raises(ParseError):
            run_cpu_phase(config, load_client, sampler, writer)

        assert sink.getvalue().splitlines() == ["CPUStress,4,0,1.00,2.00"]

    def test_spawn_error(self, config, fakes, sampler, writer, sink):
        """A load generator that cannot start aborts before any sampling."""
        load_client = fakes.LoadClient(spawn_error=SpawnError("stress-ng not found"))

        with pytest.raises(SpawnError):
            run_cpu_phase(config, load_client, sampler, writer)

        assert sink.getvalue() == ""
        assert sampler.calls == []

    def test_fixed_load_phase(self, config, load_client, sampler, writer, sink):
        """A fixed-load phase is a single level without a load parameter."""
        controller = RampController(config, load_client, sampler, writer)

        committed = asyncio.run(controller.run_phase(IPSEC_PHASE, 100))

        assert committed == [100]
        assert sink.getvalue().splitlines() == ["ipsec,4,100,15.00,45.00"]
        profile = load_client.profiles[0]
        assert profile.kind is LoadKind.IPSEC
        assert profile.load is None
        assert profile.method is None
