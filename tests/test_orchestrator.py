"""Tests for engine/orchestrator.py — batch generation.

Covers:
  - Allocation and profile count, index ordering
  - Reproducibility: same seed → same batch, whatever the worker count
  - Data-integrity failures are recorded per vehicle, or abort with fail_fast
  - on_profile callback receives profiles in index order
"""

from __future__ import annotations

import io

import pytest

from ev_mobility_sim.config import RunConfig, SimulationConfig
from ev_mobility_sim.config.simulation import FleetConfig
from ev_mobility_sim.engine.orchestrator import run_batch
from ev_mobility_sim.engine.reference import ReferenceData
from ev_mobility_sim.errors import DataIntegrityError


# ═══════════════════════════════════════════════════════════════════════════
# Fixtures
# ═══════════════════════════════════════════════════════════════════════════

def _config(total: int = 10, seed: int | None = 3, workers: int = 1, fail_fast: bool = False) -> RunConfig:
    """Private cars only, so every car day stays cheap to sample."""
    return RunConfig(
        fleet=FleetConfig(total_profiles=total, car_purpose_shares={"Private": 1.0}),
        simulation=SimulationConfig(random_seed=seed, workers=workers, fail_fast=fail_fast),
    )


@pytest.fixture
def no_bus_chargers(segments_csv, temperature_csv) -> ReferenceData:
    """Reference tables whose charging table has no Bus row."""
    charging = (
        "Segment,AC_11kW,DC_50kW,DC_150kW\n"
        "Kompaktklasse,TRUE,FALSE,FALSE\n"
        "Van,FALSE,TRUE,FALSE\n"
        "LKW,FALSE,FALSE,TRUE\n"
    )
    return ReferenceData.from_csv(
        io.StringIO(segments_csv), io.StringIO(charging), io.StringIO(temperature_csv),
    )


# ═══════════════════════════════════════════════════════════════════════════
# Batch
# ═══════════════════════════════════════════════════════════════════════════

class TestRunBatch:
    def test_counts(self, reference):
        result = run_batch(reference, _config())
        assert result.requested_profiles == 10
        assert result.allocation == {"PKW": 7, "Van": 1, "LKW": 1, "Bus": 1}
        assert len(result.profiles) == 10
        assert result.failures == []

    def test_index_order(self, reference):
        result = run_batch(reference, _config())
        assert [p.index for p in result.profiles] == list(range(1, 11))
        assert [p.vehicle_class for p in result.profiles] == ["PKW"] * 7 + ["Van", "LKW", "Bus"]

    def test_both_days(self, reference):
        result = run_batch(reference, _config())
        assert len(result.day_profiles) == 20
        for profile in result.profiles:
            assert list(profile.days) == ["Workday", "Weekend"]

    def test_reproducible(self, reference):
        a = run_batch(reference, _config(seed=99))
        b = run_batch(reference, _config(seed=99))
        assert a == b

    def test_workers_do_not_change_output(self, reference):
        serial = run_batch(reference, _config(seed=5, workers=1))
        threaded = run_batch(reference, _config(seed=5, workers=4))
        assert serial == threaded

    def test_different_seeds_differ(self, reference):
        a = run_batch(reference, _config(seed=1))
        b = run_batch(reference, _config(seed=2))
        assert a.profiles[0].vehicle != b.profiles[0].vehicle

    def test_unseeded_run(self, reference):
        assert len(run_batch(reference, _config(total=4, seed=None)).profiles) == 4

    def test_on_profile_order(self, reference):
        seen = []
        result = run_batch(reference, _config(workers=3), on_profile=lambda p: seen.append(p.index))
        assert seen == [p.index for p in result.profiles] == list(range(1, 11))


class TestFailures:
    def test_failure_recorded(self, no_bus_chargers):
        result = run_batch(no_bus_chargers, _config())
        assert len(result.profiles) == 9
        assert len(result.failures) == 1
        failure = result.failures[0]
        assert failure.index == 10
        assert failure.vehicle_class == "Bus"
        assert failure.error_type == "DataIntegrityError"
        assert failure.key == "Bus"

    def test_failure_not_streamed(self, no_bus_chargers):
        seen = []
        run_batch(no_bus_chargers, _config(), on_profile=lambda p: seen.append(p.index))
        assert 10 not in seen

    def test_fail_fast(self, no_bus_chargers):
        with pytest.raises(DataIntegrityError):
            run_batch(no_bus_chargers, _config(fail_fast=True))

    def test_too_few_profiles(self, reference):
        with pytest.raises(ValueError):
            run_batch(reference, _config(total=3))
