"""Tests for engine/temperature.py — ambient temperature and derating draws."""

from __future__ import annotations

import numpy as np
import pytest

from ev_mobility_sim.engine.temperature import sample_temperature
from ev_mobility_sim.errors import NoTemperatureBand


class TestSampleTemperature:
    def test_within_table_bounds(self, reference, rng):
        for _ in range(1000):
            draw = sample_temperature(reference, rng)
            assert -10 <= draw.temperature_c <= 30

    def test_derating_within_band(self, reference, rng):
        for _ in range(1000):
            draw = sample_temperature(reference, rng)
            assert draw.band.covers(draw.temperature_c) or draw.temperature_c == 30
            assert draw.band.capacity_pct.contains(draw.capacity_derate_pct)
            assert draw.band.range_pct.contains(draw.range_derate_pct)

    def test_custom_bounds(self, reference, rng):
        draw = sample_temperature(reference, rng, bounds=(0.0, 5.0))
        assert 0 <= draw.temperature_c <= 5
        assert draw.band.temp_from == 0

    def test_uncovered_bounds_raise(self, reference, rng):
        with pytest.raises(NoTemperatureBand):
            sample_temperature(reference, rng, bounds=(40.0, 50.0))

    def test_reproducible(self, reference):
        a = sample_temperature(reference, np.random.default_rng(3))
        b = sample_temperature(reference, np.random.default_rng(3))
        assert a == b
