"""Tests for engine/vehicle.py — charger labels and vehicle instance draws.

Covers:
  - Label parsing (AC/DC prefix, integer and decimal kW, malformed labels)
  - Capacity/range within the segment envelope, consumption formula
  - Derated capacity and range
  - Location and target SoC per charger prefix
  - 7.4 kW AC re-roll to {7.4, 11}
"""

from __future__ import annotations

import numpy as np
import pytest

from ev_mobility_sim.engine.vehicle import parse_charger_label, sample_vehicle
from ev_mobility_sim.errors import DataIntegrityError, MalformedChargerLabel


class TestParseChargerLabel:
    @pytest.mark.parametrize("label, expected", [
        ("AC_11kW", ("AC", 11.0)),
        ("DC_150kW", ("DC", 150.0)),
        ("AC_7.4kW", ("AC", 7.4)),
        ("ac_22kW", ("AC", 22.0)),
        ("CCS_50kW", ("CCS", 50.0)),
        ("Wallbox 11kW", ("", 11.0)),
    ])
    def test_parse(self, label, expected):
        assert parse_charger_label(label) == expected

    def test_no_rating(self):
        with pytest.raises(MalformedChargerLabel) as exc_info:
            parse_charger_label("AC_fast")
        assert exc_info.value.key == "AC_fast"
        assert isinstance(exc_info.value, DataIntegrityError)


class TestSampleVehicle:
    def test_envelope_and_consumption(self, reference, temperature_draw, rng):
        spec = reference.segment_spec("PKW", "Kompaktklasse")
        for _ in range(500):
            v = sample_vehicle(spec, "Private", temperature_draw, ("AC_11kW",), rng)
            assert 40 <= v.full_capacity_kwh <= 60
            assert 300 <= v.full_range_km <= 400
            assert v.consumption_wh_per_km == pytest.approx(v.full_capacity_kwh * 1000 / v.full_range_km)

    def test_derated_values(self, reference, temperature_draw, rng):
        spec = reference.segment_spec("PKW", "Kompaktklasse")
        v = sample_vehicle(spec, "Private", temperature_draw, ("AC_11kW",), rng)
        assert v.derated_capacity_kwh == pytest.approx(v.full_capacity_kwh * 0.9)
        assert v.derated_range_km == pytest.approx(v.full_range_km * 0.9)
        assert v.capacity_loss_pct == pytest.approx(10.0)

    def test_identity_fields(self, reference, temperature_draw, rng):
        spec = reference.segment_spec("Van")
        v = sample_vehicle(spec, "Van", temperature_draw, ("DC_50kW",), rng)
        assert (v.vehicle_class, v.segment, v.purpose) == ("Van", "Van", "Van")
        assert v.temperature_c == 20.0

    def test_dc_policy(self, reference, temperature_draw, rng):
        spec = reference.segment_spec("Van")
        v = sample_vehicle(spec, "Van", temperature_draw, ("DC_50kW",), rng)
        assert v.charging_location == "Public"
        assert v.target_soc_pct == 80
        assert v.charger_power_kw == 50
        assert v.is_dc

    def test_ac_policy(self, reference, temperature_draw, rng):
        spec = reference.segment_spec("PKW", "Kompaktklasse")
        locations = set()
        for _ in range(200):
            v = sample_vehicle(spec, "Private", temperature_draw, ("AC_11kW",), rng)
            assert v.target_soc_pct == 100
            assert v.charger_power_kw == 11
            locations.add(v.charging_location)
        assert locations == {"Public", "Private"}

    def test_unknown_prefix_policy(self, reference, temperature_draw, rng):
        spec = reference.segment_spec("PKW", "Kompaktklasse")
        v = sample_vehicle(spec, "Private", temperature_draw, ("CCS_50kW",), rng)
        assert v.charging_location == "Private"
        assert v.target_soc_pct == 100
        assert not v.is_dc

    def test_ac_7_4_reroll(self, reference, temperature_draw, rng):
        spec = reference.segment_spec("PKW", "Kompaktklasse")
        powers = {
            sample_vehicle(spec, "Private", temperature_draw, ("AC_7.4kW",), rng).charger_power_kw
            for _ in range(200)
        }
        assert powers == {7.4, 11.0}

    def test_label_kept_after_reroll(self, reference, temperature_draw, rng):
        spec = reference.segment_spec("PKW", "Kompaktklasse")
        for _ in range(50):
            v = sample_vehicle(spec, "Private", temperature_draw, ("AC_7.4kW",), rng)
            assert v.charger_type == "AC_7.4kW"

    def test_charger_drawn_from_set(self, reference, temperature_draw, rng):
        spec = reference.segment_spec("PKW", "Kompaktklasse")
        chargers = ("AC_11kW", "AC_22kW", "DC_150kW")
        seen = {sample_vehicle(spec, "Private", temperature_draw, chargers, rng).charger_type for _ in range(300)}
        assert seen == set(chargers)

    def test_empty_charger_set(self, reference, temperature_draw, rng):
        spec = reference.segment_spec("PKW", "Kompaktklasse")
        with pytest.raises(DataIntegrityError):
            sample_vehicle(spec, "Private", temperature_draw, (), rng)

    def test_malformed_label_propagates(self, reference, temperature_draw, rng):
        spec = reference.segment_spec("PKW", "Kompaktklasse")
        with pytest.raises(MalformedChargerLabel):
            sample_vehicle(spec, "Private", temperature_draw, ("AC_fast",), rng)

    def test_reproducible(self, reference, temperature_draw):
        spec = reference.segment_spec("PKW", "Kompaktklasse")
        a = sample_vehicle(spec, "Private", temperature_draw, ("AC_11kW",), np.random.default_rng(9))
        b = sample_vehicle(spec, "Private", temperature_draw, ("AC_11kW",), np.random.default_rng(9))
        assert a == b
