"""Tests for engine/energy.py — energy use and charging decisions.

Hand-calculated vehicle (see conftest.make_vehicle):
  50 kWh, 400 km, 125 Wh/km, 90 % derating → 45 kWh usable, 360 km range.
  With the default 20 km buffer, on-road charging starts at 340 km.
"""

from __future__ import annotations

import pytest

from ev_mobility_sim.config.charging import ChargingSettings
from ev_mobility_sim.engine.energy import (
    compute_charging,
    onroad_charger_label,
    remaining_percent,
)


class TestNoCharging:
    def test_short_day(self, make_vehicle, rng):
        out = compute_charging(make_vehicle(), 20.0, [22.0], rng)
        assert out.used_energy_kwh == pytest.approx(2.5)
        assert out.remaining_percent == pytest.approx(85.0)
        assert not out.charging_required
        assert out.charging_loss_pct == 0.0
        assert out.target_soc_pct is None
        assert out.total_charge_time_h == 0.0
        assert not out.charge_on_road

    def test_threshold_is_inclusive(self, make_vehicle, rng):
        # remaining = (50 − 5 − 0.125·d) × 2 = 80 at d = 40 km
        out = compute_charging(make_vehicle(), 40.0, [22.0], rng)
        assert out.remaining_percent == pytest.approx(80.0)
        assert not out.charging_required


class TestDepotCharging:
    def test_hand_calculation(self, make_vehicle, rng):
        out = compute_charging(make_vehicle(), 100.0, [22.0], rng)
        assert out.used_energy_kwh == pytest.approx(12.5)
        assert out.remaining_percent == pytest.approx(65.0)
        assert out.charging_required
        assert out.target_soc_pct == 100.0
        loss = out.charging_loss_pct
        assert 5 <= loss <= 10
        assert out.total_charge_time_h == pytest.approx(17.5 * (1 + loss / 100) / 11)
        assert not out.charge_on_road
        assert out.onroad_charge_time_h == 0.0

    def test_dc_loss_and_target(self, make_vehicle, rng):
        vehicle = make_vehicle(charger_type="DC_50kW", charger_power_kw=50.0,
                               charging_location="Public", target_soc_pct=80.0)
        for _ in range(100):
            out = compute_charging(vehicle, 100.0, [22.0], rng)
            assert 6 <= out.charging_loss_pct <= 8
            assert out.target_soc_pct == 80.0
            assert out.total_charge_time_h == pytest.approx(7.5 * (1 + out.charging_loss_pct / 100) / 50)

    def test_ac_loss_range(self, make_vehicle, rng):
        for _ in range(100):
            assert 5 <= compute_charging(make_vehicle(), 200.0, [], rng).charging_loss_pct <= 10

    def test_remaining_clamped_at_zero(self, make_vehicle, rng):
        vehicle = make_vehicle(capacity_derate_pct=50.0, range_derate_pct=100.0)
        out = compute_charging(vehicle, 370.0, [22.0], rng)
        assert out.remaining_percent == 0.0
        assert out.total_charge_time_h == pytest.approx(50 * (1 + out.charging_loss_pct / 100) / 11)

    def test_remaining_never_outside_bounds(self, make_vehicle, rng):
        vehicle = make_vehicle()
        for distance in range(0, 340, 7):
            out = compute_charging(vehicle, float(distance), [22.0], rng)
            assert 0.0 <= out.remaining_percent <= 100.0


class TestOnRoadCharging:
    def test_hand_calculation(self, make_vehicle, rng):
        out = compute_charging(make_vehicle(), 350.0, [22.0], rng)
        loss = out.charging_loss_pct
        assert out.remaining_percent is None
        assert out.charging_required
        assert out.onroad_charger == "AC_22kW"
        assert out.onroad_power_kw == 22.0
        assert out.onroad_charge_time_h == pytest.approx(1.25 * (1 + loss / 100) / 22)
        depot = 42.5 * (1 + loss / 100) / 11
        assert out.total_charge_time_h == pytest.approx(out.onroad_charge_time_h + depot)

    def test_buffer_boundary(self, make_vehicle, rng):
        assert compute_charging(make_vehicle(), 339.9, [22.0], rng).remaining_percent is not None
        assert compute_charging(make_vehicle(), 340.0, [22.0], rng).charge_on_road

    def test_power_drawn_from_list(self, make_vehicle, rng):
        powers = {compute_charging(make_vehicle(), 500.0, [50.0, 150.0], rng).onroad_power_kw for _ in range(100)}
        assert powers == {50.0, 150.0}

    def test_dc_label(self, make_vehicle, rng):
        assert compute_charging(make_vehicle(), 500.0, [150.0], rng).onroad_charger == "DC_150kW"

    def test_own_charger_en_route(self, make_vehicle, rng):
        vehicle = make_vehicle(charger_type="DC_150kW", charger_power_kw=150.0, target_soc_pct=80.0)
        out = compute_charging(vehicle, 500.0, [], rng)
        assert out.onroad_charger == "DC_150kW"
        assert out.onroad_power_kw == 150.0

    def test_depot_part_never_negative(self, make_vehicle, rng):
        # target 80 % reserves 10 kWh: depot energy = 43.75 − 1.25 − 10 = 32.5
        vehicle = make_vehicle(target_soc_pct=80.0)
        out = compute_charging(vehicle, 350.0, [22.0], rng)
        factor = 1 + out.charging_loss_pct / 100
        assert out.total_charge_time_h == pytest.approx(1.25 * factor / 22 + 32.5 * factor / 11)

        low_target = make_vehicle(target_soc_pct=10.0)
        out = compute_charging(low_target, 350.0, [22.0], rng)
        assert out.total_charge_time_h == pytest.approx(out.onroad_charge_time_h)


class TestHelpers:
    @pytest.mark.parametrize("power, label", [
        (11.0, "AC_11kW"),
        (22.0, "AC_22kW"),
        (50.0, "DC_50kW"),
        (7.4, "AC_7.4kW"),
    ])
    def test_onroad_label(self, power, label):
        assert onroad_charger_label(power, ChargingSettings()) == label

    def test_remaining_percent(self, make_vehicle):
        assert remaining_percent(make_vehicle(), 12.5) == pytest.approx(65.0)
        assert remaining_percent(make_vehicle(), 60.0) == 0.0

    def test_custom_settings(self, make_vehicle, rng):
        settings = ChargingSettings(safety_buffer_km=0.0, depot_threshold_pct=50.0)
        out = compute_charging(make_vehicle(), 100.0, [22.0], rng, settings)
        assert not out.charging_required
