"""Shared test fixtures — small in-memory reference tables and model factories."""

from __future__ import annotations

import io

import numpy as np
import pytest

from ev_mobility_sim.config import RunConfig, SimulationConfig
from ev_mobility_sim.engine.reference import ReferenceData
from ev_mobility_sim.engine.temperature import TemperatureDraw
from ev_mobility_sim.models.results import (
    ChargingOutcome,
    DayProfile,
    Trip,
    TripSchedule,
    VehicleInstance,
)

SEGMENTS_CSV = """\
Segment,Quantity,Percentage,NomCap_min,NomCap_max,Range_min,Range_max,AvgSpd_urban,AvgSpd_rural,AvgSpd_highway
Kompaktklasse,7000,70,40,60,300,400,24,80,118
Van,1500,15,40,90,200,350,22,65,100
LKW (over 7.5t),1000,10,300,540,250,500,20,60,80
Bus,500,5,250,450,200,350,18,40,60
"""

CHARGING_CSV = """\
Segment,AC_11kW,DC_50kW,DC_150kW
Kompaktklasse,TRUE,FALSE,FALSE
Van,FALSE,TRUE,FALSE
LKW,FALSE,FALSE,TRUE
Bus,FALSE,FALSE,TRUE
"""

TEMPERATURE_CSV = """\
Temp_from,Temp_to,Capacity_min,Capacity_max,Range_min,Range_max
-10,0,78,85,65,75
0,10,85,92,75,85
10,30,92,100,85,100
"""


@pytest.fixture
def reference() -> ReferenceData:
    return ReferenceData.from_csv(
        io.StringIO(SEGMENTS_CSV),
        io.StringIO(CHARGING_CSV),
        io.StringIO(TEMPERATURE_CSV),
    )


@pytest.fixture(scope="session")
def bundled() -> ReferenceData:
    return ReferenceData.bundled()


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(12345)


@pytest.fixture
def run_config() -> RunConfig:
    return RunConfig(simulation=SimulationConfig(random_seed=7))


@pytest.fixture
def temperature_draw(reference: ReferenceData) -> TemperatureDraw:
    """20 °C, 90 % capacity, 90 % range."""
    return TemperatureDraw(
        temperature_c=20.0,
        band=reference.temperature_band(20.0),
        capacity_derate_pct=90.0,
        range_derate_pct=90.0,
    )


@pytest.fixture
def make_vehicle():
    """Factory for a hand-calculable vehicle.

    Defaults: 50 kWh, 400 km (125 Wh/km), 90 % derating on both,
    AC_11kW charging privately to 100 %.
    """
    def _make(**overrides) -> VehicleInstance:
        fields = dict(
            vehicle_class="PKW",
            segment="Kompaktklasse",
            purpose="Private",
            temperature_c=20.0,
            capacity_derate_pct=90.0,
            range_derate_pct=90.0,
            full_capacity_kwh=50.0,
            full_range_km=400.0,
            consumption_wh_per_km=125.0,
            charger_type="AC_11kW",
            charger_power_kw=11.0,
            charging_location="Private",
            target_soc_pct=100.0,
        )
        fields.update(overrides)
        return VehicleInstance(**fields)

    return _make


@pytest.fixture
def make_day_profile(make_vehicle):
    """Factory for a two-trip day: 7:00–8:00, stop 9 h, 17:00–18:30, 120 km."""
    def _make(charging: ChargingOutcome | None = None, wraps_midnight: bool = False, **vehicle) -> DayProfile:
        schedule = TripSchedule(
            day="Workday",
            trips=[
                Trip(start_h=7.0, duration_h=1.0, end_h=8.0),
                Trip(start_h=17.0, duration_h=1.5, end_h=18.5),
            ],
            stops_h=[9.0],
            total_distance_km=120.0,
            running_time_h=2.5,
            average_speed_kmh=48.0,
            distance_bin=2,
            wraps_midnight=wraps_midnight,
        )
        if charging is None:
            charging = ChargingOutcome(
                used_energy_kwh=15.0,
                remaining_percent=60.0,
                charging_required=True,
                charging_loss_pct=7.26,
                target_soc_pct=100.0,
                total_charge_time_h=2.0,
            )
        return DayProfile(
            purpose="Private",
            day="Workday",
            vehicle=make_vehicle(**vehicle),
            schedule=schedule,
            charging=charging,
        )

    return _make


@pytest.fixture
def segments_csv() -> str:
    return SEGMENTS_CSV


@pytest.fixture
def charging_csv() -> str:
    return CHARGING_CSV


@pytest.fixture
def temperature_csv() -> str:
    return TEMPERATURE_CSV
