"""Engine — reference lookups, samplers, charging calculator and batch runner."""

from ev_mobility_sim.engine.reference import (
    ReferenceData,
    load_charging_table,
    load_segment_table,
    load_temperature_table,
)
from ev_mobility_sim.engine.temperature import TemperatureDraw, sample_temperature
from ev_mobility_sim.engine.vehicle import parse_charger_label, sample_vehicle
from ev_mobility_sim.engine.schedule import (
    ChainedScheduleSampler,
    RoadSplit,
    ShiftScheduleSampler,
    ShuttleScheduleSampler,
    build_sampler,
    draw_road_split,
)
from ev_mobility_sim.engine.energy import compute_charging
from ev_mobility_sim.engine.allocation import (
    ClassSummary,
    aggregate_vehicle_types,
    allocate_profiles,
    plan_fleet,
)
from ev_mobility_sim.engine.profile import generate_vehicle_profile
from ev_mobility_sim.engine.orchestrator import run_batch

__all__ = [
    "ReferenceData",
    "load_charging_table",
    "load_segment_table",
    "load_temperature_table",
    "TemperatureDraw",
    "sample_temperature",
    "parse_charger_label",
    "sample_vehicle",
    "ChainedScheduleSampler",
    "RoadSplit",
    "ShiftScheduleSampler",
    "ShuttleScheduleSampler",
    "build_sampler",
    "draw_road_split",
    "compute_charging",
    "ClassSummary",
    "aggregate_vehicle_types",
    "allocate_profiles",
    "plan_fleet",
    "generate_vehicle_profile",
    "run_batch",
]
