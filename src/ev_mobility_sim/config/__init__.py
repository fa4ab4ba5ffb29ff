"""Configuration models: reference rows, trip policies, run settings."""

from ev_mobility_sim.config.ranges import IntRange, ValueRange
from ev_mobility_sim.config.reference import (
    CHARGING_LOCATIONS,
    SEGMENT_GROUPS,
    VEHICLE_CLASSES,
    ChargingCompatibility,
    RoadSpeeds,
    SegmentSpec,
    TemperatureDeratingRow,
    VehicleClass,
    class_of_segment,
)
from ev_mobility_sim.config.policy import (
    DAY_TYPES,
    ChainedTripPolicy,
    DayType,
    DayWindow,
    DistanceBin,
    RoadMix,
    ShiftTripPolicy,
    ShuttleTripPolicy,
    TripPolicy,
    default_policies,
)
from ev_mobility_sim.config.charging import ChargingSettings
from ev_mobility_sim.config.simulation import (
    FleetConfig,
    RunConfig,
    SimulationConfig,
    build_run_config,
    load_run_config,
)

__all__ = [
    "IntRange",
    "ValueRange",
    "CHARGING_LOCATIONS",
    "SEGMENT_GROUPS",
    "VEHICLE_CLASSES",
    "ChargingCompatibility",
    "RoadSpeeds",
    "SegmentSpec",
    "TemperatureDeratingRow",
    "VehicleClass",
    "class_of_segment",
    "DAY_TYPES",
    "ChainedTripPolicy",
    "DayType",
    "DayWindow",
    "DistanceBin",
    "RoadMix",
    "ShiftTripPolicy",
    "ShuttleTripPolicy",
    "TripPolicy",
    "default_policies",
    "ChargingSettings",
    "FleetConfig",
    "RunConfig",
    "SimulationConfig",
    "build_run_config",
    "load_run_config",
]
