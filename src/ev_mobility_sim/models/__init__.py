"""Result models: simulation output contracts."""

from ev_mobility_sim.models.results import (
    BatchResult,
    ChargingOutcome,
    DayProfile,
    Trip,
    TripSchedule,
    VehicleFailure,
    VehicleInstance,
    VehicleJob,
    VehicleProfile,
)

__all__ = [
    "BatchResult",
    "ChargingOutcome",
    "DayProfile",
    "Trip",
    "TripSchedule",
    "VehicleFailure",
    "VehicleInstance",
    "VehicleJob",
    "VehicleProfile",
]
