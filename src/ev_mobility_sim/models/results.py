"""Result types: the contract between samplers, the batch runner and the formatters.

All numbers are kept at full precision.  Rounding for display happens only
in ``ev_mobility_sim.report.formatting``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, computed_field

from ev_mobility_sim.config.policy import DayType
from ev_mobility_sim.config.reference import VehicleClass


# ═══════════════════════════════════════════════════════════════════════════
# Vehicle
# ═══════════════════════════════════════════════════════════════════════════

class VehicleJob(BaseModel):
    """One vehicle to simulate, as planned by the fleet allocator."""

    index: int = Field(ge=1, description="1-based position in the batch")
    vehicle_class: VehicleClass
    segment: str
    purpose: str


class VehicleInstance(BaseModel):
    """One concrete vehicle, shared by its Workday and Weekend profiles."""

    vehicle_class: VehicleClass
    segment: str
    purpose: str

    temperature_c: float
    """Ambient temperature drawn for this vehicle."""
    capacity_derate_pct: float
    """Usable share of the battery at this temperature (%)."""
    range_derate_pct: float
    """Usable share of the nominal range at this temperature (%)."""

    full_capacity_kwh: float
    full_range_km: float
    consumption_wh_per_km: float
    """full_capacity × 1000 / full_range."""

    charger_type: str
    """Label of the vehicle's own charger, e.g. 'AC_11kW'."""
    charger_power_kw: float
    """Power actually used; may differ from the label after the 7.4 kW re-roll."""
    charging_location: Literal["Public", "Private"]
    target_soc_pct: float

    @computed_field
    @property
    def derated_capacity_kwh(self) -> float:
        return self.full_capacity_kwh * self.capacity_derate_pct / 100.0

    @computed_field
    @property
    def derated_range_km(self) -> float:
        return self.full_range_km * self.range_derate_pct / 100.0

    @property
    def capacity_loss_pct(self) -> float:
        return 100.0 - self.capacity_derate_pct

    @property
    def is_dc(self) -> bool:
        return self.charger_type.upper().startswith("DC")


# ═══════════════════════════════════════════════════════════════════════════
# Schedule
# ═══════════════════════════════════════════════════════════════════════════

class Trip(BaseModel):
    """One trip.  Times are hours since the schedule day's midnight.

    Times are never wrapped: a truck leg starting at 23.5 h and lasting 2 h
    ends at 25.5 h.  ``TripSchedule.wraps_midnight`` tells the formatter to
    show clock times modulo 24.
    """

    start_h: float
    duration_h: float
    end_h: float


class TripSchedule(BaseModel):
    """An accepted day schedule."""

    day: DayType
    trips: list[Trip]
    stops_h: list[float]
    """Stop i separates trip i and trip i+1 (len = trips − 1)."""
    total_distance_km: float
    running_time_h: float
    average_speed_kmh: float
    distance_bin: int | None = None
    """1-based index of the pre-drawn distance bin, None when the policy has none."""
    wraps_midnight: bool = False
    attempts: int = 1
    """Candidates drawn until this one was accepted."""

    @property
    def trip_count(self) -> int:
        return len(self.trips)

    @property
    def total_stop_h(self) -> float:
        return float(sum(self.stops_h))

    @property
    def span_h(self) -> float:
        """Last end − first start."""
        return self.trips[-1].end_h - self.trips[0].start_h


# ═══════════════════════════════════════════════════════════════════════════
# Energy & charging
# ═══════════════════════════════════════════════════════════════════════════

class ChargingOutcome(BaseModel):
    """Energy use and the charging it triggers for one day."""

    used_energy_kwh: float
    remaining_percent: float | None
    """Battery left after the day (%).  None when an on-road stop was needed."""
    charging_required: bool
    charging_loss_pct: float
    """0 when no charging happens."""
    target_soc_pct: float | None
    """None when no charging happens."""
    onroad_charger: str | None = None
    """Label of the road charger, e.g. 'DC_150kW'.  None = no on-road stop."""
    onroad_power_kw: float | None = None
    onroad_charge_time_h: float = 0.0
    total_charge_time_h: float = 0.0

    @property
    def charge_on_road(self) -> bool:
        return self.onroad_charger is not None


class DayProfile(BaseModel):
    """Complete record for one (vehicle, day type)."""

    purpose: str
    day: DayType
    vehicle: VehicleInstance
    schedule: TripSchedule
    charging: ChargingOutcome


class VehicleProfile(BaseModel):
    """Both day profiles of one vehicle plus any per-day warnings."""

    index: int
    vehicle_class: VehicleClass
    segment: str
    purpose: str
    vehicle: VehicleInstance
    days: dict[DayType, DayProfile] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)


class VehicleFailure(BaseModel):
    """A vehicle that produced no output because of bad reference data."""

    index: int
    vehicle_class: VehicleClass
    segment: str
    purpose: str
    error_type: str
    message: str
    key: str | None = None


class BatchResult(BaseModel):
    """Everything one batch run produced, ordered by vehicle index."""

    requested_profiles: int
    allocation: dict[VehicleClass, int]
    profiles: list[VehicleProfile] = Field(default_factory=list)
    failures: list[VehicleFailure] = Field(default_factory=list)

    @property
    def day_profiles(self) -> list[DayProfile]:
        return [dp for vp in self.profiles for dp in vp.days.values()]
