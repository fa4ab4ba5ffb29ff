"""Reference-data rows: vehicle segments, charger compatibility, temperature bands.

All rows are immutable once loaded.  Range checks happen here, at load time,
so the samplers never have to defend against ``min > max``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ev_mobility_sim.config.ranges import ValueRange

VehicleClass = Literal["PKW", "Van", "LKW", "Bus"]

VEHICLE_CLASSES: tuple[VehicleClass, ...] = ("PKW", "Van", "LKW", "Bus")

SEGMENT_GROUPS: dict[VehicleClass, tuple[str, ...]] = {
    "PKW": (
        "Minis",
        "Kleinwagen",
        "Kompaktklasse",
        "Mittelklasse",
        "Obere Mittelklasse",
        "Oberklasse",
        "SUV",
    ),
    "Van": ("Van",),
    "LKW": ("LKW (under 7.5t)", "LKW (over 7.5t)"),
    "Bus": ("Bus",),
}
"""Which segment labels belong to which broad vehicle class."""

CHARGING_LOCATIONS: tuple[str, str] = ("Public", "Private")
"""The one location set every class draws from."""


def class_of_segment(segment: str) -> VehicleClass | None:
    """Broad vehicle class for a segment label, or ``None`` if ungrouped."""
    for vehicle_class, members in SEGMENT_GROUPS.items():
        if segment in members:
            return vehicle_class
    return None


class RoadSpeeds(BaseModel):
    """Average speed per road type (km/h)."""

    model_config = ConfigDict(frozen=True)

    urban: float = Field(gt=0, description="Urban average speed (km/h)")
    rural: float = Field(gt=0, description="Rural average speed (km/h)")
    highway: float = Field(gt=0, description="Highway average speed (km/h)")


class SegmentSpec(BaseModel):
    """Technical envelope of one vehicle segment (size bucket)."""

    model_config = ConfigDict(frozen=True)

    segment: str = Field(min_length=1, description="Segment label, e.g. 'Kompaktklasse'")
    quantity: float = Field(default=0.0, ge=0, description="Registered vehicles in segment")
    share_pct: float = Field(default=0.0, ge=0, le=100, description="Share of the fleet (%)")
    capacity_kwh: ValueRange = Field(description="Nominal battery capacity range (kWh)")
    range_km: ValueRange = Field(description="Nominal driving range (km)")
    speeds: RoadSpeeds | None = Field(
        default=None,
        description="Average speed per road type.  Optional: car policies carry "
                    "their own nominal speeds, vans/trucks read them from here.",
    )

    @model_validator(mode="after")
    def _positive_ranges(self) -> "SegmentSpec":
        if self.capacity_kwh.low <= 0:
            raise ValueError(f"{self.segment}: capacity must be positive")
        if self.range_km.low <= 0:
            raise ValueError(f"{self.segment}: range must be positive")
        return self

    @property
    def vehicle_class(self) -> VehicleClass | None:
        return class_of_segment(self.segment)


class ChargingCompatibility(BaseModel):
    """Charger labels usable by one segment or vehicle class."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(min_length=1, description="Segment or class the row applies to")
    chargers: tuple[str, ...] = Field(
        default=(),
        description="Compatible charger labels, e.g. ('AC_11kW', 'DC_150kW')",
    )


class TemperatureDeratingRow(BaseModel):
    """Ambient-temperature interval and the usable capacity/range it allows.

    Matching is half-open, ``temp_from <= t < temp_to``.
    """

    model_config = ConfigDict(frozen=True)

    temp_from: float = Field(description="Interval start (°C, inclusive)")
    temp_to: float = Field(description="Interval end (°C, exclusive)")
    capacity_pct: ValueRange = Field(description="Usable capacity at this temperature (%)")
    range_pct: ValueRange = Field(description="Usable range at this temperature (%)")

    @model_validator(mode="after")
    def _check(self) -> "TemperatureDeratingRow":
        if self.temp_from >= self.temp_to:
            raise ValueError(
                f"temp_from ({self.temp_from}) must be below temp_to ({self.temp_to})"
            )
        for name, r in (("capacity_pct", self.capacity_pct), ("range_pct", self.range_pct)):
            if r.low <= 0 or r.high > 100:
                raise ValueError(f"{name} must lie in (0, 100], got [{r.low}, {r.high}]")
        return self

    def covers(self, temperature_c: float) -> bool:
        return self.temp_from <= temperature_c < self.temp_to
