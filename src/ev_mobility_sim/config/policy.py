"""Trip-schedule policies: one configuration object per (vehicle class, purpose).

Three schedule models cover all classes:

- **chained** (cars, vans): trips are chained start → duration → stop inside a
  day-type window, then checked against a pre-drawn distance bin and a list of
  named constraints.
- **shift** (trucks): a shift of 2–4 driving legs that may cross midnight,
  bounded by total running time and total elapsed time.
- **shuttle** (buses): an even number of equal-length trips run back to back
  with a shared stop interval.

``default_policies()`` returns the reference parameter set.  Everything is
overridable from YAML through ``RunConfig``.
"""

from __future__ import annotations

import math
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, model_validator

from ev_mobility_sim.config.ranges import IntRange, ValueRange
from ev_mobility_sim.config.reference import RoadSpeeds

DayType = Literal["Workday", "Weekend"]

DAY_TYPES: tuple[DayType, DayType] = ("Workday", "Weekend")

RoadType = Literal["urban", "rural", "highway"]

ChainedConstraint = Literal[
    "ends_before_midnight",
    "first_trip_shape",
    "total_stop",
    "shift_window",
]


# ═══════════════════════════════════════════════════════════════════════════
# Building blocks
# ═══════════════════════════════════════════════════════════════════════════

class DistanceBin(BaseModel):
    """Daily distance category, ``lower_km <= d < upper_km``."""

    lower_km: float = Field(default=0.0, ge=0, description="Inclusive lower bound (km)")
    upper_km: float | None = Field(
        default=None, gt=0, description="Exclusive upper bound (km); None = open-ended",
    )
    probability: float = Field(ge=0, le=1, description="Chance this bin is drawn for a day")

    @model_validator(mode="after")
    def _ordered(self) -> "DistanceBin":
        if self.upper_km is not None and self.upper_km <= self.lower_km:
            raise ValueError("upper_km must exceed lower_km")
        return self

    def contains(self, distance_km: float) -> bool:
        if distance_km < self.lower_km:
            return False
        return self.upper_km is None or distance_km < self.upper_km


class RoadMix(BaseModel):
    """How running time splits across road types and how fast each is driven.

    The two non-``remainder`` shares are jittered by ±``share_jitter_pct``;
    the remainder share makes the total 100 %.  Speeds come from
    ``speeds_kmh`` (jittered by ±``speed_jitter_kmh``) or, when that is
    ``None``, from the segment table.
    """

    urban_pct: float = Field(ge=0, le=100, description="Nominal urban share of running time (%)")
    rural_pct: float = Field(ge=0, le=100, description="Nominal rural share of running time (%)")
    highway_pct: float = Field(ge=0, le=100, description="Nominal highway share of running time (%)")
    share_jitter_pct: float = Field(default=0.0, ge=0, le=50, description="± jitter on shares (pp)")
    remainder: RoadType = Field(
        default="highway", description="Road type whose share absorbs the jitter",
    )
    speeds_kmh: RoadSpeeds | None = Field(
        default=None, description="Nominal speeds; None = take them from the segment table",
    )
    speed_jitter_kmh: float = Field(default=0.0, ge=0, description="± jitter on speeds (km/h)")

    @model_validator(mode="after")
    def _sums_to_100(self) -> "RoadMix":
        total = self.urban_pct + self.rural_pct + self.highway_pct
        if not math.isclose(total, 100.0, abs_tol=1e-6):
            raise ValueError(f"road shares must sum to 100, got {total}")
        return self


class DayWindow(BaseModel):
    """Chained-trip timing ranges for one day type (hours)."""

    start_h: ValueRange = Field(description="First trip start (clock hour)")
    first_duration_h: ValueRange = Field(description="First trip duration")
    first_stop_h: ValueRange = Field(description="Stop after the first trip")
    other_duration_h: ValueRange = Field(description="Duration of trips 2..N")
    other_stop_h: ValueRange = Field(description="Stops after trips 2..N")


def _three_bins(short: float, medium: float, long: float) -> list[DistanceBin]:
    return [
        DistanceBin(lower_km=0, upper_km=100, probability=short),
        DistanceBin(lower_km=100, upper_km=300, probability=medium),
        DistanceBin(lower_km=300, upper_km=None, probability=long),
    ]


def _check_probabilities(bins: list[DistanceBin]) -> None:
    if not bins:
        return
    total = sum(b.probability for b in bins)
    if not math.isclose(total, 1.0, abs_tol=1e-6):
        raise ValueError(f"distance-bin probabilities must sum to 1, got {total}")


# ═══════════════════════════════════════════════════════════════════════════
# Schedule models
# ═══════════════════════════════════════════════════════════════════════════

class ChainedTripPolicy(BaseModel):
    """Cars and vans: chained trips inside a day window, distance-binned."""

    kind: Literal["chained"] = "chained"
    trip_count: IntRange = Field(
        default_factory=lambda: IntRange(low=2, high=4),
        description="Trips per day, drawn per candidate",
    )
    workday: DayWindow
    weekend: DayWindow
    distance_bins: list[DistanceBin] = Field(
        default_factory=lambda: _three_bins(0.6, 0.3, 0.1),
        description="Daily distance categories; one is drawn per day before sampling",
    )
    constraints: list[ChainedConstraint] = Field(
        default_factory=lambda: ["ends_before_midnight", "first_trip_shape"],
        description="Acceptance predicates evaluated in order",
    )
    first_trip_margin_h: float = Field(
        default=10 / 60, ge=0,
        description="First trip may exceed the sum of the others by at most this (h)",
    )
    day_end_h: float = Field(default=24.0, gt=0, description="Latest allowed end of the last trip (h)")
    total_stop_h: ValueRange | None = Field(default=None, description="Allowed sum of stops (h)")
    shift_window_h: ValueRange | None = Field(
        default=None, description="Allowed last end − first start (h)",
    )
    road_mix: RoadMix
    onroad_powers_kw: list[float] = Field(
        default_factory=lambda: [22.0, 50.0, 75.0, 150.0],
        description="On-road charger powers to draw from; empty = vehicle's own charger",
    )

    @model_validator(mode="after")
    def _check(self) -> "ChainedTripPolicy":
        if self.trip_count.low < 1:
            raise ValueError("trip_count must be at least 1")
        _check_probabilities(self.distance_bins)
        if "total_stop" in self.constraints and self.total_stop_h is None:
            raise ValueError("'total_stop' constraint needs total_stop_h")
        if "shift_window" in self.constraints and self.shift_window_h is None:
            raise ValueError("'shift_window' constraint needs shift_window_h")
        return self

    def window(self, day: DayType) -> DayWindow:
        return self.workday if day == "Workday" else self.weekend


class ShiftTripPolicy(BaseModel):
    """Trucks: 2–4 legs around the clock, bounded running time and span."""

    kind: Literal["shift"] = "shift"
    first_start_h: ValueRange = Field(
        default_factory=lambda: ValueRange(low=0, high=24),
        description="Clock hour of the first leg, drawn once per vehicle",
    )
    trip_count: IntRange = Field(
        default_factory=lambda: IntRange(low=2, high=4),
        description="Workday legs, drawn once per vehicle; weekend draws 2..workday",
    )
    trip_duration_h: ValueRange = Field(default_factory=lambda: ValueRange(low=1, high=4))
    stop_h: ValueRange = Field(default_factory=lambda: ValueRange(low=0.3, high=1.5))
    running_time_h: ValueRange = Field(default_factory=lambda: ValueRange(low=3, high=7))
    total_window_h: ValueRange = Field(default_factory=lambda: ValueRange(low=4, high=10))
    wraps_midnight: bool = Field(default=True, description="Clock times wrap modulo 24 h")
    road_mix: RoadMix
    onroad_powers_kw: list[float] = Field(
        default_factory=lambda: [50.0, 75.0, 150.0, 300.0],
    )

    @model_validator(mode="after")
    def _check(self) -> "ShiftTripPolicy":
        if self.trip_count.low < 2:
            raise ValueError("trip_count must be at least 2")
        return self


class ShuttleTripPolicy(BaseModel):
    """Buses: even number of equal trips, fixed daily distance band."""

    kind: Literal["shuttle"] = "shuttle"
    trip_length_km: ValueRange = Field(default_factory=lambda: ValueRange(low=5, high=25))
    round_trips: IntRange = Field(
        default_factory=lambda: IntRange(low=3, high=7),
        description="Workday trip pairs (trips = 2 × pairs)",
    )
    daily_distance_km: ValueRange = Field(default_factory=lambda: ValueRange(low=80, high=180))
    running_time_h: ValueRange = Field(default_factory=lambda: ValueRange(low=5, high=7))
    workday_stop_fraction: ValueRange = Field(
        default_factory=lambda: ValueRange(low=1 / 6, high=1 / 5),
        description="Total stop time as a fraction of running time (workday)",
    )
    weekend_stop_fraction: ValueRange = Field(
        default_factory=lambda: ValueRange(low=1 / 6, high=1 / 4),
    )
    earliest_start_h: float = Field(default=4.0, ge=0)
    latest_end_h: float = Field(default=27.0, gt=0, description="May exceed 24 (after midnight)")
    onroad_powers_kw: list[float] = Field(
        default_factory=list,
        description="Empty = buses top up en route with their own charger",
    )

    @model_validator(mode="after")
    def _check(self) -> "ShuttleTripPolicy":
        if self.round_trips.low < 1:
            raise ValueError("round_trips must be at least 1")
        return self


TripPolicy = Annotated[
    Union[ChainedTripPolicy, ShiftTripPolicy, ShuttleTripPolicy],
    Field(discriminator="kind"),
]


# ═══════════════════════════════════════════════════════════════════════════
# Reference parameter set
# ═══════════════════════════════════════════════════════════════════════════

_CAR_ROAD_MIX = RoadMix(
    urban_pct=26, rural_pct=41, highway_pct=33,
    speeds_kmh=RoadSpeeds(urban=24, rural=80, highway=118),
    speed_jitter_kmh=5,
)

_SERVICE_WORKDAY = DayWindow(
    start_h=[4, 15], first_duration_h=[0.1, 2.5], first_stop_h=[0.1, 1.5],
    other_duration_h=[0.1, 2.5], other_stop_h=[0.1, 1.5],
)
_SERVICE_WEEKEND = DayWindow(
    start_h=[6, 12], first_duration_h=[0.1, 2], first_stop_h=[0.1, 1.5],
    other_duration_h=[0.1, 2], other_stop_h=[0.1, 1.5],
)


def default_policies() -> dict[str, TripPolicy]:
    """Reference policies keyed by policy name."""
    return {
        "Job & Education": ChainedTripPolicy(
            workday=DayWindow(
                start_h=[5, 9], first_duration_h=[0.1, 1], first_stop_h=[4, 9],
                other_duration_h=[0.1, 1], other_stop_h=[0.1, 2],
            ),
            weekend=DayWindow(
                start_h=[5, 18], first_duration_h=[0.1, 1.5], first_stop_h=[0.1, 10],
                other_duration_h=[0.1, 1.5], other_stop_h=[0.1, 10],
            ),
            distance_bins=_three_bins(0.6, 0.3, 0.1),
            road_mix=_CAR_ROAD_MIX,
        ),
        "Private": ChainedTripPolicy(
            workday=DayWindow(
                start_h=[5, 18], first_duration_h=[0.1, 2], first_stop_h=[0.1, 10],
                other_duration_h=[0.1, 2], other_stop_h=[0.1, 10],
            ),
            weekend=DayWindow(
                start_h=[5, 20], first_duration_h=[0.1, 3], first_stop_h=[0.1, 10],
                other_duration_h=[0.1, 2], other_stop_h=[0.1, 10],
            ),
            distance_bins=_three_bins(0.6, 0.3, 0.1),
            road_mix=_CAR_ROAD_MIX,
        ),
        "Service": ChainedTripPolicy(
            workday=_SERVICE_WORKDAY,
            weekend=_SERVICE_WEEKEND,
            distance_bins=_three_bins(0.2, 0.6, 0.2),
            constraints=["ends_before_midnight", "total_stop", "shift_window"],
            total_stop_h=ValueRange(low=1, high=3),
            shift_window_h=ValueRange(low=4, high=10),
            road_mix=_CAR_ROAD_MIX,
        ),
        "Van": ChainedTripPolicy(
            workday=_SERVICE_WORKDAY,
            weekend=_SERVICE_WEEKEND,
            distance_bins=_three_bins(0.2, 0.6, 0.2),
            constraints=["ends_before_midnight", "total_stop", "shift_window"],
            total_stop_h=ValueRange(low=1, high=3),
            shift_window_h=ValueRange(low=4, high=10),
            road_mix=RoadMix(
                urban_pct=44, rural_pct=27, highway_pct=29,
                share_jitter_pct=5, remainder="highway",
            ),
        ),
        "LKW": ShiftTripPolicy(
            road_mix=RoadMix(
                urban_pct=14, rural_pct=25, highway_pct=61,
                share_jitter_pct=5, remainder="urban",
            ),
        ),
        "Bus": ShuttleTripPolicy(),
    }
