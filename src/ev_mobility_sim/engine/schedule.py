"""Trip schedule samplers: the rejection-sampling core.

One sampler is built per vehicle and asked for a schedule once per day type.
Each schedule model has its own sampler:

  ChainedScheduleSampler  — cars and vans.  Per day: draw a distance bin,
                            then repeat {draw N trips chained start → duration
                            → stop; check named constraints; split running
                            time over road types; check the bin} until accepted.
  ShiftScheduleSampler    — trucks.  First start and workday leg count are
                            drawn once per vehicle; per day legs and stops are
                            redrawn until running time and span fit.
  ShuttleScheduleSampler  — buses.  Trip length, trip count, running time and
                            start are drawn once per vehicle; the weekend runs
                            fewer trips over the same running time.

Every loop is capped at ``max_attempts`` candidates.  Exhaustion raises
``ConstraintUnsatisfiable`` with a histogram of rejection reasons.

Schedule times are hours since the day's midnight and are never wrapped;
``TripSchedule.wraps_midnight`` marks schedules whose clock display is mod 24.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Protocol

import numpy as np

from ev_mobility_sim.config.policy import (
    ChainedConstraint,
    ChainedTripPolicy,
    DayType,
    RoadMix,
    RoadType,
    ShiftTripPolicy,
    ShuttleTripPolicy,
    TripPolicy,
)
from ev_mobility_sim.config.reference import RoadSpeeds, SegmentSpec
from ev_mobility_sim.errors import ConstraintUnsatisfiable, DataIntegrityError
from ev_mobility_sim.models.results import Trip, TripSchedule

logger = logging.getLogger(__name__)

ROAD_TYPES: tuple[RoadType, RoadType, RoadType] = ("urban", "rural", "highway")


# ═══════════════════════════════════════════════════════════════════════════
# Road-type split
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RoadSplit:
    """Share of running time and average speed per road type."""

    shares_pct: dict[str, float]
    speeds_kmh: dict[str, float]

    def distance_km(self, running_time_h: float) -> float:
        """Σ speed × running time × share over the road types."""
        return sum(
            self.speeds_kmh[road] * running_time_h * self.shares_pct[road] / 100.0
            for road in ROAD_TYPES
        )


def draw_road_split(
    mix: RoadMix,
    segment_speeds: RoadSpeeds | None,
    rng: np.random.Generator,
    segment: str = "",
) -> RoadSplit:
    """Draw today's road shares and speeds.

    Non-remainder shares are nominal ± ``share_jitter_pct``; the remainder
    road type takes what is left of 100 %.  Speeds are nominal ±
    ``speed_jitter_kmh``, nominal coming from the policy or, if it has none,
    from the segment table.

    Raises
    ------
    DataIntegrityError
        Neither the policy nor the segment row carries speeds.
    """
    nominal = {"urban": mix.urban_pct, "rural": mix.rural_pct, "highway": mix.highway_pct}
    shares: dict[str, float] = {}
    for road in ROAD_TYPES:
        if road == mix.remainder:
            continue
        shares[road] = nominal[road] + _jitter(mix.share_jitter_pct, rng)
    shares[mix.remainder] = 100.0 - sum(shares.values())

    base = mix.speeds_kmh or segment_speeds
    if base is None:
        raise DataIntegrityError(f"no road speeds for segment {segment!r}", key=segment)
    speeds = {road: getattr(base, road) + _jitter(mix.speed_jitter_kmh, rng) for road in ROAD_TYPES}
    return RoadSplit(shares_pct=shares, speeds_kmh=speeds)


def _jitter(width: float, rng: np.random.Generator) -> float:
    if width <= 0:
        return 0.0
    return float(rng.random() * 2.0 * width - width)


# ═══════════════════════════════════════════════════════════════════════════
# Candidate
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class _Candidate:
    """Draft schedule: trip i starts at starts[i]; stops has one entry fewer."""

    starts: list[float]
    durations: list[float]
    stops: list[float]

    @property
    def ends(self) -> list[float]:
        return [s + d for s, d in zip(self.starts, self.durations)]

    @property
    def running_time_h(self) -> float:
        return float(sum(self.durations))

    @property
    def span_h(self) -> float:
        return self.ends[-1] - self.starts[0]


def _chain(first_start: float, durations: list[float], stops: list[float]) -> _Candidate:
    starts = [first_start]
    for duration, stop in zip(durations[:-1], stops):
        starts.append(starts[-1] + duration + stop)
    return _Candidate(starts=starts, durations=durations, stops=stops)


def _to_schedule(
    day: DayType,
    candidate: _Candidate,
    distance_km: float,
    *,
    distance_bin: int | None = None,
    wraps_midnight: bool = False,
    attempts: int = 1,
) -> TripSchedule:
    running = candidate.running_time_h
    return TripSchedule(
        day=day,
        trips=[
            Trip(start_h=s, duration_h=d, end_h=e)
            for s, d, e in zip(candidate.starts, candidate.durations, candidate.ends)
        ],
        stops_h=list(candidate.stops),
        total_distance_km=distance_km,
        running_time_h=running,
        average_speed_kmh=distance_km / running if running > 0 else 0.0,
        distance_bin=distance_bin,
        wraps_midnight=wraps_midnight,
        attempts=attempts,
    )


class ScheduleSampler(Protocol):
    """Anything that yields one accepted schedule per day type."""

    def sample(self, day: DayType, rng: np.random.Generator) -> TripSchedule: ...


# ═══════════════════════════════════════════════════════════════════════════
# Chained (cars, vans)
# ═══════════════════════════════════════════════════════════════════════════

def _ends_before_midnight(c: _Candidate, policy: ChainedTripPolicy) -> bool:
    return c.ends[-1] <= policy.day_end_h


def _first_trip_shape(c: _Candidate, policy: ChainedTripPolicy) -> bool:
    return c.durations[0] <= sum(c.durations[1:]) + policy.first_trip_margin_h


def _total_stop(c: _Candidate, policy: ChainedTripPolicy) -> bool:
    return policy.total_stop_h.contains(sum(c.stops))


def _shift_window(c: _Candidate, policy: ChainedTripPolicy) -> bool:
    return policy.shift_window_h.contains(c.span_h)


CHAINED_CHECKS: dict[ChainedConstraint, Callable[[_Candidate, ChainedTripPolicy], bool]] = {
    "ends_before_midnight": _ends_before_midnight,
    "first_trip_shape": _first_trip_shape,
    "total_stop": _total_stop,
    "shift_window": _shift_window,
}
"""Acceptance predicates a chained policy can list, by name."""


class ChainedScheduleSampler:
    """Chained trips inside a day window, accepted against a pre-drawn distance bin.

    Usage::

        sampler = ChainedScheduleSampler("Private", policy, spec)
        workday = sampler.sample("Workday", rng)
    """

    def __init__(
        self,
        name: str,
        policy: ChainedTripPolicy,
        segment: SegmentSpec,
        max_attempts: int = 100_000,
    ) -> None:
        self.name = name
        self.policy = policy
        self.segment = segment
        self.max_attempts = max_attempts
        self._checks = [(c, CHAINED_CHECKS[c]) for c in policy.constraints]

    def draw_distance_bin(self, rng: np.random.Generator) -> int | None:
        """1-based index of today's distance bin, or None when the policy has none."""
        bins = self.policy.distance_bins
        if not bins:
            return None
        probabilities = np.array([b.probability for b in bins], dtype=np.float64)
        return int(rng.choice(len(bins), p=probabilities / probabilities.sum())) + 1

    def draw_candidate(self, day: DayType, rng: np.random.Generator) -> _Candidate:
        window = self.policy.window(day)
        n_trips = self.policy.trip_count.sample(rng)
        first_start = window.start_h.sample(rng)
        durations = [window.first_duration_h.sample(rng)]
        stops: list[float] = []
        if n_trips > 1:
            stops.append(window.first_stop_h.sample(rng))
        for k in range(1, n_trips):
            durations.append(window.other_duration_h.sample(rng))
            if k < n_trips - 1:
                stops.append(window.other_stop_h.sample(rng))
        return _chain(first_start, durations, stops)

    def sample(self, day: DayType, rng: np.random.Generator) -> TripSchedule:
        distance_bin = self.draw_distance_bin(rng)
        target = self.policy.distance_bins[distance_bin - 1] if distance_bin else None
        rejections: Counter[str] = Counter()

        for attempt in range(1, self.max_attempts + 1):
            candidate = self.draw_candidate(day, rng)
            failed = next((name for name, check in self._checks if not check(candidate, self.policy)), None)
            if failed is not None:
                rejections[failed] += 1
                continue

            split = draw_road_split(self.policy.road_mix, self.segment.speeds, rng, self.segment.segment)
            distance = split.distance_km(candidate.running_time_h)
            if target is not None and not target.contains(distance):
                rejections["distance_bin"] += 1
                continue

            logger.debug(
                "%s %s: accepted after %d attempts (bin=%s, %.1f km)",
                self.name, day, attempt, distance_bin, distance,
            )
            return _to_schedule(day, candidate, distance, distance_bin=distance_bin, attempts=attempt)

        raise ConstraintUnsatisfiable(self.name, day, self.max_attempts, rejections)


# ═══════════════════════════════════════════════════════════════════════════
# Shift (trucks)
# ═══════════════════════════════════════════════════════════════════════════

class ShiftScheduleSampler:
    """Truck legs around the clock.

    First start and workday leg count are drawn at construction, once per
    vehicle.  The weekend runs between ``trip_count.low`` and the workday
    count of legs, starting at the same clock time.
    """

    def __init__(
        self,
        name: str,
        policy: ShiftTripPolicy,
        segment: SegmentSpec,
        rng: np.random.Generator,
        max_attempts: int = 100_000,
    ) -> None:
        self.name = name
        self.policy = policy
        self.segment = segment
        self.max_attempts = max_attempts
        self.first_start_h = policy.first_start_h.sample(rng)
        self.workday_trips = policy.trip_count.sample(rng)

    def trip_count(self, day: DayType, rng: np.random.Generator) -> int:
        if day == "Workday":
            return self.workday_trips
        return int(rng.integers(self.policy.trip_count.low, self.workday_trips, endpoint=True))

    def sample(self, day: DayType, rng: np.random.Generator) -> TripSchedule:
        policy = self.policy
        n_trips = self.trip_count(day, rng)
        rejections: Counter[str] = Counter()

        for attempt in range(1, self.max_attempts + 1):
            durations = [policy.trip_duration_h.sample(rng) for _ in range(n_trips)]
            stops = [policy.stop_h.sample(rng) for _ in range(n_trips - 1)]
            running = sum(durations)
            if not policy.running_time_h.contains(running):
                rejections["running_time"] += 1
                continue
            if not policy.total_window_h.contains(running + sum(stops)):
                rejections["total_window"] += 1
                continue

            candidate = _chain(self.first_start_h, durations, stops)
            split = draw_road_split(policy.road_mix, self.segment.speeds, rng, self.segment.segment)
            distance = split.distance_km(running)
            logger.debug("%s %s: accepted after %d attempts (%.1f km)", self.name, day, attempt, distance)
            return _to_schedule(
                day, candidate, distance, wraps_midnight=policy.wraps_midnight, attempts=attempt,
            )

        raise ConstraintUnsatisfiable(self.name, day, self.max_attempts, rejections)


# ═══════════════════════════════════════════════════════════════════════════
# Shuttle (buses)
# ═══════════════════════════════════════════════════════════════════════════

class ShuttleScheduleSampler:
    """Back-to-back bus trips of one fixed length.

    Construction draws the vehicle's trip length and workday trip count
    (redrawn together until the daily distance fits), its running time,
    workday stop total and first start.  Trip count is always even.
    """

    def __init__(
        self,
        name: str,
        policy: ShuttleTripPolicy,
        rng: np.random.Generator,
        max_attempts: int = 100_000,
    ) -> None:
        self.name = name
        self.policy = policy
        self.max_attempts = max_attempts

        for attempt in range(1, max_attempts + 1):
            trip_km = policy.trip_length_km.sample(rng)
            pairs = policy.round_trips.sample(rng)
            if policy.daily_distance_km.contains(trip_km * 2 * pairs):
                break
        else:
            raise ConstraintUnsatisfiable(
                name, "Workday", max_attempts, Counter({"daily_distance": max_attempts}),
            )
        self.trip_length_km = trip_km
        self.workday_trips = 2 * pairs
        self.plan_attempts = attempt

        self.running_time_h = policy.running_time_h.sample(rng)
        self.workday_stop_h = self.running_time_h * policy.workday_stop_fraction.sample(rng)
        latest_start = policy.latest_end_h - (self.running_time_h + self.workday_stop_h)
        if latest_start < policy.earliest_start_h:
            self.first_start_h = policy.earliest_start_h
        else:
            self.first_start_h = policy.earliest_start_h + (latest_start - policy.earliest_start_h) * rng.random()

    def _weekend_trips(self, rng: np.random.Generator) -> tuple[int, int]:
        """Even weekend trip count whose distance stays in band, plus attempts used."""
        low_pairs = self.policy.round_trips.low
        for attempt in range(1, self.max_attempts + 1):
            pairs = int(rng.integers(low_pairs, self.workday_trips // 2, endpoint=True))
            if self.policy.daily_distance_km.contains(self.trip_length_km * 2 * pairs):
                return 2 * pairs, attempt
        raise ConstraintUnsatisfiable(
            self.name, "Weekend", self.max_attempts, Counter({"daily_distance": self.max_attempts}),
        )

    def sample(self, day: DayType, rng: np.random.Generator) -> TripSchedule:
        if day == "Workday":
            n_trips, stop_total, attempts = self.workday_trips, self.workday_stop_h, self.plan_attempts
        else:
            n_trips, attempts = self._weekend_trips(rng)
            stop_total = self.running_time_h * self.policy.weekend_stop_fraction.sample(rng)

        run = self.running_time_h / n_trips
        stop = stop_total / (n_trips - 1)
        candidate = _chain(self.first_start_h, [run] * n_trips, [stop] * (n_trips - 1))
        distance = self.trip_length_km * n_trips
        logger.debug("%s %s: %d trips × %.1f km", self.name, day, n_trips, self.trip_length_km)
        return _to_schedule(day, candidate, distance, attempts=attempts)


# ═══════════════════════════════════════════════════════════════════════════
# Factory
# ═══════════════════════════════════════════════════════════════════════════

def build_sampler(
    name: str,
    policy: TripPolicy,
    segment: SegmentSpec,
    rng: np.random.Generator,
    max_attempts: int = 100_000,
) -> ScheduleSampler:
    """Sampler for one vehicle under ``policy``.

    Per-vehicle draws (truck start and leg count, bus plan) happen here, so
    the Workday and Weekend schedules of one vehicle share them.
    """
    if isinstance(policy, ChainedTripPolicy):
        return ChainedScheduleSampler(name, policy, segment, max_attempts)
    if isinstance(policy, ShiftTripPolicy):
        return ShiftScheduleSampler(name, policy, segment, rng, max_attempts)
    if isinstance(policy, ShuttleTripPolicy):
        return ShuttleScheduleSampler(name, policy, rng, max_attempts)
    raise TypeError(f"unsupported trip policy {type(policy).__name__}")
