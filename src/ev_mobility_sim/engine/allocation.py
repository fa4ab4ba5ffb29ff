"""Fleet planning: how many profiles per vehicle class, and which vehicles.

  1. ``aggregate_vehicle_types`` — segment rows → quantity and share per class
  2. ``allocate_profiles``       — total profile count → count per class
  3. ``plan_fleet``              — counts → ordered ``VehicleJob`` list

Allocation rule: classes are visited in ascending share order and receive
``floor(share × N)``, at least 1 when their share is nonzero; zero-share
classes receive nothing.  Whatever is left over (positive or negative) is
settled on the largest-share class, so the counts always sum to N.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from ev_mobility_sim.config.reference import VEHICLE_CLASSES, SegmentSpec, VehicleClass
from ev_mobility_sim.config.simulation import FleetConfig
from ev_mobility_sim.engine.reference import ReferenceData
from ev_mobility_sim.models.results import VehicleJob


@dataclass(frozen=True)
class ClassSummary:
    """Aggregated segment rows of one vehicle class."""

    vehicle_class: VehicleClass
    quantity: float
    share_pct: float


def aggregate_vehicle_types(reference: ReferenceData) -> dict[VehicleClass, ClassSummary]:
    """Sum quantity and fleet share over each class's segments."""
    summary: dict[VehicleClass, ClassSummary] = {}
    for vehicle_class in VEHICLE_CLASSES:
        rows = reference.segments_of(vehicle_class)
        summary[vehicle_class] = ClassSummary(
            vehicle_class=vehicle_class,
            quantity=sum(r.quantity for r in rows),
            share_pct=sum(r.share_pct for r in rows),
        )
    return summary


def allocate_profiles(shares_pct: dict[VehicleClass, float], total: int) -> dict[VehicleClass, int]:
    """Split ``total`` profiles across classes by share.

    Parameters
    ----------
    shares_pct : dict
        Fleet share per class (%).  Need not sum to exactly 100.
    total : int
        Profiles to generate.

    Returns
    -------
    dict
        Count per class, in the key order of ``shares_pct``; sums to ``total``.

    Raises
    ------
    ValueError
        ``total`` is smaller than the number of classes with a nonzero share,
        or no class has a nonzero share.
    """
    nonzero = [c for c, s in shares_pct.items() if s > 0]
    if not nonzero:
        raise ValueError("no vehicle class has a nonzero share")
    if total < len(nonzero):
        raise ValueError(
            f"cannot give {len(nonzero)} classes at least one profile each out of {total}"
        )

    counts: dict[VehicleClass, int] = {c: 0 for c in shares_pct}
    for vehicle_class in sorted(nonzero, key=lambda c: shares_pct[c]):
        raw = shares_pct[vehicle_class] / 100.0 * total
        counts[vehicle_class] = 1 if raw < 1 else math.floor(raw)

    largest = max(nonzero, key=lambda c: shares_pct[c])
    counts[largest] += total - sum(counts.values())
    if counts[largest] < 1:
        raise ValueError(f"allocation left {largest} without profiles for total={total}")
    return counts


def _draw_segment(rows: list[SegmentSpec], rng: np.random.Generator) -> str:
    weights = np.array([r.share_pct for r in rows], dtype=np.float64)
    if weights.sum() <= 0:
        weights = np.ones(len(rows))
    return rows[int(rng.choice(len(rows), p=weights / weights.sum()))].segment


def _draw_purpose(shares: dict[str, float], rng: np.random.Generator) -> str:
    names = list(shares)
    weights = np.array([shares[n] for n in names], dtype=np.float64)
    return names[int(rng.choice(len(names), p=weights / weights.sum()))]


def plan_fleet(
    reference: ReferenceData,
    fleet: FleetConfig,
    rng: np.random.Generator,
) -> tuple[dict[VehicleClass, int], list[VehicleJob]]:
    """Allocate ``fleet.total_profiles`` and draw segment and purpose per vehicle.

    Jobs are grouped by class in PKW, Van, LKW, Bus order and numbered from 1.
    Segments within a class are drawn by their fleet share; car purposes by
    ``fleet.car_purpose_shares``.  Other classes use their class name as purpose.
    """
    summary = aggregate_vehicle_types(reference)
    allocation = allocate_profiles(
        {c: s.share_pct for c, s in summary.items()}, fleet.total_profiles,
    )

    jobs: list[VehicleJob] = []
    for vehicle_class, count in allocation.items():
        rows = reference.segments_of(vehicle_class)
        for _ in range(count):
            segment = _draw_segment(rows, rng)
            purpose = (
                _draw_purpose(fleet.car_purpose_shares, rng)
                if vehicle_class == "PKW" else vehicle_class
            )
            jobs.append(VehicleJob(
                index=len(jobs) + 1,
                vehicle_class=vehicle_class,
                segment=segment,
                purpose=purpose,
            ))
    return allocation, jobs
