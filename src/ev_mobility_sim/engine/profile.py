"""Per-vehicle generator: temperature → vehicle → (schedule → charging) × 2 days.

A ``DataIntegrityError`` from any lookup propagates and costs the whole
vehicle.  A ``ConstraintUnsatisfiable`` costs only the day it happened on:
the day is left out and a warning is recorded on the profile.
"""

from __future__ import annotations

import logging

import numpy as np

from ev_mobility_sim.config.policy import DAY_TYPES
from ev_mobility_sim.config.simulation import RunConfig
from ev_mobility_sim.engine.energy import compute_charging
from ev_mobility_sim.engine.reference import ReferenceData
from ev_mobility_sim.engine.schedule import build_sampler
from ev_mobility_sim.engine.temperature import sample_temperature
from ev_mobility_sim.engine.vehicle import sample_vehicle
from ev_mobility_sim.errors import ConstraintUnsatisfiable
from ev_mobility_sim.models.results import DayProfile, VehicleJob, VehicleProfile

logger = logging.getLogger(__name__)


def generate_vehicle_profile(
    job: VehicleJob,
    reference: ReferenceData,
    config: RunConfig,
    rng: np.random.Generator,
) -> VehicleProfile:
    """Generate the Workday and Weekend profiles of one vehicle.

    Parameters
    ----------
    job : VehicleJob
        Class, segment and purpose of the vehicle.
    reference : ReferenceData
        Loaded reference tables.
    config : RunConfig
        Policies, charging and engine settings.
    rng : numpy.random.Generator
        Generator owned by this vehicle alone.

    Raises
    ------
    DataIntegrityError
        A lookup failed; no profile is produced for this vehicle.
    """
    spec = reference.segment_spec(job.vehicle_class, job.segment)
    chargers = reference.compatible_chargers(job.segment, job.vehicle_class)
    policy_name = config.policy_name(job.vehicle_class, job.purpose)
    policy = config.policy_for(job.vehicle_class, job.purpose)

    temperature = sample_temperature(reference, rng)
    vehicle = sample_vehicle(spec, job.purpose, temperature, chargers, rng, config.charging)
    profile = VehicleProfile(
        index=job.index,
        vehicle_class=job.vehicle_class,
        segment=job.segment,
        purpose=job.purpose,
        vehicle=vehicle,
    )

    try:
        sampler = build_sampler(policy_name, policy, spec, rng, config.simulation.max_attempts)
    except ConstraintUnsatisfiable as exc:
        _warn(profile, exc)
        return profile

    for day in DAY_TYPES:
        try:
            schedule = sampler.sample(day, rng)
        except ConstraintUnsatisfiable as exc:
            _warn(profile, exc)
            continue
        charging = compute_charging(
            vehicle, schedule.total_distance_km, policy.onroad_powers_kw, rng, config.charging,
        )
        profile.days[day] = DayProfile(
            purpose=job.purpose,
            day=day,
            vehicle=vehicle,
            schedule=schedule,
            charging=charging,
        )
    return profile


def _warn(profile: VehicleProfile, exc: ConstraintUnsatisfiable) -> None:
    logger.warning(
        "Vehicle %d (%s, %s): no %s schedule after %d attempts",
        profile.index, profile.segment, exc.policy, exc.day, exc.attempts,
    )
    profile.warnings.append(str(exc))
