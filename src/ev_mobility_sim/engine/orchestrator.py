"""Batch orchestrator: plan the fleet, generate every vehicle, collect results.

Randomness is split up front from one master ``SeedSequence``:

  child 0      → fleet planning (segment and purpose draws)
  child 1..N   → one generator per vehicle, in index order

so a given seed yields the same batch whatever the number of worker
threads.  Vehicles are independent and the reference tables are read-only,
which lets them run on a thread pool; results are re-sequenced by vehicle
index before they are returned.

Entry point: ``run_batch(reference, config)``
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable

import numpy as np

from ev_mobility_sim.config.simulation import RunConfig
from ev_mobility_sim.engine.allocation import plan_fleet
from ev_mobility_sim.engine.profile import generate_vehicle_profile
from ev_mobility_sim.engine.reference import ReferenceData
from ev_mobility_sim.errors import DataIntegrityError
from ev_mobility_sim.models.results import (
    BatchResult,
    VehicleFailure,
    VehicleJob,
    VehicleProfile,
)

logger = logging.getLogger(__name__)


def run_batch(
    reference: ReferenceData,
    config: RunConfig,
    on_profile: Callable[[VehicleProfile], None] | None = None,
) -> BatchResult:
    """Generate ``config.fleet.total_profiles`` vehicle profiles.

    Parameters
    ----------
    reference : ReferenceData
        Loaded reference tables, shared by all workers.
    config : RunConfig
        Complete run configuration.
    on_profile : callable, optional
        Called with each finished profile in vehicle-index order, e.g. to
        stream it to an emitter.

    Raises
    ------
    DataIntegrityError
        Only when ``config.simulation.fail_fast`` is set.  Otherwise the
        vehicle is recorded in ``BatchResult.failures`` and the batch goes on.
    """
    seed_seq = np.random.SeedSequence(config.simulation.random_seed)
    plan_rng = np.random.default_rng(seed_seq.spawn(1)[0])
    allocation, jobs = plan_fleet(reference, config.fleet, plan_rng)
    vehicle_rngs = [np.random.default_rng(s) for s in seed_seq.spawn(len(jobs))]
    logger.info(
        "Generating %d profiles (%s) with %d worker(s)",
        len(jobs),
        ", ".join(f"{c}={n}" for c, n in allocation.items()),
        config.simulation.workers,
    )

    def run_one(job: VehicleJob, rng: np.random.Generator) -> VehicleProfile | VehicleFailure:
        return _run_job(job, reference, config, rng)

    if config.simulation.workers == 1:
        outcomes = [run_one(job, rng) for job, rng in zip(jobs, vehicle_rngs)]
    else:
        with ThreadPoolExecutor(max_workers=config.simulation.workers) as pool:
            outcomes = list(pool.map(run_one, jobs, vehicle_rngs))

    result = BatchResult(requested_profiles=config.fleet.total_profiles, allocation=allocation)
    for outcome in sorted(outcomes, key=lambda o: o.index):
        if isinstance(outcome, VehicleFailure):
            result.failures.append(outcome)
            continue
        result.profiles.append(outcome)
        if on_profile is not None:
            on_profile(outcome)

    if result.failures:
        logger.warning(
            "%d of %d vehicles failed; batch is short by that many profiles",
            len(result.failures), len(jobs),
        )
    return result


def _run_job(
    job: VehicleJob,
    reference: ReferenceData,
    config: RunConfig,
    rng: np.random.Generator,
) -> VehicleProfile | VehicleFailure:
    try:
        return generate_vehicle_profile(job, reference, config, rng)
    except DataIntegrityError as exc:
        logger.error(
            "Vehicle %d (%s / %s) failed: %s [key=%r]",
            job.index, job.vehicle_class, job.segment, exc, exc.key,
        )
        if config.simulation.fail_fast:
            raise
        return VehicleFailure(
            index=job.index,
            vehicle_class=job.vehicle_class,
            segment=job.segment,
            purpose=job.purpose,
            error_type=type(exc).__name__,
            message=str(exc),
            key=None if exc.key is None else str(exc.key),
        )
