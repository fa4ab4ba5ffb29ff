"""Ambient temperature sampler.

One temperature is drawn per vehicle and shared by its Workday and Weekend
profiles.  The matching derating band then yields the usable share of
battery capacity and of nominal range:

  temperature_c   ~ U(overall_min, overall_max)
  capacity_derate ~ U(band.capacity_min, band.capacity_max)   (%)
  range_derate    ~ U(band.range_min, band.range_max)         (%)
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ev_mobility_sim.config.reference import TemperatureDeratingRow
from ev_mobility_sim.engine.reference import ReferenceData


@dataclass(frozen=True)
class TemperatureDraw:
    """Immutable result of one temperature draw."""

    temperature_c: float
    band: TemperatureDeratingRow
    capacity_derate_pct: float
    """Usable share of battery capacity (%)."""
    range_derate_pct: float
    """Usable share of nominal range (%)."""


def sample_temperature(
    reference: ReferenceData,
    rng: np.random.Generator,
    bounds: tuple[float, float] | None = None,
) -> TemperatureDraw:
    """Draw an ambient temperature and its derating factors.

    Parameters
    ----------
    reference : ReferenceData
        Provides the derating bands.
    rng : numpy.random.Generator
        Seeded RNG for reproducibility.
    bounds : tuple[float, float], optional
        ``(min, max)`` to draw from.  Defaults to the span of the band table.

    Raises
    ------
    NoTemperatureBand
        When ``bounds`` reach outside the bands.  Not retried.
    """
    low, high = bounds if bounds is not None else reference.temperature_bounds
    temperature_c = float(low + (high - low) * rng.random())
    band = reference.temperature_band(temperature_c)
    return TemperatureDraw(
        temperature_c=temperature_c,
        band=band,
        capacity_derate_pct=band.capacity_pct.sample(rng),
        range_derate_pct=band.range_pct.sample(rng),
    )
