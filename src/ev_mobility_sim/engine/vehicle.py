"""Vehicle instance sampler.

Turns a segment envelope plus a temperature draw into one concrete vehicle:

  full_capacity ~ U(NomCap_min, NomCap_max)        (kWh)
  full_range    ~ U(Range_min, Range_max)          (km)
  consumption   = full_capacity × 1000 / full_range (Wh/km)

The vehicle's own charger is drawn uniformly from the compatible labels.
Its prefix decides where and how far the vehicle charges:

  DC_*   → Public,                 target SoC 80 %
  AC_*   → Public or Private (½/½), target SoC 100 %
  other  → Private,                target SoC 100 %

An AC rating of 7.4 kW is re-drawn as 7.4 or 11 kW with equal probability,
which mirrors the mix of wallboxes actually installed.
"""

from __future__ import annotations

import logging
import re

import numpy as np

from ev_mobility_sim.config.charging import ChargingSettings
from ev_mobility_sim.config.reference import CHARGING_LOCATIONS, SegmentSpec
from ev_mobility_sim.engine.temperature import TemperatureDraw
from ev_mobility_sim.errors import DataIntegrityError, MalformedChargerLabel
from ev_mobility_sim.models.results import VehicleInstance

logger = logging.getLogger(__name__)

_POWER_PATTERN = re.compile(r"\d+(?:\.\d+)?")


def parse_charger_label(label: str) -> tuple[str, float]:
    """Split a charger label into ``(prefix, power_kw)``.

    ``"AC_11kW"`` → ``("AC", 11.0)``, ``"DC_150kW"`` → ``("DC", 150.0)``.
    The prefix is upper-cased and may be anything; only AC and DC carry a
    charging policy.

    Raises
    ------
    MalformedChargerLabel
        If the label carries no number.
    """
    match = _POWER_PATTERN.search(label)
    if match is None:
        raise MalformedChargerLabel(label)
    prefix = label.split("_", 1)[0].strip().upper() if "_" in label else ""
    return prefix, float(match.group())


def sample_vehicle(
    spec: SegmentSpec,
    purpose: str,
    temperature: TemperatureDraw,
    chargers: tuple[str, ...],
    rng: np.random.Generator,
    settings: ChargingSettings | None = None,
) -> VehicleInstance:
    """Draw one concrete vehicle of segment ``spec``.

    Parameters
    ----------
    spec : SegmentSpec
        Capacity and range envelope of the segment.
    purpose : str
        Trip purpose (cars) or class name (other classes); copied onto the instance.
    temperature : TemperatureDraw
        Ambient temperature and derating factors for this vehicle.
    chargers : tuple[str, ...]
        Compatible charger labels; must not be empty.
    rng : numpy.random.Generator
        Seeded RNG for reproducibility.
    settings : ChargingSettings, optional
        Target SoC and re-roll constants.  Defaults to ``ChargingSettings()``.
    """
    settings = settings or ChargingSettings()
    vehicle_class = spec.vehicle_class
    if vehicle_class is None:
        raise DataIntegrityError(
            f"segment {spec.segment!r} belongs to no vehicle class", key=spec.segment,
        )
    if not chargers:
        raise DataIntegrityError(f"no compatible chargers for {spec.segment!r}", key=spec.segment)

    full_capacity = spec.capacity_kwh.sample(rng)
    full_range = spec.range_km.sample(rng)
    consumption = full_capacity * 1000.0 / full_range

    charger_type = chargers[int(rng.integers(len(chargers)))]
    prefix, power_kw = parse_charger_label(charger_type)

    if prefix == "DC":
        location = "Public"
        target_soc = settings.dc_target_soc_pct
    elif prefix == "AC":
        if power_kw == settings.ac_reroll_from_kw:
            power_kw = (settings.ac_reroll_from_kw, settings.ac_reroll_to_kw)[int(rng.integers(2))]
        location = CHARGING_LOCATIONS[int(rng.integers(len(CHARGING_LOCATIONS)))]
        target_soc = settings.ac_target_soc_pct
    else:
        logger.debug("Charger %r has no AC/DC prefix; charging privately to full", charger_type)
        location = "Private"
        target_soc = settings.ac_target_soc_pct

    return VehicleInstance(
        vehicle_class=vehicle_class,
        segment=spec.segment,
        purpose=purpose,
        temperature_c=temperature.temperature_c,
        capacity_derate_pct=temperature.capacity_derate_pct,
        range_derate_pct=temperature.range_derate_pct,
        full_capacity_kwh=full_capacity,
        full_range_km=full_range,
        consumption_wh_per_km=consumption,
        charger_type=charger_type,
        charger_power_kw=power_kw,
        charging_location=location,
        target_soc_pct=target_soc,
    )
