"""Energy & charging calculator.

Derives one day's energy use and the charging it triggers from a vehicle
and its accepted schedule.  Everything stays at full precision; rounding is
left to the formatter.

Two branches, split on the buffered derated range:

  distance < derated_range − buffer   → depot/home charging only
      used        = consumption × distance / 1000                    (kWh)
      remaining % = capacity_derate − used / full_capacity × 100   (clamped 0–100)
      if remaining % < threshold:
          time = (target % − remaining %) / 100 × full_capacity × (1 + loss) / own_power

  otherwise                            → on-road stop, then depot top-up
      over_distance = |distance − derated_range|
      over_energy   = consumption × over_distance / 1000
      road_time     = over_energy × (1 + loss) / road_power
      depot_energy  = used − over_energy − full_capacity × (1 − target % / 100)
      total_time    = road_time + max(depot_energy, 0) × (1 + loss) / own_power

The charging loss is drawn (DC or AC range by the vehicle's charger) only on
days where charging actually happens.
"""

from __future__ import annotations

import numpy as np

from ev_mobility_sim.config.charging import ChargingSettings
from ev_mobility_sim.models.results import ChargingOutcome, VehicleInstance


def onroad_charger_label(power_kw: float, settings: ChargingSettings) -> str:
    """``AC_22kW`` up to the AC limit, ``DC_<p>kW`` above it."""
    kind = "AC" if power_kw <= settings.onroad_ac_max_kw else "DC"
    return f"{kind}_{power_kw:g}kW"


def remaining_percent(vehicle: VehicleInstance, used_energy_kwh: float) -> float:
    """Battery left after driving, as % of full capacity, clamped to [0, 100]."""
    full = vehicle.full_capacity_kwh
    value = (full - used_energy_kwh - full * vehicle.capacity_loss_pct / 100.0) * 100.0 / full
    return min(100.0, max(0.0, value))


def draw_charging_loss(vehicle: VehicleInstance, rng: np.random.Generator, settings: ChargingSettings) -> float:
    loss_range = settings.dc_loss_pct if vehicle.is_dc else settings.ac_loss_pct
    return loss_range.sample(rng)


def compute_charging(
    vehicle: VehicleInstance,
    distance_km: float,
    onroad_powers_kw: list[float],
    rng: np.random.Generator,
    settings: ChargingSettings | None = None,
) -> ChargingOutcome:
    """Energy use and charging decision for one day.

    Parameters
    ----------
    vehicle : VehicleInstance
        The vehicle, already derated for temperature.
    distance_km : float
        Total distance of the accepted schedule.
    onroad_powers_kw : list[float]
        Road charger powers to draw from.  Empty means the vehicle tops up en
        route with its own charger (buses) and the road label is the
        vehicle's own charger type.
    rng : numpy.random.Generator
        Seeded RNG for reproducibility.
    settings : ChargingSettings, optional
        Buffer, threshold and loss ranges.  Defaults to ``ChargingSettings()``.
    """
    settings = settings or ChargingSettings()
    used = vehicle.consumption_wh_per_km * distance_km / 1000.0
    full = vehicle.full_capacity_kwh
    own_power = vehicle.charger_power_kw

    # ── 1. Depot/home charging only ─────────────────────────────────────
    if distance_km < vehicle.derated_range_km - settings.safety_buffer_km:
        remaining = remaining_percent(vehicle, used)
        if remaining >= settings.depot_threshold_pct:
            return ChargingOutcome(
                used_energy_kwh=used,
                remaining_percent=remaining,
                charging_required=False,
                charging_loss_pct=0.0,
                target_soc_pct=None,
            )
        loss = draw_charging_loss(vehicle, rng, settings)
        energy = (vehicle.target_soc_pct - remaining) / 100.0 * full
        depot_time = max(energy, 0.0) * (1 + loss / 100.0) / own_power
        return ChargingOutcome(
            used_energy_kwh=used,
            remaining_percent=remaining,
            charging_required=True,
            charging_loss_pct=loss,
            target_soc_pct=vehicle.target_soc_pct,
            total_charge_time_h=depot_time,
        )

    # ── 2. On-road stop plus depot top-up ───────────────────────────────
    loss = draw_charging_loss(vehicle, rng, settings)
    if onroad_powers_kw:
        road_power = float(onroad_powers_kw[int(rng.integers(len(onroad_powers_kw)))])
        road_label = onroad_charger_label(road_power, settings)
    else:
        road_power = own_power
        road_label = vehicle.charger_type

    over_distance = abs(distance_km - vehicle.derated_range_km)
    over_energy = vehicle.consumption_wh_per_km * over_distance / 1000.0
    road_time = over_energy * (1 + loss / 100.0) / road_power
    depot_energy = used - over_energy - full * (1 - vehicle.target_soc_pct / 100.0)
    total_time = road_time + max(depot_energy, 0.0) * (1 + loss / 100.0) / own_power

    return ChargingOutcome(
        used_energy_kwh=used,
        remaining_percent=None,
        charging_required=True,
        charging_loss_pct=loss,
        target_soc_pct=vehicle.target_soc_pct,
        onroad_charger=road_label,
        onroad_power_kw=road_power,
        onroad_charge_time_h=road_time,
        total_charge_time_h=total_time,
    )
