"""Tabular export: one numeric row per (vehicle, day)."""

from __future__ import annotations

import pandas as pd

from ev_mobility_sim.models.results import BatchResult

NULLABLE_COLUMNS = ["distance_bin", "remaining_percent", "target_soc_pct", "onroad_power_kw"]
"""Numeric columns that may be None for a day; exported as float so gaps are NaN."""


def profiles_to_frame(result: BatchResult) -> pd.DataFrame:
    """Flatten a batch into a DataFrame at full precision.

    Columns that do not apply to a day (``remaining_percent`` after an
    on-road stop, ``target_soc_pct`` without charging) are NaN.
    """
    rows = []
    for profile in result.profiles:
        for day, dp in profile.days.items():
            v, s, c = dp.vehicle, dp.schedule, dp.charging
            rows.append({
                "index": profile.index,
                "vehicle_class": profile.vehicle_class,
                "segment": profile.segment,
                "purpose": profile.purpose,
                "day": day,
                "temperature_c": v.temperature_c,
                "consumption_wh_per_km": v.consumption_wh_per_km,
                "full_capacity_kwh": v.full_capacity_kwh,
                "derated_capacity_kwh": v.derated_capacity_kwh,
                "full_range_km": v.full_range_km,
                "derated_range_km": v.derated_range_km,
                "charger_type": v.charger_type,
                "charger_power_kw": v.charger_power_kw,
                "charging_location": v.charging_location,
                "trip_count": s.trip_count,
                "first_start_h": s.trips[0].start_h,
                "last_end_h": s.trips[-1].end_h,
                "running_time_h": s.running_time_h,
                "total_stop_h": s.total_stop_h,
                "distance_km": s.total_distance_km,
                "average_speed_kmh": s.average_speed_kmh,
                "distance_bin": s.distance_bin,
                "attempts": s.attempts,
                "used_energy_kwh": c.used_energy_kwh,
                "remaining_percent": c.remaining_percent,
                "charging_loss_pct": c.charging_loss_pct,
                "target_soc_pct": c.target_soc_pct,
                "onroad_charger": c.onroad_charger,
                "onroad_power_kw": c.onroad_power_kw,
                "onroad_charge_time_h": c.onroad_charge_time_h,
                "total_charge_time_h": c.total_charge_time_h,
            })
    frame = pd.DataFrame(rows)
    if not frame.empty:
        frame[NULLABLE_COLUMNS] = frame[NULLABLE_COLUMNS].astype(float)
    return frame
