"""Display formatting for day profiles.

Turns a numeric ``DayProfile`` into the ordered display record printed for
each simulated day.  The record is built in one pass; nothing here feeds
back into the numbers.

Conventions:
  clock times  "7h 05min"   (minutes zero-padded; truck times wrap at 24 h)
  durations    "1h 5min"
  quantities   integers with unit ("38 km", "165 Wh/km", "12 °C")
  percentages  one decimal ("87.3 %"); blank when the value does not apply
"""

from __future__ import annotations

import math

from ev_mobility_sim.models.results import DayProfile

DisplayValue = str | list[str]

DISPLAY_FIELDS: tuple[str, ...] = (
    "Purpose",
    "Day",
    "Temperature",
    "Consumption",
    "FullCapacity",
    "CapacityWithTemperature",
    "PercentOperatingCapacity",
    "FullRange",
    "RangeWithTemperature",
    "PercentOperatingRange",
    "Distance",
    "AvgSpeed",
    "ChargingLocation",
    "ChargingType",
    "SoC",
    "PercentChargingLoss",
    "TripNumber",
    "TripStart",
    "TripEnd",
    "RunTime",
    "StopTime",
    "ChargeOnRoad",
    "ChargingTimeOnRoad",
    "BatteryPerc",
    "TotalTimeToCharge",
)
"""Display record keys, in print order."""


def _round(value: float) -> int:
    # Halves round away from zero: 162.5 -> 163, -2.5 -> -3.
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _split_minutes(hours: float) -> tuple[int, int]:
    # Round to whole minutes first so 59.6 min becomes the next hour, not "60min".
    total = _round(hours * 60)
    return divmod(total, 60)


def format_clock(hours: float, wrap: bool = False) -> str:
    """Clock time ``"Hh MMmin"``.  ``wrap`` folds hours past midnight into 0–23."""
    h, m = _split_minutes(hours)
    if wrap:
        h %= 24
    return f"{h}h {m:02d}min"


def format_duration(hours: float) -> str:
    """Duration ``"Hh Mmin"``."""
    h, m = _split_minutes(max(hours, 0.0))
    return f"{h}h {m}min"


def format_percent(value: float | None) -> str:
    return "" if value is None else f"{value:.1f} %"


def format_day_profile(profile: DayProfile) -> dict[str, DisplayValue]:
    """Ordered display record of one day, keys as in ``DISPLAY_FIELDS``."""
    vehicle = profile.vehicle
    schedule = profile.schedule
    charging = profile.charging
    wrap = schedule.wraps_midnight

    return {
        "Purpose": profile.purpose,
        "Day": profile.day,
        "Temperature": f"{_round(vehicle.temperature_c)} °C",
        "Consumption": f"{_round(vehicle.consumption_wh_per_km)} Wh/km",
        "FullCapacity": f"{_round(vehicle.full_capacity_kwh)} kWh",
        "CapacityWithTemperature": f"{_round(vehicle.derated_capacity_kwh)} kWh",
        "PercentOperatingCapacity": format_percent(vehicle.capacity_derate_pct),
        "FullRange": f"{_round(vehicle.full_range_km)} km",
        "RangeWithTemperature": f"{_round(vehicle.derated_range_km)} km",
        "PercentOperatingRange": format_percent(vehicle.range_derate_pct),
        "Distance": f"{_round(schedule.total_distance_km)} km",
        "AvgSpeed": f"{_round(schedule.average_speed_kmh)} km/h",
        "ChargingLocation": vehicle.charging_location,
        "ChargingType": vehicle.charger_type,
        "SoC": format_percent(charging.target_soc_pct),
        "PercentChargingLoss": format_percent(charging.charging_loss_pct),
        "TripNumber": f"{schedule.trip_count} trips",
        "TripStart": [format_clock(t.start_h, wrap) for t in schedule.trips],
        "TripEnd": [format_clock(t.end_h, wrap) for t in schedule.trips],
        "RunTime": format_duration(schedule.running_time_h),
        "StopTime": [format_clock(s) for s in schedule.stops_h],
        "ChargeOnRoad": f"Yes_{charging.onroad_charger}" if charging.charge_on_road else "No",
        "ChargingTimeOnRoad": format_duration(charging.onroad_charge_time_h),
        "BatteryPerc": format_percent(charging.remaining_percent),
        "TotalTimeToCharge": format_duration(charging.total_charge_time_h),
    }


def render_value(value: DisplayValue) -> str:
    """Lists print as ``{'a'  'b'}``, everything else as is."""
    if isinstance(value, list):
        return "{" + "  ".join(f"'{v}'" for v in value) + "}"
    return value
