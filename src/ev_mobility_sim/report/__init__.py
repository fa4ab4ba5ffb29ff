"""Report — display formatting, dual-sink emitter and tabular export."""

from ev_mobility_sim.report.formatting import (
    DISPLAY_FIELDS,
    format_clock,
    format_day_profile,
    format_duration,
    format_percent,
    render_value,
)
from ev_mobility_sim.report.emitter import ProfileEmitter
from ev_mobility_sim.report.table import profiles_to_frame

__all__ = [
    "DISPLAY_FIELDS",
    "format_clock",
    "format_day_profile",
    "format_duration",
    "format_percent",
    "render_value",
    "ProfileEmitter",
    "profiles_to_frame",
]
