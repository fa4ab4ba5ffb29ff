"""Charging behaviour settings shared by every vehicle class."""

from pydantic import BaseModel, Field

from ev_mobility_sim.config.ranges import ValueRange


class ChargingSettings(BaseModel):
    """Charging policy constants.

    The loss ranges model charger-to-battery losses; a loss is only drawn on
    days where charging actually happens.
    """

    safety_buffer_km: float = Field(
        default=20.0, ge=0,
        description="Trips must stay this far below the derated range to avoid on-road charging",
    )
    depot_threshold_pct: float = Field(
        default=80.0, gt=0, le=100,
        description="Remaining battery below this triggers depot/home charging",
    )
    dc_loss_pct: ValueRange = Field(
        default_factory=lambda: ValueRange(low=6, high=8),
        description="Charging loss for DC chargers (%)",
    )
    ac_loss_pct: ValueRange = Field(
        default_factory=lambda: ValueRange(low=5, high=10),
        description="Charging loss for AC (and unlabelled) chargers (%)",
    )
    dc_target_soc_pct: float = Field(default=80.0, gt=0, le=100, description="DC fast charging stops here")
    ac_target_soc_pct: float = Field(default=100.0, gt=0, le=100, description="AC charging fills up")
    ac_reroll_from_kw: float = Field(
        default=7.4, gt=0,
        description="AC rating that is re-drawn to model mixed wallbox installations",
    )
    ac_reroll_to_kw: float = Field(
        default=11.0, gt=0,
        description="Alternative rating for the re-drawn AC chargers",
    )
    onroad_ac_max_kw: float = Field(
        default=22.0, gt=0,
        description="On-road chargers up to this power are labelled AC, above DC",
    )
