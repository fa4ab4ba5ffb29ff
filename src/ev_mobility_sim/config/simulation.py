"""Top-level run configuration: bundles policies, charging, fleet and engine settings."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator

from ev_mobility_sim.config.charging import ChargingSettings
from ev_mobility_sim.config.policy import TripPolicy, default_policies
from ev_mobility_sim.config.reference import VEHICLE_CLASSES, VehicleClass

CAR_PURPOSES: tuple[str, ...] = ("Job & Education", "Private", "Service")


class SimulationConfig(BaseModel):
    """Engine-level settings."""

    random_seed: int | None = Field(
        default=None,
        description="Master seed for reproducible batches. None = non-deterministic.",
    )
    max_attempts: int = Field(
        default=100_000, ge=1,
        description="Candidate schedules tried per day before giving up on it",
    )
    workers: int = Field(
        default=1, ge=1, le=64,
        description="Threads generating vehicles concurrently. Output order is "
                    "always by vehicle index.",
    )
    fail_fast: bool = Field(
        default=False,
        description="Abort the batch on the first data-integrity error instead of "
                    "skipping the affected vehicle.",
    )


class FleetConfig(BaseModel):
    """How many profiles to generate and how car purposes are mixed."""

    total_profiles: int = Field(default=10, ge=1, description="Vehicles to simulate")
    car_purpose_shares: dict[str, float] = Field(
        default_factory=lambda: dict(zip(CAR_PURPOSES, (0.35, 0.5, 0.15))),
        description="Probability of each purpose for a passenger car",
    )

    @model_validator(mode="after")
    def _check_shares(self) -> "FleetConfig":
        if not self.car_purpose_shares:
            raise ValueError("car_purpose_shares must not be empty")
        if any(v < 0 for v in self.car_purpose_shares.values()):
            raise ValueError("car_purpose_shares must be non-negative")
        if sum(self.car_purpose_shares.values()) <= 0:
            raise ValueError("car_purpose_shares must not all be zero")
        return self


class RunConfig(BaseModel):
    """Complete input bundle for one batch run."""

    policies: dict[str, TripPolicy] = Field(default_factory=default_policies)
    charging: ChargingSettings = Field(default_factory=ChargingSettings)
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)
    fleet: FleetConfig = Field(default_factory=FleetConfig)

    @model_validator(mode="after")
    def _every_vehicle_has_a_policy(self) -> "RunConfig":
        required = [*self.fleet.car_purpose_shares, *(c for c in VEHICLE_CLASSES if c != "PKW")]
        missing = [p for p in required if p not in self.policies]
        if missing:
            raise ValueError(f"no trip policy named: {', '.join(missing)}")
        return self

    def policy_name(self, vehicle_class: VehicleClass, purpose: str) -> str:
        """Policy key for a vehicle: cars by purpose, other classes by class name."""
        return purpose if vehicle_class == "PKW" else vehicle_class

    def policy_for(self, vehicle_class: VehicleClass, purpose: str) -> TripPolicy:
        name = self.policy_name(vehicle_class, purpose)
        try:
            return self.policies[name]
        except KeyError:
            raise KeyError(f"no trip policy named {name!r}") from None


def deep_merge(base: dict, overrides: dict) -> dict:
    """Recursively merge overrides into base dict."""
    for key, val in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(val, dict):
            deep_merge(base[key], val)
        else:
            base[key] = val
    return base


def build_run_config(overrides: dict[str, Any] | None = None) -> RunConfig:
    """Build a RunConfig from partial overrides merged onto defaults."""
    defaults = RunConfig().model_dump(mode="json")
    if overrides:
        overrides = copy.deepcopy(overrides)
        deep_merge(defaults, overrides)
        # Purpose shares are a distribution: given ones replace the defaults whole.
        shares = overrides.get("fleet", {}).get("car_purpose_shares")
        if shares is not None:
            defaults["fleet"]["car_purpose_shares"] = shares
    return RunConfig.model_validate(defaults)


def load_run_config(path: str | Path) -> RunConfig:
    """Load a YAML run configuration; omitted keys keep their defaults."""
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping")
    return build_run_config(data)
