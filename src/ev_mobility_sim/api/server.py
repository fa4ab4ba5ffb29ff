"""FastAPI server — HTTP access to the profile generator.

Run with:
    uvicorn ev_mobility_sim.api.server:app --reload --port 8000

Or:
    ev-mobility-api

Endpoints:
    GET  /health     — liveness probe
    GET  /           — welcome message and endpoint list
    GET  /schema     — JSON Schema of the run configuration
    GET  /defaults   — complete default run configuration
    GET  /policies   — trip policy names and schedule models
    POST /generate   — run a batch on the bundled reference tables
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, ValidationError

from ev_mobility_sim import __version__
from ev_mobility_sim.config.simulation import RunConfig, build_run_config
from ev_mobility_sim.engine.orchestrator import run_batch
from ev_mobility_sim.engine.reference import ReferenceData
from ev_mobility_sim.errors import DataIntegrityError
from ev_mobility_sim.report.formatting import format_day_profile

MAX_PROFILES_PER_REQUEST = 500


# ═══════════════════════════════════════════════════════════════════════════
# App setup
# ═══════════════════════════════════════════════════════════════════════════

app = FastAPI(
    title="EV Mobility Profile Synthesizer API",
    version=__version__,
    description=(
        "Generate synthetic daily trip schedules and charging needs for "
        "electric cars, vans, trucks and buses. Start with GET /defaults to see "
        "every tunable parameter, then POST partial overrides to /generate."
    ),
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# ═══════════════════════════════════════════════════════════════════════════
# Request / response models
# ═══════════════════════════════════════════════════════════════════════════

class GenerateRequest(BaseModel):
    """Request body for /generate. All fields optional — defaults used for missing."""
    config: dict[str, Any] = Field(
        default_factory=dict,
        description="Partial or full RunConfig JSON. Missing fields use defaults. "
                    "Example: {'fleet': {'total_profiles': 20}, 'simulation': {'random_seed': 7}}",
    )
    include_display: bool = Field(
        default=True,
        description="Also return the formatted display record of every day profile",
    )


class GenerateResponse(BaseModel):
    """Response from /generate."""
    requested_profiles: int
    allocation: dict[str, int]
    profiles: list[dict[str, Any]]
    failures: list[dict[str, Any]]
    display: list[dict[str, Any]] = Field(default_factory=list)


# ═══════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════

@lru_cache(maxsize=1)
def get_reference() -> ReferenceData:
    """Bundled reference tables, loaded on first use."""
    return ReferenceData.bundled()


def _build_config(overrides: dict[str, Any]) -> RunConfig:
    try:
        config = build_run_config(overrides)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors(include_url=False, include_context=False)) from None
    if config.fleet.total_profiles > MAX_PROFILES_PER_REQUEST:
        raise HTTPException(
            status_code=422,
            detail=f"total_profiles is limited to {MAX_PROFILES_PER_REQUEST} per request",
        )
    return config


# ═══════════════════════════════════════════════════════════════════════════
# Endpoints
# ═══════════════════════════════════════════════════════════════════════════

@app.get("/health")
def health_check():
    """Health check for deployment platforms."""
    return {"status": "ok"}


@app.get("/")
def root():
    """API root — returns a welcome message and the endpoint list."""
    return {
        "name": "EV Mobility Profile Synthesizer API",
        "version": __version__,
        "endpoints": ["/health", "/schema", "/defaults", "/policies", "/generate"],
        "docs": "GET /docs (interactive Swagger UI)",
    }


@app.get("/schema")
def get_schema():
    """Full JSON Schema for RunConfig — all inputs with types, defaults, constraints."""
    return RunConfig.model_json_schema()


@app.get("/defaults")
def get_defaults():
    """Complete default RunConfig as JSON. Use as a starting point for overrides."""
    return RunConfig().model_dump(mode="json")


@app.get("/policies")
def list_policies():
    """Trip policy names with their schedule model and on-road charger powers."""
    return {
        name: {"kind": policy.kind, "onroad_powers_kw": policy.onroad_powers_kw}
        for name, policy in RunConfig().policies.items()
    }


@app.post("/generate", response_model=GenerateResponse)
def generate(req: GenerateRequest):
    """Generate a batch of vehicle profiles.

    Vehicles with bad reference data are listed under ``failures``; days
    whose schedule could not be satisfied are missing from that vehicle's
    ``days`` and explained in its ``warnings``.
    """
    config = _build_config(req.config)
    try:
        result = run_batch(get_reference(), config)
    except DataIntegrityError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from None
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from None

    display = []
    if req.include_display:
        display = [
            {"index": p.index, "day": day, "record": format_day_profile(dp)}
            for p in result.profiles
            for day, dp in p.days.items()
        ]
    return GenerateResponse(
        requested_profiles=result.requested_profiles,
        allocation=result.allocation,
        profiles=[p.model_dump(mode="json") for p in result.profiles],
        failures=[f.model_dump(mode="json") for f in result.failures],
        display=display,
    )


# ═══════════════════════════════════════════════════════════════════════════
# CLI entry point
# ═══════════════════════════════════════════════════════════════════════════

def main():
    """Run the API server."""
    import uvicorn
    uvicorn.run(
        "ev_mobility_sim.api.server:app",
        host="0.0.0.0",
        port=8000,
        reload=False,
    )


if __name__ == "__main__":
    main()
