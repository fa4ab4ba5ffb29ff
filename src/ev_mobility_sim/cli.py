"""Command-line entry point: ``ev-mobility-sim``.

Examples::

    ev-mobility-sim -n 50 --seed 42 --output profiles.txt --csv profiles.csv
    ev-mobility-sim --config scenarios/base_case.yaml --workers 4
    ev-mobility-sim --segments ev_segments.csv --charging chargingCompatible.csv \\
                    --temperature Temperatur.csv -n 20
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from pydantic import ValidationError

from ev_mobility_sim import __version__
from ev_mobility_sim.config.simulation import RunConfig, load_run_config
from ev_mobility_sim.engine.orchestrator import run_batch
from ev_mobility_sim.engine.reference import (
    BUNDLED_DATA_DIR,
    CHARGING_FILE,
    SEGMENT_FILE,
    TEMPERATURE_FILE,
    ReferenceData,
)
from ev_mobility_sim.errors import DataIntegrityError
from ev_mobility_sim.logging_config import LOG_FORMATS, setup_logging
from ev_mobility_sim.report.emitter import ProfileEmitter
from ev_mobility_sim.report.table import profiles_to_frame

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ev-mobility-sim",
        description="Generate synthetic daily mobility and charging profiles for EVs.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    data = parser.add_argument_group("reference tables (default: bundled sample data)")
    data.add_argument("--segments", type=Path, default=BUNDLED_DATA_DIR / SEGMENT_FILE,
                      help="Vehicle segment CSV")
    data.add_argument("--charging", type=Path, default=BUNDLED_DATA_DIR / CHARGING_FILE,
                      help="Charger compatibility CSV")
    data.add_argument("--temperature", type=Path, default=BUNDLED_DATA_DIR / TEMPERATURE_FILE,
                      help="Temperature derating CSV")

    run = parser.add_argument_group("run")
    run.add_argument("--config", type=Path, help="YAML run configuration")
    run.add_argument("-n", "--profiles", type=int, help="Total profiles to generate")
    run.add_argument("--seed", type=int, help="Master random seed")
    run.add_argument("--workers", type=int, help="Worker threads")
    run.add_argument("--max-attempts", type=int, help="Candidate schedules per day before giving up")
    run.add_argument("--fail-fast", action="store_true",
                     help="Abort on the first data-integrity error")

    out = parser.add_argument_group("output")
    out.add_argument("-o", "--output", type=Path, help="Also write profile text to this file")
    out.add_argument("--csv", type=Path, help="Write one row per vehicle-day to this CSV")
    out.add_argument("-q", "--quiet", action="store_true", help="Do not print profiles to the console")
    out.add_argument("--log-level", default="INFO",
                     choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    out.add_argument("--log-format", default="simple", choices=sorted(LOG_FORMATS))
    out.add_argument("--log-file", type=Path, help="Also write log records to this file")
    return parser


def resolve_config(args: argparse.Namespace) -> RunConfig:
    """YAML config (if any) with command-line flags layered on top."""
    config = load_run_config(args.config) if args.config else RunConfig()
    overrides: dict = {"simulation": {}, "fleet": {}}
    if args.profiles is not None:
        overrides["fleet"]["total_profiles"] = args.profiles
    if args.seed is not None:
        overrides["simulation"]["random_seed"] = args.seed
    if args.workers is not None:
        overrides["simulation"]["workers"] = args.workers
    if args.max_attempts is not None:
        overrides["simulation"]["max_attempts"] = args.max_attempts
    if args.fail_fast:
        overrides["simulation"]["fail_fast"] = True
    base = config.model_dump(mode="json")
    for section, values in overrides.items():
        base[section].update(values)
    return RunConfig.model_validate(base)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_file, args.log_format)

    try:
        config = resolve_config(args)
        reference = ReferenceData.from_csv(args.segments, args.charging, args.temperature)
    except (ValidationError, ValueError, OSError, DataIntegrityError) as exc:
        logger.error("Invalid input: %s", exc)
        return 2

    try:
        with ProfileEmitter(path=args.output, echo=not args.quiet) as emitter:
            result = run_batch(reference, config, on_profile=emitter.emit)
    except DataIntegrityError as exc:
        logger.error("Aborted: %s [key=%r]", exc, exc.key)
        return 2
    except ValueError as exc:
        logger.error("Cannot plan the fleet: %s", exc)
        return 2

    if args.csv:
        args.csv.parent.mkdir(parents=True, exist_ok=True)
        profiles_to_frame(result).to_csv(args.csv, index=False)
        logger.info("Wrote %s", args.csv)

    logger.info(
        "Done: %d profiles, %d failed, %d warnings",
        len(result.profiles), len(result.failures),
        sum(len(p.warnings) for p in result.profiles),
    )
    return 1 if result.failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
