"""Reference data provider: segment specs, charger compatibility, temperature bands.

CSV ingestion plus pure lookups over the loaded tables.  Tables are read once
and never mutated, so one ``ReferenceData`` can be shared between worker
threads without locking.

  1. ``load_segment_table``      — ev_segments.csv → list[SegmentSpec]
  2. ``load_charging_table``     — chargingCompatible.csv → list[ChargingCompatibility]
  3. ``load_temperature_table``  — Temperatur.csv → list[TemperatureDeratingRow]
  4. ``ReferenceData``           — lookups that raise ``DataIntegrityError`` on a miss
"""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path

from pydantic import ValidationError

from ev_mobility_sim.config.reference import (
    SEGMENT_GROUPS,
    ChargingCompatibility,
    RoadSpeeds,
    SegmentSpec,
    TemperatureDeratingRow,
    VehicleClass,
)
from ev_mobility_sim.errors import DataIntegrityError, NoTemperatureBand

logger = logging.getLogger(__name__)

BUNDLED_DATA_DIR = Path(__file__).resolve().parent.parent / "data"
SEGMENT_FILE = "ev_segments.csv"
CHARGING_FILE = "chargingCompatible.csv"
TEMPERATURE_FILE = "Temperatur.csv"

_MISSING = (None, "", "NA", "NaN", "nan", "null")
_TRUE = ("true", "1", "yes", "y", "x")
_FALSE = ("false", "0", "no", "n", "")


# ═══════════════════════════════════════════════════════════════════════════
# CSV ingestion
# ═══════════════════════════════════════════════════════════════════════════

def load_segment_table(source: str | Path | io.StringIO) -> list[SegmentSpec]:
    """Parse the vehicle-segment CSV.

    Expected columns (header row required):
      Segment, NomCap_min, NomCap_max, Range_min, Range_max
      [, Quantity, Percentage, AvgSpd_urban, AvgSpd_rural, AvgSpd_highway]

    Speeds are optional but must be given all three or not at all.
    """
    specs: list[SegmentSpec] = []
    for line, row in _read_rows(source):
        where = f"{_name(source)} line {line}"
        label = _text(row, "Segment", where)
        speeds = [row.get(c) for c in ("AvgSpd_urban", "AvgSpd_rural", "AvgSpd_highway")]
        try:
            if all(s in _MISSING for s in speeds):
                road_speeds = None
            else:
                road_speeds = RoadSpeeds(
                    urban=_number(row, "AvgSpd_urban", where),
                    rural=_number(row, "AvgSpd_rural", where),
                    highway=_number(row, "AvgSpd_highway", where),
                )
            specs.append(SegmentSpec(
                segment=label,
                quantity=_optional_number(row, "Quantity", where) or 0.0,
                share_pct=_optional_number(row, "Percentage", where) or 0.0,
                capacity_kwh=(_number(row, "NomCap_min", where), _number(row, "NomCap_max", where)),
                range_km=(_number(row, "Range_min", where), _number(row, "Range_max", where)),
                speeds=road_speeds,
            ))
        except ValidationError as exc:
            raise DataIntegrityError(f"{where}: invalid segment {label!r}: {exc}", key=label) from exc
    return specs


def load_charging_table(source: str | Path | io.StringIO) -> list[ChargingCompatibility]:
    """Parse the charger-compatibility CSV.

    Expected columns: ``Segment`` followed by one flag column per charger
    label (``AC_11kW``, ``DC_150kW``, ...).  Flags accept TRUE/FALSE, 1/0,
    yes/no; blank means not compatible.
    """
    rows: list[ChargingCompatibility] = []
    for line, row in _read_rows(source):
        where = f"{_name(source)} line {line}"
        label = _text(row, "Segment", where)
        chargers = tuple(
            column.strip()
            for column, flag in row.items()
            if column is not None and column != "Segment" and _flag(flag, column, where)
        )
        rows.append(ChargingCompatibility(label=label, chargers=chargers))
    return rows


def load_temperature_table(source: str | Path | io.StringIO) -> list[TemperatureDeratingRow]:
    """Parse the temperature-derating CSV.

    Expected columns:
      Temp_from, Temp_to, Capacity_min, Capacity_max, Range_min, Range_max
    """
    bands: list[TemperatureDeratingRow] = []
    for line, row in _read_rows(source):
        where = f"{_name(source)} line {line}"
        try:
            bands.append(TemperatureDeratingRow(
                temp_from=_number(row, "Temp_from", where),
                temp_to=_number(row, "Temp_to", where),
                capacity_pct=(_number(row, "Capacity_min", where), _number(row, "Capacity_max", where)),
                range_pct=(_number(row, "Range_min", where), _number(row, "Range_max", where)),
            ))
        except ValidationError as exc:
            raise DataIntegrityError(f"{where}: invalid temperature band: {exc}", key=line) from exc
    return bands


def _read_rows(source: str | Path | io.StringIO) -> list[tuple[int, dict[str, str]]]:
    """Read CSV from file path or StringIO, returning (line number, row) pairs."""
    if isinstance(source, io.StringIO):
        source.seek(0)
        reader = csv.DictReader(source)
        return [(i, row) for i, row in enumerate(reader, start=2)]
    path = Path(source)
    with path.open(newline="", encoding="utf-8-sig") as f:
        reader = csv.DictReader(f)
        return [(i, row) for i, row in enumerate(reader, start=2)]


def _name(source: str | Path | io.StringIO) -> str:
    return "<memory>" if isinstance(source, io.StringIO) else Path(source).name


def _text(row: dict[str, str], column: str, where: str) -> str:
    value = row.get(column)
    if value in _MISSING:
        raise DataIntegrityError(f"{where}: missing {column}", key=column)
    return str(value).strip()


def _number(row: dict[str, str], column: str, where: str) -> float:
    value = _optional_number(row, column, where)
    if value is None:
        raise DataIntegrityError(f"{where}: missing {column}", key=column)
    return value


def _optional_number(row: dict[str, str], column: str, where: str) -> float | None:
    value = row.get(column)
    if value is None or str(value).strip() in _MISSING:
        return None
    try:
        return float(str(value).strip())
    except ValueError:
        raise DataIntegrityError(f"{where}: {column}={value!r} is not a number", key=column) from None


def _flag(value: str | None, column: str, where: str) -> bool:
    text = "" if value is None else str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE or text in ("na", "nan", "null"):
        return False
    raise DataIntegrityError(f"{where}: {column}={value!r} is not a flag", key=column)


# ═══════════════════════════════════════════════════════════════════════════
# Provider
# ═══════════════════════════════════════════════════════════════════════════

class ReferenceData:
    """Read-only lookups over the three reference tables.

    Usage::

        ref = ReferenceData.from_csv("ev_segments.csv",
                                     "chargingCompatible.csv",
                                     "Temperatur.csv")
        spec = ref.segment_spec("PKW", "Kompaktklasse")
        chargers = ref.compatible_chargers("PKW")
        band = ref.temperature_band(12.3)

    Every lookup raises ``DataIntegrityError`` (a ``LookupError``) when the
    tables cannot answer it.  Callers must not substitute a default.
    """

    def __init__(
        self,
        segments: list[SegmentSpec],
        compatibility: list[ChargingCompatibility],
        temperature_bands: list[TemperatureDeratingRow],
    ) -> None:
        if not temperature_bands:
            raise DataIntegrityError("temperature table is empty", key="temperature")
        self._segments = {s.segment: s for s in segments}
        self._compatibility = {c.label: c.chargers for c in compatibility}
        self._bands = tuple(temperature_bands)
        self._check_band_coverage()

    # ── Construction ────────────────────────────────────────────────────

    @classmethod
    def from_csv(
        cls,
        segments: str | Path | io.StringIO,
        charging: str | Path | io.StringIO,
        temperature: str | Path | io.StringIO,
    ) -> "ReferenceData":
        ref = cls(
            load_segment_table(segments),
            load_charging_table(charging),
            load_temperature_table(temperature),
        )
        logger.info(
            "Loaded reference data: %d segments, %d charger rows, %d temperature bands",
            len(ref._segments), len(ref._compatibility), len(ref._bands),
        )
        return ref

    @classmethod
    def bundled(cls) -> "ReferenceData":
        """Sample tables shipped with the package."""
        return cls.from_csv(
            BUNDLED_DATA_DIR / SEGMENT_FILE,
            BUNDLED_DATA_DIR / CHARGING_FILE,
            BUNDLED_DATA_DIR / TEMPERATURE_FILE,
        )

    def _check_band_coverage(self) -> None:
        ordered = sorted(self._bands, key=lambda b: b.temp_from)
        for lower, upper in zip(ordered, ordered[1:]):
            if upper.temp_from > lower.temp_to:
                raise DataIntegrityError(
                    f"temperature bands leave a gap between {lower.temp_to} and "
                    f"{upper.temp_from} °C",
                    key=(lower.temp_to, upper.temp_from),
                )

    # ── Segments ────────────────────────────────────────────────────────

    def segment_spec(self, vehicle_class: VehicleClass, segment: str | None = None) -> SegmentSpec:
        """Spec row for a segment of a class.

        ``segment`` defaults to the class's only segment (Van, Bus).  A segment
        that is not grouped under ``vehicle_class`` is a lookup miss.
        """
        members = SEGMENT_GROUPS.get(vehicle_class)
        if members is None:
            raise DataIntegrityError(f"unknown vehicle class {vehicle_class!r}", key=vehicle_class)
        if segment is None:
            if len(members) != 1:
                raise DataIntegrityError(
                    f"{vehicle_class} has several segments; one must be named",
                    key=vehicle_class,
                )
            segment = members[0]
        if segment not in members:
            raise DataIntegrityError(
                f"segment {segment!r} does not belong to {vehicle_class}", key=segment,
            )
        try:
            return self._segments[segment]
        except KeyError:
            raise DataIntegrityError(f"no segment row for {segment!r}", key=segment) from None

    def segments_of(self, vehicle_class: VehicleClass) -> list[SegmentSpec]:
        """All loaded segment rows grouped under ``vehicle_class``."""
        return [
            self._segments[name]
            for name in SEGMENT_GROUPS.get(vehicle_class, ())
            if name in self._segments
        ]

    @property
    def segments(self) -> list[SegmentSpec]:
        return list(self._segments.values())

    # ── Chargers ────────────────────────────────────────────────────────

    def compatible_chargers(self, *labels: str) -> tuple[str, ...]:
        """Charger labels for the first of ``labels`` with a table row.

        Pass the most specific key first, e.g.
        ``compatible_chargers("LKW (over 7.5t)", "LKW")``.
        """
        for label in labels:
            chargers = self._compatibility.get(label)
            if chargers is None:
                continue
            if not chargers:
                raise DataIntegrityError(f"no compatible chargers listed for {label!r}", key=label)
            return chargers
        raise DataIntegrityError(
            f"no charger compatibility row for {' / '.join(labels)!r}",
            key=labels[0] if labels else None,
        )

    # ── Temperature ─────────────────────────────────────────────────────

    @property
    def temperature_bounds(self) -> tuple[float, float]:
        """(lowest Temp_from, highest Temp_to) over all bands."""
        return (
            min(b.temp_from for b in self._bands),
            max(b.temp_to for b in self._bands),
        )

    def temperature_band(self, temperature_c: float) -> TemperatureDeratingRow:
        """First band with ``temp_from <= t < temp_to``.

        The overall upper bound itself belongs to the band that ends there,
        so every temperature drawn from ``temperature_bounds`` is covered.
        """
        for band in self._bands:
            if band.covers(temperature_c):
                return band
        upper = self.temperature_bounds[1]
        if temperature_c == upper:
            for band in self._bands:
                if band.temp_to == upper:
                    return band
        raise NoTemperatureBand(temperature_c)
