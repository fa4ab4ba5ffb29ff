"""Dual-sink profile emitter: every line goes to the console and to a file."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TextIO

from ev_mobility_sim.config.policy import DAY_TYPES
from ev_mobility_sim.models.results import VehicleProfile
from ev_mobility_sim.report.formatting import format_day_profile, render_value


class ProfileEmitter:
    """Write simulation blocks to several text streams at once.

    Usage::

        with ProfileEmitter(path="profiles.txt") as emitter:
            result = run_batch(reference, config, on_profile=emitter.emit)

    Each vehicle prints as::

        --- Simulation 1: Workday ---
            Purpose                  : Private
            ...
        --- Simulation 1: Weekend ---
            ...
    """

    def __init__(
        self,
        path: str | Path | None = None,
        stream: TextIO | None = None,
        echo: bool = True,
    ) -> None:
        self._path = Path(path) if path is not None else None
        self._file: TextIO | None = None
        self._streams: list[TextIO] = [stream or sys.stdout] if echo else []

    def __enter__(self) -> "ProfileEmitter":
        if self._path is not None:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._file = self._path.open("w", encoding="utf-8")
            self._streams.append(self._file)
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._file is not None:
            self._streams.remove(self._file)
            self._file.close()
            self._file = None

    def write(self, text: str) -> None:
        for stream in self._streams:
            stream.write(text)

    def emit(self, profile: VehicleProfile) -> None:
        """Print both days of one vehicle, then a blank line."""
        for day in DAY_TYPES:
            self.write(f"--- Simulation {profile.index}: {day} ---\n")
            day_profile = profile.days.get(day)
            if day_profile is None:
                self.write(f"    {'Warning':<25s}: no accepted {day} schedule\n")
                continue
            for key, value in format_day_profile(day_profile).items():
                self.write(f"    {key:<25s}: {render_value(value)}\n")
        self.write("\n")

