"""Error taxonomy for profile generation.

``DataIntegrityError`` is fatal for the affected vehicle (bad or missing
reference data).  ``ConstraintUnsatisfiable`` only costs one day-profile:
the rejection loop gave up after ``max_attempts`` candidates.
"""

from __future__ import annotations

from collections import Counter


class ProfileGenerationError(Exception):
    """Base class for everything the generator raises on purpose."""


class DataIntegrityError(ProfileGenerationError, LookupError):
    """Reference data cannot answer a lookup (missing row, bad label, gap in bands)."""

    def __init__(self, message: str, key: object = None) -> None:
        super().__init__(message)
        self.key = key


class NoTemperatureBand(DataIntegrityError):
    """No derating interval covers the sampled ambient temperature."""

    def __init__(self, temperature_c: float) -> None:
        super().__init__(
            f"No temperature band covers {temperature_c:.2f} °C", key=temperature_c,
        )
        self.temperature_c = temperature_c


class MalformedChargerLabel(DataIntegrityError):
    """A charger label carries no numeric kW rating (e.g. ``"AC_fast"``)."""

    def __init__(self, label: str) -> None:
        super().__init__(f"Charger label {label!r} has no kW rating", key=label)
        self.label = label


class ConstraintUnsatisfiable(ProfileGenerationError):
    """The schedule rejection loop exhausted its attempt budget."""

    def __init__(
        self,
        policy: str,
        day: str,
        attempts: int,
        rejections: Counter[str] | None = None,
    ) -> None:
        self.policy = policy
        self.day = day
        self.attempts = attempts
        self.rejections = rejections or Counter()
        top = ", ".join(f"{k}={v}" for k, v in self.rejections.most_common(3))
        super().__init__(
            f"No accepted {day} schedule for {policy!r} after {attempts} attempts"
            + (f" (rejected by: {top})" if top else "")
        )
