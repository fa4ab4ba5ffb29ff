"""Closed numeric intervals used by every sampling parameter."""

from __future__ import annotations

from typing import Any

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, model_validator


class ValueRange(BaseModel):
    """Closed real interval ``[low, high]``, sampled uniformly.

    Accepts a two-element list in YAML/JSON (``[0.1, 2.5]``) as well as the
    mapping form.  ``low > high`` is rejected at load time so that sampling
    never sees an inverted range.
    """

    model_config = ConfigDict(frozen=True)

    low: float = Field(description="Lower bound (inclusive)")
    high: float = Field(description="Upper bound (inclusive)")

    @model_validator(mode="before")
    @classmethod
    def _from_pair(cls, data: Any) -> Any:
        if isinstance(data, (list, tuple)):
            if len(data) != 2:
                raise ValueError(f"expected [low, high], got {len(data)} values")
            return {"low": data[0], "high": data[1]}
        return data

    @model_validator(mode="after")
    def _ordered(self) -> "ValueRange":
        if self.low > self.high:
            raise ValueError(f"low ({self.low}) must not exceed high ({self.high})")
        return self

    @property
    def width(self) -> float:
        return self.high - self.low

    def contains(self, value: float) -> bool:
        return self.low <= value <= self.high

    def sample(self, rng: np.random.Generator) -> float:
        return float(self.low + self.width * rng.random())


class IntRange(BaseModel):
    """Closed integer interval ``[low, high]``, sampled uniformly."""

    model_config = ConfigDict(frozen=True)

    low: int = Field(description="Smallest value (inclusive)")
    high: int = Field(description="Largest value (inclusive)")

    @model_validator(mode="before")
    @classmethod
    def _from_pair(cls, data: Any) -> Any:
        if isinstance(data, (list, tuple)):
            if len(data) != 2:
                raise ValueError(f"expected [low, high], got {len(data)} values")
            return {"low": data[0], "high": data[1]}
        return data

    @model_validator(mode="after")
    def _ordered(self) -> "IntRange":
        if self.low > self.high:
            raise ValueError(f"low ({self.low}) must not exceed high ({self.high})")
        return self

    def sample(self, rng: np.random.Generator) -> int:
        return int(rng.integers(self.low, self.high, endpoint=True))
