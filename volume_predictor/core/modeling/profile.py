from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterator

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class VolumeProfile:
    """Per-bin volume distribution forecast for one trading day.

    ``values`` holds one entry per bin; ``NaN`` marks bins whose share is
    unknown. Known entries are non-negative and sum to ``scale`` whenever the
    profile is defined.
    """

    day: date
    values: np.ndarray
    scale: float
    instants: pd.DatetimeIndex | None = None

    @property
    def is_defined(self) -> bool:
        return bool(np.isfinite(self.values).any())

    @property
    def total(self) -> float:
        """Sum of the known bins."""

        finite = self.values[np.isfinite(self.values)]
        return float(finite.sum()) if finite.size else float("nan")

    def to_series(self) -> pd.Series:
        index = self.instants if self.instants is not None else pd.RangeIndex(len(self.values))
        return pd.Series(self.values, index=index, name=self.day.isoformat())

    def to_dict(self) -> dict[str, Any]:
        """Return a plain dictionary representation suitable for serialization."""

        return {
            "day": self.day.isoformat(),
            "scale": float(self.scale),
            "values": [None if np.isnan(value) else float(value) for value in self.values],
            "instants": (
                [stamp.isoformat() for stamp in self.instants]
                if self.instants is not None
                else None
            ),
        }

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[float]:
        return iter(self.values.tolist())

    def __array__(self, dtype=None, copy=None) -> np.ndarray:
        return np.asarray(self.values, dtype=dtype)


__all__ = ["VolumeProfile"]
