"""Training-time sanitation of per-bin observation vectors.

Sanitizers mutate a day's vector in place before it is folded into the
rolling model. Removed bins are marked with ``NaN`` so they carry no weight
during fitting, exactly like bins that were never observed.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np

from .exceptions import ConfigurationError

OUTLIER_FRACTION = 0.5


@runtime_checkable
class TrainingSanitizer(Protocol):
    """Strategy applied to every training vector before the model update."""

    def sanitize(self, values: np.ndarray) -> None:  # pragma: no cover - interface
        ...


def clean_outliers(values: np.ndarray, *, fraction: float = OUTLIER_FRACTION) -> None:
    """Remove bins larger than ``fraction`` of the last bin (closing auction).

    A missing, zero or negative reference means no outlier can be detected and
    the vector is left as is.
    """

    if values.size < 2:
        return
    reference = values[-1]
    if not np.isfinite(reference) or reference <= 0:
        return
    body = values[:-1]
    with np.errstate(invalid="ignore"):
        mask = body > fraction * reference
    body[mask] = np.nan


def cut_head_and_tail(values: np.ndarray, head: int, tail: int) -> None:
    """Remove ``head`` bins from the first and ``tail`` bins from the last value."""

    if head <= 0 and tail <= 0:
        return
    present = np.flatnonzero(np.isfinite(values))
    if present.size == 0:
        return
    first, last = int(present[0]), int(present[-1])
    if head > 0:
        values[first : first + head] = np.nan
    if tail > 0:
        values[max(last - tail + 1, 0) : last + 1] = np.nan


class NoOpSanitizer:
    """Leave training vectors untouched."""

    def sanitize(self, values: np.ndarray) -> None:
        return None

    def __repr__(self) -> str:
        return "NoOpSanitizer()"


class VolumeSanitizer:
    """Outlier rejection followed by head/tail trimming for volume vectors."""

    def __init__(self, ignore_head: int = 0, ignore_tail: int = 0) -> None:
        ignore_head = int(ignore_head)
        ignore_tail = int(ignore_tail)
        if ignore_head < 0 or ignore_tail < 0:
            raise ConfigurationError(
                "ignore_head and ignore_tail must be non-negative "
                f"(got {ignore_head} and {ignore_tail})."
            )
        self._ignore_head = ignore_head
        self._ignore_tail = ignore_tail

    @property
    def ignore_head(self) -> int:
        return self._ignore_head

    @property
    def ignore_tail(self) -> int:
        return self._ignore_tail

    def sanitize(self, values: np.ndarray) -> None:
        clean_outliers(values)
        cut_head_and_tail(values, self._ignore_head, self._ignore_tail)

    def __repr__(self) -> str:
        return (
            f"VolumeSanitizer(ignore_head={self._ignore_head}, "
            f"ignore_tail={self._ignore_tail})"
        )


__all__ = [
    "NoOpSanitizer",
    "OUTLIER_FRACTION",
    "TrainingSanitizer",
    "VolumeSanitizer",
    "clean_outliers",
    "cut_head_and_tail",
]
