"""Volume profile of the "typical" stock of a market for the next session.

After receiving the traded volume of every bin for every stock in the
market, :class:`PCAVolumeProfilePredictor` forecasts the common intraday
profile for the next day. Sessions are expected to have an open and a close
but no pauses. Profiles are scaled so that the known bins always add up to
100; unknown bins are ``NaN``.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING, Iterable

import numpy as np

from ..diagnostics import NEGATIVE_CLAMPED, ZERO_SUM, DiagnosticEvent, DiagnosticsSink
from ..exceptions import ConfigurationError
from ..fields import Field
from ..sanitizers import VolumeSanitizer
from ..sessions import InstantGenerator, as_date
from .day_by_day import PCADayByDayPredictor
from .profile import VolumeProfile

if TYPE_CHECKING:  # pragma: no cover - import for annotations only
    from ..config import VolumeProfileConfig

LOGGER = logging.getLogger(__name__)

PROFILE_SCALE = 100.0
ZERO_SUM_POLICIES: tuple[str, ...] = ("nan", "uniform")


def _validate_zero_sum_policy(policy: str) -> str:
    normalized = str(policy).strip().lower()
    if normalized not in ZERO_SUM_POLICIES:
        raise ConfigurationError(
            f"Unknown zero_sum_policy '{policy}'. Expected one of {ZERO_SUM_POLICIES}."
        )
    return normalized


def normalize_profile(
    values: Iterable[float] | np.ndarray,
    scale: float = PROFILE_SCALE,
    *,
    diagnostics: DiagnosticsSink | None = None,
    day: date | None = None,
    zero_sum_policy: str = "nan",
) -> np.ndarray:
    """Clamp negative bins to zero and rescale known bins to sum to ``scale``.

    ``NaN`` bins are neither clamped nor counted and stay ``NaN``. Every clamp
    is reported to ``diagnostics``. When the clamped sum is zero the
    ``zero_sum_policy`` decides the result: ``"nan"`` makes every bin
    unknown, ``"uniform"`` spreads ``scale`` evenly over the known bins.
    """

    policy = _validate_zero_sum_policy(zero_sum_policy)
    result = np.array(values, dtype=float).reshape(-1)
    known = ~np.isnan(result)
    if not known.any():
        return result

    for index in np.flatnonzero(known & (result < 0)):
        if diagnostics is not None:
            diagnostics.report(
                DiagnosticEvent(
                    kind=NEGATIVE_CLAMPED,
                    message="Setting negative value for prediction to 0",
                    day=day,
                    index=int(index),
                    value=float(result[index]),
                )
            )
        result[index] = 0.0

    total = float(result[known].sum())
    if total == 0.0:
        if diagnostics is not None:
            diagnostics.report(
                DiagnosticEvent(
                    kind=ZERO_SUM,
                    message=f"Prediction sums to zero; applying '{policy}' fallback",
                    day=day,
                )
            )
        if policy == "uniform":
            result[known] = scale / int(known.sum())
        else:
            result[:] = np.nan
        return result

    result[known] = result[known] * scale / total
    return result


class PCAVolumeProfilePredictor(PCADayByDayPredictor):
    """Day-by-day PCA predictor of the market volume profile.

    Training vectors lose their outliers (bins above half of the closing
    auction) and, optionally, ``ignore_head`` bins from the first and
    ``ignore_tail`` bins from the last bin with a value. Predictions are
    clamped to non-negative values and rescaled to 100.
    """

    def __init__(
        self,
        instant_generator: InstantGenerator,
        minimum_variance: float,
        symbols: Iterable[str] | str,
        ignore_head: int = 0,
        ignore_tail: int = 0,
        *,
        diagnostics: DiagnosticsSink | None = None,
        window_days: int | None = None,
        zero_sum_policy: str = "nan",
    ) -> None:
        super().__init__(
            instant_generator,
            Field.VOLUME,
            minimum_variance,
            PROFILE_SCALE,
            symbols,
            sanitizer=VolumeSanitizer(ignore_head, ignore_tail),
            diagnostics=diagnostics,
            window_days=window_days,
        )
        self.zero_sum_policy = _validate_zero_sum_policy(zero_sum_policy)

    @classmethod
    def from_config(
        cls,
        config: "VolumeProfileConfig",
        *,
        diagnostics: DiagnosticsSink | None = None,
    ) -> "PCAVolumeProfilePredictor":
        return cls(
            config.instant_generator(),
            config.minimum_variance,
            config.symbols,
            config.ignore_head,
            config.ignore_tail,
            diagnostics=diagnostics,
            window_days=config.window_days,
            zero_sum_policy=config.zero_sum_policy,
        )

    @property
    def ignore_head(self) -> int:
        return self.sanitizer.ignore_head

    @property
    def ignore_tail(self) -> int:
        return self.sanitizer.ignore_tail

    def predict(self, day: date) -> VolumeProfile:
        """Forecast the volume profile of ``day``."""

        day = as_date(day)
        raw = self.predict_vector(day)
        values = normalize_profile(
            raw,
            self.scale,
            diagnostics=self.diagnostics,
            day=day,
            zero_sum_policy=self.zero_sum_policy,
        )
        profile = VolumeProfile(
            day=day,
            values=values,
            scale=self.scale,
            instants=self.instant_generator.instants(day),
        )
        if not profile.is_defined:
            LOGGER.info("Volume profile for %s is undefined", day)
        return profile

    def describe(self) -> str:
        """Human readable name of the predictor."""

        if self.scale <= 0:
            return "Not Normalized PCA Volume Profile Considering all market values Predictor"
        return (
            f"Normalized to {self.scale} PCA Volume Profile Considering all market "
            "values Predictor"
        )

    def __str__(self) -> str:
        return self.describe()


__all__ = [
    "PCAVolumeProfilePredictor",
    "PROFILE_SCALE",
    "ZERO_SUM_POLICIES",
    "normalize_profile",
]
