"""Walk-forward evaluation of volume profile forecasts."""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Mapping, Sequence

import numpy as np
import pandas as pd
from sklearn.metrics import mean_absolute_error, mean_squared_error

from .modeling.volume_profile import PCAVolumeProfilePredictor, normalize_profile
from .observations import DailyVectors

LOGGER = logging.getLogger(__name__)

EVALUATION_COLUMNS = ["day", "mae", "rmse", "bins"]


def realized_profile(
    vectors: Mapping[str, Sequence[float] | np.ndarray],
    symbols: Iterable[str],
    scale: float,
) -> np.ndarray | None:
    """Market profile actually traded: bin-wise sum over ``symbols``, rescaled.

    Bins no symbol traded are ``NaN``. Returns ``None`` when no tracked symbol
    is present.
    """

    tracked = set(symbols)
    rows = [
        np.asarray(values, dtype=float)
        for symbol, values in vectors.items()
        if str(symbol).strip().upper() in tracked
    ]
    if not rows:
        return None
    try:
        matrix = np.vstack(rows)
    except ValueError:
        LOGGER.warning("Realized vectors have inconsistent lengths; skipping day.")
        return None
    finite = np.isfinite(matrix)
    totals = np.where(finite, matrix, 0.0).sum(axis=0)
    totals[~finite.any(axis=0)] = np.nan
    return normalize_profile(totals, scale)


def evaluate_walk_forward(
    predictor: PCAVolumeProfilePredictor,
    daily: DailyVectors,
    *,
    warmup_days: int = 1,
) -> pd.DataFrame:
    """Predict each day before learning it and score against the realized profile."""

    if warmup_days < 1:
        raise ValueError("warmup_days must be at least 1.")

    records: list[dict[str, object]] = []
    for position, day in enumerate(sorted(daily)):
        vectors = daily[day]
        if position >= warmup_days:
            records.append(_score_day(predictor, day, vectors))
        predictor.learn(day, vectors)

    LOGGER.info("Walk-forward evaluation scored %d days", len(records))
    return pd.DataFrame.from_records(records, columns=EVALUATION_COLUMNS)


def _score_day(
    predictor: PCAVolumeProfilePredictor,
    day: date,
    vectors: Mapping[str, Sequence[float] | np.ndarray],
) -> dict[str, object]:
    forecast = predictor.predict(day).values
    actual = realized_profile(vectors, predictor.symbols, predictor.scale)
    if actual is None or actual.shape != forecast.shape:
        return {"day": day, "mae": np.nan, "rmse": np.nan, "bins": 0}

    comparable = np.isfinite(forecast) & np.isfinite(actual)
    if not comparable.any():
        return {"day": day, "mae": np.nan, "rmse": np.nan, "bins": 0}

    y_true = actual[comparable]
    y_pred = forecast[comparable]
    return {
        "day": day,
        "mae": float(mean_absolute_error(y_true, y_pred)),
        "rmse": float(np.sqrt(mean_squared_error(y_true, y_pred))),
        "bins": int(comparable.sum()),
    }


__all__ = ["EVALUATION_COLUMNS", "evaluate_walk_forward", "realized_profile"]
