"""Align long-format market observations into per-day, per-symbol bin vectors."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable

import numpy as np
import pandas as pd

from .exceptions import ConfigurationError
from .fields import Field
from .sessions import InstantGenerator

LOGGER = logging.getLogger(__name__)

DailyVectors = dict[date, dict[str, np.ndarray]]


def normalize_symbols(symbols: Iterable[str] | str | None) -> tuple[str, ...]:
    """Return a sorted tuple of unique, upper-cased symbols.

    Strings are split on commas. An empty result is a configuration error.
    """

    if symbols is None:
        candidates: list[str] = []
    elif isinstance(symbols, str):
        candidates = symbols.split(",")
    else:
        candidates = [str(item) for item in symbols]
    cleaned = {token.strip().upper() for token in candidates if token and token.strip()}
    if not cleaned:
        raise ConfigurationError("At least one symbol is required.")
    return tuple(sorted(cleaned))


def _align_timezone(stamps: pd.Series, timezone: str | None) -> pd.Series:
    if timezone:
        if stamps.dt.tz is None:
            return stamps.dt.tz_localize(timezone)
        return stamps.dt.tz_convert(timezone)
    if stamps.dt.tz is not None:
        return stamps.dt.tz_localize(None)
    return stamps


def _bin_step(instants: pd.DatetimeIndex, generator: InstantGenerator) -> pd.Timedelta | None:
    if len(instants) == 0:
        return None
    if len(instants) > 1:
        return instants[1] - instants[0]
    minutes = getattr(generator, "bin_minutes", None)
    if minutes:
        return pd.Timedelta(timedelta(minutes=int(minutes)))
    return None


def daily_vectors(
    frame: pd.DataFrame,
    instant_generator: InstantGenerator,
    *,
    field: Field = Field.VOLUME,
    symbols: Iterable[str] | str | None = None,
    timestamp_column: str = "timestamp",
    symbol_column: str = "symbol",
) -> DailyVectors:
    """Group ``frame`` rows into one vector per trading day and symbol.

    Rows outside the session or carrying non-finite values are dropped. Bins
    without any row stay ``NaN``; several rows in the same bin are combined
    with the field's aggregation.
    """

    missing = [
        column
        for column in (timestamp_column, symbol_column, field.column)
        if column not in frame.columns
    ]
    if missing:
        raise KeyError(f"Observation frame is missing required columns: {missing}")

    data = frame.loc[:, [timestamp_column, symbol_column, field.column]].copy()
    data[timestamp_column] = _align_timezone(
        pd.to_datetime(data[timestamp_column]),
        getattr(instant_generator, "timezone", None),
    )
    data[symbol_column] = data[symbol_column].astype(str).str.strip().str.upper()
    data[field.column] = pd.to_numeric(data[field.column], errors="coerce")
    data = data[np.isfinite(data[field.column].to_numpy(dtype=float))]
    if symbols is not None:
        data = data[data[symbol_column].isin(normalize_symbols(symbols))]
    data = data.sort_values(timestamp_column, kind="stable")

    result: DailyVectors = {}
    for day, day_rows in data.groupby(data[timestamp_column].dt.date, sort=True):
        instants = instant_generator.instants(day)
        step = _bin_step(instants, instant_generator)
        if step is None:
            LOGGER.debug("No bins available for %s; skipping.", day)
            continue

        stamps = pd.DatetimeIndex(day_rows[timestamp_column])
        positions = instants.searchsorted(stamps, side="right") - 1
        inside = (positions >= 0) & (stamps < instants[-1] + step)
        dropped = int((~inside).sum())
        if dropped:
            LOGGER.debug("Dropped %d observations outside the session on %s.", dropped, day)

        binned = day_rows.loc[inside, [symbol_column, field.column]].assign(
            _bin=positions[inside]
        )
        aggregated = binned.groupby([symbol_column, "_bin"], sort=True)[field.column].agg(
            field.aggregation
        )

        vectors: dict[str, np.ndarray] = {}
        for symbol, series in aggregated.groupby(level=0, sort=True):
            vector = np.full(len(instants), np.nan)
            vector[series.index.get_level_values("_bin").to_numpy()] = series.to_numpy(
                dtype=float
            )
            vectors[str(symbol)] = vector
        if vectors:
            result[day] = vectors

    return result


__all__ = ["DailyVectors", "daily_vectors", "normalize_symbols"]
