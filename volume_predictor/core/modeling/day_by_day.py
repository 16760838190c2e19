"""Rolling PCA model forecasting next-day per-bin vectors from pooled symbols."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Mapping, Sequence

import numpy as np
import pandas as pd
from sklearn.decomposition import PCA
from sklearn.impute import SimpleImputer

from ..diagnostics import (
    BIN_COUNT_MISMATCH,
    EMPTY_OBSERVATION,
    VALUES_REMOVED,
    DiagnosticEvent,
    DiagnosticsSink,
    default_diagnostics,
)
from ..exceptions import BinAlignmentError, ConfigurationError
from ..fields import Field
from ..observations import daily_vectors, normalize_symbols
from ..sanitizers import NoOpSanitizer, TrainingSanitizer
from ..sessions import InstantGenerator, as_date

LOGGER = logging.getLogger(__name__)


def _column_mean(matrix: np.ndarray) -> np.ndarray:
    """Mean of the finite entries of each column, ``NaN`` for empty columns."""

    finite = np.isfinite(matrix)
    counts = finite.sum(axis=0)
    totals = np.where(finite, matrix, 0.0).sum(axis=0)
    means = np.full(matrix.shape[1], np.nan)
    np.divide(totals, counts, out=means, where=counts > 0)
    return means


@dataclass(frozen=True)
class _FittedModel:
    forecast: np.ndarray
    n_components: int | None
    explained_variance_ratio: np.ndarray | None


class PCADayByDayPredictor:
    """Use every learned day before a target day to forecast its bin vector.

    Each learned day contributes one observation row per tracked symbol.
    Observations are sanitized, scaled to ``scale`` when it is positive and
    stacked into a matrix on which a PCA keeping ``minimum_variance`` of the
    explained variance is fitted. The forecast for a day is the latest
    learned day's mean observation projected onto the retained components.
    Bins never observed in the history are forecast as ``NaN``.
    """

    def __init__(
        self,
        instant_generator: InstantGenerator,
        field: Field,
        minimum_variance: float,
        scale: float,
        symbols: Iterable[str] | str,
        *,
        sanitizer: TrainingSanitizer | None = None,
        diagnostics: DiagnosticsSink | None = None,
        window_days: int | None = None,
    ) -> None:
        minimum_variance = float(minimum_variance)
        if not 0.0 < minimum_variance <= 1.0:
            raise ConfigurationError(
                f"minimum_variance must be in (0, 1], got {minimum_variance}."
            )
        if window_days is not None and int(window_days) < 1:
            raise ConfigurationError("window_days must be at least 1 when provided.")

        self.instant_generator = instant_generator
        self.field = Field.from_name(field)
        self.minimum_variance = minimum_variance
        self.scale = float(scale)
        self.symbols = normalize_symbols(symbols)
        self.sanitizer: TrainingSanitizer = (
            sanitizer if sanitizer is not None else NoOpSanitizer()
        )
        self.diagnostics: DiagnosticsSink = (
            diagnostics if diagnostics is not None else default_diagnostics()
        )
        self.window_days = int(window_days) if window_days is not None else None

        self._tracked = frozenset(self.symbols)
        self._history: dict[date, pd.DataFrame] = {}
        self._width: int | None = None
        self._cache: dict[tuple[date, ...], _FittedModel] = {}
        self._last_fit: _FittedModel | None = None

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def days(self) -> list[date]:
        return sorted(self._history)

    @property
    def n_days(self) -> int:
        return len(self._history)

    @property
    def history(self) -> pd.DataFrame:
        """Observation rows indexed by ``(day, symbol)``, one column per bin."""

        if not self._history:
            return pd.DataFrame(
                index=pd.MultiIndex.from_tuples([], names=["day", "symbol"])
            )
        days = self.days
        frame = pd.concat([self._history[day] for day in days], keys=days)
        frame.index.names = ["day", "symbol"]
        return frame

    @property
    def n_components_(self) -> int | None:
        return self._last_fit.n_components if self._last_fit is not None else None

    @property
    def explained_variance_ratio_(self) -> np.ndarray | None:
        if self._last_fit is None:
            return None
        return self._last_fit.explained_variance_ratio

    def reset(self) -> None:
        self._history.clear()
        self._cache.clear()
        self._width = None
        self._last_fit = None

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------
    def learn(self, day: date, vectors: Mapping[str, Sequence[float] | np.ndarray]) -> int:
        """Fold one day of per-symbol vectors into the rolling history.

        Returns the number of observation rows kept for ``day``.
        """

        day = as_date(day)
        bins = len(self.instant_generator.instants(day))
        if self._width is not None and bins != self._width:
            raise BinAlignmentError(
                "Trading day bins differ from the learned history.",
                day=day,
                expected=self._width,
                actual=bins,
            )

        rows: dict[str, np.ndarray] = {}
        for raw_symbol, raw_values in vectors.items():
            symbol = str(raw_symbol).strip().upper()
            if symbol not in self._tracked:
                continue
            observation = self._prepare(day, symbol, raw_values, bins)
            if observation is not None:
                rows[symbol] = observation

        self._history.pop(day, None)
        if rows:
            self._width = bins
            self._history[day] = pd.DataFrame.from_dict(rows, orient="index").sort_index()
        elif not self._history:
            self._width = None
        self._trim_window()
        self._cache.clear()

        LOGGER.debug("Learned %d observations for %s", len(rows), day)
        return len(rows)

    def learn_frame(
        self,
        frame: pd.DataFrame,
        *,
        timestamp_column: str = "timestamp",
        symbol_column: str = "symbol",
    ) -> int:
        """Learn every trading day found in a long-format observation frame."""

        daily = daily_vectors(
            frame,
            self.instant_generator,
            field=self.field,
            symbols=self.symbols,
            timestamp_column=timestamp_column,
            symbol_column=symbol_column,
        )
        for day, vectors in daily.items():
            self.learn(day, vectors)
        LOGGER.info("Learned %d trading days from observation frame", len(daily))
        return len(daily)

    def _prepare(
        self,
        day: date,
        symbol: str,
        raw_values: Sequence[float] | np.ndarray,
        bins: int,
    ) -> np.ndarray | None:
        values = np.array(raw_values, dtype=float).reshape(-1)
        values[~np.isfinite(values)] = np.nan
        if values.size != bins:
            self.diagnostics.report(
                DiagnosticEvent(
                    kind=BIN_COUNT_MISMATCH,
                    message=f"Skipping observation with {values.size} bins, expected {bins}",
                    day=day,
                    symbol=symbol,
                    value=float(values.size),
                )
            )
            return None

        before = int(np.isfinite(values).sum())
        self.sanitizer.sanitize(values)
        finite = np.isfinite(values)
        removed = before - int(finite.sum())
        if removed > 0:
            self.diagnostics.report(
                DiagnosticEvent(
                    kind=VALUES_REMOVED,
                    message=f"Sanitizer removed {removed} bins",
                    day=day,
                    symbol=symbol,
                    value=float(removed),
                )
            )

        total = float(values[finite].sum()) if finite.any() else 0.0
        if not finite.any() or (self.scale > 0 and total <= 0):
            self.diagnostics.report(
                DiagnosticEvent(
                    kind=EMPTY_OBSERVATION,
                    message="Skipping observation without usable values",
                    day=day,
                    symbol=symbol,
                )
            )
            return None

        if self.scale > 0:
            values[finite] = values[finite] * (self.scale / total)
        return values

    def _trim_window(self) -> None:
        if self.window_days is None:
            return
        while len(self._history) > self.window_days:
            oldest = min(self._history)
            del self._history[oldest]

    # ------------------------------------------------------------------
    # Prediction
    # ------------------------------------------------------------------
    def predict_vector(self, day: date) -> np.ndarray:
        """Raw forecast for ``day`` using only days learned before it."""

        day = as_date(day)
        bins = len(self.instant_generator.instants(day))
        used_days = tuple(learned for learned in self.days if learned < day)
        if not used_days:
            LOGGER.debug("No history before %s; forecast is unknown", day)
            return np.full(bins, np.nan)
        if self._width is not None and bins != self._width:
            raise BinAlignmentError(day=day, expected=self._width, actual=bins)

        fitted = self._cache.get(used_days)
        if fitted is None:
            fitted = self._fit(used_days)
            self._cache[used_days] = fitted
        self._last_fit = fitted
        return fitted.forecast.copy()

    def _fit(self, used_days: tuple[date, ...]) -> _FittedModel:
        width = int(self._width or 0)
        forecast = np.full(width, np.nan)

        matrix = np.vstack([self._history[day].to_numpy(dtype=float) for day in used_days])
        known = np.isfinite(matrix).any(axis=0)
        if not known.any():
            return _FittedModel(forecast, None, None)

        imputer = SimpleImputer(strategy="mean")
        train = imputer.fit_transform(matrix[:, known])
        latest = _column_mean(self._history[used_days[-1]].to_numpy(dtype=float)[:, known])
        target = imputer.transform(latest.reshape(1, -1))

        if train.shape[0] < 2 or np.allclose(train, train[0]):
            forecast[known] = target.ravel()
            return _FittedModel(forecast, None, None)

        n_components = self.minimum_variance if self.minimum_variance < 1.0 else None
        pca = PCA(n_components=n_components, svd_solver="full")
        pca.fit(train)
        projected = pca.inverse_transform(pca.transform(target))
        forecast[known] = projected.ravel()

        LOGGER.debug(
            "Fitted PCA on %d observations x %d bins; kept %d components (%.3f variance)",
            train.shape[0],
            train.shape[1],
            pca.n_components_,
            float(pca.explained_variance_ratio_.sum()),
        )
        return _FittedModel(
            forecast,
            int(pca.n_components_),
            pca.explained_variance_ratio_.copy(),
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(field={self.field.name}, "
            f"minimum_variance={self.minimum_variance}, scale={self.scale}, "
            f"symbols={len(self.symbols)}, days={self.n_days})"
        )


__all__ = ["PCADayByDayPredictor"]
