"""Tests for aligning long-format observations into daily bin vectors."""

from __future__ import annotations

from datetime import date
from pathlib import Path
import sys

import numpy as np
import pandas as pd
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from volume_predictor.core.diagnostics import CollectingDiagnostics
from volume_predictor.core.fields import Field
from volume_predictor.core.modeling import PCAVolumeProfilePredictor
from volume_predictor.core.observations import daily_vectors, normalize_symbols
from volume_predictor.core.sessions import SessionInstantGenerator

GENERATOR = SessionInstantGenerator("09:00", "09:20", 5)


def _frame() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "timestamp": [
                "2024-05-02 08:55",  # before open
                "2024-05-02 09:01",
                "2024-05-02 09:03",
                "2024-05-02 09:16",
                "2024-05-02 09:20",  # at close
                "2024-05-02 09:07",
                "2024-05-03 09:05",
            ],
            "symbol": ["aaa", "aaa", "aaa", "aaa", "aaa", " bbb ", "aaa"],
            "volume": [999, 10, 5, 40, 999, 7, 3],
            "close": [1.0, 1.0, 1.1, 1.2, 1.3, 2.0, 1.0],
        }
    )


def test_daily_vectors_sum_volume_per_bin():
    daily = daily_vectors(_frame(), GENERATOR)

    assert list(daily) == [date(2024, 5, 2), date(2024, 5, 3)]
    first = daily[date(2024, 5, 2)]
    np.testing.assert_array_equal(first["AAA"], [15.0, np.nan, np.nan, 40.0])
    np.testing.assert_array_equal(first["BBB"], [np.nan, 7.0, np.nan, np.nan])
    np.testing.assert_array_equal(daily[date(2024, 5, 3)]["AAA"], [np.nan, 3.0, np.nan, np.nan])


def test_daily_vectors_take_last_price_for_close_field():
    daily = daily_vectors(_frame(), GENERATOR, field=Field.CLOSE, symbols=["AAA"])

    vector = daily[date(2024, 5, 2)]["AAA"]
    assert vector[0] == pytest.approx(1.1)
    assert set(daily[date(2024, 5, 2)]) == {"AAA"}


def test_daily_vectors_drop_non_numeric_values():
    frame = _frame()
    frame["volume"] = frame["volume"].astype(object)
    frame.loc[1, "volume"] = "n/a"

    daily = daily_vectors(frame, GENERATOR)

    assert daily[date(2024, 5, 2)]["AAA"][0] == pytest.approx(5.0)


def test_daily_vectors_require_columns():
    with pytest.raises(KeyError):
        daily_vectors(_frame().drop(columns=["volume"]), GENERATOR)


def test_normalize_symbols_deduplicates_and_sorts():
    assert normalize_symbols(["msft", "AAPL", " msft "]) == ("AAPL", "MSFT")
    assert normalize_symbols("ibm,  sap") == ("IBM", "SAP")


def test_learn_frame_feeds_every_day_in_order():
    predictor = PCAVolumeProfilePredictor(
        GENERATOR, 0.9, ["AAA", "BBB"], diagnostics=CollectingDiagnostics()
    )

    learned = predictor.learn_frame(_frame())

    assert learned == 2
    assert predictor.days == [date(2024, 5, 2), date(2024, 5, 3)]
    assert set(predictor.history.loc[date(2024, 5, 2)].index) == {"AAA", "BBB"}
