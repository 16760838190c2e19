"""Tests for the trading-session instant generator."""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
import sys

import pandas as pd
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from volume_predictor.core.exceptions import ConfigurationError
from volume_predictor.core.sessions import (
    InstantGenerator,
    SessionInstantGenerator,
    as_date,
)


def test_instants_cover_session_with_bin_starts():
    generator = SessionInstantGenerator("09:00", "17:30", 30)

    instants = generator.instants(date(2024, 5, 2))

    assert generator.bin_count() == 17
    assert len(instants) == 17
    assert instants[0] == pd.Timestamp("2024-05-02 09:00")
    assert instants[-1] == pd.Timestamp("2024-05-02 17:00")
    assert isinstance(generator, InstantGenerator)


def test_instants_are_localized_when_timezone_is_set():
    generator = SessionInstantGenerator("09:30", "16:00", 5, timezone="America/New_York")

    instants = generator.instants(date(2024, 5, 2))

    assert str(instants.tz) == "America/New_York"
    assert len(instants) == 78


def test_instants_accept_datetimes():
    generator = SessionInstantGenerator("09:00", "10:00", 15)

    instants = generator.instants(datetime(2024, 5, 2, 13, 45))

    assert instants[0] == pd.Timestamp("2024-05-02 09:00")
    assert as_date(pd.Timestamp("2024-05-02 13:45")) == date(2024, 5, 2)


@pytest.mark.parametrize(
    "open_time, close_time, bin_minutes",
    [
        ("10:00", "09:00", 5),
        ("09:00", "09:00", 5),
        ("09:00", "10:00", 0),
        ("09:00", "10:00", 7),
        ("nine", "10:00", 5),
    ],
)
def test_invalid_sessions_fail_fast(open_time, close_time, bin_minutes):
    with pytest.raises(ConfigurationError):
        SessionInstantGenerator(open_time, close_time, bin_minutes)
