"""Trading sessions mapping a day to its ordered intraday bins."""

from __future__ import annotations

from datetime import date, datetime, time as dt_time
from typing import Protocol, runtime_checkable

import pandas as pd

from .exceptions import ConfigurationError


@runtime_checkable
class InstantGenerator(Protocol):
    """Enumerate the ordered bin instants of a trading day."""

    def instants(self, day: date) -> pd.DatetimeIndex:  # pragma: no cover - interface
        ...


def _parse_time(value: dt_time | str) -> dt_time:
    if isinstance(value, dt_time):
        return value
    try:
        return dt_time.fromisoformat(str(value).strip())
    except ValueError as exc:
        raise ConfigurationError(f"Invalid session time '{value}'.") from exc


class SessionInstantGenerator:
    """Fixed open/close session without pauses, split into equal bins.

    Instants are bin start times: the first one is the open, the last one is
    ``close - bin_minutes``.
    """

    def __init__(
        self,
        open_time: dt_time | str = "09:00",
        close_time: dt_time | str = "17:30",
        bin_minutes: int = 5,
        *,
        timezone: str | None = None,
    ) -> None:
        self.open_time = _parse_time(open_time)
        self.close_time = _parse_time(close_time)
        self.bin_minutes = int(bin_minutes)
        self.timezone = timezone or None

        if self.bin_minutes <= 0:
            raise ConfigurationError("bin_minutes must be positive.")
        session_minutes = self._minutes(self.close_time) - self._minutes(self.open_time)
        if session_minutes <= 0:
            raise ConfigurationError("Session close must be later than session open.")
        if session_minutes % self.bin_minutes:
            raise ConfigurationError(
                f"A {session_minutes} minute session cannot be split into "
                f"{self.bin_minutes} minute bins."
            )
        self._bin_count = session_minutes // self.bin_minutes

    @staticmethod
    def _minutes(value: dt_time) -> int:
        return value.hour * 60 + value.minute

    def bin_count(self) -> int:
        return self._bin_count

    def instants(self, day: date) -> pd.DatetimeIndex:
        start = pd.Timestamp(datetime.combine(as_date(day), self.open_time))
        if self.timezone:
            start = start.tz_localize(self.timezone)
        return pd.date_range(
            start=start,
            periods=self._bin_count,
            freq=pd.Timedelta(minutes=self.bin_minutes),
        )

    def __repr__(self) -> str:
        return (
            f"SessionInstantGenerator(open_time={self.open_time.isoformat('minutes')!r}, "
            f"close_time={self.close_time.isoformat('minutes')!r}, "
            f"bin_minutes={self.bin_minutes}, timezone={self.timezone!r})"
        )


def as_date(value: date | datetime | pd.Timestamp) -> date:
    if isinstance(value, (datetime, pd.Timestamp)):
        return value.date()
    return value


__all__ = [
    "InstantGenerator",
    "SessionInstantGenerator",
    "as_date",
]
