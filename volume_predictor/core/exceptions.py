"""Custom exceptions raised by predictors and calendars."""

from __future__ import annotations

from datetime import date


class ConfigurationError(ValueError):
    """Raised when a predictor or calendar is built with invalid settings."""


class BinAlignmentError(ValueError):
    """Raised when a day's bin count does not match the fitted model width."""

    def __init__(
        self,
        message: str | None = None,
        *,
        day: date | None = None,
        expected: int,
        actual: int,
    ) -> None:
        self.day = day
        self.expected = int(expected)
        self.actual = int(actual)

        details = [message or "Bin count does not match the rolling model."]
        if day is not None:
            details.append(f"Day: {day.isoformat()}.")
        details.append(f"Expected {self.expected} bins, got {self.actual}.")

        super().__init__(" ".join(details))


__all__ = ["BinAlignmentError", "ConfigurationError"]
