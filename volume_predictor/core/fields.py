"""Market data fields the day-by-day predictors can observe."""

from __future__ import annotations

from enum import Enum


class Field(Enum):
    """Observable field with the column it is read from and its bin aggregation."""

    VOLUME = ("volume", "sum")
    CLOSE = ("close", "last")
    TRADES = ("trades", "sum")

    def __init__(self, column: str, aggregation: str) -> None:
        self.column = column
        self.aggregation = aggregation

    @classmethod
    def from_name(cls, name: "str | Field") -> "Field":
        if isinstance(name, Field):
            return name
        try:
            return cls[str(name).strip().upper()]
        except KeyError as exc:
            raise ValueError(f"Unknown field '{name}'.") from exc


__all__ = ["Field"]
